# bemanning/routes/schedule_api.py
"""
JSON API for the scheduling core.

Results from the core go out as-is. State trees use the stored camelCase
keys. Role engine and extra-day planner only persist in "apply" mode.
"""

import datetime
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bemanning.core.agreements import list_agreements
from bemanning.core.config import DEFAULT_MAX_EXTRA_PER_PERSON
from bemanning.core.evaluator import evaluate
from bemanning.core.holidays import get_all_holidays
from bemanning.core.hr_rules import get_person_vacation_year_info
from bemanning.core.models import AppState, ScheduleStateError
from bemanning.core.scheduler import get_strategy, plan_extra_days
from bemanning.core.sentry_config import capture_exception, capture_message
from bemanning.core.stats import calc_month_stats, calc_year_stats
from bemanning.core.storage import (
    StorageError,
    build_import_preview,
    export_state_json,
    import_state_json,
    load_state,
    parse_state,
    save_state,
)
from bemanning.core.utils import parse_iso_date
from bemanning.core.validators import validate_mode, validate_year_month
from bemanning.database.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["schedule_api"])


class GenerateRequest(BaseModel):
    mode: str = "month"
    year: int | None = None
    month: int | None = None
    from_date: str | None = None
    to_date: str | None = None
    policy: str | None = None


class RoleEngineRequest(BaseModel):
    year: int
    month: int
    mode: str = "preview"
    group_ids: list[str] | None = None


class ExtraDaysRequest(BaseModel):
    year: int
    month: int
    mode: str = "preview"
    max_per_person_per_month: int = Field(DEFAULT_MAX_EXTRA_PER_PERSON, ge=0)
    prefer_weekdays: bool = True


def get_state(db: Session = Depends(get_db)) -> AppState:
    """Dependency: current state, or 500 if the stored snapshot is broken."""
    try:
        return load_state(db)
    except StorageError as e:
        logger.error(f"Stored state could not be loaded: {e}")
        capture_exception(e, {"storage": {"operation": "load_state"}})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Stored state is invalid") from e


def _bad_request(error: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("/state")
async def read_state(state: AppState = Depends(get_state)):
    return state.dump()


@router.put("/state")
async def replace_state(payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Replace the whole state tree."""
    try:
        state = parse_state(payload)
    except StorageError as e:
        raise _bad_request(e) from e
    snapshot = save_state(db, state)
    return {"saved": True, "snapshot_id": snapshot.id}


@router.get("/state/export", response_class=PlainTextResponse)
async def export_state(state: AppState = Depends(get_state)):
    return PlainTextResponse(export_state_json(state), media_type="application/json")


@router.post("/state/import")
async def import_state(request: Request, preview: bool = Query(False), db: Session = Depends(get_db)):
    """Import an exported state file. With preview=true nothing is stored."""
    raw = await request.body()
    try:
        if preview:
            return {"preview": build_import_preview(raw)}
        state = import_state_json(db, raw)
    except StorageError as e:
        raise _bad_request(e) from e
    return {"imported": True, "people": len(state.people), "year": state.schedule.year}


@router.get("/holidays/{year}")
async def holidays(year: int):
    validate_year_month(year)
    return {"year": year, "holidays": get_all_holidays(year)}


@router.post("/schedule/generate")
async def generate_flat(request: GenerateRequest, state: AppState = Depends(get_state)):
    """Flat-list generation. Failures come back as success=false, never as HTTP errors."""
    strategy = get_strategy("flat")
    return strategy.run(
        state,
        mode=request.mode,
        year=request.year,
        month=request.month,
        from_date=request.from_date,
        to_date=request.to_date,
        policy=request.policy,
    )


@router.post("/schedule/role-engine")
async def run_role_engine(
    request: RoleEngineRequest,
    state: AppState = Depends(get_state),
    db: Session = Depends(get_db),
):
    validate_mode(request.mode)
    strategy = get_strategy("role")
    try:
        result = strategy.run(state, request.year, request.month, request.mode, request.group_ids)
    except ScheduleStateError as e:
        raise _bad_request(e) from e

    proposed = result["proposed_state"]
    if request.mode == "apply":
        save_state(db, proposed)
        if result["has_p0_warnings"]:
            capture_message(
                "Role schedule applied with P0 warnings",
                level="warning",
                context={"role_engine": {"year": request.year, "month": request.month}},
            )

    return {**result, "proposed_state": proposed.dump(), "mode": request.mode}


@router.post("/schedule/extra-days")
async def run_extra_planner(
    request: ExtraDaysRequest,
    state: AppState = Depends(get_state),
    db: Session = Depends(get_db),
):
    validate_mode(request.mode)
    try:
        result = plan_extra_days(
            state,
            request.year,
            request.month,
            mode=request.mode,
            max_per_person_per_month=request.max_per_person_per_month,
            prefer_weekdays=request.prefer_weekdays,
        )
    except ScheduleStateError as e:
        raise _bad_request(e) from e

    proposed = result["proposed_state"]
    if request.mode == "apply":
        save_state(db, proposed)

    return {**result, "proposed_state": proposed.dump(), "mode": request.mode}


@router.get("/rules/{year}/{month}")
async def rule_warnings(year: int, month: int, state: AppState = Depends(get_state)):
    validate_year_month(year, month)
    try:
        return evaluate(state, year, month)
    except ScheduleStateError as e:
        raise _bad_request(e) from e


@router.get("/stats/{year}")
async def year_stats(year: int, state: AppState = Depends(get_state)):
    validate_year_month(year)
    try:
        return calc_year_stats(state, year)
    except ScheduleStateError as e:
        raise _bad_request(e) from e


@router.get("/stats/{year}/{month}")
async def month_stats(year: int, month: int, state: AppState = Depends(get_state)):
    validate_year_month(year, month)
    try:
        return calc_month_stats(state, year, month)
    except ScheduleStateError as e:
        raise _bad_request(e) from e


@router.get("/vacation/{person_id}")
async def vacation_info(
    person_id: str,
    today: str | None = Query(None, description="Referensdatum YYYY-MM-DD"),
    state: AppState = Depends(get_state),
):
    person = state.person(person_id)
    if person is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")

    reference: datetime.date | None = None
    if today is not None:
        reference = parse_iso_date(today)
        if reference is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date")

    return get_person_vacation_year_info(person, today=reference)


@router.get("/agreements")
async def agreements():
    return [a.model_dump(mode="json") for a in list_agreements()]
