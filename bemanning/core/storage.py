# bemanning/core/storage.py
"""
Persistence layer for the application state tree.

The store hands out validated snapshots and accepts full replacements.
JSON import/export mirrors the backup files users move between machines.
"""

import json
import logging
import time
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from bemanning.core.config import APP_VERSION
from bemanning.core.constants import SCHEMA_VERSION
from bemanning.core.models import AppState, Meta, Schedule
from bemanning.core.utils import get_today
from bemanning.database.database import StateSnapshot

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """General error type for problems loading or parsing state."""

    pass


def create_default_state(year: int | None = None) -> AppState:
    """Tomt state med ett fullt kalenderår."""
    year = year or get_today().year
    return AppState(
        meta=Meta(schema_version=SCHEMA_VERSION, updated_at=int(time.time() * 1000), app_version=APP_VERSION),
        schedule=Schedule.empty(year),
    )


def parse_state(data: Any) -> AppState:
    """
    Validate a raw state tree.

    Raises:
        StorageError: If the data does not match the state schema
    """
    if not isinstance(data, dict):
        raise StorageError("Expected state object")
    try:
        return AppState.model_validate(data)
    except ValidationError as e:
        logger.warning("State validation failed: %d error(s)", e.error_count())
        raise StorageError(f"Invalid state: {e}") from e


def load_state(db: Session) -> AppState:
    """
    Load the newest stored state, or a fresh default state if none exists.

    Raises:
        StorageError: If the stored snapshot is invalid
    """
    snapshot = db.query(StateSnapshot).order_by(StateSnapshot.id.desc()).first()
    if snapshot is None:
        logger.info("No stored state, using default state")
        return create_default_state()
    return parse_state(snapshot.state)


def save_state(db: Session, state: AppState) -> StateSnapshot:
    """Store a full replacement of the state tree."""
    snapshot = StateSnapshot(schema_version=state.meta.schema_version, state=state.dump())
    db.add(snapshot)
    db.commit()
    db.refresh(snapshot)
    logger.info(
        "State saved",
        extra={"extra_fields": {"snapshot_id": snapshot.id, "people": len(state.people)}},
    )
    return snapshot


def export_state_json(state: AppState) -> str:
    return json.dumps(state.dump(), ensure_ascii=False, indent=2)


def _loads(raw: str | bytes) -> Any:
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except UnicodeDecodeError as e:
        logger.warning("Import is not UTF-8: %s", e)
        raise StorageError("Import file must be UTF-8 encoded JSON") from e
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in import: %s", e)
        raise StorageError(f"Invalid JSON: {e}") from e


def build_import_preview(raw: str | bytes) -> dict[str, Any]:
    """
    Summary of an import file without storing anything.

    Raises:
        StorageError: If the file is not valid JSON or not a valid state
    """
    state = parse_state(_loads(raw))
    active = sum(1 for p in state.people if p.is_active)
    total_entries = sum(len(day.entries) for month in state.schedule.months for day in month.days)

    return {
        "schema_version": state.meta.schema_version,
        "year": state.schedule.year,
        "people": len(state.people),
        "active_people": active,
        "inactive_people": len(state.people) - active,
        "total_entries": total_entries,
        "months": len(state.schedule.months),
    }


def import_state_json(db: Session, raw: str | bytes) -> AppState:
    """
    Validate and store an exported state file.

    Raises:
        StorageError: If the file is not valid JSON or not a valid state
    """
    state = parse_state(_loads(raw))
    state.meta.updated_at = int(time.time() * 1000)
    save_state(db, state)
    return state
