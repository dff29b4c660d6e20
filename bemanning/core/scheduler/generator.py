"""
Schemagenerering som platt lista (månad eller period).

Passen tilldelas dag för dag i datumordning. Redan genererade pass räknas in
i veckotimmarna för kommande dagar, så tilldelningen är sekventiell och inte
globalt optimerad. Underskott lämnas otillsatta och loggas.
"""

import datetime
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import AliasChoices, Field, ValidationError

from bemanning.core.config import MAX_PERIOD_DAYS
from bemanning.core.eligibility import get_eligible_persons_for_shift, validate_person_for_scheduling
from bemanning.core.models import CamelModel, Group, GroupDemand, Person, ShiftTemplate
from bemanning.core.sentry_config import capture_exception
from bemanning.core.types import GeneratedShift, GenerationResult
from bemanning.core.utils import days_in_month, format_iso_date, iter_dates, parse_iso_date

logger = logging.getLogger(__name__)


class ScheduleGenerationError(Exception):
    """Förutsättningarna för generering saknas. Blir {success: false}."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class GenerationRequest(CamelModel):
    mode: str | None = None
    year: int | None = None
    month: int | None = None
    from_date: str | None = None
    to_date: str | None = None
    groups: list[Group] = Field(default_factory=list)
    shifts: list[ShiftTemplate] = Field(default_factory=list, validation_alias=AliasChoices("shifts", "passes"))
    demands: list[GroupDemand] = Field(default_factory=list)
    people: list[Person] = Field(default_factory=list)


def _resolve_range(request: GenerationRequest) -> tuple[datetime.date, datetime.date]:
    if request.mode == "month":
        if not request.year or not request.month:
            raise ScheduleGenerationError("År och månad krävs för month-läge")
        if request.month < 1 or request.month > 12:
            raise ScheduleGenerationError(f"Ogiltigt månadsnummer: {request.month}")
        start = datetime.date(request.year, request.month, 1)
        return start, datetime.date(request.year, request.month, days_in_month(request.year, request.month))

    if not request.from_date or not request.to_date:
        raise ScheduleGenerationError("Från-datum och till-datum krävs för period-läge")

    start = parse_iso_date(request.from_date)
    end = parse_iso_date(request.to_date)
    if start is None or end is None:
        raise ScheduleGenerationError("Ogiltiga datum")
    if end < start:
        raise ScheduleGenerationError("Till-datum måste vara efter från-datum")

    span = (end - start).days
    if span > MAX_PERIOD_DAYS:
        raise ScheduleGenerationError(f"Period kan max vara {MAX_PERIOD_DAYS} dagar (du valde {span} dagar)")
    return start, end


def _validate_people(people: Sequence[Person], today: datetime.date | None) -> None:
    """Alla personer kontrolleras. Ett enda fel stoppar hela genereringen."""
    errors: list[str] = []
    for person in people:
        result = validate_person_for_scheduling(person, today=today)
        if not result["valid"]:
            errors.append(f"{person.display_name}: {', '.join(result['errors'])}")

    if errors:
        raise ScheduleGenerationError(f"Personaldata ofullständig för {len(errors)} person(er)", errors)


def demand_count(demands: Sequence[GroupDemand], group: Group, shift: ShiftTemplate, weekday: int) -> int:
    """
    Behov för grupp + pass en viss veckodag.

    Ett behov för exakt (grupp, pass) vinner. Annars gäller gruppens behov
    för de pass som är kopplade till gruppen.
    """
    group_level = None
    for demand in demands:
        if demand.group_id != group.id:
            continue
        if demand.shift_id == shift.id:
            return demand.counts[weekday]
        if demand.shift_id is None and group_level is None:
            group_level = demand

    if group_level is not None and shift.id in group.shift_ids:
        return group_level.counts[weekday]
    return 0


def _build_record(
    iso: str, index: int, person: Person, group: Group, shift: ShiftTemplate, generated_at: str
) -> GeneratedShift:
    return {
        "id": f"generated_{iso}_{group.id}_{shift.id}_{index}",
        "date": iso,
        "start_time": shift.start_time,
        "end_time": shift.end_time,
        "person_id": person.id,
        "person_name": person.display_name,
        "group_id": group.id,
        "group_name": group.name,
        "shift_id": shift.id,
        "shift_name": shift.name,
        "role": "staff",
        "location": shift.workplace or "-",
        "generated_at": generated_at,
    }


def _generate(
    request: GenerationRequest, today: datetime.date | None, policy: str | None
) -> tuple[list[GeneratedShift], datetime.date, datetime.date]:
    if request.mode not in ("month", "period"):
        raise ScheduleGenerationError("Ogiltigt läge (mode)")
    if not request.groups:
        raise ScheduleGenerationError("Inga grupper definierade")
    if not request.shifts:
        raise ScheduleGenerationError("Inga grundpass definierade")

    people = [p for p in request.people if p.is_active]
    if not people:
        raise ScheduleGenerationError("Ingen aktiv personal")

    start, end = _resolve_range(request)
    _validate_people(people, today)

    by_id = {p.id: p for p in people}
    generated_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
    generated: list[GeneratedShift] = []

    for current in iter_dates(start, end):
        iso = format_iso_date(current)
        weekday = current.weekday()
        assigned_today: set[str] = set()

        for group in request.groups:
            for shift in request.shifts:
                needed = demand_count(request.demands, group, shift, weekday)
                if needed <= 0:
                    continue

                pool = [p for p in people if p.id not in assigned_today]
                ranked = get_eligible_persons_for_shift(pool, shift, group, iso, generated, policy)
                chosen = ranked[:needed]

                if len(chosen) < needed:
                    logger.info(
                        "Shortfall %s %s/%s: %d of %d filled",
                        iso,
                        group.id,
                        shift.id,
                        len(chosen),
                        needed,
                        extra={"extra_fields": {"date": iso, "group_id": group.id, "shift_id": shift.id}},
                    )

                for index, candidate in enumerate(chosen):
                    person = by_id[candidate["person_id"]]
                    generated.append(_build_record(iso, index, person, group, shift, generated_at))
                    assigned_today.add(person.id)

    return generated, start, end


def generate_schedule(
    request: GenerationRequest | Mapping[str, Any],
    today: datetime.date | None = None,
    policy: str | None = None,
) -> GenerationResult:
    """
    Genererar pass för en månad eller period.

    Args:
        request: mode, year/month eller from_date/to_date, groups, shifts
            (eller "passes"), demands och people
        today: Referensdatum för HRF-valideringen
        policy: Poängpolicy för röda dagar (se eligibility)

    Returns:
        {"success", "shifts", "message", "errors"}. Fel kastas aldrig vidare.
    """
    try:
        if not isinstance(request, GenerationRequest):
            request = GenerationRequest.model_validate(request)

        logger.info(
            "Generating schedule",
            extra={"extra_fields": {"mode": request.mode, "year": request.year, "month": request.month}},
        )
        shifts, start, end = _generate(request, today, policy)

    except ScheduleGenerationError as e:
        logger.warning("Schedule generation rejected: %s", e, extra={"extra_fields": {"errors": e.errors}})
        return {"success": False, "shifts": [], "message": "", "errors": e.errors}

    except ValidationError as e:
        logger.warning("Invalid generation request: %s", e.error_count())
        return {"success": False, "shifts": [], "message": "", "errors": [str(e)]}

    except Exception as e:
        logger.exception("Schedule generation failed")
        capture_exception(e, {"schedule_generation": {"mode": getattr(request, "mode", None)}})
        return {
            "success": False,
            "shifts": [],
            "message": "",
            "errors": [str(e) or "Ett okänt fel uppstod vid schemagenerering"],
        }

    logger.info("Generated %d shifts (%s -> %s)", len(shifts), start, end)
    return {
        "success": True,
        "shifts": shifts,
        "message": f"Schema genererat för {len(shifts)} pass ({start.isoformat()} → {end.isoformat()})",
        "errors": [],
    }
