"""
Behörighet och poängsättning: kan person P arbeta pass S på datum D?

Alla predikat är fail-closed: saknade eller felaktiga data ger False/0,
aldrig ett undantag.
"""

import datetime
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from bemanning.core.config import SCORING_POLICY, STANDARD_DAY_HOURS
from bemanning.core.holidays import is_red_day
from bemanning.core.hr_rules import (
    HRF_EMPLOYMENT_PCT,
    HRF_START_DATE_MISSING,
    get_remaining_vacation_days,
    validate_person_against_hrf,
)
from bemanning.core.models import Group, Person, ShiftTemplate
from bemanning.core.time_utils import shift_hours
from bemanning.core.types import PersonWeekStats, RankedCandidate
from bemanning.core.utils import format_iso_date, parse_iso_date, week_bounds

logger = logging.getLogger(__name__)

POLICY_RED_DAY_BONUS = "red_day_bonus"
POLICY_VACATION_BALANCE = "vacation_balance"

BASE_SCORE = 100
PERFECT_FIT_BONUS = 50
GOOD_UTILIZATION_BONUS = 20
RED_DAY_BONUS = 10
HIGH_VACATION_PENALTY = 10
INELIGIBLE_SCORE = -1

#: HRF-fel som redan rapporteras av schemaläggningskontrollen med egen text.
_COVERED_HRF_CODES = frozenset({HRF_START_DATE_MISSING, HRF_EMPLOYMENT_PCT})


def get_shift_duration(shift: ShiftTemplate | None) -> float:
    """Passets längd i timmar. Pass över midnatt får +24h."""
    if shift is None:
        return 0.0
    return shift_hours(shift.start_time, shift.end_time)


def get_available_hours(person: Person | None) -> float:
    """Tillgängliga timmar per dag: 8h * tjänstgöringsgrad."""
    if person is None or not person.employment_pct or not person.workdays_per_week:
        return 0.0
    return STANDARD_DAY_HOURS * person.employment_pct / 100


def get_max_weekly_hours(person: Person | None) -> float:
    """Veckotak: arbetsdagar/vecka * 8h * tjänstgöringsgrad."""
    if person is None or not person.employment_pct or not person.workdays_per_week:
        return 0.0
    return person.workdays_per_week * STANDARD_DAY_HOURS * person.employment_pct / 100


def is_vacation_day(person: Person, value: Any) -> bool:
    date = parse_iso_date(value)
    if date is None:
        return False
    return format_iso_date(date) in person.vacation_dates


def is_leave_day(person: Person, value: Any) -> bool:
    date = parse_iso_date(value)
    if date is None:
        return False
    return format_iso_date(date) in person.leave_dates


def can_work_on_day(person: Person | None, value: Any) -> bool:
    """Inte semester eller ledighet. Röda dagar blockerar inte."""
    if person is None or parse_iso_date(value) is None:
        return False
    return not is_vacation_day(person, value) and not is_leave_day(person, value)


def is_available_on_weekday(person: Person | None, value: Any) -> bool:
    """Tillgänglighet per veckodag, index 0 = måndag."""
    date = parse_iso_date(value)
    if person is None or date is None or not person.availability:
        return False
    return person.availability[date.weekday()] is True


def can_work_in_group(person: Person | None, group: Group | None) -> bool:
    if person is None or group is None:
        return False
    return group.id in person.group_ids


def would_exceed_weekly_hours(person: Person, hours_after_shift: float) -> bool:
    """True om veckotaket överskrids. Exakt på taket är tillåtet."""
    if not person.workdays_per_week:
        return False
    return hours_after_shift > get_max_weekly_hours(person)


def can_person_work_shift(
    person: Person | None,
    shift: ShiftTemplate | None,
    group: Group | None,
    date: Any,
    hours_worked_this_week: float = 0.0,
) -> bool:
    """Alla villkor måste vara uppfyllda. Avvisningsorsak loggas på DEBUG."""
    if person is None or shift is None:
        logger.debug("Person or shift missing")
        return False

    name = person.display_name

    if not can_work_on_day(person, date):
        logger.debug("%s cannot work on %s (vacation/leave)", name, date)
        return False

    if not is_available_on_weekday(person, date):
        logger.debug("%s not available on weekday of %s", name, date)
        return False

    if not can_work_in_group(person, group):
        logger.debug("%s not in group %s", name, group.name if group else None)
        return False

    hours = get_shift_duration(shift)
    available = get_available_hours(person)
    if hours > available:
        logger.debug("%s shift too long (%.2fh > %.2fh available)", name, hours, available)
        return False

    if would_exceed_weekly_hours(person, hours_worked_this_week + hours):
        logger.debug("%s would exceed weekly hours", name)
        return False

    return True


def score_person_for_shift(
    person: Person | None,
    shift: ShiftTemplate | None,
    group: Group | None,
    date: Any,
    hours_worked_this_week: float = 0.0,
    policy: str | None = None,
) -> int:
    """
    Poäng för en kandidat. Högre är bättre, -1 betyder ej behörig.

    Bas 100, +50 om passet fyller veckobudgeten (inom 1h), +20 om mindre än
    2h återstår efteråt. Röd-dag-policyn ger +10 på röda dagar; alternativet
    "vacation_balance" ger -10 vid stort semestersaldo.
    """
    if not can_person_work_shift(person, shift, group, date, hours_worked_this_week):
        return INELIGIBLE_SCORE

    policy = policy or SCORING_POLICY
    score = BASE_SCORE

    hours = get_shift_duration(shift)
    remaining_weekly = get_max_weekly_hours(person) - hours_worked_this_week

    if abs(hours - remaining_weekly) < 1:
        score += PERFECT_FIT_BONUS

    if remaining_weekly - hours < 2:
        score += GOOD_UTILIZATION_BONUS

    if policy == POLICY_VACATION_BALANCE:
        if (person.vacation_days_per_year or 0) - 5 > 10:
            score -= HIGH_VACATION_PENALTY
    elif is_red_day(date):
        score += RED_DAY_BONUS

    return score


def _record_value(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def get_hours_worked_this_week(person: Person, date: Any, assigned_shifts: Iterable[Any] = ()) -> float:
    """
    Summerar personens tilldelade pass i måndag–söndag-veckan som innehåller datumet.

    Passen kan vara dicts (genererade pass) eller objekt med
    person_id/date/start_time/end_time.
    """
    target = parse_iso_date(date)
    if target is None:
        return 0.0

    monday, sunday = week_bounds(target)
    total = 0.0
    for record in assigned_shifts:
        if _record_value(record, "person_id") != person.id:
            continue
        shift_date = parse_iso_date(_record_value(record, "date"))
        if shift_date is None or not monday <= shift_date <= sunday:
            continue
        total += shift_hours(_record_value(record, "start_time"), _record_value(record, "end_time"))
    return total


def get_eligible_persons_for_shift(
    people: Sequence[Person],
    shift: ShiftTemplate | None,
    group: Group | None,
    date: Any,
    assigned_shifts: Sequence[Any] = (),
    policy: str | None = None,
) -> list[RankedCandidate]:
    """Behöriga kandidater, sorterade på poäng (stabil sortering)."""
    if not people or shift is None or group is None or parse_iso_date(date) is None:
        return []

    ranked: list[RankedCandidate] = []
    for person in people:
        hours = get_hours_worked_this_week(person, date, assigned_shifts)
        score = score_person_for_shift(person, shift, group, date, hours, policy)
        if score >= 0:
            ranked.append({"person_id": person.id, "name": person.display_name, "score": score, "hours_this_week": hours})

    ranked.sort(key=lambda c: c["score"], reverse=True)
    return ranked


def has_vacation_days_available(person: Person | None, count: int = 1, today: datetime.date | None = None) -> bool:
    if person is None:
        return False
    return get_remaining_vacation_days(person, today=today) >= count


def has_leave_days_available(person: Person | None, count: int = 1) -> bool:
    if person is None:
        return False
    return (person.saved_leave_days or 0) >= count


def get_person_week_stats(
    person: Person, date: Any, assigned_shifts: Sequence[Any] = (), today: datetime.date | None = None
) -> PersonWeekStats:
    """Timmar, tak och saldon för veckan som innehåller datumet."""
    hours = get_hours_worked_this_week(person, date, assigned_shifts)
    max_hours = get_max_weekly_hours(person)
    utilization = round(hours / max_hours * 100, 1) if max_hours else 0.0

    return {
        "person_id": person.id,
        "hours_worked": hours,
        "max_hours": max_hours,
        "utilization": utilization,
        "remaining_hours": max_hours - hours,
        "vacation_days_left": get_remaining_vacation_days(person, today=today),
        "leave_days_left": person.saved_leave_days or 0,
    }


def validate_person_for_scheduling(person: Person, today: datetime.date | None = None) -> dict[str, Any]:
    """
    Kontrollerar att personen har allt som krävs för schemaläggning.

    Returns:
        {"valid": bool, "errors": [...]} med alla fel, även HRF-fel
    """
    errors: list[str] = []

    if not person.group_ids:
        errors.append("Ingen arbetsgrupp tilldelad")

    if not person.availability:
        errors.append("Ingen tillgänglighet definierad")

    if not person.start_date:
        errors.append("Inget startdatum")

    pct = person.employment_pct
    if pct is None or pct < 10 or pct > 100:
        errors.append("Ogiltig tjänstgöringsgrad")

    workdays = person.workdays_per_week
    if workdays is None or workdays < 1 or workdays > 7:
        errors.append("Ogiltigt antal arbetsdagar per vecka")

    hrf = validate_person_against_hrf(person, today=today)
    for code, error in zip(hrf["error_codes"], hrf["errors"]):
        if code not in _COVERED_HRF_CODES:
            errors.append(error)

    return {"valid": not errors, "errors": errors}
