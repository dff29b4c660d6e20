"""
Regelmotor för arbetstid, vila, extra-ledighet och semesteruttag.

P0 är hårda regler som blockerar en placering, P1 är information.
"""

import logging
from typing import Any

from bemanning.core.config import (
    MAX_WORK_MINUTES_PER_DAY,
    MIN_DAILY_REST_MINUTES,
    STREAK_WARNING_DAYS,
    WEEKLY_REST_BREACH_DAYS,
)
from bemanning.core.constants import (
    LEVEL_P0,
    LEVEL_P1,
    STATUS_CHILD_CARE,
    STATUS_EXTRA_DAY,
    STATUS_LEAVE,
    STATUS_SICK,
    STATUS_VACATION,
    STATUS_WORK,
)
from bemanning.core.holidays import is_red_day
from bemanning.core.models import AppState, Entry, MonthSchedule, Person, ScheduleStateError
from bemanning.core.time_utils import calculate_rest_minutes, calculate_work_minutes
from bemanning.core.types import EvaluationResult, PersonRuleStats, RuleWarning

logger = logging.getLogger(__name__)

_STATUS_COUNTERS = {
    STATUS_VACATION: "sem_days",
    STATUS_SICK: "sj_days",
    STATUS_CHILD_CARE: "vab_days",
    STATUS_LEAVE: "perm_days",
    STATUS_EXTRA_DAY: "extra_taken_days",
}

_SUMMED_STATS = (
    "worked_days",
    "red_days_worked",
    "earned_extra_days",
    "extra_taken_days",
    "sem_days",
    "sj_days",
    "vab_days",
    "perm_days",
    "rest11h_breaches",
    "max10h_breaches",
    "rest36h_breaches",
)


def _empty_stats(person: Person, current_streak: int = 0) -> PersonRuleStats:
    return {
        "person_id": person.id,
        "first_name": person.first_name,
        "last_name": person.last_name,
        "worked_days": 0,
        "red_days_worked": 0,
        "earned_extra_days": 0,
        "extra_taken_days": 0,
        "extra_balance_days": 0,
        "sem_days": 0,
        "sj_days": 0,
        "vab_days": 0,
        "perm_days": 0,
        "max_streak": 0,
        "current_streak": current_streak,
        "rest11h_breaches": 0,
        "max10h_breaches": 0,
        "rest36h_breaches": 0,
    }


def _warning(
    level: str, code: str, person_id: str, date_from: str, date_to: str, message: str, **details: Any
) -> RuleWarning:
    return {
        "level": level,
        "code": code,
        "person_id": person_id,
        "date_from": date_from,
        "date_to": date_to,
        "message": message,
        "details": details,
    }


def _resolved(entry: Entry, defaults: dict[str, str | None], field: str) -> str | None:
    return entry.times().get(field) or defaults.get(field)


def _evaluate_person(
    person: Person,
    month_data: MonthSchedule,
    defaults: dict[str, str | None],
    streak_warnings: bool,
    previous_streak: int = 0,
) -> tuple[list[RuleWarning], PersonRuleStats]:
    """Regelkontroll för en person under en månad."""
    warnings: list[RuleWarning] = []
    stats = _empty_stats(person, previous_streak)
    label = person.last_name or person.display_name
    days = month_data.days
    entries = [day.entry_for(person.id) for day in days]

    for index, (day, entry) in enumerate(zip(days, entries)):
        if entry is None or entry.status != STATUS_WORK:
            stats["current_streak"] = 0
            if entry is not None and entry.status in _STATUS_COUNTERS:
                stats[_STATUS_COUNTERS[entry.status]] += 1
            continue

        stats["worked_days"] += 1
        stats["current_streak"] += 1
        stats["max_streak"] = max(stats["max_streak"], stats["current_streak"])

        if is_red_day(day.date):
            stats["red_days_worked"] += 1
            stats["earned_extra_days"] += 1

        work_min = calculate_work_minutes(entry.times(), defaults)
        if work_min is not None and work_min > MAX_WORK_MINUTES_PER_DAY:
            stats["max10h_breaches"] += 1
            warnings.append(
                _warning(
                    LEVEL_P0,
                    "MAX_10H",
                    person.id,
                    day.date,
                    day.date,
                    f"{label}: Arbetstid > 10h på {day.date} ({work_min / 60:.1f}h)",
                    work_minutes=work_min,
                    day=day.date,
                )
            )

        if streak_warnings and stats["current_streak"] >= STREAK_WARNING_DAYS:
            warnings.append(
                _warning(
                    LEVEL_P1,
                    "STREAK_10",
                    person.id,
                    day.date,
                    day.date,
                    f"{label}: {stats['current_streak']} arbetsdagar i rad",
                    streak=stats["current_streak"],
                )
            )

        if index + 1 < len(days):
            next_entry = entries[index + 1]
            if next_entry is not None and next_entry.status == STATUS_WORK:
                rest_min = calculate_rest_minutes(
                    _resolved(entry, defaults, "start"),
                    _resolved(entry, defaults, "end"),
                    _resolved(next_entry, defaults, "start"),
                )
                if rest_min is not None and rest_min < MIN_DAILY_REST_MINUTES:
                    next_date = days[index + 1].date
                    stats["rest11h_breaches"] += 1
                    warnings.append(
                        _warning(
                            LEVEL_P0,
                            "REST_11H",
                            person.id,
                            day.date,
                            next_date,
                            f"{label}: Dygnsvila < 11h mellan {day.date} och {next_date} ({rest_min / 60:.1f}h)",
                            rest_minutes=rest_min,
                        )
                    )

    # Veckovila: sju arbetsdagar i följd inom ett 7-dagarsfönster ger ingen 36h-vila
    worked = [e is not None and e.status == STATUS_WORK for e in entries]
    for start in range(len(days) - WEEKLY_REST_BREACH_DAYS + 1):
        window = worked[start : start + WEEKLY_REST_BREACH_DAYS]
        if all(window):
            first, last = days[start].date, days[start + WEEKLY_REST_BREACH_DAYS - 1].date
            stats["rest36h_breaches"] += 1
            warnings.append(
                _warning(
                    LEVEL_P0,
                    "REST_36H",
                    person.id,
                    first,
                    last,
                    f"{label}: Veckovila < 36h ({len(window)} dagar i rad) {first} – {last}",
                    worked_days_in_week=len(window),
                )
            )

    month_from = days[0].date if days else ""
    month_to = days[-1].date if days else ""

    start_balance = person.extra_days_start_balance or 0
    stats["extra_balance_days"] = start_balance + stats["earned_extra_days"] - stats["extra_taken_days"]

    if stats["extra_taken_days"] > start_balance + stats["earned_extra_days"]:
        warnings.append(
            _warning(
                LEVEL_P0,
                "EXTRA_NEGATIVE",
                person.id,
                month_from,
                month_to,
                f"{label}: Uttag extra-ledighet utan tillräckligt saldo ({stats['extra_balance_days']} dagar)",
                start_balance=start_balance,
                earned_days=stats["earned_extra_days"],
                taken_days=stats["extra_taken_days"],
                balance=stats["extra_balance_days"],
            )
        )

    if stats["earned_extra_days"] > 0 and stats["extra_taken_days"] == 0:
        warnings.append(
            _warning(
                LEVEL_P1,
                "EXTRA_NOT_PLANNED",
                person.id,
                month_from,
                month_to,
                f"{label}: {stats['earned_extra_days']} intjänade extra-dagar utan uttag",
                earned_days=stats["earned_extra_days"],
                taken_days=stats["extra_taken_days"],
                balance=stats["extra_balance_days"],
            )
        )

    vacation_available = (person.vacation_days_per_year or 0) + (person.saved_vacation_days or 0)
    vacation_used = (person.used_vacation_days or 0) + stats["sem_days"]
    if vacation_used > vacation_available:
        warnings.append(
            _warning(
                LEVEL_P0,
                "VACATION_OVERDRAWN",
                person.id,
                month_from,
                month_to,
                f"{label}: Semesteruttag ({vacation_used} dagar) överskrider tillgängliga ({vacation_available} dagar)",
                sem_days_this_month=stats["sem_days"],
                total_used=vacation_used,
                total_available=vacation_available,
            )
        )

    return warnings, stats


def _sort_warnings(warnings: list[RuleWarning]) -> list[RuleWarning]:
    return sorted(warnings, key=lambda w: (0 if w["level"] == LEVEL_P0 else 1, w["date_from"]))


def _require_year(state: AppState, year: int) -> None:
    if state.schedule is None or state.schedule.year != year:
        raise ScheduleStateError(f"Schedule för år {year} saknas")


def evaluate(state: AppState, year: int, month: int) -> EvaluationResult:
    """
    Regelkontroll för en månad.

    Args:
        state: Hela state-trädet
        year: År, måste matcha schedule.year
        month: Månad 1–12

    Returns:
        {"warnings": [...], "stats_by_person": {...}, "year", "month"}

    Raises:
        ScheduleStateError: om året eller månaden saknas
    """
    _require_year(state, year)
    month_data = state.month_data(year, month)
    defaults = state.default_times_for(month_data)

    all_warnings: list[RuleWarning] = []
    stats_by_person: dict[str, PersonRuleStats] = {}

    for person in state.active_people():
        warnings, stats = _evaluate_person(person, month_data, defaults, state.settings.enable_p1_streak10)
        stats_by_person[person.id] = stats
        all_warnings.extend(warnings)

    return {
        "warnings": _sort_warnings(all_warnings),
        "stats_by_person": stats_by_person,
        "year": year,
        "month": month,
    }


def evaluate_year(state: AppState, year: int) -> EvaluationResult:
    """Regelkontroll för hela året. Arbetsserier fortsätter över månadsgränser."""
    _require_year(state, year)

    all_warnings: list[RuleWarning] = []
    people = state.active_people()
    year_stats: dict[str, PersonRuleStats] = {p.id: _empty_stats(p) for p in people}
    trailing: dict[str, int] = {}

    for month_data in state.schedule.months:
        defaults = state.default_times_for(month_data)
        for person in people:
            warnings, stats = _evaluate_person(
                person,
                month_data,
                defaults,
                state.settings.enable_p1_streak10,
                trailing.get(person.id, 0),
            )
            trailing[person.id] = stats["current_streak"]

            totals = year_stats[person.id]
            for key in _SUMMED_STATS:
                totals[key] += stats[key]
            totals["max_streak"] = max(totals["max_streak"], stats["max_streak"])
            totals["current_streak"] = stats["current_streak"]
            all_warnings.extend(warnings)

    for person in people:
        totals = year_stats[person.id]
        totals["extra_balance_days"] = (
            (person.extra_days_start_balance or 0) + totals["earned_extra_days"] - totals["extra_taken_days"]
        )

    logger.debug("Evaluated year %s: %d warnings", year, len(all_warnings))
    return {
        "warnings": _sort_warnings(all_warnings),
        "stats_by_person": year_stats,
        "year": year,
        "is_year_view": True,
    }
