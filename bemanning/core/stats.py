"""Månads- och årsstatistik per person: timmar, mål och extra-dagssaldo."""

from bemanning.core.config import STANDARD_DAY_HOURS, STATUS_TOLERANCE_HOURS
from bemanning.core.constants import STATUS_EXTRA_DAY, STATUS_WORK
from bemanning.core.holidays import is_red_day
from bemanning.core.models import AppState, MonthSchedule, Person, ScheduleStateError
from bemanning.core.time_utils import calculate_work_minutes
from bemanning.core.types import PersonMonthStats, StatsResult
from bemanning.core.utils import count_weekdays_in_month

STATUS_OK = "OK"
STATUS_UNDER = "YELLOW"
STATUS_OVER = "RED"


def calculate_target_hours(year: int, month: int, employment_pct: float | None) -> float:
    """Måltimmar: vardagar (mån–fre) * 8h * tjänstgöringsgrad."""
    return count_weekdays_in_month(year, month) * STANDARD_DAY_HOURS * (employment_pct or 0) / 100


def get_status_color(delta_hours: float, tolerance: float = STATUS_TOLERANCE_HOURS) -> str:
    if delta_hours < -tolerance:
        return STATUS_UNDER
    if delta_hours > tolerance:
        return STATUS_OVER
    return STATUS_OK


def _finish(
    person: Person,
    hours_worked: float,
    days_worked: int,
    red_days_worked: int,
    extra_taken: int,
    target_hours: float,
    tolerance: float,
) -> PersonMonthStats:
    delta = hours_worked - target_hours
    start_balance = person.extra_days_start_balance or 0
    balance = start_balance + red_days_worked - extra_taken

    return {
        "person_id": person.id,
        "first_name": person.first_name,
        "last_name": person.last_name,
        "days_worked": days_worked,
        "red_days_worked": red_days_worked,
        "hours_worked": round(hours_worked, 2),
        "target_hours": round(target_hours, 2),
        "delta_hours": round(delta, 2),
        "status_color": get_status_color(delta, tolerance),
        "extra_start_balance_days": start_balance,
        "extra_earned_days": red_days_worked,
        "extra_taken_days": extra_taken,
        "extra_balance_days": balance,
        "extra_to_plan_days": max(0, balance),
        "extra_negative_days": max(0, -balance),
    }


def _month_totals(person: Person, month_data: MonthSchedule, defaults: dict[str, str | None]) -> tuple[float, int, int, int]:
    """(timmar, arbetsdagar, röda arbetsdagar, uttagna extra-dagar)"""
    hours = 0.0
    days_worked = 0
    red_days = 0
    extra_taken = 0

    for day in month_data.days:
        entry = day.entry_for(person.id)
        if entry is None:
            continue
        if entry.status == STATUS_WORK:
            days_worked += 1
            work_min = calculate_work_minutes(entry.times(), defaults)
            if work_min is not None:
                hours += work_min / 60
            if is_red_day(day.date):
                red_days += 1
        elif entry.status == STATUS_EXTRA_DAY:
            extra_taken += 1

    return hours, days_worked, red_days, extra_taken


def _require_year(state: AppState, year: int) -> None:
    if state.schedule is None or state.schedule.year != year:
        raise ScheduleStateError(f"Schedule för år {year} saknas")


def calc_month_stats(state: AppState, year: int, month: int) -> StatsResult:
    """
    Statistik per person för en månad.

    Raises:
        ScheduleStateError: om året eller månaden saknas
    """
    _require_year(state, year)
    month_data = state.month_data(year, month)
    defaults = state.default_times_for(month_data)
    tolerance = state.settings.summary_tolerance_hours

    stats_by_person: dict[str, PersonMonthStats] = {}
    for person in state.people:
        hours, days_worked, red_days, extra_taken = _month_totals(person, month_data, defaults)
        target = calculate_target_hours(year, month, person.employment_pct)
        stats_by_person[person.id] = _finish(person, hours, days_worked, red_days, extra_taken, target, tolerance)

    return {"stats_by_person": stats_by_person, "year": year, "month": month}


def calc_year_stats(state: AppState, year: int) -> StatsResult:
    """Årsstatistik som summan av de tolv månaderna."""
    _require_year(state, year)
    tolerance = state.settings.summary_tolerance_hours

    stats_by_person: dict[str, PersonMonthStats] = {}
    for person in state.people:
        hours = 0.0
        target = 0.0
        days_worked = red_days = extra_taken = 0

        for month_data in state.schedule.months:
            m_hours, m_days, m_red, m_extra = _month_totals(person, month_data, state.default_times_for(month_data))
            hours += m_hours
            days_worked += m_days
            red_days += m_red
            extra_taken += m_extra
            target += calculate_target_hours(year, month_data.month, person.employment_pct)

        stats_by_person[person.id] = _finish(person, hours, days_worked, red_days, extra_taken, target, tolerance)

    return {"stats_by_person": stats_by_person, "year": year}
