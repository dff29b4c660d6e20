# bemanning/core/types.py

"""
Type definitions for the results returned by the scheduling core.

The core returns plain dicts (they go straight out as JSON through the API),
so their shapes are described with TypedDicts. NewType wrappers keep ids and
ISO date strings from being mixed up with other strings.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NewType, TypedDict

if TYPE_CHECKING:
    from bemanning.core.models import AppState

PersonId = NewType("PersonId", str)
GroupId = NewType("GroupId", str)
ShiftId = NewType("ShiftId", str)
IsoDate = NewType("IsoDate", str)

Hours = float


class RuleWarning(TypedDict):
    """A single rule violation. P0 blocks placement, P1 is advisory."""

    level: str
    code: str
    person_id: PersonId
    date_from: IsoDate
    date_to: IsoDate
    message: str
    details: dict[str, Any]


class PersonRuleStats(TypedDict):
    person_id: PersonId
    first_name: str
    last_name: str
    worked_days: int
    red_days_worked: int
    earned_extra_days: int
    extra_taken_days: int
    extra_balance_days: int
    sem_days: int
    sj_days: int
    vab_days: int
    perm_days: int
    max_streak: int
    current_streak: int
    rest11h_breaches: int
    max10h_breaches: int
    rest36h_breaches: int


class EvaluationResult(TypedDict, total=False):
    warnings: list[RuleWarning]
    stats_by_person: dict[str, PersonRuleStats]
    year: int
    month: int
    is_year_view: bool


#: Injicerad regelkontroll: (state, year, month) -> resultat med warnings.
RuleEvaluator = Callable[["AppState", int, int], EvaluationResult]


class HRValidationResult(TypedDict):
    valid: bool
    errors: list[str]
    #: En kod per fel, i samma ordning som errors.
    error_codes: list[str]
    years_employed: int
    vacation_days_per_year: int
    sector: str


class VacationYearInfo(TypedDict):
    sector: str
    sector_name: str
    vacation_year: str
    years_employed: int
    vacation_days_per_year: int
    calculation_period_weeks: int
    accumulated: int
    used_this_year: int
    saved_from_last_year: int
    remaining: int
    employment_pct: float | None
    vacation_year_start_month: int
    notice_period_months: int


class PersonWeekStats(TypedDict):
    person_id: PersonId
    hours_worked: Hours
    max_hours: Hours
    utilization: float
    remaining_hours: Hours
    vacation_days_left: int
    leave_days_left: int


class RankedCandidate(TypedDict):
    person_id: PersonId
    name: str
    score: int
    hours_this_week: Hours


class GeneratedShift(TypedDict):
    """Flat-list assignment with denormalised display fields."""

    id: str
    date: IsoDate
    start_time: str | None
    end_time: str | None
    person_id: PersonId
    person_name: str
    group_id: GroupId
    group_name: str
    shift_id: ShiftId
    shift_name: str
    role: str
    location: str
    generated_at: str


class GenerationResult(TypedDict):
    success: bool
    shifts: list[GeneratedShift]
    message: str
    errors: list[str]


class Vacancy(TypedDict):
    date: IsoDate
    role: str
    needed: int


class EngineResult(TypedDict):
    proposed_state: "AppState"
    vacancies: list[Vacancy]
    notes: str
    fill_rate: float
    total_slots: int
    filled_slots: int
    has_p0_warnings: bool


class PlannedExtra(TypedDict):
    person_id: PersonId
    first_name: str
    last_name: str
    dates: list[IsoDate]
    count: int


class UnplannedExtra(PlannedExtra):
    planned_count: int
    remaining_count: int


class ExtraPlanResult(TypedDict):
    proposed_state: "AppState"
    planned: list[PlannedExtra]
    unplanned: list[UnplannedExtra]
    notes: str


class PersonMonthStats(TypedDict):
    person_id: PersonId
    first_name: str
    last_name: str
    days_worked: int
    red_days_worked: int
    hours_worked: Hours
    target_hours: Hours
    delta_hours: Hours
    status_color: str
    extra_start_balance_days: int
    extra_earned_days: int
    extra_taken_days: int
    extra_balance_days: int
    extra_to_plan_days: int
    extra_negative_days: int


class StatsResult(TypedDict, total=False):
    stats_by_person: dict[str, PersonMonthStats]
    year: int
    month: int
