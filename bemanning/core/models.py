import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from bemanning.core.config import DEFAULT_TIMES
from bemanning.core.constants import (
    DAYS_PER_WEEK,
    ENTRY_STATUSES,
    ROLES,
    SCHEMA_VERSION,
    SECTOR_PRIVATE,
    STATUS_VACANCY,
)
from bemanning.core.utils import days_in_month, parse_iso_date

_HM_RE = re.compile(r"^\d{2}:\d{2}$")


class ScheduleStateError(ValueError):
    """The state tree lacks the year/month/demand a computation needs."""

    pass


def _check_hm(value: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _HM_RE.match(value):
        raise ValueError(f"Time must be HH:MM or null, got {value!r}")
    return value


class CamelModel(BaseModel):
    """Base model accepting both the stored camelCase keys and snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Person(CamelModel):
    """Employee with employment terms, availability and leave state."""

    id: str
    first_name: str = ""
    last_name: str = ""
    name: str | None = None
    start_date: str | None = None
    employment_pct: float | None = None
    workdays_per_week: int | None = None
    sector: str = SECTOR_PRIVATE
    age: int | None = None
    availability: list[bool] | None = None
    vacation_dates: list[str] = Field(default_factory=list)
    leave_dates: list[str] = Field(default_factory=list)
    vacation_days_per_year: int = 25
    used_vacation_days: int = 0
    saved_vacation_days: int = 0
    saved_leave_days: int = 0
    extra_days_start_balance: int = 0
    group_ids: list[str] = Field(default_factory=list)
    skills: dict[str, bool] = Field(default_factory=dict)
    is_active: bool = True
    hourly_wage: float | None = None
    agreement_id: str | None = None
    notice_period_months: int | None = None
    vacation_table: Literal["fulltime", "parttime"] | None = None
    last_vacation_year_update: str | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_fields(cls, data: Any) -> Any:
        """Map legacy field names onto the canonical schema.

        Older records use ``degree`` for the employment percentage and either
        ``groups`` or ``groupIds`` for group membership.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)
        degree = data.pop("degree", None)
        if data.get("employmentPct") is None and data.get("employment_pct") is None and degree is not None:
            data["employmentPct"] = degree

        legacy_groups = data.pop("groups", None)
        if data.get("groupIds") is None and data.get("group_ids") is None and legacy_groups is not None:
            data["groupIds"] = legacy_groups

        for key in ("groupIds", "group_ids"):
            if isinstance(data.get(key), list):
                data[key] = [str(g) for g in data[key] if g not in (None, "")]
        return data

    @field_validator("availability")
    @classmethod
    def availability_has_seven_days(cls, value: list[bool] | None) -> list[bool] | None:
        if value is not None and len(value) != DAYS_PER_WEEK:
            raise ValueError(f"availability must have {DAYS_PER_WEEK} entries (Mon–Sun), got {len(value)}")
        return value

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.name or self.id

    def has_skill(self, role: str) -> bool:
        return bool(self.skills.get(role))


class Group(CamelModel):
    """Scheduling group with its linked shift templates."""

    id: str
    name: str
    color: str | None = None
    text_color: str | None = None
    shift_ids: list[str] = Field(default_factory=list)


class ShiftTemplate(CamelModel):
    """Shift template. Missing start/end means a flex shift."""

    id: str
    name: str
    short_name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    break_start: str | None = None
    break_end: str | None = None
    color: str | None = None
    cost_center: str | None = None
    workplace: str | None = None
    description: str | None = None

    @field_validator("start_time", "end_time", "break_start", "break_end")
    @classmethod
    def validate_times(cls, value: str | None) -> str | None:
        return _check_hm(value)


class GroupDemand(CamelModel):
    """Headcount per weekday (Mon..Sun) for a group, optionally for one shift."""

    group_id: str
    shift_id: str | None = None
    counts: list[int]

    @field_validator("counts")
    @classmethod
    def seven_counts_in_range(cls, value: list[int]) -> list[int]:
        if len(value) != DAYS_PER_WEEK:
            raise ValueError(f"counts must have {DAYS_PER_WEEK} values (Mon–Sun)")
        for v in value:
            if v < 0 or v > 50:
                raise ValueError(f"demand values must be 0–50, got {v}")
        return value


class RoleDemand(CamelModel):
    """Headcount per skill role for one weekday."""

    kitchen: int = Field(0, alias="KITCHEN", ge=0, le=50)
    pack: int = Field(0, alias="PACK", ge=0, le=50)
    dish: int = Field(0, alias="DISH", ge=0, le=50)
    system: int = Field(0, alias="SYSTEM", ge=0, le=50)
    admin: int = Field(0, alias="ADMIN", ge=0, le=50)
    notes: str = ""

    def count_for(self, role: str) -> int:
        if role not in ROLES:
            return 0
        return getattr(self, role.lower())

    @property
    def total(self) -> int:
        return sum(self.count_for(role) for role in ROLES)


class Demand(CamelModel):
    """Staffing demand, per group and per skill role."""

    group_demands: dict[str, list[int]] = Field(default_factory=dict)
    weekday_template: list[RoleDemand] | None = None

    @field_validator("group_demands")
    @classmethod
    def group_demands_in_range(cls, value: dict[str, list[int]]) -> dict[str, list[int]]:
        for group_id, counts in value.items():
            GroupDemand(group_id=group_id, counts=counts)
        return value

    @field_validator("weekday_template")
    @classmethod
    def template_has_seven_days(cls, value: list[RoleDemand] | None) -> list[RoleDemand] | None:
        if value is not None and len(value) != DAYS_PER_WEEK:
            raise ValueError(f"weekday_template must have {DAYS_PER_WEEK} entries (Mon–Sun)")
        return value

    def as_group_demands(self) -> list[GroupDemand]:
        return [GroupDemand(group_id=gid, counts=counts) for gid, counts in self.group_demands.items()]


class KitchenCore(CamelModel):
    """People allowed to fill the first KITCHEN slots of each day."""

    enabled: bool = True
    core_person_ids: list[str] = Field(default_factory=list)
    min_core_per_day: int = Field(1, ge=0)


class Entry(CamelModel):
    """One person's status on one day, or an unfilled vacancy."""

    person_id: str | None = None
    status: str
    start: str | None = None
    end: str | None = None
    break_start: str | None = None
    break_end: str | None = None
    role: str | None = None
    group_id: str | None = None
    shift_id: str | None = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        if value not in ENTRY_STATUSES:
            raise ValueError(f"Unknown status {value!r}, expected one of {', '.join(ENTRY_STATUSES)}")
        return value

    @field_validator("start", "end", "break_start", "break_end")
    @classmethod
    def validate_times(cls, value: str | None) -> str | None:
        return _check_hm(value)

    @model_validator(mode="after")
    def person_required_unless_vacancy(self) -> "Entry":
        if self.status != STATUS_VACANCY and not self.person_id:
            raise ValueError(f"Entry with status {self.status} needs a personId")
        return self

    def times(self) -> dict[str, str | None]:
        return {
            "start": self.start,
            "end": self.end,
            "break_start": self.break_start,
            "break_end": self.break_end,
        }


class Day(CamelModel):
    date: str
    entries: list[Entry] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def iso_date(cls, value: str) -> str:
        if parse_iso_date(value) is None or len(value) != 10:
            raise ValueError(f"date must be YYYY-MM-DD, got {value!r}")
        return value

    def entry_for(self, person_id: str) -> Entry | None:
        return next((e for e in self.entries if e.person_id == person_id), None)


class TimeDefaults(CamelModel):
    start: str | None = DEFAULT_TIMES["start"]
    end: str | None = DEFAULT_TIMES["end"]
    break_start: str | None = DEFAULT_TIMES["break_start"]
    break_end: str | None = DEFAULT_TIMES["break_end"]

    @field_validator("start", "end", "break_start", "break_end")
    @classmethod
    def validate_times(cls, value: str | None) -> str | None:
        return _check_hm(value)

    def as_dict(self) -> dict[str, str | None]:
        return {
            "start": self.start,
            "end": self.end,
            "break_start": self.break_start,
            "break_end": self.break_end,
        }


class MonthSchedule(CamelModel):
    month: int = Field(ge=1, le=12)
    days: list[Day]
    time_defaults: TimeDefaults | None = None


class Schedule(CamelModel):
    """A year of months. Exactly 12 months with calendar-correct day counts."""

    year: int
    months: list[MonthSchedule]

    @model_validator(mode="after")
    def calendar_shape(self) -> "Schedule":
        if len(self.months) != 12:
            raise ValueError(f"schedule.months must have exactly 12 months, got {len(self.months)}")
        for idx, month in enumerate(self.months):
            if month.month != idx + 1:
                raise ValueError(f"schedule.months[{idx}].month must be {idx + 1}, got {month.month}")
            expected = days_in_month(self.year, month.month)
            if len(month.days) != expected:
                raise ValueError(
                    f"schedule.months[{idx}] (month {month.month}) must have {expected} days, has {len(month.days)}"
                )
        return self

    @classmethod
    def empty(cls, year: int, with_time_defaults: bool = True) -> "Schedule":
        months = []
        for m in range(1, 13):
            days = [Day(date=f"{year}-{m:02d}-{d:02d}") for d in range(1, days_in_month(year, m) + 1)]
            months.append(
                MonthSchedule(month=m, days=days, time_defaults=TimeDefaults() if with_time_defaults else None)
            )
        return cls(year=year, months=months)


class Settings(CamelModel):
    """Application settings the core reads."""

    default_start: str = DEFAULT_TIMES["start"]
    default_end: str = DEFAULT_TIMES["end"]
    break_start: str = DEFAULT_TIMES["break_start"]
    break_end: str = DEFAULT_TIMES["break_end"]
    hourly_wage_is_default: bool = True
    enable_p1_streak10: bool = Field(True, alias="enableP1Streak10")
    summary_tolerance_hours: float = 0.25
    theme: dict[str, Any] | None = None

    def default_times(self) -> dict[str, str | None]:
        return {
            "start": self.default_start,
            "end": self.default_end,
            "break_start": self.break_start,
            "break_end": self.break_end,
        }


class Meta(CamelModel):
    schema_version: str = SCHEMA_VERSION
    updated_at: int = 0
    app_version: str = "1.0.0"


class AppState(CamelModel):
    """Full application state tree as supplied by the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    meta: Meta = Field(default_factory=Meta)
    people: list[Person] = Field(default_factory=list)
    schedule: Schedule
    settings: Settings = Field(default_factory=Settings)
    demand: Demand | None = None
    kitchen_core: KitchenCore = Field(default_factory=KitchenCore)
    groups: dict[str, Group] = Field(default_factory=dict)
    shifts: dict[str, ShiftTemplate] = Field(default_factory=dict)
    group_shifts: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("people")
    @classmethod
    def unique_person_ids(cls, value: list[Person]) -> list[Person]:
        seen: set[str] = set()
        for person in value:
            if person.id in seen:
                raise ValueError(f"Duplicate person id {person.id!r}")
            seen.add(person.id)
        return value

    def month_data(self, year: int, month: int) -> MonthSchedule:
        """Month object for year/month, or ScheduleStateError."""
        if self.schedule is None or self.schedule.year != year:
            raise ScheduleStateError(f"Schedule för år {year} saknas")
        if not isinstance(month, int) or month < 1 or month > 12:
            raise ScheduleStateError("Månad måste vara 1–12")
        if len(self.schedule.months) < month:
            raise ScheduleStateError(f"Månad {month} saknas")
        return self.schedule.months[month - 1]

    def default_times_for(self, month_data: MonthSchedule) -> dict[str, str | None]:
        """Month time defaults when set, otherwise the settings defaults."""
        if month_data.time_defaults is not None:
            return month_data.time_defaults.as_dict()
        return self.settings.default_times()

    def active_people(self) -> list[Person]:
        return [p for p in self.people if p.is_active]

    def person(self, person_id: str) -> Person | None:
        return next((p for p in self.people if p.id == person_id), None)

    def dump(self) -> dict[str, Any]:
        """JSON-safe dict with the stored camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


