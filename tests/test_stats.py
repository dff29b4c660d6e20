"""
Unit tests for monthly and yearly per-person statistics.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from bemanning.core.models import ScheduleStateError, Settings
from bemanning.core.stats import (
    STATUS_OK,
    STATUS_OVER,
    STATUS_UNDER,
    calc_month_stats,
    calc_year_stats,
    calculate_target_hours,
    get_status_color,
)


def fill_weekdays(put_entry, state, month=1, person_id="p1"):
    for day in state.month_data(2026, month).days:
        if datetime.date.fromisoformat(day.date).weekday() < 5:
            put_entry(state, day.date, person_id, "A")


class TestTargets:
    def test_january_target(self):
        # 22 weekdays in January 2026
        assert calculate_target_hours(2026, 1, 100) == 176.0
        assert calculate_target_hours(2026, 1, 50) == 88.0

    def test_missing_employment_gives_zero(self):
        assert calculate_target_hours(2026, 1, None) == 0.0

    def test_status_colors(self):
        assert get_status_color(0.0) == STATUS_OK
        assert get_status_color(0.2) == STATUS_OK
        assert get_status_color(-1.0) == STATUS_UNDER
        assert get_status_color(1.0) == STATUS_OVER


class TestMonthStats:
    def test_full_month_hits_target(self, make_state, put_entry):
        state = make_state()
        fill_weekdays(put_entry, state)
        stats = calc_month_stats(state, 2026, 1)["stats_by_person"]["p1"]

        assert stats["days_worked"] == 22
        assert stats["hours_worked"] == 176.0
        assert stats["delta_hours"] == 0.0
        assert stats["status_color"] == STATUS_OK

    def test_empty_month_is_under_target(self, make_state):
        stats = calc_month_stats(make_state(), 2026, 1)["stats_by_person"]["p1"]
        assert stats["hours_worked"] == 0.0
        assert stats["status_color"] == STATUS_UNDER

    def test_entry_times_override_defaults(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="10:00", end="14:00", break_start="12:00", break_end="12:00")
        stats = calc_month_stats(state, 2026, 1)["stats_by_person"]["p1"]
        assert stats["hours_worked"] == 4.0

    def test_settings_defaults_when_month_has_none(self, make_state, put_entry):
        settings = Settings(default_start="08:00", default_end="12:00", break_start="10:00", break_end="10:30")
        state = make_state(settings=settings)
        state.month_data(2026, 1).time_defaults = None
        put_entry(state, "2026-01-07", "p1", "A")
        stats = calc_month_stats(state, 2026, 1)["stats_by_person"]["p1"]

        assert stats["hours_worked"] == 3.5

    def test_extra_day_balance(self, make_person, make_state, put_entry):
        state = make_state([make_person(extra_days_start_balance=1)])
        put_entry(state, "2026-01-04", "p1", "A")
        put_entry(state, "2026-01-06", "p1", "A")
        put_entry(state, "2026-01-20", "p1", "X")
        stats = calc_month_stats(state, 2026, 1)["stats_by_person"]["p1"]

        assert stats["red_days_worked"] == 2
        assert stats["extra_earned_days"] == 2
        assert stats["extra_taken_days"] == 1
        assert stats["extra_balance_days"] == 2
        assert stats["extra_to_plan_days"] == 2
        assert stats["extra_negative_days"] == 0

    def test_negative_balance(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-20", "p1", "X")
        stats = calc_month_stats(state, 2026, 1)["stats_by_person"]["p1"]

        assert stats["extra_to_plan_days"] == 0
        assert stats["extra_negative_days"] == 1

    def test_inactive_people_are_included(self, make_person, make_state):
        state = make_state([make_person("p1"), make_person("p2", is_active=False)])
        assert set(calc_month_stats(state, 2026, 1)["stats_by_person"]) == {"p1", "p2"}

    def test_missing_year_raises(self, make_state):
        with pytest.raises(ScheduleStateError):
            calc_month_stats(make_state(), 2027, 1)


class TestYearStats:
    def test_year_target_is_sum_of_months(self, make_state):
        stats = calc_year_stats(make_state(), 2026)["stats_by_person"]["p1"]
        # 261 weekdays in 2026
        assert stats["target_hours"] == 2088.0

    def test_year_sums_months(self, make_state, put_entry):
        state = make_state()
        fill_weekdays(put_entry, state, month=1)
        fill_weekdays(put_entry, state, month=2)
        stats = calc_year_stats(state, 2026)["stats_by_person"]["p1"]

        assert stats["days_worked"] == 42
        assert stats["hours_worked"] == 336.0
