"""
Unit tests for the working-time and rest rule evaluator.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from bemanning.core.evaluator import evaluate, evaluate_year
from bemanning.core.models import ScheduleStateError, Settings


def codes(result, code=None):
    return [w for w in result["warnings"] if code is None or w["code"] == code]


def work_days(put_entry, state, first, last, month=1, person_id="p1", **times):
    for day in range(first, last + 1):
        put_entry(state, f"2026-{month:02d}-{day:02d}", person_id, "A", **times)


class TestWorkingTime:
    def test_long_day_is_p0(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="06:00", end="18:00", break_start="12:00", break_end="12:30")
        warnings = codes(evaluate(state, 2026, 1), "MAX_10H")

        assert len(warnings) == 1
        assert warnings[0]["level"] == "P0"
        assert warnings[0]["details"]["work_minutes"] == 690

    def test_exactly_ten_hours_is_allowed(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="06:00", end="16:30", break_start="12:00", break_end="12:30")
        assert codes(evaluate(state, 2026, 1), "MAX_10H") == []


class TestDailyRest:
    def test_late_then_early_breaks_rest(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="14:00", end="23:00")
        put_entry(state, "2026-01-08", "p1", "A", start="07:00")
        warnings = codes(evaluate(state, 2026, 1), "REST_11H")

        assert len(warnings) == 1
        assert warnings[0]["date_from"] == "2026-01-07"
        assert warnings[0]["date_to"] == "2026-01-08"
        assert warnings[0]["details"]["rest_minutes"] == 480

    def test_night_shifts_in_a_row_are_fine(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="22:00", end="06:00", break_start="02:00", break_end="02:30")
        put_entry(state, "2026-01-08", "p1", "A", start="22:00", end="06:00", break_start="02:00", break_end="02:30")
        assert codes(evaluate(state, 2026, 1), "REST_11H") == []

    def test_default_day_shifts_are_fine(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 5, 9)
        assert codes(evaluate(state, 2026, 1), "REST_11H") == []

    def test_day_off_between_shifts_is_not_checked(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "A", start="14:00", end="23:00")
        put_entry(state, "2026-01-09", "p1", "A", start="05:00")
        assert codes(evaluate(state, 2026, 1), "REST_11H") == []


class TestWeeklyRestAndStreaks:
    def test_seven_days_in_a_row_breaks_weekly_rest(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 5, 11)
        warnings = codes(evaluate(state, 2026, 1), "REST_36H")

        assert len(warnings) == 1
        assert warnings[0]["level"] == "P0"
        assert (warnings[0]["date_from"], warnings[0]["date_to"]) == ("2026-01-05", "2026-01-11")

    def test_each_seven_day_window_counts(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 5, 12)
        result = evaluate(state, 2026, 1)

        assert len(codes(result, "REST_36H")) == 2
        assert result["stats_by_person"]["p1"]["rest36h_breaches"] == 2

    def test_ten_day_streak_is_p1(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 1, 11)
        warnings = codes(evaluate(state, 2026, 1), "STREAK_10")

        assert [w["date_from"] for w in warnings] == ["2026-01-10", "2026-01-11"]
        assert all(w["level"] == "P1" for w in warnings)

    def test_streak_warning_can_be_disabled(self, make_state, put_entry):
        state = make_state(settings=Settings(enable_p1_streak10=False))
        work_days(put_entry, state, 1, 11)
        assert codes(evaluate(state, 2026, 1), "STREAK_10") == []

    def test_max_streak_in_stats(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 5, 7)
        work_days(put_entry, state, 12, 16)
        stats = evaluate(state, 2026, 1)["stats_by_person"]["p1"]

        assert stats["max_streak"] == 5
        assert stats["worked_days"] == 8


class TestExtraDaysAndVacation:
    def test_x_without_balance_is_p0(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "X")
        warnings = codes(evaluate(state, 2026, 1), "EXTRA_NEGATIVE")

        assert len(warnings) == 1
        assert warnings[0]["details"]["balance"] == -1

    def test_x_with_start_balance_is_fine(self, make_person, make_state, put_entry):
        state = make_state([make_person(extra_days_start_balance=1)])
        put_entry(state, "2026-01-07", "p1", "X")
        assert codes(evaluate(state, 2026, 1), "EXTRA_NEGATIVE") == []

    def test_worked_red_day_without_x_is_p1(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-06", "p1", "A")
        result = evaluate(state, 2026, 1)
        warnings = codes(result, "EXTRA_NOT_PLANNED")

        assert len(warnings) == 1
        assert warnings[0]["level"] == "P1"
        assert result["stats_by_person"]["p1"]["red_days_worked"] == 1

    def test_vacation_overdrawn(self, make_person, make_state, put_entry):
        state = make_state([make_person(vacation_days_per_year=2, used_vacation_days=1)])
        put_entry(state, "2026-01-07", "p1", "SEM")
        put_entry(state, "2026-01-08", "p1", "SEM")
        warnings = codes(evaluate(state, 2026, 1), "VACATION_OVERDRAWN")

        assert len(warnings) == 1
        assert warnings[0]["details"]["total_used"] == 3

    def test_absence_counters(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-07", "p1", "SJ")
        put_entry(state, "2026-01-08", "p1", "VAB")
        put_entry(state, "2026-01-09", "p1", "PERM")
        stats = evaluate(state, 2026, 1)["stats_by_person"]["p1"]

        assert (stats["sj_days"], stats["vab_days"], stats["perm_days"]) == (1, 1, 1)


class TestResultShape:
    def test_p0_sorted_before_p1(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 1, 11)
        levels = [w["level"] for w in evaluate(state, 2026, 1)["warnings"]]

        assert {"P0", "P1"} <= set(levels)
        assert levels == sorted(levels)

    def test_inactive_people_are_skipped(self, make_person, make_state, put_entry):
        state = make_state([make_person("p1", is_active=False)])
        put_entry(state, "2026-01-07", "p1", "X")
        result = evaluate(state, 2026, 1)

        assert result["warnings"] == []
        assert result["stats_by_person"] == {}

    def test_wrong_year_raises(self, make_state):
        with pytest.raises(ScheduleStateError):
            evaluate(make_state(), 2025, 1)


class TestYearView:
    def test_streak_continues_across_months(self, make_state, put_entry):
        state = make_state()
        work_days(put_entry, state, 26, 31, month=1)
        work_days(put_entry, state, 1, 4, month=2)

        assert codes(evaluate(state, 2026, 2), "STREAK_10") == []

        result = evaluate_year(state, 2026)
        assert result["is_year_view"] is True
        assert [w["date_from"] for w in codes(result, "STREAK_10")] == ["2026-02-04"]
        assert result["stats_by_person"]["p1"]["worked_days"] == 10
