"""
Unit tests for extra-day (X) planning.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from bemanning.core.models import ScheduleStateError
from bemanning.core.scheduler import find_candidate_dates, plan_extra_days


def reject_all(state, year, month):
    return {"warnings": [{"level": "P0", "person_id": p.id, "code": "TEST"} for p in state.people]}


def broken_evaluator(state, year, month):
    raise RuntimeError("evaluator down")


def only_p1_warnings(state, year, month):
    return {"warnings": [{"level": "P1", "person_id": p.id, "code": "TEST"} for p in state.people]}


class TestCandidateDates:
    def test_weekdays_first_with_spacing(self, make_state):
        month = make_state().month_data(2026, 1)
        assert find_candidate_dates("p1", month, 2) == ["2026-01-01", "2026-01-05"]

    def test_existing_work_day_is_preferred(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-20", "p1", "A")
        dates = find_candidate_dates("p1", state.month_data(2026, 1), 2)
        assert dates == ["2026-01-20", "2026-01-01"]

    def test_without_weekday_preference(self, make_state):
        month = make_state().month_data(2026, 1)
        assert find_candidate_dates("p1", month, 2, prefer_weekdays=False) == ["2026-01-01", "2026-01-04"]

    def test_protected_and_existing_x_days_are_skipped(self, make_state, put_entry):
        state = make_state()
        put_entry(state, "2026-01-01", "p1", "SEM")
        put_entry(state, "2026-01-02", "p1", "X")
        dates = find_candidate_dates("p1", state.month_data(2026, 1), 1)
        assert dates == ["2026-01-05"]

    def test_second_pass_fills_without_spacing(self, make_state):
        month = make_state().month_data(2026, 1)
        dates = find_candidate_dates("p1", month, 15, prefer_weekdays=False)

        assert len(dates) == 15
        assert len(set(dates)) == 15
        assert dates[:11] == [f"2026-01-{d:02d}" for d in range(1, 32, 3)]

    def test_zero_count(self, make_state):
        assert find_candidate_dates("p1", make_state().month_data(2026, 1), 0) == []


class TestPlanExtraDays:
    def test_plans_start_balance(self, make_person, make_state):
        state = make_state([make_person("p1", extra_days_start_balance=2)])
        result = plan_extra_days(state, 2026, 1)

        assert result["planned"] == [
            {
                "person_id": "p1",
                "first_name": "Anna",
                "last_name": "Berg-p1",
                "dates": ["2026-01-01", "2026-01-05"],
                "count": 2,
            }
        ]
        assert result["unplanned"] == []

        proposed = result["proposed_state"].month_data(2026, 1)
        assert proposed.days[0].entry_for("p1").status == "X"
        # original untouched
        assert state.month_data(2026, 1).days[0].entries == []

    def test_cap_per_person(self, make_person, make_state):
        state = make_state([make_person("p1", extra_days_start_balance=5)])
        result = plan_extra_days(state, 2026, 1, max_per_person_per_month=1)
        assert result["planned"][0]["count"] == 1
        assert result["unplanned"] == []

    def test_nothing_to_plan(self, make_person, make_state):
        result = plan_extra_days(make_state([make_person("p1")]), 2026, 1)
        assert result["planned"] == []
        assert result["unplanned"] == []

    def test_worked_red_day_earns_a_day(self, make_person, make_state, put_entry):
        state = make_state([make_person("p1")])
        # Sunday
        put_entry(state, "2026-01-04", "p1", "A")
        result = plan_extra_days(state, 2026, 1)

        assert result["planned"][0]["count"] == 1

    def test_x_replaces_existing_work_day(self, make_person, make_state, put_entry):
        state = make_state([make_person("p1", extra_days_start_balance=1)])
        put_entry(state, "2026-01-20", "p1", "A")
        result = plan_extra_days(state, 2026, 1)

        day = result["proposed_state"].month_data(2026, 1).days[19]
        assert [e.status for e in day.entries if e.person_id == "p1"] == ["X"]

    def test_rejected_days_are_reported_as_unplanned(self, make_person, make_state):
        state = make_state([make_person("p1", extra_days_start_balance=2)])
        result = plan_extra_days(state, 2026, 1, evaluator=reject_all)

        assert result["planned"] == []
        assert result["unplanned"][0]["planned_count"] == 0
        assert result["unplanned"][0]["remaining_count"] == 2
        assert all(not day.entries for day in result["proposed_state"].month_data(2026, 1).days)

    def test_failing_evaluator_counts_as_rejection(self, make_person, make_state):
        people = [make_person("p1", extra_days_start_balance=2), make_person("p2", extra_days_start_balance=1)]
        state = make_state(people)
        result = plan_extra_days(state, 2026, 1, evaluator=broken_evaluator)

        assert result["planned"] == []
        assert [u["remaining_count"] for u in result["unplanned"]] == [2, 1]
        assert all(not day.entries for day in result["proposed_state"].month_data(2026, 1).days)

    def test_p1_warnings_do_not_block(self, make_person, make_state):
        state = make_state([make_person("p1", extra_days_start_balance=1)])
        result = plan_extra_days(state, 2026, 1, evaluator=only_p1_warnings)
        assert result["planned"][0]["count"] == 1

    def test_apply_stamps_updated_at(self, make_person, make_state):
        state = make_state([make_person("p1", extra_days_start_balance=1)])
        result = plan_extra_days(state, 2026, 1, mode="apply")
        assert result["proposed_state"].meta.updated_at > 0
        assert "Planerade X-dagar: 1" in result["notes"]

    def test_missing_month(self, make_state):
        with pytest.raises(ScheduleStateError):
            plan_extra_days(make_state(), 2025, 1)
