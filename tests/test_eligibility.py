"""
Unit tests for shift eligibility, scoring and weekly hour limits.
"""

import datetime
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from bemanning.core.eligibility import (
    BASE_SCORE,
    INELIGIBLE_SCORE,
    can_person_work_shift,
    get_available_hours,
    get_eligible_persons_for_shift,
    get_hours_worked_this_week,
    get_max_weekly_hours,
    get_person_week_stats,
    get_shift_duration,
    has_leave_days_available,
    is_available_on_weekday,
    score_person_for_shift,
    validate_person_for_scheduling,
    would_exceed_weekly_hours,
)
from bemanning.core.models import Group, ShiftTemplate

GROUP = Group(id="g1", name="Kök", shift_ids=["s1"])
DAY_SHIFT = ShiftTemplate(id="s1", name="Dag", start_time="08:00", end_time="16:00")
SHORT_SHIFT = ShiftTemplate(id="s2", name="Kort", start_time="10:00", end_time="14:00")
NIGHT_SHIFT = ShiftTemplate(id="s3", name="Natt", start_time="22:00", end_time="06:00")
FLEX_SHIFT = ShiftTemplate(id="s4", name="Flex")

# Wednesday, ordinary weekday
WEDNESDAY = "2026-01-07"


class TestShiftDuration:
    def test_day_shift(self):
        assert get_shift_duration(DAY_SHIFT) == 8.0

    def test_night_shift_wraps_midnight(self):
        assert get_shift_duration(NIGHT_SHIFT) == 8.0

    def test_flex_shift_is_zero(self):
        assert get_shift_duration(FLEX_SHIFT) == 0.0
        assert get_shift_duration(None) == 0.0


class TestHourLimits:
    def test_available_hours_scale_with_employment(self, make_person):
        assert get_available_hours(make_person(employment_pct=80)) == 6.4

    def test_missing_employment_gives_zero(self, make_person):
        assert get_available_hours(make_person(employment_pct=None)) == 0.0
        assert get_max_weekly_hours(make_person(workdays_per_week=None)) == 0.0

    def test_max_weekly_hours(self, make_person):
        assert get_max_weekly_hours(make_person(employment_pct=80, workdays_per_week=4)) == 25.6

    def test_exactly_at_cap_is_allowed(self, make_person):
        person = make_person()
        assert would_exceed_weekly_hours(person, 40.0) is False
        assert would_exceed_weekly_hours(person, 40.5) is True


class TestCanPersonWorkShift:
    def test_fulltime_person_can_work_day_shift(self, make_person):
        assert can_person_work_shift(make_person(), DAY_SHIFT, GROUP, WEDNESDAY) is True

    def test_parttime_person_cannot_take_full_day(self, make_person):
        """80 % over four days gives 6.4 h per day, less than an 8 h shift."""
        person = make_person(employment_pct=80, workdays_per_week=4)
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) is False
        assert can_person_work_shift(person, SHORT_SHIFT, GROUP, WEDNESDAY) is True

    def test_vacation_day_blocks(self, make_person):
        person = make_person(vacation_dates=[WEDNESDAY])
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) is False

    def test_leave_day_blocks(self, make_person):
        person = make_person(leave_dates=[WEDNESDAY])
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) is False

    def test_unavailable_weekday_blocks(self, make_person):
        availability = [True] * 7
        availability[2] = False
        person = make_person(availability=availability)
        assert is_available_on_weekday(person, WEDNESDAY) is False
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) is False

    def test_red_day_does_not_block(self, make_person):
        assert can_person_work_shift(make_person(), DAY_SHIFT, GROUP, "2026-01-06") is True

    def test_wrong_group_blocks(self, make_person):
        person = make_person(group_ids=["g2"])
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) is False

    def test_weekly_cap_blocks(self, make_person):
        person = make_person()
        assert can_person_work_shift(person, DAY_SHIFT, GROUP, WEDNESDAY, hours_worked_this_week=36) is False

    def test_missing_inputs_fail_closed(self, make_person):
        assert can_person_work_shift(None, DAY_SHIFT, GROUP, WEDNESDAY) is False
        assert can_person_work_shift(make_person(), None, GROUP, WEDNESDAY) is False
        assert can_person_work_shift(make_person(), DAY_SHIFT, GROUP, "garbage") is False


class TestScoring:
    def test_ineligible_scores_minus_one(self, make_person):
        person = make_person(group_ids=[])
        assert score_person_for_shift(person, DAY_SHIFT, GROUP, WEDNESDAY) == INELIGIBLE_SCORE

    def test_base_score_with_room_left(self, make_person):
        assert score_person_for_shift(make_person(), DAY_SHIFT, GROUP, WEDNESDAY) == BASE_SCORE

    def test_filling_the_week_earns_bonuses(self, make_person):
        score = score_person_for_shift(make_person(), DAY_SHIFT, GROUP, WEDNESDAY, hours_worked_this_week=32)
        assert score == BASE_SCORE + 50 + 20

    def test_red_day_bonus(self, make_person):
        score = score_person_for_shift(make_person(), DAY_SHIFT, GROUP, "2026-01-06")
        assert score == BASE_SCORE + 10

    def test_vacation_balance_policy(self, make_person):
        person = make_person(vacation_days_per_year=25)
        score = score_person_for_shift(person, DAY_SHIFT, GROUP, "2026-01-06", policy="vacation_balance")
        assert score == BASE_SCORE - 10


class TestWeekHours:
    def test_sums_only_same_week_and_person(self, make_person):
        person = make_person()
        assigned = [
            {"person_id": "p1", "date": "2026-01-05", "start_time": "08:00", "end_time": "16:00"},
            {"person_id": "p1", "date": "2026-01-11", "start_time": "08:00", "end_time": "12:00"},
            # previous week
            {"person_id": "p1", "date": "2026-01-04", "start_time": "08:00", "end_time": "16:00"},
            {"person_id": "p2", "date": "2026-01-06", "start_time": "08:00", "end_time": "16:00"},
        ]
        assert get_hours_worked_this_week(person, WEDNESDAY, assigned) == 12.0

    def test_week_stats(self, make_person):
        person = make_person()
        assigned = [{"person_id": "p1", "date": "2026-01-05", "start_time": "08:00", "end_time": "16:00"}]
        stats = get_person_week_stats(person, WEDNESDAY, assigned, today=datetime.date(2026, 1, 7))

        assert stats["hours_worked"] == 8.0
        assert stats["max_hours"] == 40.0
        assert stats["utilization"] == 20.0
        assert stats["remaining_hours"] == 32.0


class TestEligibleCandidates:
    def test_sorted_by_score_descending(self, make_person):
        almost_full = make_person("p1")
        fresh = make_person("p2")
        assigned = [
            {"person_id": "p1", "date": d, "start_time": "08:00", "end_time": "16:00"}
            for d in ("2026-01-05", "2026-01-06", "2026-01-08", "2026-01-09")
        ]

        ranked = get_eligible_persons_for_shift([fresh, almost_full], DAY_SHIFT, GROUP, WEDNESDAY, assigned)

        assert [c["person_id"] for c in ranked] == ["p1", "p2"]
        assert ranked[0]["hours_this_week"] == 32.0

    def test_ties_keep_input_order(self, make_person):
        people = [make_person("a"), make_person("b"), make_person("c")]
        ranked = get_eligible_persons_for_shift(people, DAY_SHIFT, GROUP, WEDNESDAY)
        assert [c["person_id"] for c in ranked] == ["a", "b", "c"]

    def test_empty_inputs(self, make_person):
        assert get_eligible_persons_for_shift([], DAY_SHIFT, GROUP, WEDNESDAY) == []
        assert get_eligible_persons_for_shift([make_person()], None, GROUP, WEDNESDAY) == []


class TestSchedulingValidation:
    def test_complete_person_is_valid(self, make_person):
        result = validate_person_for_scheduling(make_person(), today=datetime.date(2026, 1, 7))
        assert result == {"valid": True, "errors": []}

    def test_reports_every_missing_field(self, make_person):
        person = make_person(group_ids=[], availability=None, start_date=None, workdays_per_week=9)
        result = validate_person_for_scheduling(person, today=datetime.date(2026, 1, 7))

        assert result["valid"] is False
        assert "Ingen arbetsgrupp tilldelad" in result["errors"]
        assert "Ingen tillgänglighet definierad" in result["errors"]
        assert "Inget startdatum" in result["errors"]
        assert "Ogiltigt antal arbetsdagar per vecka" in result["errors"]
        assert "Startdatum saknas" not in result["errors"]

    def test_overlapping_hrf_errors_reported_once(self, make_person):
        person = make_person(employment_pct=5)
        result = validate_person_for_scheduling(person, today=datetime.date(2026, 1, 7))

        assert result["errors"] == ["Ogiltig tjänstgöringsgrad"]

    def test_other_hrf_errors_are_passed_on(self, make_person):
        person = make_person(hourly_wage=100.0)
        result = validate_person_for_scheduling(person, today=datetime.date(2026, 1, 7))

        assert result["valid"] is False
        assert len(result["errors"]) == 1
        assert result["errors"][0].startswith("Timlön")

    def test_leave_balance(self, make_person):
        assert has_leave_days_available(make_person(saved_leave_days=2), 2) is True
        assert has_leave_days_available(make_person(saved_leave_days=1), 2) is False
