"""Gemensamma hjälpfunktioner för motorer som arbetar på ett proposed state."""

import logging

from bemanning.core.constants import LEVEL_P0
from bemanning.core.models import AppState, ScheduleStateError
from bemanning.core.sentry_config import capture_exception
from bemanning.core.types import EvaluationResult, RuleEvaluator

logger = logging.getLogger(__name__)

MODES = ("preview", "apply")


def require_mode(mode: str) -> str:
    if mode not in MODES:
        raise ScheduleStateError(f"Ogiltigt läge: {mode!r} (preview eller apply)")
    return mode


def has_p0_for_person(result: EvaluationResult, person_id: str) -> bool:
    """True om regelresultatet har någon P0-varning för personen. P1 ignoreras."""
    return any(w["level"] == LEVEL_P0 and w["person_id"] == person_id for w in result.get("warnings", []))


def placement_breaks_p0(
    evaluator: RuleEvaluator,
    proposed: AppState,
    year: int,
    month: int,
    person_id: str,
) -> bool:
    """
    Kör regelkontrollen efter en provplacering.

    Ett fel i regelkontrollen räknas som P0, så placeringen återställs och
    körningen fortsätter med nästa kandidat.
    """
    try:
        result = evaluator(proposed, year, month)
    except Exception as e:
        logger.exception(
            "Rule evaluation failed during trial placement",
            extra={"extra_fields": {"person_id": person_id, "year": year, "month": month}},
        )
        capture_exception(e, {"trial_placement": {"person_id": person_id, "year": year, "month": month}})
        return True
    return has_p0_for_person(result, person_id)
