import logging
import re
from collections.abc import Mapping
from typing import Any

from bemanning.core.constants import MINUTES_PER_DAY

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def time_to_minutes(value: Any) -> int | None:
    """Parse "HH:MM" to minutes after midnight.

    Returns None for empty, malformed or out-of-range values ("flex" times
    are stored as None, so None is a normal input here).
    """
    if not isinstance(value, str):
        return None

    match = _TIME_RE.match(value.strip())
    if not match:
        logger.debug("Ignoring malformed time value %r", value)
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        logger.debug("Ignoring out-of-range time value %r", value)
        return None
    return hours * 60 + minutes


def span_minutes(start_min: int, end_min: int) -> int:
    """Minutes from start to end, wrapping past midnight when end < start."""
    span = end_min - start_min
    if span < 0:
        span += MINUTES_PER_DAY
    return span


def shift_hours(start_time: str | None, end_time: str | None) -> float:
    """Duration in hours of a start/end pair. Flex (missing) times give 0."""
    start_min = time_to_minutes(start_time)
    end_min = time_to_minutes(end_time)
    if start_min is None or end_min is None:
        return 0.0
    return span_minutes(start_min, end_min) / 60


def calculate_work_minutes(times: Mapping[str, str | None], defaults: Mapping[str, str | None]) -> int | None:
    """Worked minutes for one entry: (end - start) - (break_end - break_start).

    Entry-specific times win over the defaults. Both spans wrap past midnight
    (night shifts). The result is floored at 0. Returns None when start or end
    cannot be resolved.
    """

    def pick(field: str) -> int | None:
        return time_to_minutes(times.get(field) or defaults.get(field))

    start_min = pick("start")
    end_min = pick("end")
    if start_min is None or end_min is None:
        return None

    work_min = span_minutes(start_min, end_min)

    break_start = pick("break_start")
    break_end = pick("break_end")
    if break_start is not None and break_end is not None:
        work_min -= span_minutes(break_start, break_end)

    return max(0, work_min)


def calculate_rest_minutes(
    start_time: str | None,
    end_time: str | None,
    next_start_time: str | None,
) -> int | None:
    """Rest between one working day and a working day on the following date.

    The first shift ends on the next calendar day when it wraps past
    midnight, so its end is measured from the first day's midnight.
    """
    start_min = time_to_minutes(start_time)
    end_min = time_to_minutes(end_time)
    next_start_min = time_to_minutes(next_start_time)
    if start_min is None or end_min is None or next_start_min is None:
        return None

    end_abs = start_min + span_minutes(start_min, end_min)
    return MINUTES_PER_DAY + next_start_min - end_abs
