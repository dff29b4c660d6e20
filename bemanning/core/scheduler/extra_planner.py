"""
Planering av X-dagar (uttag av intjänad extra-ledighet).

Saldot kommer från statistiken (röda dagar som arbetats). Varje föreslagen
dag provplaceras och kontrolleras med regelmotorn innan den behålls.
"""

import logging
import time

from bemanning.core.config import DEFAULT_MAX_EXTRA_PER_PERSON, EXTRA_DAY_MIN_SPACING
from bemanning.core.constants import PROTECTED_STATUSES, STATUS_EXTRA_DAY, STATUS_WORK
from bemanning.core.evaluator import evaluate
from bemanning.core.logging_config import LogContext
from bemanning.core.models import AppState, Entry, MonthSchedule
from bemanning.core.scheduler.state import placement_breaks_p0, require_mode
from bemanning.core.stats import calc_month_stats
from bemanning.core.types import ExtraPlanResult, PlannedExtra, RuleEvaluator, UnplannedExtra
from bemanning.core.utils import parse_iso_date

logger = logging.getLogger(__name__)

WEEKDAY_PRIORITY = 1000
WORKDAY_PRIORITY = 100


def find_candidate_dates(
    person_id: str,
    month_data: MonthSchedule,
    count: int,
    prefer_weekdays: bool = True,
) -> list[str]:
    """
    Rangordnade kandidatdatum för X-dagar.

    Prioritet: +1000 för vardag (om vardagar föredras), +100 om dagen redan
    är ett A-pass, minus dagnumret. Första varvet kräver minst tre dagars
    avstånd till redan valda datum, andra varvet fyller på utan krav.
    Skyddade statusar och befintliga X-dagar hoppas över.
    """
    if count <= 0:
        return []

    ranked: list[tuple[int, str, int]] = []
    for day in month_data.days:
        date = parse_iso_date(day.date)
        if date is None:
            continue

        entry = day.entry_for(person_id)
        if entry is not None and (entry.status in PROTECTED_STATUSES or entry.status == STATUS_EXTRA_DAY):
            continue

        priority = 0
        if prefer_weekdays and date.weekday() < 5:
            priority += WEEKDAY_PRIORITY
        if entry is not None and entry.status == STATUS_WORK:
            priority += WORKDAY_PRIORITY
        priority -= date.day

        ranked.append((priority, day.date, date.day))

    ranked.sort(key=lambda c: c[0], reverse=True)

    selected: list[tuple[str, int]] = []
    for _, iso, day_num in ranked:
        if all(abs(day_num - chosen) >= EXTRA_DAY_MIN_SPACING for _, chosen in selected):
            selected.append((iso, day_num))
            if len(selected) >= count:
                return [iso for iso, _ in selected]

    chosen_dates = {iso for iso, _ in selected}
    for _, iso, day_num in ranked:
        if len(selected) >= count:
            break
        if iso not in chosen_dates:
            selected.append((iso, day_num))
            chosen_dates.add(iso)

    return [iso for iso, _ in selected]


def plan_extra_days(
    state: AppState,
    year: int,
    month: int,
    mode: str = "preview",
    max_per_person_per_month: int = DEFAULT_MAX_EXTRA_PER_PERSON,
    prefer_weekdays: bool = True,
    evaluator: RuleEvaluator = evaluate,
) -> ExtraPlanResult:
    """
    Lägger ut X-dagar för personer med positivt extra-saldo.

    Returns:
        proposed_state, planned, unplanned och notes

    Raises:
        ScheduleStateError: om året eller månaden saknas
    """
    require_mode(mode)
    state.month_data(year, month)

    with LogContext(year=year, month=month):
        proposed = state.model_copy(deep=True)
        month_data = proposed.month_data(year, month)
        days_by_date = {day.date: day for day in month_data.days}
        stats = calc_month_stats(proposed, year, month)["stats_by_person"]

        planned: list[PlannedExtra] = []
        unplanned: list[UnplannedExtra] = []

        for person in proposed.active_people():
            person_stats = stats.get(person.id)
            if person_stats is None or person_stats["extra_to_plan_days"] <= 0:
                continue

            wanted = min(person_stats["extra_to_plan_days"], max_per_person_per_month)
            placed: list[str] = []

            for iso in find_candidate_dates(person.id, month_data, wanted, prefer_weekdays):
                day = days_by_date[iso]
                original = day.entries
                day.entries = [e for e in original if e.person_id != person.id]
                day.entries.append(Entry(person_id=person.id, status=STATUS_EXTRA_DAY))

                if placement_breaks_p0(evaluator, proposed, year, month, person.id):
                    day.entries = original
                    logger.debug("X-day for %s on %s rejected (P0)", person.id, iso)
                else:
                    placed.append(iso)

            if placed:
                planned.append(
                    {
                        "person_id": person.id,
                        "first_name": person.first_name,
                        "last_name": person.last_name,
                        "dates": placed,
                        "count": len(placed),
                    }
                )

            if len(placed) < wanted:
                unplanned.append(
                    {
                        "person_id": person.id,
                        "first_name": person.first_name,
                        "last_name": person.last_name,
                        "dates": placed,
                        "count": wanted,
                        "planned_count": len(placed),
                        "remaining_count": wanted - len(placed),
                    }
                )

        total_planned = sum(p["count"] for p in planned)
        notes = [f"Planering för månad {month} {year}", f"Planerade X-dagar: {total_planned}"]
        if unplanned:
            notes.append(f"Kunde ej planera för {len(unplanned)} person(er)")

        if mode == "apply":
            proposed.meta.updated_at = int(time.time() * 1000)

        logger.info(
            "Extra-day planning done: %d planned, %d people short",
            total_planned,
            len(unplanned),
            extra={"extra_fields": {"mode": mode}},
        )

    return {
        "proposed_state": proposed,
        "planned": planned,
        "unplanned": unplanned,
        "notes": "; ".join(notes),
    }
