"""
Rollbaserad schemamotor (v2).

Arbetar på en djup kopia av state ("proposed state") och fyller varje dags
rollslots i prioritetsordning. Varje kandidat provplaceras och kontrolleras
med regelmotorn; en P0-varning för personen avvisar placeringen.
"""

import logging
import time
from collections import Counter
from collections.abc import Sequence

from bemanning.core.constants import (
    LEVEL_P0,
    ROLE_KITCHEN,
    ROLE_PRIORITY,
    STATUS_VACANCY,
    STATUS_WORK,
)
from bemanning.core.evaluator import evaluate
from bemanning.core.logging_config import LogContext
from bemanning.core.models import AppState, Day, Entry, Person, ScheduleStateError
from bemanning.core.sentry_config import capture_exception
from bemanning.core.scheduler.state import placement_breaks_p0, require_mode
from bemanning.core.types import EngineResult, RuleEvaluator, Vacancy
from bemanning.core.utils import parse_iso_date, round_half_up

logger = logging.getLogger(__name__)


def _select_people(state: AppState, group_ids: Sequence[str] | None) -> list[Person]:
    people = state.active_people()
    if group_ids:
        selected = {str(g) for g in group_ids}
        people = [p for p in people if selected.intersection(p.group_ids)]
    return people


def _clear_generated(days: list[Day], person_ids: set[str] | None) -> None:
    """Tar bort vakanser och A-pass. Med gruppfilter rensas bara de valdas A."""
    for day in days:
        day.entries = [
            e
            for e in day.entries
            if e.status != STATUS_VACANCY
            and not (e.status == STATUS_WORK and (person_ids is None or e.person_id in person_ids))
        ]


def compute_targets(people: Sequence[Person], total_slots: int) -> dict[str, int]:
    """
    Rättvisemål per person: round(totalt behov * grad / summa av grader).

    Totalt behov är summan av månadens faktiska rollbehov.
    """
    sum_pct = sum(p.employment_pct or 0 for p in people)
    if sum_pct <= 0:
        return {p.id: 0 for p in people}
    return {p.id: round_half_up(total_slots * (p.employment_pct or 0) / sum_pct) for p in people}


def _try_place(
    proposed: AppState,
    day: Day,
    person: Person,
    role: str,
    year: int,
    month: int,
    evaluator: RuleEvaluator,
) -> bool:
    """Provplacera ett A-pass. Behålls bara om personen inte får någon P0."""
    day.entries.append(Entry(person_id=person.id, status=STATUS_WORK, role=role))
    if placement_breaks_p0(evaluator, proposed, year, month, person.id):
        day.entries.pop()
        logger.debug("Rejected %s for %s on %s (P0)", person.id, role, day.date)
        return False
    return True


def generate_role_schedule(
    state: AppState,
    year: int,
    month: int,
    mode: str = "preview",
    evaluator: RuleEvaluator = evaluate,
    group_ids: Sequence[str] | None = None,
) -> EngineResult:
    """
    Genererar ett schemaförslag för en månad utifrån rollbehov per veckodag.

    Args:
        state: State-trädet. Ändras aldrig.
        year: År, måste matcha schedule.year
        month: Månad 1–12
        mode: "preview" eller "apply" (apply stämplar meta.updated_at)
        evaluator: Regelkontroll (state, year, month) -> {"warnings": [...]}
        group_ids: Begränsa till personer i dessa grupper

    Returns:
        proposed_state, vacancies, notes, fill_rate, total_slots,
        filled_slots, has_p0_warnings

    Raises:
        ScheduleStateError: om år, månad eller rollbehov saknas
    """
    require_mode(mode)
    state.month_data(year, month)

    template = state.demand.weekday_template if state.demand is not None else None
    if not template:
        raise ScheduleStateError("Bemanningsbehov per roll saknas (demand.weekdayTemplate)")

    with LogContext(year=year, month=month):
        people = _select_people(state, group_ids)
        proposed = state.model_copy(deep=True)
        days = proposed.month_data(year, month).days

        _clear_generated(days, {p.id for p in people} if group_ids else None)

        weekdays = [parse_iso_date(day.date).weekday() for day in days]
        total_slots = sum(template[wd].total for wd in weekdays)
        targets = compute_targets(people, total_slots)
        current: Counter[str] = Counter()

        core = proposed.kitchen_core
        core_ids = set(core.core_person_ids)
        core_slots = core.min_core_per_day if core.enabled and core_ids else 0

        logger.info(
            "Role engine run: %d slots, %d people",
            total_slots,
            len(people),
            extra={"extra_fields": {"total_slots": total_slots, "people": len(people), "mode": mode}},
        )

        vacancy_counts: Counter[tuple[str, str]] = Counter()
        filled_slots = 0

        for day, weekday in zip(days, weekdays):
            demand = template[weekday]
            busy = {e.person_id for e in day.entries if e.person_id}

            for role in ROLE_PRIORITY:
                for slot in range(demand.count_for(role)):
                    is_core_slot = role == ROLE_KITCHEN and slot < core_slots
                    candidates = [
                        p
                        for p in people
                        if p.has_skill(role) and p.id not in busy and (not is_core_slot or p.id in core_ids)
                    ]
                    candidates.sort(key=lambda p: targets[p.id] - current[p.id], reverse=True)

                    chosen = next(
                        (p for p in candidates if _try_place(proposed, day, p, role, year, month, evaluator)),
                        None,
                    )
                    if chosen is not None:
                        busy.add(chosen.id)
                        current[chosen.id] += 1
                        filled_slots += 1
                    else:
                        day.entries.append(Entry(person_id=None, status=STATUS_VACANCY, role=role))
                        vacancy_counts[(day.date, role)] += 1

        vacancies: list[Vacancy] = [
            {"date": date, "role": role, "needed": needed} for (date, role), needed in vacancy_counts.items()
        ]

        notes = [f"Förslag genererat: {filled_slots} av {total_slots} rollslots tillsatta"]
        if vacancies:
            vacancy_total = sum(v["needed"] for v in vacancies)
            vacancy_days = len({v["date"] for v in vacancies})
            notes.append(f"{vacancy_total} vakans(er) på {vacancy_days} dag(ar)")

        p0_count = 0
        try:
            final = evaluator(proposed, year, month)
        except Exception as e:
            logger.exception("Final rule check failed")
            capture_exception(e, {"role_engine": {"year": year, "month": month, "mode": mode}})
            notes.append("Slutlig regelkontroll misslyckades")
        else:
            p0_count = sum(1 for w in final.get("warnings", []) if w["level"] == LEVEL_P0)
            if p0_count:
                notes.append(f"{p0_count} P0-varning(ar) vid slutlig kontroll")

        if mode == "apply":
            proposed.meta.updated_at = int(time.time() * 1000)

        fill_rate = round(filled_slots / total_slots, 4) if total_slots else 1.0
        logger.info("Role engine done: fill rate %.2f", fill_rate)

    return {
        "proposed_state": proposed,
        "vacancies": vacancies,
        "notes": "; ".join(notes),
        "fill_rate": fill_rate,
        "total_slots": total_slots,
        "filled_slots": filled_slots,
        "has_p0_warnings": p0_count > 0,
    }
