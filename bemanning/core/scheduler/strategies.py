"""
Val av genereringsstrategi.

Två strategier med olika kontrakt finns: platt lista över ett datumintervall
(underskott lämnas tyst) och rollbaserad månadsgenerering (explicita
vakanser). Båda nås via samma protokoll.
"""

import datetime
from typing import Any, Protocol

from bemanning.core.evaluator import evaluate
from bemanning.core.models import AppState, Group
from bemanning.core.scheduler.engine import generate_role_schedule
from bemanning.core.scheduler.generator import GenerationRequest, generate_schedule
from bemanning.core.types import EngineResult, GenerationResult, RuleEvaluator


class GenerationStrategy(Protocol):
    name: str

    def run(self, state: AppState, **options: Any) -> dict[str, Any]: ...


def _groups_with_shifts(state: AppState) -> list[Group]:
    """Gruppernas pass, med state.group_shifts som reserv."""
    groups = []
    for group_id, group in state.groups.items():
        if not group.shift_ids and state.group_shifts.get(group_id):
            group = group.model_copy(update={"shift_ids": list(state.group_shifts[group_id])})
        groups.append(group)
    return groups


def build_generation_request(
    state: AppState,
    mode: str = "month",
    year: int | None = None,
    month: int | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
) -> GenerationRequest:
    """Bygger en platt genereringsbegäran från state-trädet."""
    return GenerationRequest(
        mode=mode,
        year=year,
        month=month,
        from_date=from_date,
        to_date=to_date,
        groups=_groups_with_shifts(state),
        shifts=list(state.shifts.values()),
        demands=state.demand.as_group_demands() if state.demand is not None else [],
        people=state.people,
    )


class FlatListStrategy:
    name = "flat"

    def run(
        self,
        state: AppState,
        mode: str = "month",
        year: int | None = None,
        month: int | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
        today: datetime.date | None = None,
        policy: str | None = None,
    ) -> GenerationResult:
        request = build_generation_request(state, mode, year, month, from_date, to_date)
        return generate_schedule(request, today=today, policy=policy)


class RoleBasedStrategy:
    name = "role"

    def __init__(self, evaluator: RuleEvaluator = evaluate):
        self.evaluator = evaluator

    def run(
        self,
        state: AppState,
        year: int,
        month: int,
        mode: str = "preview",
        group_ids: list[str] | None = None,
    ) -> EngineResult:
        return generate_role_schedule(state, year, month, mode, self.evaluator, group_ids)


_STRATEGIES: dict[str, type] = {
    FlatListStrategy.name: FlatListStrategy,
    RoleBasedStrategy.name: RoleBasedStrategy,
}


def get_strategy(name: str, **kwargs: Any) -> GenerationStrategy:
    """
    Strategi efter namn ("flat" eller "role").

    Raises:
        ValueError: okänt namn
    """
    strategy_cls = _STRATEGIES.get(name)
    if strategy_cls is None:
        raise ValueError(f"Okänd strategi: {name!r} (välj en av {', '.join(sorted(_STRATEGIES))})")
    return strategy_cls(**kwargs)
