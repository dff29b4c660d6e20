"""
Scheduler - automatisk schemaläggning.

Platt generering, rollbaserad motor, X-dagsplanering och strategival.
"""

from .engine import compute_targets, generate_role_schedule
from .extra_planner import find_candidate_dates, plan_extra_days
from .generator import GenerationRequest, ScheduleGenerationError, demand_count, generate_schedule
from .strategies import (
    FlatListStrategy,
    GenerationStrategy,
    RoleBasedStrategy,
    build_generation_request,
    get_strategy,
)

__all__ = [
    "FlatListStrategy",
    "GenerationRequest",
    "GenerationStrategy",
    "RoleBasedStrategy",
    "ScheduleGenerationError",
    "build_generation_request",
    "compute_targets",
    "demand_count",
    "find_candidate_dates",
    "generate_role_schedule",
    "generate_schedule",
    "get_strategy",
    "plan_extra_days",
]
