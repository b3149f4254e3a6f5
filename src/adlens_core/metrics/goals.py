"""Optimization-goal and campaign-objective resolution.

Two independent alias layers:
- optimization goal (ad-set level) -> canonical bucket -> candidate action types
- campaign objective -> ObjectiveResultRule (label, action types, first|sum)
"""
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from ..meta.constants import (
    CAMPAIGN_OBJECTIVE_ALIASES,
    FALLBACK_RESULT_ACTION_TYPES,
    OBJECTIVE_RESULT_RULES,
    OPTIMIZATION_GOAL_ALIASES,
    OPTIMIZATION_GOAL_TO_ACTION_TYPES,
    ObjectiveResultRule,
)
from .parsing import format_result_label


logger = logging.getLogger(__name__)


@dataclass
class ActionStat:
    """Aggregated quantity and (minimum) cost-per-action of one action type."""

    quantity: float = 0.0
    cost: Optional[float] = None


@dataclass(frozen=True)
class ResultDetail:
    """A resolved result: action type, display label, volume and unit cost."""

    type: str
    label: str
    quantity: float
    cost: Optional[float]


def normalize_optimization_goal(goal: Optional[str]) -> Optional[str]:
    if not goal or not isinstance(goal, str):
        return None
    upper = goal.strip().upper()
    if not upper:
        return None
    return OPTIMIZATION_GOAL_ALIASES.get(upper, upper)


def get_goal_action_candidates(goal: Optional[str]) -> list[str]:
    """Goal-specific candidates followed by the generic fallback list."""
    normalized = normalize_optimization_goal(goal)
    mapped = OPTIMIZATION_GOAL_TO_ACTION_TYPES.get(normalized, ()) if normalized else ()
    return [*mapped, *FALLBACK_RESULT_ACTION_TYPES]


def get_objective_result_rule(objective: object) -> Optional[ObjectiveResultRule]:
    if not isinstance(objective, str) or not objective.strip():
        return None

    upper = objective.strip().upper()
    normalized = CAMPAIGN_OBJECTIVE_ALIASES.get(upper, upper)
    return OBJECTIVE_RESULT_RULES.get(normalized)


def pick_official_result_for_adset(
    goal: Optional[str], actions: Mapping[str, ActionStat]
) -> Optional[ResultDetail]:
    """Choose the single result metric of an ad-set.

    1. first candidate (declared order) with quantity > 0;
    2. else the observed action type with the highest quantity;
    3. else the first candidate with quantity 0, so the ad-set still has a
       labeled result.
    """
    candidates = get_goal_action_candidates(goal)
    seen: set[str] = set()

    for candidate in candidates:
        normalized = candidate.lower()
        if normalized in seen:
            continue
        seen.add(normalized)

        stat = actions.get(normalized)
        if stat is not None and stat.quantity > 0:
            return ResultDetail(
                type=normalized,
                label=format_result_label(normalized),
                quantity=stat.quantity,
                cost=stat.cost,
            )

    best_type: Optional[str] = None
    best_stat: Optional[ActionStat] = None
    for action_type, stat in actions.items():
        if stat.quantity <= 0:
            continue
        if best_stat is None or stat.quantity > best_stat.quantity:
            best_type, best_stat = action_type, stat

    if best_type is not None and best_stat is not None:
        logger.debug(
            "No goal candidate with volume for goal=%s, using %s", goal, best_type
        )
        return ResultDetail(
            type=best_type,
            label=format_result_label(best_type),
            quantity=best_stat.quantity,
            cost=best_stat.cost,
        )

    default_type = next((c.lower() for c in candidates if c), None)
    if default_type is None:
        return None

    return ResultDetail(
        type=default_type,
        label=format_result_label(default_type),
        quantity=0.0,
        cost=None,
    )
