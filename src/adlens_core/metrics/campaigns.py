"""Campaign aggregation: dominant goal group and campaign-level result.

Campaign totals (spend, impressions, clicks, leads) come from every ad-set.
results / result_spend / cost_per_result come only from the dominant
optimization-goal group, judged by the campaign objective's result rule.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..meta.constants import CAMPAIGN_SUMMARY_LABEL, ObjectiveResultRule
from ..schemas.dashboard import (
    AdsetResultRow,
    CampaignResultSummary,
    MetricTotals,
    ResultBreakdown,
)
from ..schemas.graph import GraphCampaign
from .adsets import AdsetBundle
from .goals import get_objective_result_rule, normalize_optimization_goal
from .parsing import format_result_label
from .totals import create_empty_totals, recompute_cost_per_result


logger = logging.getLogger(__name__)


SPEND_TIE_EPSILON = 1e-6
UNKNOWN_GOAL_KEY = "__UNKNOWN__"


@dataclass
class GoalGroup:
    """Ad-sets of one campaign sharing a canonical optimization goal."""

    canonical_goal: Optional[str]
    original_goals: set[str] = field(default_factory=set)
    spend: float = 0.0
    adsets: list[AdsetBundle] = field(default_factory=list)

    @property
    def result_quantity(self) -> float:
        return sum(adset.result_quantity for adset in self.adsets)


@dataclass
class ActionAggregate:
    quantity: float = 0.0
    weighted_spend: float = 0.0


@dataclass
class CampaignMetricBundle:
    metrics: MetricTotals
    result: Optional[CampaignResultSummary]


def group_adsets_by_goal(adsets: Iterable[AdsetBundle]) -> dict[str, GoalGroup]:
    groups: dict[str, GoalGroup] = {}
    for adset in adsets:
        canonical = normalize_optimization_goal(adset.optimization_goal)
        key = canonical or UNKNOWN_GOAL_KEY

        group = groups.get(key)
        if group is None:
            group = GoalGroup(canonical_goal=canonical)
            groups[key] = group

        if adset.optimization_goal:
            group.original_goals.add(adset.optimization_goal)
        group.spend += adset.spend
        group.adsets.append(adset)
    return groups


def select_dominant_group(groups: Iterable[GoalGroup]) -> Optional[GoalGroup]:
    """Highest spend wins; on a near-tie the higher summed result volume wins."""
    dominant: Optional[GoalGroup] = None

    for group in groups:
        if dominant is None:
            dominant = group
            continue

        if group.spend > dominant.spend + SPEND_TIE_EPSILON:
            dominant = group
            continue

        if (
            abs(group.spend - dominant.spend) <= SPEND_TIE_EPSILON
            and group.result_quantity > dominant.result_quantity
        ):
            dominant = group

    return dominant


def aggregate_actions_for_adsets(
    adsets: Iterable[AdsetBundle],
) -> dict[str, ActionAggregate]:
    """Sum quantities per action type plus cost-weighted spend (cost * quantity)."""
    aggregate: dict[str, ActionAggregate] = {}
    for adset in adsets:
        for action in adset.actions:
            entry = aggregate.setdefault(action.type.lower(), ActionAggregate())
            entry.quantity += action.quantity
            if action.cost is not None and action.quantity > 0:
                entry.weighted_spend += action.cost * action.quantity
    return aggregate


def _select_result_types(
    rule: ObjectiveResultRule,
    aggregated: dict[str, ActionAggregate],
    result_spend: float,
) -> tuple[list[ResultBreakdown], list[str]]:
    """Apply a rule's first/sum mode; returns breakdown entries and selected types."""
    breakdown: list[ResultBreakdown] = []
    selected: list[str] = []
    types = [action_type.lower() for action_type in rule.action_types]

    if rule.mode == "first":
        for action_type in types:
            info = aggregated.get(action_type)
            quantity = info.quantity if info else 0.0
            if quantity <= 0:
                continue

            cost: Optional[float] = None
            if info.weighted_spend > 0:
                cost = info.weighted_spend / quantity
            elif result_spend > 0:
                cost = result_spend / quantity

            breakdown.append(
                ResultBreakdown(
                    type=action_type,
                    label=rule.label,
                    quantity=quantity,
                    cost_per_result=cost,
                )
            )
            selected.append(action_type)
            break

        # Remember the intended target even without volume.
        if not breakdown and types:
            selected.append(types[0])
    else:
        for action_type in types:
            info = aggregated.get(action_type)
            quantity = info.quantity if info else 0.0
            if quantity <= 0:
                continue

            cost = info.weighted_spend / quantity if info.weighted_spend > 0 else None
            breakdown.append(
                ResultBreakdown(
                    type=action_type,
                    label=format_result_label(action_type),
                    quantity=quantity,
                    cost_per_result=cost,
                )
            )
            selected.append(action_type)

    return breakdown, selected


def _rule_adset_row(
    adset: AdsetBundle,
    rule: ObjectiveResultRule,
    selected_types: list[str],
    fallback_goal: Optional[str],
) -> AdsetResultRow:
    actions_by_type = {action.type: action for action in adset.actions}

    quantity = 0.0
    weighted_cost = 0.0
    for action_type in selected_types:
        action = actions_by_type.get(action_type)
        if action is None:
            continue
        quantity += action.quantity
        if action.cost is not None and action.quantity > 0:
            weighted_cost += action.cost * action.quantity

    cost: Optional[float] = None
    if quantity > 0:
        cost = weighted_cost / quantity if weighted_cost > 0 else adset.spend / quantity

    return AdsetResultRow(
        adset_id=adset.adset_id,
        adset_name=adset.adset_name,
        optimization_goal=adset.optimization_goal or fallback_goal,
        action_type=selected_types[0] if len(selected_types) == 1 else None,
        label=rule.label,
        quantity=quantity,
        cost_per_result=cost,
        spend=adset.spend,
        impressions=adset.impressions,
        clicks=adset.clicks,
    )


def _official_adset_row(
    adset: AdsetBundle, fallback_goal: Optional[str]
) -> AdsetResultRow:
    official = adset.official_result

    cost = official.cost if official else None
    if cost is None and adset.result_quantity > 0:
        cost = adset.spend / adset.result_quantity

    return AdsetResultRow(
        adset_id=adset.adset_id,
        adset_name=adset.adset_name,
        optimization_goal=adset.optimization_goal or fallback_goal,
        action_type=official.type if official else None,
        label=official.label if official else format_result_label(None),
        quantity=adset.result_quantity,
        cost_per_result=cost,
        spend=adset.spend,
        impressions=adset.impressions,
        clicks=adset.clicks,
    )


def build_campaign_bundle(
    campaign: GraphCampaign, adsets: list[AdsetBundle]
) -> CampaignMetricBundle:
    """Roll a campaign's ad-sets into totals and one result summary."""
    metrics = create_empty_totals()

    if not adsets:
        return CampaignMetricBundle(metrics=metrics, result=None)

    for adset in adsets:
        metrics.spend += adset.spend
        metrics.impressions += adset.impressions
        metrics.clicks += adset.clicks
        metrics.leads += adset.leads

    groups = group_adsets_by_goal(adsets)
    dominant = select_dominant_group(groups.values())
    if dominant is None:
        return CampaignMetricBundle(metrics=metrics, result=None)

    if len(groups) > 1:
        logger.debug(
            "Campaign %s: dominant goal %s out of %s groups",
            campaign.id,
            dominant.canonical_goal,
            len(groups),
        )

    result_adsets = dominant.adsets
    result_spend = sum(adset.spend for adset in result_adsets)
    rule = get_objective_result_rule(campaign.objective)

    if rule is not None:
        aggregated = aggregate_actions_for_adsets(result_adsets)
        breakdown, selected_types = _select_result_types(rule, aggregated, result_spend)

        result_quantity = sum(entry.quantity for entry in breakdown)
        cost_per_result = result_spend / result_quantity if result_quantity > 0 else None

        result = CampaignResultSummary(
            label=rule.label,
            quantity=result_quantity,
            cost_per_result=cost_per_result,
            optimization_goal=dominant.canonical_goal,
            types=list(dict.fromkeys(entry.type for entry in breakdown)),
            details=breakdown or None,
            adsets=[
                _rule_adset_row(adset, rule, selected_types, dominant.canonical_goal)
                for adset in result_adsets
            ],
        )

        metrics.results = result_quantity
        metrics.result_spend = result_spend
        recompute_cost_per_result(metrics)
    else:
        result = CampaignResultSummary(
            label=CAMPAIGN_SUMMARY_LABEL,
            quantity=None,
            cost_per_result=None,
            optimization_goal=dominant.canonical_goal,
            types=[],
            details=None,
            adsets=[
                _official_adset_row(adset, dominant.canonical_goal)
                for adset in result_adsets
            ],
        )

        metrics.results = 0.0
        metrics.result_spend = 0.0
        metrics.cost_per_result = None

    return CampaignMetricBundle(metrics=metrics, result=result)
