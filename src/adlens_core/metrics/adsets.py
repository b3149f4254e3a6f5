"""Ad-set aggregation: fold raw insight rows into one bundle per ad-set."""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..meta.constants import LEAD_ACTION_TYPES
from ..schemas.graph import AdsetInsightRow
from .goals import ActionStat, ResultDetail, pick_official_result_for_adset
from .parsing import (
    extract_entry_total,
    format_result_label,
    normalize_action_type,
    parse_number,
)


logger = logging.getLogger(__name__)


@dataclass
class AggregatedAdsetMetrics:
    """Running totals for one ad-set across many insight rows."""

    adset_id: str
    campaign_id: str
    adset_name: Optional[str] = None
    campaign_name: Optional[str] = None
    optimization_goal: Optional[str] = None
    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    reach: float = 0.0
    actions: dict[str, ActionStat] = field(default_factory=dict)


@dataclass(frozen=True)
class AdsetBundle:
    """Finalized, read-only view of one ad-set."""

    adset_id: str
    campaign_id: str
    adset_name: Optional[str]
    campaign_name: Optional[str]
    optimization_goal: Optional[str]
    spend: float
    impressions: float
    clicks: float
    reach: float
    leads: float
    actions: tuple[ResultDetail, ...]
    official_result: Optional[ResultDetail]
    result_quantity: float
    result_cost: Optional[float]


def _merge_row(bucket: AggregatedAdsetMetrics, row: AdsetInsightRow) -> None:
    bucket.spend += parse_number(row.spend)
    bucket.impressions += parse_number(row.impressions)
    bucket.clicks += parse_number(row.clicks)
    bucket.reach += parse_number(row.reach)

    if row.optimization_goal and not bucket.optimization_goal:
        bucket.optimization_goal = row.optimization_goal
    if row.adset_name and not bucket.adset_name:
        bucket.adset_name = row.adset_name
    if row.campaign_name and not bucket.campaign_name:
        bucket.campaign_name = row.campaign_name

    for entry in row.actions or []:
        action_type = normalize_action_type(entry.action_type)
        if not action_type:
            continue
        quantity = extract_entry_total(entry)
        if quantity <= 0:
            continue
        stat = bucket.actions.setdefault(action_type, ActionStat())
        stat.quantity += quantity

    # Keep the smallest reported cost per type.
    for entry in row.cost_per_action_type or []:
        action_type = normalize_action_type(entry.action_type)
        if not action_type:
            continue
        cost = extract_entry_total(entry)
        if cost <= 0:
            continue
        stat = bucket.actions.get(action_type)
        if stat is None:
            bucket.actions[action_type] = ActionStat(quantity=0.0, cost=cost)
        elif stat.cost is None or stat.cost > cost:
            stat.cost = cost


def aggregate_insight_rows_by_adset(
    rows: Iterable[AdsetInsightRow],
) -> dict[str, AggregatedAdsetMetrics]:
    """Fold rows sharing an ad-set id; rows without ad-set/campaign id are skipped."""
    aggregated: dict[str, AggregatedAdsetMetrics] = {}
    skipped = 0

    for row in rows:
        if not row.adset_id or not row.campaign_id:
            skipped += 1
            continue

        bucket = aggregated.get(row.adset_id)
        if bucket is None:
            bucket = AggregatedAdsetMetrics(
                adset_id=row.adset_id,
                campaign_id=row.campaign_id,
            )
            aggregated[row.adset_id] = bucket

        _merge_row(bucket, row)

    if skipped:
        logger.debug("Skipped %s insight rows without adset/campaign id", skipped)
    return aggregated


def build_adset_bundle(agg: AggregatedAdsetMetrics) -> AdsetBundle:
    actions = sorted(
        (
            ResultDetail(
                type=action_type,
                label=format_result_label(action_type),
                quantity=stat.quantity,
                cost=stat.cost,
            )
            for action_type, stat in agg.actions.items()
            if stat.quantity > 0
        ),
        key=lambda detail: detail.quantity,
        reverse=True,
    )

    leads = sum(
        stat.quantity
        for action_type, stat in agg.actions.items()
        if action_type in LEAD_ACTION_TYPES
    )

    official = pick_official_result_for_adset(agg.optimization_goal, agg.actions)

    result_quantity = official.quantity if official else 0.0
    result_cost: Optional[float] = None
    if official and result_quantity > 0:
        result_cost = official.cost
        if result_cost is None and agg.spend > 0:
            result_cost = agg.spend / result_quantity

    if official and official.cost != result_cost:
        official = ResultDetail(
            type=official.type,
            label=official.label,
            quantity=official.quantity,
            cost=result_cost,
        )

    return AdsetBundle(
        adset_id=agg.adset_id,
        campaign_id=agg.campaign_id,
        adset_name=agg.adset_name,
        campaign_name=agg.campaign_name,
        optimization_goal=agg.optimization_goal,
        spend=agg.spend,
        impressions=agg.impressions,
        clicks=agg.clicks,
        reach=agg.reach,
        leads=leads,
        actions=tuple(actions),
        official_result=official,
        result_quantity=result_quantity,
        result_cost=result_cost,
    )


def group_adset_bundles_by_campaign(
    rows: Iterable[AdsetInsightRow],
) -> dict[str, list[AdsetBundle]]:
    """Aggregate ad-set rows and bucket the finalized bundles by campaign id."""
    by_campaign: dict[str, list[AdsetBundle]] = {}
    for agg in aggregate_insight_rows_by_adset(rows).values():
        bundle = build_adset_bundle(agg)
        by_campaign.setdefault(bundle.campaign_id, []).append(bundle)
    return by_campaign
