"""Creative and per-ad reports for one campaign.

Same objective-rule result logic as the campaign aggregator, applied to the
actions of a single creative (or a single ad row) instead of an ad-set group.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..meta.constants import ObjectiveResultRule
from ..meta.graph_client import MetaGraphClient
from ..schemas.dashboard import (
    AdReportMetrics,
    CampaignAdReport,
    CampaignCreativeReport,
    CreativeAsset,
    CreativePerformance,
    DateWindow,
)
from ..schemas.graph import ActionEntry, AdInsightRow, GraphAdCreative
from .goals import get_objective_result_rule
from .parsing import (
    extract_entry_total,
    normalize_action_type,
    parse_number,
    parse_percent_to_number,
)


logger = logging.getLogger(__name__)


PLACEHOLDER_LABEL = "Sem prévia"


@dataclass
class CreativeAggregate:
    """Summed ad-level metrics of every ad sharing one creative."""

    creative_id: str
    impressions: float = 0.0
    clicks: float = 0.0
    spend: float = 0.0
    actions: dict[str, float] = field(default_factory=dict)


def sum_action_totals(
    entries: Optional[Iterable[ActionEntry]], totals: Optional[dict[str, float]] = None
) -> dict[str, float]:
    """Add positive action quantities into ``totals`` keyed by canonical type."""
    totals = {} if totals is None else totals
    for entry in entries or []:
        action_type = normalize_action_type(entry.action_type)
        if not action_type:
            continue
        quantity = extract_entry_total(entry)
        if quantity <= 0:
            continue
        totals[action_type] = totals.get(action_type, 0.0) + quantity
    return totals


def resolve_result_quantity(
    rule: Optional[ObjectiveResultRule], action_totals: dict[str, float]
) -> float:
    """Quantity under the objective rule, else the highest observed volume."""
    quantity = 0.0

    if rule is not None:
        types = [action_type.lower() for action_type in rule.action_types]
        if rule.mode == "first":
            quantity = next(
                (action_totals[t] for t in types if action_totals.get(t, 0.0) > 0),
                0.0,
            )
        else:
            quantity = sum(action_totals.get(t, 0.0) for t in types)

    if quantity <= 0:
        quantity = max(action_totals.values(), default=0.0)

    return quantity


def pick_creative_thumbnail(creative: Optional[GraphAdCreative]) -> Optional[str]:
    """First available preview: thumbnail, link picture, video still, feed image, feed video."""
    if creative is None:
        return None
    if creative.thumbnail_url:
        return creative.thumbnail_url

    story = creative.object_story_spec
    if story and story.link_data and story.link_data.picture:
        return story.link_data.picture
    if story and story.video_data and story.video_data.image_url:
        return story.video_data.image_url

    feed = creative.asset_feed_spec
    if feed and feed.images and feed.images[0].url:
        return feed.images[0].url
    if feed and feed.videos and feed.videos[0].thumbnail_url:
        return feed.videos[0].thumbnail_url

    return None


def build_creative_assets(
    creative_id: str, creative: Optional[GraphAdCreative]
) -> list[CreativeAsset]:
    """Deduplicated visual assets of a creative; never empty."""
    candidates: list[CreativeAsset] = []

    if creative is not None:
        if creative.thumbnail_url:
            candidates.append(
                CreativeAsset(
                    id=f"{creative_id}-thumbnail",
                    label="Miniatura principal",
                    thumbnail_url=creative.thumbnail_url,
                    url=creative.thumbnail_url,
                )
            )

        feed = creative.asset_feed_spec
        for index, image in enumerate((feed.images if feed else None) or []):
            if not image.url and not image.hash:
                continue
            candidates.append(
                CreativeAsset(
                    id=image.hash or f"{creative_id}-image-{index}",
                    label=f"Imagem {image.hash or index + 1}",
                    thumbnail_url=image.url,
                    url=image.url,
                )
            )

        story = creative.object_story_spec
        link_data = story.link_data if story else None
        if link_data and link_data.picture:
            candidates.append(
                CreativeAsset(
                    id=f"{creative_id}-link",
                    label="Imagem do link",
                    thumbnail_url=link_data.picture,
                    url=link_data.link or link_data.picture,
                )
            )

    assets: list[CreativeAsset] = []
    seen: set[str] = set()
    for asset in candidates:
        key = asset.thumbnail_url or asset.url or asset.id
        if key in seen:
            continue
        seen.add(key)
        assets.append(asset)

    if not assets:
        assets.append(
            CreativeAsset(id=f"{creative_id}-placeholder", label=PLACEHOLDER_LABEL)
        )
    return assets


def aggregate_rows_by_creative(
    rows: Iterable[AdInsightRow], ad_creative_map: dict[str, str]
) -> dict[str, CreativeAggregate]:
    """Fold ad rows per creative id; ads without a known creative are dropped."""
    aggregated: dict[str, CreativeAggregate] = {}
    dropped = 0

    for row in rows:
        creative_id = ad_creative_map.get(row.ad_id) if row.ad_id else None
        if not creative_id:
            dropped += 1
            continue

        bucket = aggregated.setdefault(creative_id, CreativeAggregate(creative_id))
        bucket.impressions += parse_number(row.impressions)
        bucket.clicks += parse_number(row.clicks)
        bucket.spend += parse_number(row.spend)
        sum_action_totals(row.actions, bucket.actions)

    if dropped:
        logger.debug("Dropped %s ad rows without a creative mapping", dropped)
    return aggregated


def build_creative_reports(
    rows: Iterable[AdInsightRow],
    ad_creative_map: dict[str, str],
    creatives: dict[str, GraphAdCreative],
    objective: Optional[str],
) -> list[CampaignCreativeReport]:
    rule = get_objective_result_rule(objective)
    reports: list[CampaignCreativeReport] = []

    for creative_id, agg in aggregate_rows_by_creative(rows, ad_creative_map).items():
        creative = creatives.get(creative_id)
        results = resolve_result_quantity(rule, agg.actions)

        reports.append(
            CampaignCreativeReport(
                id=creative_id,
                name=creative.name if creative else None,
                thumbnail_url=pick_creative_thumbnail(creative),
                assets=build_creative_assets(creative_id, creative),
                performance=CreativePerformance(
                    impressions=agg.impressions,
                    clicks=agg.clicks,
                    spend=agg.spend,
                    results=results,
                    cost_per_result=agg.spend / results if results > 0 else None,
                ),
            )
        )

    return reports


def build_ad_reports(
    rows: Iterable[AdInsightRow],
    ad_creative_map: dict[str, str],
    creatives: dict[str, GraphAdCreative],
    objective: Optional[str],
) -> list[CampaignAdReport]:
    """One report per ad row (rows without ad id skipped), in upstream order."""
    rule = get_objective_result_rule(objective)
    reports: list[CampaignAdReport] = []

    for row in rows:
        if not row.ad_id:
            continue

        spend = parse_number(row.spend)
        result_qty = resolve_result_quantity(rule, sum_action_totals(row.actions))
        creative_id = ad_creative_map.get(row.ad_id)

        reports.append(
            CampaignAdReport(
                ad_id=row.ad_id,
                ad_name=row.ad_name,
                creative_id=creative_id,
                thumbnail_url=pick_creative_thumbnail(
                    creatives.get(creative_id) if creative_id else None
                ),
                metrics=AdReportMetrics(
                    impressions=parse_number(row.impressions),
                    clicks=parse_number(row.clicks),
                    spend=spend,
                    ctr=parse_percent_to_number(row.ctr),
                    result_qty=result_qty,
                    cost_per_result=spend / result_qty if result_qty > 0 else None,
                ),
            )
        )

    return reports


async def _fetch_campaign_inputs(
    client: MetaGraphClient, campaign_id: str, time_range: Optional[DateWindow]
) -> tuple[list[AdInsightRow], dict[str, str], dict[str, GraphAdCreative]]:
    rows = await client.fetch_ad_insights(campaign_id, time_range)
    if not rows:
        return [], {}, {}

    ad_creative_map = await client.fetch_ad_creative_map(campaign_id)
    creative_ids = [
        ad_creative_map[row.ad_id]
        for row in rows
        if row.ad_id and row.ad_id in ad_creative_map
    ]
    creatives = await client.fetch_creatives_metadata(creative_ids)
    return rows, ad_creative_map, creatives


async def fetch_campaign_creative_reports(
    client: MetaGraphClient,
    campaign_id: str,
    objective: Optional[str],
    time_range: Optional[DateWindow] = None,
) -> list[CampaignCreativeReport]:
    """Fetch ad rows, ad->creative map and creative metadata; report per creative."""
    rows, ad_creative_map, creatives = await _fetch_campaign_inputs(
        client, campaign_id, time_range
    )
    reports = build_creative_reports(rows, ad_creative_map, creatives, objective)
    logger.info("Campaign %s: %s creative reports", campaign_id, len(reports))
    return reports


async def fetch_campaign_ad_reports(
    client: MetaGraphClient,
    campaign_id: str,
    objective: Optional[str],
    time_range: Optional[DateWindow] = None,
) -> list[CampaignAdReport]:
    rows, ad_creative_map, creatives = await _fetch_campaign_inputs(
        client, campaign_id, time_range
    )
    reports = build_ad_reports(rows, ad_creative_map, creatives, objective)
    logger.info("Campaign %s: %s ad reports", campaign_id, len(reports))
    return reports
