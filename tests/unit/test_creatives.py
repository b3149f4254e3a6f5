"""Unit tests for creative and per-ad reports."""
from unittest.mock import AsyncMock

import pytest

from src.adlens_core.meta.constants import ObjectiveResultRule
from src.adlens_core.metrics.creatives import (
    build_ad_reports,
    build_creative_assets,
    build_creative_reports,
    fetch_campaign_ad_reports,
    fetch_campaign_creative_reports,
    pick_creative_thumbnail,
    resolve_result_quantity,
)
from src.adlens_core.metrics.goals import get_objective_result_rule
from src.adlens_core.schemas.graph import AdInsightRow, GraphAdCreative


def _ad_row(ad_id, spend, actions=None, ctr=None):
    return AdInsightRow.model_validate(
        {
            "ad_id": ad_id,
            "ad_name": f"Ad {ad_id}" if ad_id else None,
            "spend": spend,
            "impressions": "500",
            "clicks": "25",
            "ctr": ctr,
            "actions": [
                {"action_type": action_type, "value": value}
                for action_type, value in (actions or {}).items()
            ],
        }
    )


@pytest.fixture
def creatives():
    return {
        "cr1": GraphAdCreative.model_validate(
            {
                "id": "cr1",
                "name": "Carousel",
                "thumbnail_url": "https://cdn/thumb.jpg",
                "object_story_spec": {
                    "link_data": {"picture": "https://cdn/link.jpg", "link": "https://shop"}
                },
                "asset_feed_spec": {
                    "images": [
                        {"hash": "h1", "url": "https://cdn/h1.jpg"},
                        {"url": "https://cdn/thumb.jpg"},
                        {"url": "https://cdn/second.jpg"},
                    ]
                },
            }
        ),
        "cr2": GraphAdCreative.model_validate(
            {"id": "cr2", "object_story_spec": {"video_data": {"image_url": "https://cdn/v.jpg"}}}
        ),
    }


def test_resolve_result_quantity_first_mode():
    """Test first-mode rules take the first type with volume."""
    rule = get_objective_result_rule("OUTCOME_LEADS")

    assert resolve_result_quantity(rule, {"leadgen": 3, "lead": 0, "link_click": 90}) == 3


def test_resolve_result_quantity_falls_back_to_highest_volume():
    """Test no rule match falls back to the highest observed volume."""
    rule = get_objective_result_rule("OUTCOME_SALES")

    assert resolve_result_quantity(rule, {"link_click": 90, "view_content": 12}) == 90
    assert resolve_result_quantity(None, {}) == 0.0


def test_pick_creative_thumbnail_order():
    """Test thumbnail preference order across creative fields."""
    assert pick_creative_thumbnail(None) is None
    assert pick_creative_thumbnail(
        GraphAdCreative(thumbnail_url="https://cdn/a.jpg")
    ) == "https://cdn/a.jpg"
    assert pick_creative_thumbnail(
        GraphAdCreative.model_validate(
            {"asset_feed_spec": {"images": [{"hash": "h"}], "videos": [{"thumbnail_url": "https://cdn/v.jpg"}]}}
        )
    ) == "https://cdn/v.jpg"


def test_build_creative_assets_deduplicates(creatives):
    """Test assets from thumbnail, feed images and link picture are deduplicated."""
    assets = build_creative_assets("cr1", creatives["cr1"])

    assert [asset.label for asset in assets] == [
        "Miniatura principal",
        "Imagem h1",
        "Imagem 3",
        "Imagem do link",
    ]
    assert assets[-1].url == "https://shop"
    assert len({asset.thumbnail_url for asset in assets}) == len(assets)


def test_build_creative_assets_placeholder():
    """Test creatives without visuals get one placeholder asset."""
    assets = build_creative_assets("cr9", None)

    assert len(assets) == 1
    assert assets[0].id == "cr9-placeholder"
    assert assets[0].thumbnail_url is None


def test_build_creative_reports(creatives):
    """Test ad rows aggregate per creative; unmapped ads are dropped."""
    rows = [
        _ad_row("a1", "30", {"lead": "2"}),
        _ad_row("a2", "20", {"lead": "3", "link_click": "40"}),
        _ad_row("a3", "15", {"video_view": "100"}),
        _ad_row("a4", "99", {"lead": "50"}),
    ]
    ad_creative_map = {"a1": "cr1", "a2": "cr1", "a3": "cr2"}

    reports = build_creative_reports(rows, ad_creative_map, creatives, "OUTCOME_LEADS")

    assert [report.id for report in reports] == ["cr1", "cr2"]

    first = reports[0]
    assert first.name == "Carousel"
    assert first.thumbnail_url == "https://cdn/thumb.jpg"
    assert first.performance.spend == 50.0
    assert first.performance.impressions == 1000.0
    assert first.performance.results == 5.0
    assert first.performance.cost_per_result == pytest.approx(10.0)

    second = reports[1]
    assert second.thumbnail_url == "https://cdn/v.jpg"
    assert second.performance.results == 100.0
    assert second.assets[0].id == "cr2-placeholder"


def test_build_creative_reports_without_results(creatives):
    """Test creatives with no actions have no cost per result."""
    reports = build_creative_reports(
        [_ad_row("a1", "30")], {"a1": "cr1"}, creatives, "OUTCOME_LEADS"
    )

    assert reports[0].performance.results == 0.0
    assert reports[0].performance.cost_per_result is None


def test_build_ad_reports(creatives):
    """Test one report per ad row with ctr as a fraction."""
    rows = [
        _ad_row("a1", "30", {"lead": "3"}, ctr="2.5"),
        _ad_row("a2", "10", {}),
        _ad_row(None, "5", {"lead": "1"}),
    ]

    reports = build_ad_reports(rows, {"a1": "cr1"}, creatives, "OUTCOME_LEADS")

    assert [report.ad_id for report in reports] == ["a1", "a2"]
    assert reports[0].creative_id == "cr1"
    assert reports[0].thumbnail_url == "https://cdn/thumb.jpg"
    assert reports[0].metrics.ctr == pytest.approx(0.025)
    assert reports[0].metrics.result_qty == 3.0
    assert reports[0].metrics.cost_per_result == pytest.approx(10.0)
    assert reports[1].creative_id is None
    assert reports[1].thumbnail_url is None
    assert reports[1].metrics.cost_per_result is None


@pytest.mark.asyncio
async def test_fetch_campaign_creative_reports(creatives):
    """Test creative metadata is requested for the mapped creative ids."""
    client = AsyncMock()
    client.fetch_ad_insights.return_value = [
        _ad_row("a1", "30", {"lead": "2"}),
        _ad_row("a2", "10", {"lead": "1"}),
    ]
    client.fetch_ad_creative_map.return_value = {"a1": "cr1", "a2": "cr1"}
    client.fetch_creatives_metadata.return_value = {"cr1": creatives["cr1"]}

    reports = await fetch_campaign_creative_reports(client, "c1", "OUTCOME_LEADS")

    client.fetch_ad_insights.assert_awaited_once_with("c1", None)
    client.fetch_creatives_metadata.assert_awaited_once_with(["cr1", "cr1"])
    assert len(reports) == 1
    assert reports[0].performance.results == 3.0


@pytest.mark.asyncio
async def test_fetch_campaign_ad_reports_without_rows():
    """Test no follow-up requests when the campaign has no ad rows."""
    client = AsyncMock()
    client.fetch_ad_insights.return_value = []

    reports = await fetch_campaign_ad_reports(client, "c1", None)

    assert reports == []
    client.fetch_ad_creative_map.assert_not_awaited()
    client.fetch_creatives_metadata.assert_not_awaited()


def test_resolve_result_quantity_sum_mode():
    """Test sum-mode rules add every listed type."""
    rule = ObjectiveResultRule("Conversões", ("purchase", "lead"), "sum")

    assert resolve_result_quantity(rule, {"purchase": 2, "lead": 3, "link_click": 50}) == 5


def test_build_creative_reports_sum_rule(monkeypatch, creatives):
    """Test creative results under a sum-mode rule."""
    monkeypatch.setattr(
        "src.adlens_core.metrics.creatives.get_objective_result_rule",
        lambda objective: ObjectiveResultRule("Conversões", ("purchase", "lead"), "sum"),
    )
    rows = [
        _ad_row("a1", "40", {"purchase": "1", "lead": "2"}),
        _ad_row("a2", "10", {"lead": "2", "link_click": "80"}),
    ]

    reports = build_creative_reports(rows, {"a1": "cr1", "a2": "cr1"}, creatives, "CUSTOM")

    assert reports[0].performance.results == 5.0
    assert reports[0].performance.cost_per_result == pytest.approx(10.0)
