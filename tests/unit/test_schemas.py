"""Unit tests for dashboard models and date windows."""
from datetime import date

import pytest
from pydantic import ValidationError

from src.adlens_core.schemas.dashboard import (
    CampaignAdReport,
    CampaignResultSummary,
    DashboardCampaignMetrics,
    DateWindow,
    ResultBreakdown,
)
from src.adlens_core.schemas.graph import ActionEntry


def test_date_window_previous_period():
    """Test previous window has the same length and ends the day before."""
    window = DateWindow(since=date(2025, 1, 10), until=date(2025, 1, 19))

    previous = window.previous_period()

    assert window.days == 10
    assert previous.since == date(2024, 12, 31)
    assert previous.until == date(2025, 1, 9)
    assert previous.days == 10


def test_date_window_single_day():
    """Test one-day windows map to the previous day."""
    previous = DateWindow(since="2025-03-01", until="2025-03-01").previous_period()

    assert previous.since == previous.until == date(2025, 2, 28)


def test_date_window_rejects_reversed_range():
    """Test since after until is rejected."""
    with pytest.raises(ValidationError):
        DateWindow(since=date(2025, 2, 1), until=date(2025, 1, 1))


def test_date_window_rejects_malformed_date():
    """Test malformed dates are rejected."""
    with pytest.raises(ValidationError):
        DateWindow(since="2025-13-01", until="2025-12-31")


def test_date_window_as_time_range():
    """Test wire representation of the window."""
    window = DateWindow(since=date(2025, 1, 1), until=date(2025, 1, 31))

    assert window.as_time_range() == {"since": "2025-01-01", "until": "2025-01-31"}


def test_action_entry_attribution_windows():
    """Test extra wire keys are exposed as attribution windows."""
    entry = ActionEntry.model_validate(
        {"action_type": "lead", "value": "3", "7d_click": "2", "1d_view": "1"}
    )

    assert entry.attribution_windows == {"7d_click": "2", "1d_view": "1"}


def test_campaign_result_serializes_dashboard_keys():
    """Test result summary keys follow the dashboard JSON contract."""
    campaign = DashboardCampaignMetrics(
        id="c1",
        result=CampaignResultSummary(
            label="Leads",
            quantity=3,
            cost_per_result=5.0,
            types=["lead"],
            details=[
                ResultBreakdown(type="lead", label="Leads", quantity=3, cost_per_result=5.0)
            ],
        ),
    )

    dumped = campaign.model_dump(by_alias=True)

    result = dumped["resultado"]
    assert result["quantidade"] == 3
    assert result["custo_por_resultado"] == 5.0
    assert result["tipos"] == ["lead"]
    assert result["detalhes"][0]["tipo"] == "lead"
    assert dumped["metrics"]["costPerResult"] is None


def test_ad_report_serializes_thumbnail_key():
    """Test ad report keys: snake_case ids with camelCase thumbnail and metrics."""
    report = CampaignAdReport(ad_id="a1", thumbnail_url="https://cdn/x.jpg")

    dumped = report.model_dump(by_alias=True)

    assert dumped["ad_id"] == "a1"
    assert dumped["thumbnailUrl"] == "https://cdn/x.jpg"
    assert "resultQty" in dumped["metrics"]
