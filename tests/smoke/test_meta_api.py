"""Smoke test against the live Meta Marketing API.

Validates that the fields the aggregation engine relies on are present in
real responses and that a dashboard rollup completes end to end.

Run with valid credentials:
    META_ACCESS_TOKEN=... META_APP_SECRET=... META_AD_ACCOUNT_ID=act_... \
        PYTHONPATH=. pytest tests/smoke/test_meta_api.py -v
"""
import os
from datetime import date, timedelta

import aiohttp
import pytest

from src.adlens_core.meta.credentials import MetaCredentials
from src.adlens_core.meta.graph_client import MetaGraphClient
from src.adlens_core.metrics.dashboard import DashboardService
from src.adlens_core.schemas.dashboard import AccountRef, DateWindow


pytestmark = pytest.mark.skipif(
    not (os.getenv("META_ACCESS_TOKEN") and os.getenv("META_APP_SECRET")),
    reason="META_ACCESS_TOKEN / META_APP_SECRET not set",
)


@pytest.fixture
def ad_account_id():
    account_id = os.getenv("META_AD_ACCOUNT_ID")
    if not account_id:
        pytest.skip("META_AD_ACCOUNT_ID not set")
    return account_id


@pytest.mark.asyncio
async def test_meta_adset_insight_fields(ad_account_id):
    """Validate ad-set insight rows carry the fields the aggregator reads.

    PASS Criteria:
    - Signed request succeeds
    - Rows contain campaign_id, adset_id, optimization_goal and spend
    """
    credentials = MetaCredentials.from_env()
    yesterday = date.today() - timedelta(days=1)
    window = DateWindow(since=yesterday - timedelta(days=6), until=yesterday)

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=60)) as session:
        client = MetaGraphClient(credentials, session)
        rows = await client.fetch_adset_insights(ad_account_id, window)

    if not rows:
        pytest.skip("No ad-set insights in the last 7 days (no ad spend)")

    row = rows[0]
    assert row.campaign_id, "Missing 'campaign_id' field"
    assert row.adset_id, "Missing 'adset_id' field"
    assert row.optimization_goal, "Missing 'optimization_goal' field"
    assert row.spend is not None, "Missing 'spend' field"


@pytest.mark.asyncio
async def test_meta_dashboard_rollup(ad_account_id):
    """Validate a full dashboard rollup with previous-period comparison."""
    credentials = MetaCredentials.from_env()
    yesterday = date.today() - timedelta(days=1)
    window = DateWindow(since=yesterday - timedelta(days=6), until=yesterday)

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=120)) as session:
        service = DashboardService(MetaGraphClient(credentials, session))
        result = await service.fetch_dashboard_metrics(
            [AccountRef(id=1, name="Smoke", value=ad_account_id)],
            time_range=window,
            previous_range=window.previous_period(),
        )

    assert len(result.accounts) == 1
    assert result.totals.spend >= 0
    assert result.previous_totals.spend >= 0
    print(f"Meta dashboard totals: {result.totals.model_dump(by_alias=True)}")
