"""Meta ads metrics aggregation layer.

Rolls Graph insight rows up to:
- Ad-set bundles (official result per optimization goal)
- Campaign metrics (dominant goal group + objective result rule)
- Account and dashboard totals (with previous-period comparison)
- Creative and per-ad reports for one campaign
"""
from .campaigns import build_campaign_bundle
from .creatives import (
    build_ad_reports,
    build_creative_reports,
    fetch_campaign_ad_reports,
    fetch_campaign_creative_reports,
)
from .dashboard import DashboardFilters, DashboardService

__all__ = [
    "DashboardService",
    "DashboardFilters",
    "build_campaign_bundle",
    "build_creative_reports",
    "build_ad_reports",
    "fetch_campaign_creative_reports",
    "fetch_campaign_ad_reports",
]
