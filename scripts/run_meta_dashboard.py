#!/usr/bin/env python3
"""CLI entry point for the Meta dashboard rollup.

Usage:
    # All-time dashboard for the accounts in META_AD_ACCOUNT_IDS
    PYTHONPATH=. python scripts/run_meta_dashboard.py

    # Explicit window (previous period derived automatically)
    PYTHONPATH=. python scripts/run_meta_dashboard.py --account act_123 --start 2025-01-01 --end 2025-01-31

    # Only lead campaigns that are active
    PYTHONPATH=. python scripts/run_meta_dashboard.py --objective OUTCOME_LEADS --status ACTIVE

    # Per-creative or per-ad report for one campaign
    PYTHONPATH=. python scripts/run_meta_dashboard.py --account act_123 --creatives 120200000000001
    PYTHONPATH=. python scripts/run_meta_dashboard.py --account act_123 --ads 120200000000001
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiohttp

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.adlens_core.meta.credentials import MetaCredentials
from src.adlens_core.meta.graph_client import MetaGraphClient
from src.adlens_core.metrics.creatives import (
    fetch_campaign_ad_reports,
    fetch_campaign_creative_reports,
)
from src.adlens_core.metrics.dashboard import DashboardFilters, DashboardService
from src.adlens_core.schemas.dashboard import AccountRef, DateWindow


logger = logging.getLogger("run_meta_dashboard")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def parse_window(start: Optional[str], end: Optional[str]) -> Optional[DateWindow]:
    if not start and not end:
        return None
    if not start or not end:
        raise SystemExit("--start and --end must be given together")

    return DateWindow(
        since=datetime.strptime(start, "%Y-%m-%d").date(),
        until=datetime.strptime(end, "%Y-%m-%d").date(),
    )


def resolve_accounts(values: Optional[list[str]]) -> list[AccountRef]:
    if not values:
        raw = os.getenv("META_AD_ACCOUNT_IDS", "")
        values = [value.strip() for value in raw.split(",") if value.strip()]

    if not values:
        raise SystemExit("No ad accounts: pass --account or set META_AD_ACCOUNT_IDS")

    return [
        AccountRef(id=index, name=value, value=value)
        for index, value in enumerate(values, start=1)
    ]


async def find_campaign_objective(
    client: MetaGraphClient, account_id: str, campaign_id: str
) -> Optional[str]:
    campaigns = await client.fetch_campaigns(account_id)
    match = next((c for c in campaigns if c.id == campaign_id), None)
    if match is None:
        logger.warning("Campaign %s not found in %s", campaign_id, account_id)
        return None
    return match.objective


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Meta ads dashboard metrics")
    parser.add_argument(
        "--account",
        action="append",
        help="Ad account id (repeatable). Defaults to META_AD_ACCOUNT_IDS.",
    )
    parser.add_argument("--start", type=str, help="Window start (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Window end (YYYY-MM-DD)")
    parser.add_argument(
        "--no-previous",
        action="store_true",
        help="Skip the previous-period comparison",
    )
    parser.add_argument("--campaign-id", action="append", help="Filter by campaign id")
    parser.add_argument("--objective", action="append", help="Filter by objective")
    parser.add_argument("--status", action="append", help="Filter by status")
    parser.add_argument("--goal", action="append", help="Filter by optimization goal")
    parser.add_argument(
        "--creatives",
        metavar="CAMPAIGN_ID",
        help="Print creative reports for one campaign instead of the dashboard",
    )
    parser.add_argument(
        "--ads",
        metavar="CAMPAIGN_ID",
        help="Print per-ad reports for one campaign instead of the dashboard",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    credentials = MetaCredentials.from_env()
    accounts = resolve_accounts(args.account)
    time_range = parse_window(args.start, args.end)

    timeout = aiohttp.ClientTimeout(total=60)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = MetaGraphClient(credentials, session)

        campaign_id = args.creatives or args.ads
        if campaign_id:
            objective = await find_campaign_objective(
                client, accounts[0].value, campaign_id
            )
            if args.creatives:
                reports = await fetch_campaign_creative_reports(
                    client, campaign_id, objective, time_range
                )
            else:
                reports = await fetch_campaign_ad_reports(
                    client, campaign_id, objective, time_range
                )
            payload = [report.model_dump(by_alias=True, mode="json") for report in reports]

        else:
            filters = DashboardFilters.from_params(
                campaign_ids=args.campaign_id,
                objectives=args.objective,
                statuses=args.status,
                optimization_goals=args.goal,
            )
            previous_range = None
            if time_range is not None and not args.no_previous:
                previous_range = time_range.previous_period()

            service = DashboardService(client)
            result = await service.fetch_dashboard_metrics(
                accounts,
                filters=filters,
                time_range=time_range,
                previous_range=previous_range,
            )
            payload = result.model_dump(by_alias=True, mode="json")

    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
