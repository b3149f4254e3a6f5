"""Account/dashboard builder.

Fetches campaigns and ad-set insights per account, rolls them into campaign,
account and grand totals, and optionally replays the same pipeline over a
previous-period window for trend comparison.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from ..meta.graph_client import MetaGraphClient
from ..schemas.dashboard import (
    AccountRef,
    DashboardAccountMetrics,
    DashboardCampaignMetrics,
    DateRangeInfo,
    DateWindow,
    MetaDashboardResult,
    MetricTotals,
)
from ..schemas.graph import AdsetInsightRow, GraphCampaign
from .adsets import group_adset_bundles_by_campaign
from .campaigns import build_campaign_bundle
from .goals import normalize_optimization_goal
from .totals import add_totals, create_empty_totals, sum_totals


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_or_cancel(coros: list[Awaitable[T]]) -> list[T]:
    """Run awaitables concurrently; on the first failure cancel and reap the rest."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _normalize_filter(
    values: Optional[Iterable[object]], transform: Callable[[str], Optional[str]]
) -> Optional[frozenset[str]]:
    if not values:
        return None
    normalized = {transform(str(value)) for value in values if value is not None}
    normalized.discard(None)
    normalized.discard("")
    return frozenset(normalized) or None


@dataclass(frozen=True)
class DashboardFilters:
    """Caller-supplied campaign filters; None means the filter is inactive."""

    campaign_ids: Optional[frozenset[str]] = None
    objectives: Optional[frozenset[str]] = None
    statuses: Optional[frozenset[str]] = None
    optimization_goals: Optional[frozenset[str]] = None

    @classmethod
    def from_params(
        cls,
        campaign_ids: Optional[Iterable[object]] = None,
        objectives: Optional[Iterable[str]] = None,
        statuses: Optional[Iterable[str]] = None,
        optimization_goals: Optional[Iterable[str]] = None,
    ) -> "DashboardFilters":
        """Build filters: objectives/statuses upper-cased, goals through the alias table."""
        return cls(
            campaign_ids=_normalize_filter(campaign_ids, str.strip),
            objectives=_normalize_filter(objectives, lambda v: v.strip().upper()),
            statuses=_normalize_filter(statuses, lambda v: v.strip().upper()),
            optimization_goals=_normalize_filter(
                optimization_goals, normalize_optimization_goal
            ),
        )

    @property
    def is_active(self) -> bool:
        return any(
            value is not None
            for value in (
                self.campaign_ids,
                self.objectives,
                self.statuses,
                self.optimization_goals,
            )
        )

    def matches_campaign(self, campaign: GraphCampaign) -> bool:
        """Check id, objective and status filters (goal is checked after aggregation)."""
        if self.campaign_ids is not None and campaign.id not in self.campaign_ids:
            return False

        if self.objectives is not None:
            objective = campaign.objective.upper() if campaign.objective else None
            if not objective or objective not in self.objectives:
                return False

        if self.statuses is not None:
            status = campaign.status.upper() if campaign.status else None
            if not status or status not in self.statuses:
                return False

        return True

    def matches_goal(self, dominant_goal: Optional[str]) -> bool:
        if self.optimization_goals is None:
            return True
        normalized = normalize_optimization_goal(dominant_goal)
        return bool(normalized) and normalized in self.optimization_goals


class DashboardService:
    """Build the Meta dashboard rollup for a set of ad accounts."""

    def __init__(self, client: MetaGraphClient) -> None:
        """Initialize dashboard service.

        Args:
            client: Signed Graph client (session owned by the caller)
        """
        self.client = client

    def _aggregate_campaigns(
        self,
        campaigns: list[GraphCampaign],
        rows: list[AdsetInsightRow],
        filters: DashboardFilters,
    ) -> list[DashboardCampaignMetrics]:
        adsets_by_campaign = group_adset_bundles_by_campaign(rows)
        entries: list[DashboardCampaignMetrics] = []

        for campaign in campaigns:
            if not campaign.id:
                continue
            if not filters.matches_campaign(campaign):
                continue

            bundle = build_campaign_bundle(
                campaign, adsets_by_campaign.get(campaign.id, [])
            )

            dominant_goal = bundle.result.optimization_goal if bundle.result else None
            if not filters.matches_goal(dominant_goal):
                continue

            entries.append(
                DashboardCampaignMetrics(
                    id=campaign.id,
                    name=campaign.name,
                    objective=campaign.objective,
                    status=campaign.status,
                    metrics=bundle.metrics,
                    result=bundle.result,
                )
            )

        return entries

    async def _build_account(
        self,
        account: AccountRef,
        filters: DashboardFilters,
        time_range: Optional[DateWindow],
    ) -> tuple[DashboardAccountMetrics, list[GraphCampaign]]:
        campaigns = await self.client.fetch_campaigns(account.value)
        rows = await self.client.fetch_adset_insights(account.value, time_range)

        entries = self._aggregate_campaigns(campaigns, rows, filters)

        # Without filters, an idle period still lists every campaign.
        if not entries and not filters.is_active:
            entries = [
                DashboardCampaignMetrics(
                    id=campaign.id,
                    name=campaign.name,
                    objective=campaign.objective,
                    status=campaign.status,
                    metrics=create_empty_totals(),
                )
                for campaign in campaigns
                if campaign.id
            ]

        entries.sort(key=lambda entry: entry.metrics.spend, reverse=True)

        account_totals = create_empty_totals()
        for entry in entries:
            add_totals(account_totals, entry.metrics)

        logger.info(
            "Account %s: %s campaigns, spend=%.2f, results=%s",
            account.value,
            len(entries),
            account_totals.spend,
            account_totals.results,
        )

        metrics = DashboardAccountMetrics(
            id=account.id,
            name=account.name,
            value=account.value,
            metrics=account_totals,
            campaigns=entries,
        )
        return metrics, campaigns

    async def _previous_account_totals(
        self,
        account: AccountRef,
        campaigns: list[GraphCampaign],
        filters: DashboardFilters,
        previous_range: DateWindow,
    ) -> MetricTotals:
        rows = await self.client.fetch_adset_insights(account.value, previous_range)
        entries = self._aggregate_campaigns(campaigns, rows, filters)
        return sum_totals([entry.metrics for entry in entries])

    async def fetch_dashboard_metrics(
        self,
        accounts: list[AccountRef],
        filters: Optional[DashboardFilters] = None,
        time_range: Optional[DateWindow] = None,
        previous_range: Optional[DateWindow] = None,
    ) -> MetaDashboardResult:
        """Aggregate every account; any upstream error aborts the whole call.

        Args:
            accounts: Ad accounts to query
            filters: Optional campaign filters (applied to both periods)
            time_range: Reporting window (None -> upstream maximum lookback)
            previous_range: Optional comparison window for previous_totals

        Returns:
            MetaDashboardResult with accounts sorted by spend descending
        """
        filters = filters or DashboardFilters()

        built = await gather_or_cancel(
            [self._build_account(account, filters, time_range) for account in accounts]
        )

        account_results = [metrics for metrics, _ in built]
        account_results.sort(key=lambda entry: entry.metrics.spend, reverse=True)
        totals = sum_totals([entry.metrics for entry in account_results])

        previous_totals = create_empty_totals()
        if previous_range is not None:
            previous = await gather_or_cancel(
                [
                    self._previous_account_totals(
                        account, campaigns, filters, previous_range
                    )
                    for account, (_, campaigns) in zip(accounts, built)
                ]
            )
            previous_totals = sum_totals(previous)

        return MetaDashboardResult(
            date_range=DateRangeInfo(
                start=time_range.since if time_range else None,
                end=time_range.until if time_range else None,
                previous_start=previous_range.since if previous_range else None,
                previous_end=previous_range.until if previous_range else None,
            ),
            totals=totals,
            previous_totals=previous_totals,
            accounts=account_results,
        )
