"""Pydantic models for dashboard inputs and rollup results.

Attribute names are English; aliases carry the dashboard's JSON keys.
Serialize with ``model_dump(by_alias=True)``.
"""
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccountRef(BaseModel):
    """Ad account selected by the caller."""

    id: int = Field(..., description="Internal account resource id")
    name: str = Field(..., description="Display name")
    value: str = Field(..., description="Upstream ad account id (e.g., act_123)")


class DateWindow(BaseModel):
    """Inclusive reporting window."""

    since: date
    until: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateWindow":
        if self.since > self.until:
            raise ValueError("since must be less than or equal to until")
        return self

    @property
    def days(self) -> int:
        return (self.until - self.since).days + 1

    def previous_period(self) -> "DateWindow":
        """Window of the same length ending the day before ``since``."""
        previous_until = self.since - timedelta(days=1)
        previous_since = previous_until - timedelta(days=self.days - 1)
        return DateWindow(since=previous_since, until=previous_until)

    def as_time_range(self) -> dict[str, str]:
        return {"since": self.since.isoformat(), "until": self.until.isoformat()}


class MetricTotals(CamelModel):
    """Additive totals; cost_per_result is derived, never summed."""

    spend: float = 0.0
    result_spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    leads: float = 0.0
    results: float = 0.0
    cost_per_result: Optional[float] = None


class ResultBreakdown(BaseModel):
    """Contribution of one action type to a campaign result."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., alias="tipo")
    label: str
    quantity: float = Field(..., alias="quantidade")
    cost_per_result: Optional[float] = Field(None, alias="custo_por_resultado")


class AdsetResultRow(BaseModel):
    """Per-ad-set line of the campaign drill-down table."""

    model_config = ConfigDict(populate_by_name=True)

    adset_id: str
    adset_name: Optional[str] = None
    optimization_goal: Optional[str] = None
    action_type: Optional[str] = None
    label: str
    quantity: float = Field(..., alias="quantidade")
    cost_per_result: Optional[float] = Field(None, alias="custo_por_resultado")
    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0


class CampaignResultSummary(BaseModel):
    """The single result a campaign is judged on."""

    model_config = ConfigDict(populate_by_name=True)

    label: str
    quantity: Optional[float] = Field(None, alias="quantidade")
    cost_per_result: Optional[float] = Field(None, alias="custo_por_resultado")
    optimization_goal: Optional[str] = None
    types: list[str] = Field(default_factory=list, alias="tipos")
    details: Optional[list[ResultBreakdown]] = Field(None, alias="detalhes")
    adsets: list[AdsetResultRow] = Field(default_factory=list)


class DashboardCampaignMetrics(CamelModel):
    id: str
    name: Optional[str] = None
    objective: Optional[str] = None
    status: Optional[str] = None
    metrics: MetricTotals = Field(default_factory=MetricTotals)
    result: Optional[CampaignResultSummary] = Field(None, alias="resultado")


class DashboardAccountMetrics(CamelModel):
    id: int
    name: str
    value: str
    metrics: MetricTotals = Field(default_factory=MetricTotals)
    campaigns: list[DashboardCampaignMetrics] = Field(default_factory=list)


class DateRangeInfo(CamelModel):
    start: Optional[date] = None
    end: Optional[date] = None
    previous_start: Optional[date] = None
    previous_end: Optional[date] = None


class MetaDashboardResult(CamelModel):
    """Grand totals, previous-period totals and per-account rollups."""

    date_range: DateRangeInfo = Field(default_factory=DateRangeInfo)
    totals: MetricTotals = Field(default_factory=MetricTotals)
    previous_totals: MetricTotals = Field(default_factory=MetricTotals)
    accounts: list[DashboardAccountMetrics] = Field(default_factory=list)


class CreativeAsset(CamelModel):
    id: str
    label: str
    thumbnail_url: Optional[str] = None
    url: Optional[str] = None


class CreativePerformance(CamelModel):
    impressions: float = 0.0
    clicks: float = 0.0
    spend: float = 0.0
    results: float = 0.0
    cost_per_result: Optional[float] = None


class CampaignCreativeReport(CamelModel):
    """Visual assets and performance of one creative within a campaign."""

    id: str
    name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    assets: list[CreativeAsset] = Field(default_factory=list)
    performance: CreativePerformance = Field(default_factory=CreativePerformance)


class AdReportMetrics(CamelModel):
    impressions: float = 0.0
    clicks: float = 0.0
    spend: float = 0.0
    ctr: Optional[float] = None
    result_qty: float = 0.0
    cost_per_result: Optional[float] = None


class CampaignAdReport(BaseModel):
    """Per-ad performance line with its creative thumbnail."""

    model_config = ConfigDict(populate_by_name=True)

    ad_id: str
    ad_name: Optional[str] = None
    creative_id: Optional[str] = None
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    metrics: AdReportMetrics = Field(default_factory=AdReportMetrics)
