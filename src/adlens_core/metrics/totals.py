"""MetricTotals accumulation."""
from ..schemas.dashboard import MetricTotals


def create_empty_totals() -> MetricTotals:
    return MetricTotals()


def recompute_cost_per_result(totals: MetricTotals) -> None:
    totals.cost_per_result = (
        totals.result_spend / totals.results if totals.results > 0 else None
    )


def add_totals(target: MetricTotals, source: MetricTotals) -> None:
    """Add ``source`` into ``target`` field-wise.

    cost_per_result is re-derived from result_spend / results after every
    accumulation.
    """
    target.spend += source.spend
    target.result_spend += source.result_spend
    target.impressions += source.impressions
    target.clicks += source.clicks
    target.leads += source.leads
    target.results += source.results
    recompute_cost_per_result(target)


def sum_totals(items: list[MetricTotals]) -> MetricTotals:
    totals = create_empty_totals()
    for item in items:
        add_totals(totals, item)
    return totals
