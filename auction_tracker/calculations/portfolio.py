"""
Portfolio Aggregation

Consolidates every property of the portfolio into one scenario view and
aggregates co-investor shares into revenue, cost and profit figures.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from auction_tracker.calculations.resolver import consolidate
from auction_tracker.calculations.summary import calculate_roi_total
from auction_tracker.models import Category, FinancialEntry, Label, PurchaseType, Scenario

# Reference value only; the cash actually put in is the down payment
EXCLUDED_LABELS = (Label.acquisition_value.value,)

# Deducted from the sale proceeds, not invested
NON_INVESTED_LABELS = (
    Label.outstanding_balance.value,
    Label.capital_gains_tax.value,
    Label.broker_commission.value,
)


@dataclass
class PortfolioFilters:
    """Dashboard filters. An empty sequence means no filtering on that field."""

    states: Sequence[str] = ()
    properties: Sequence[str] = ()
    purchase_types: Sequence[PurchaseType] = ()
    sold: Sequence[bool] = ()
    categories: Sequence[Category] = ()


@dataclass
class PropertyPerformance:
    property_name: str
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    capital_invested: float = 0.0
    roi: float = 0.0


@dataclass
class CostLine:
    category: Category
    label: str
    total_cash_flow: float = 0.0
    total_share: float = 0.0


@dataclass
class PortfolioKPIs:
    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0
    properties: List[PropertyPerformance] = field(default_factory=list)
    cost_summary: List[CostLine] = field(default_factory=list)
    profit_by_state: Dict[str, float] = field(default_factory=dict)


def portfolio_entries(
    entries: Iterable[FinancialEntry],
    scenario: Scenario,
    filters: Optional[PortfolioFilters] = None,
) -> List[FinancialEntry]:
    """
    Consolidated line items of every property in one scenario.

    State and property filters select whole properties (from the anchor
    entry); the remaining filters apply line by line.
    """
    entries = list(entries)
    filters = filters or PortfolioFilters()

    anchors: Dict[str, FinancialEntry] = {}
    for entry in entries:
        anchors.setdefault(entry.property_name, entry)

    result: List[FinancialEntry] = []
    for property_name, anchor in anchors.items():
        if filters.states and anchor.state not in filters.states:
            continue
        if filters.properties and property_name not in filters.properties:
            continue
        result.extend(consolidate(entries, property_name, scenario))

    return [
        e
        for e in result
        if e.label not in EXCLUDED_LABELS
        and (not filters.purchase_types or e.purchase_type in filters.purchase_types)
        and (not filters.sold or e.sold in filters.sold)
        and (not filters.categories or e.category in filters.categories)
    ]


def portfolio_kpis(
    entries: Iterable[FinancialEntry],
    scenario: Scenario,
    filters: Optional[PortfolioFilters] = None,
) -> PortfolioKPIs:
    """
    Aggregate the consolidated portfolio by co-investor share.

    Positive shares are revenue and negative shares are costs (kept
    negative). Per-property ROI is profit over invested capital, in percent.
    """
    kpis = PortfolioKPIs()
    by_property: Dict[str, PropertyPerformance] = {}
    by_cost: Dict[tuple, CostLine] = {}

    for entry in portfolio_entries(entries, scenario, filters):
        share = entry.share
        row = by_property.setdefault(entry.property_name, PropertyPerformance(entry.property_name))
        row.profit += share
        kpis.profit_by_state[entry.state] = kpis.profit_by_state.get(entry.state, 0.0) + share

        if share > 0:
            kpis.revenue += share
            row.revenue += share
            continue

        kpis.costs += share
        row.cost += share
        if entry.label not in NON_INVESTED_LABELS:
            row.capital_invested += abs(share)

        if share < 0:
            line = by_cost.setdefault(
                (entry.category, entry.label), CostLine(entry.category, entry.label)
            )
            line.total_cash_flow += entry.cash_flow
            line.total_share += share

    kpis.profit = kpis.revenue + kpis.costs
    for row in by_property.values():
        row.roi = calculate_roi_total(row.profit, row.capital_invested)
    kpis.properties = list(by_property.values())
    kpis.cost_summary = sorted(by_cost.values(), key=lambda line: line.total_share)
    return kpis
