"""
Scenario Summary Calculations

Aggregates the resolved line items of one property/scenario into profit,
capital employed and ROI figures.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Optional

from auction_tracker.calculations.resolver import find_entry, property_info, resolve
from auction_tracker.config import get_settings
from auction_tracker.models import FinancialEntry, Label, Scenario

# Average month length used when recording the sale duration from dates
SALE_DURATION_DAYS_PER_MONTH = 30.4375

PROJECTED_DURATION_MONTHS = 12

# Everything that counts as cash put into the deal besides the down payment
FIXED_COST_LABELS = (
    Label.itbi,
    Label.registry,
    Label.agent_fee,
    Label.auctioneer_commission,
    Label.deed_fee,
    Label.renovation,
    Label.vacancy,
    Label.debt,
    Label.installment,
    Label.condo,
    Label.property_tax,
)


@dataclass
class SummaryBreakdown:
    """Components behind a scenario summary."""

    sale: float = 0.0
    capital_employed: float = 0.0
    fixed_costs: float = 0.0
    duration_months: float = 1.0
    costs: Dict[str, float] = field(default_factory=dict)


@dataclass
class ScenarioSummary:
    """Headline numbers for one property in one scenario."""

    total_profit: float
    roi_total: float
    roi_monthly: float
    profit_per_share: float
    breakdown: SummaryBreakdown


@dataclass
class ScenarioComparison:
    """Projected vs executed summaries of a property."""

    projected: ScenarioSummary
    executed: ScenarioSummary
    deltas: Dict[str, float]


def calculate_roi_total(profit: float, capital_employed: float) -> float:
    """Profit over capital employed, in percent. 0 without capital."""
    if capital_employed == 0:
        return 0.0
    return profit / capital_employed * 100


def calculate_roi_monthly(roi_total: float, duration_months: float) -> float:
    """
    Compound monthly equivalent of a total ROI, in percent.

    A non-positive growth base (a loss of 100% or more) is reported as
    exactly -100 instead of taking a fractional power of a negative number.
    """
    if duration_months <= 0:
        return 0.0
    base = 1 + roi_total / 100
    if base <= 0:
        return -100.0
    return (base ** (1 / duration_months) - 1) * 100


def sale_duration_from_dates(purchase_date: date, sale_date: date) -> float:
    """Months between purchase and sale, rounded to 2 decimals."""
    days = (sale_date - purchase_date).days
    return round(days / SALE_DURATION_DAYS_PER_MONTH, 2)


def duration_months(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    today: Optional[date] = None,
    days_per_month: Optional[float] = None,
) -> float:
    """
    Holding period used to annualize ROI.

    The projection is always 12 months. The execution uses the manually
    recorded sale duration when there is one, otherwise the days between
    purchase and sale (or today, while unsold) over the average month
    length (``Settings.days_per_month`` unless given), floored at one month.
    """
    if scenario == Scenario.projected:
        return float(PROJECTED_DURATION_MONTHS)

    entries = list(entries)
    sale_entry = find_entry(entries, property_name, scenario, Label.sale)
    if sale_entry is not None and sale_entry.sale_duration_months and sale_entry.sale_duration_months > 0:
        return float(sale_entry.sale_duration_months)

    info = property_info(entries, property_name, scenario)
    if info.purchase_date is None:
        return 1.0

    end_date = info.sale_date or today or date.today()
    days = abs((end_date - info.purchase_date).days)
    if days_per_month is None:
        days_per_month = get_settings().days_per_month
    return max(1.0, days / days_per_month)


def summarize(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    today: Optional[date] = None,
) -> ScenarioSummary:
    """
    Summarize a property in one scenario.

    Args:
        entries: Full entry collection
        property_name: Property to summarize
        scenario: Projected or executed
        today: Reference date for unsold executed properties

    Returns:
        ScenarioSummary with profit, ROI and the cost breakdown
    """
    entries = list(entries)

    def value(label: Label) -> float:
        return resolve(entries, property_name, scenario, label)

    sale = value(Label.sale)
    broker_commission = value(Label.broker_commission)
    capital_gains_tax = value(Label.capital_gains_tax)
    outstanding_balance = value(Label.outstanding_balance)
    down_payment = value(Label.down_payment)

    costs = {label.name: value(label) for label in FIXED_COST_LABELS}
    fixed_costs = sum(costs.values())
    capital_employed = down_payment + fixed_costs

    total_profit = (
        sale - outstanding_balance - broker_commission - capital_gains_tax - capital_employed
    )
    roi_total = calculate_roi_total(total_profit, capital_employed)

    months = duration_months(entries, property_name, scenario, today)
    roi_monthly = calculate_roi_monthly(roi_total, months)

    share_count = property_info(entries, property_name, scenario).share_count

    costs.update(
        {
            Label.broker_commission.name: broker_commission,
            Label.capital_gains_tax.name: capital_gains_tax,
            Label.outstanding_balance.name: outstanding_balance,
            Label.down_payment.name: down_payment,
        }
    )

    return ScenarioSummary(
        total_profit=total_profit,
        roi_total=roi_total,
        roi_monthly=roi_monthly,
        profit_per_share=total_profit / share_count,
        breakdown=SummaryBreakdown(
            sale=sale,
            capital_employed=capital_employed,
            fixed_costs=fixed_costs,
            duration_months=months,
            costs=costs,
        ),
    )


def _registry_and_taxes(summary: ScenarioSummary) -> float:
    costs = summary.breakdown.costs
    return (
        costs[Label.itbi.name]
        + costs[Label.registry.name]
        + costs[Label.agent_fee.name]
        + costs[Label.deed_fee.name]
        + costs[Label.capital_gains_tax.name]
    )


def compare(
    entries: Iterable[FinancialEntry],
    property_name: str,
    today: Optional[date] = None,
) -> ScenarioComparison:
    """Projected and executed summaries of a property, with executed-minus-projected deltas."""
    entries = list(entries)
    projected = summarize(entries, property_name, Scenario.projected, today)
    executed = summarize(entries, property_name, Scenario.executed, today)

    deltas = {
        "roi_total": executed.roi_total - projected.roi_total,
        "roi_monthly": executed.roi_monthly - projected.roi_monthly,
        "profit_per_share": executed.profit_per_share - projected.profit_per_share,
        "renovation": (
            executed.breakdown.costs[Label.renovation.name]
            - projected.breakdown.costs[Label.renovation.name]
        ),
        "registry_and_taxes": _registry_and_taxes(executed) - _registry_and_taxes(projected),
    }

    return ScenarioComparison(projected=projected, executed=executed, deltas=deltas)

