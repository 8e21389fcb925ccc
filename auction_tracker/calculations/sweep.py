"""
Viability and Sensitivity Calculations

Standalone "what-if" calculator for an auction bid: no stored entries, no
scenarios. Given one set of inputs it computes the deal at a bid amount,
and the sensitivity table re-runs the same calculation across a range of
bids. Financed purchases simulate the loan month by month up to the sale
instead of using the fixed 12-month snapshot of the entry engine.
"""

from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

from auction_tracker.calculations.amortization import schedule
from auction_tracker.calculations.summary import calculate_roi_monthly, calculate_roi_total
from auction_tracker.formatters import to_number
from auction_tracker.models import AmortizationSystem, PurchaseType

DEFAULT_ROW_COUNT = 12

REGISTRY_RATE = 0.01
DEED_RATE = 0.01


@dataclass(frozen=True)
class ViabilityInputs:
    """Inputs of one viability simulation. Percentages are in percent."""

    name: str = "Simulação 1"

    # General
    months_to_sale: int = 12
    sale_value: float = 0.0
    broker_percent: float = 5.0

    # Auction
    bid: float = 0.0
    bid_increment: float = 5000.0
    auctioneer_percent: float = 5.0
    auctioneer_value: float = 0.0
    itbi_percent: float = 2.0
    itbi_value: float = 0.0
    registry_cost: float = 0.0
    deed_cost: float = 0.0

    # Fixed costs
    renovation_cost: float = 0.0
    eviction_cost: float = 0.0
    monthly_condo: float = 0.0
    annual_property_tax: float = 0.0

    # Financing
    purchase_type: PurchaseType = PurchaseType.cash
    down_payment_percent: float = 20.0
    annual_interest_rate: float = 9.5
    term_months: int = 360
    amortization_system: AmortizationSystem = AmortizationSystem.sac

    capital_gains_percent: float = 15.0


@dataclass
class ViabilityBreakdown:
    auctioneer_commission: float = 0.0
    itbi: float = 0.0
    registry_total: float = 0.0
    preparation_total: float = 0.0
    broker_commission: float = 0.0
    income_tax: float = 0.0
    payoff_balance: float = 0.0
    installments_paid: float = 0.0
    financing_cost: float = 0.0


@dataclass
class SweepRow:
    """The deal evaluated at one bid amount."""

    bid: float
    net_profit: float
    roi_total: float
    roi_monthly: float
    capital_invested: float
    breakdown: ViabilityBreakdown = field(default_factory=ViabilityBreakdown)


def calculate_viability(inputs: ViabilityInputs, bid: Optional[float] = None) -> SweepRow:
    """
    Evaluate the deal at a bid.

    Args:
        inputs: Simulation inputs
        bid: Bid amount (defaults to ``inputs.bid``)

    Returns:
        SweepRow with profit, ROI and capital invested
    """
    bid = to_number(inputs.bid if bid is None else bid)
    months = max(0, int(to_number(inputs.months_to_sale)))
    sale_value = to_number(inputs.sale_value)

    # Acquisition
    auctioneer_commission = bid * to_number(inputs.auctioneer_percent) / 100
    itbi = bid * to_number(inputs.itbi_percent) / 100
    registry_total = to_number(inputs.registry_cost) + to_number(inputs.deed_cost)
    acquisition_costs = auctioneer_commission + itbi + registry_total

    # Holding
    condo_total = to_number(inputs.monthly_condo) * months
    property_tax_total = to_number(inputs.annual_property_tax) / 12 * months
    preparation_total = (
        to_number(inputs.renovation_cost)
        + to_number(inputs.eviction_cost)
        + condo_total
        + property_tax_total
    )

    # Sale
    broker_commission = sale_value * to_number(inputs.broker_percent) / 100

    payoff_balance = 0.0
    financing_cost = 0.0
    installments_paid = 0.0

    if PurchaseType(inputs.purchase_type) == PurchaseType.cash:
        capital_invested = bid + acquisition_costs + preparation_total
    else:
        down_payment = bid * to_number(inputs.down_payment_percent) / 100
        financed_amount = bid - down_payment

        loan = schedule(
            financed_amount,
            inputs.annual_interest_rate,
            inputs.term_months,
            inputs.amortization_system,
            months,
        )
        if financed_amount > 0 and to_number(inputs.term_months) > 0:
            payoff_balance = loan.outstanding_balance
        else:
            payoff_balance = max(0.0, financed_amount)
        financing_cost = loan.accrued_interest_to_date
        installments_paid = loan.total_paid_to_date

        # Cash out of pocket until the sale
        capital_invested = down_payment + acquisition_costs + preparation_total + installments_paid

    deductible = (
        bid
        + acquisition_costs
        + to_number(inputs.renovation_cost)
        + broker_commission
        + financing_cost
    )
    gain = sale_value - deductible
    income_tax = gain * to_number(inputs.capital_gains_percent) / 100 if gain > 0 else 0.0

    net_sale_proceeds = sale_value - (broker_commission + income_tax + payoff_balance)
    net_profit = net_sale_proceeds - capital_invested

    roi_total = calculate_roi_total(net_profit, capital_invested)
    roi_monthly = calculate_roi_monthly(roi_total, months)

    return SweepRow(
        bid=bid,
        net_profit=net_profit,
        roi_total=roi_total,
        roi_monthly=roi_monthly,
        capital_invested=capital_invested,
        breakdown=ViabilityBreakdown(
            auctioneer_commission=auctioneer_commission,
            itbi=itbi,
            registry_total=registry_total,
            preparation_total=preparation_total,
            broker_commission=broker_commission,
            income_tax=income_tax,
            payoff_balance=payoff_balance,
            installments_paid=installments_paid,
            financing_cost=financing_cost,
        ),
    )


def sweep(
    inputs: ViabilityInputs,
    increment: Optional[float] = None,
    row_count: int = DEFAULT_ROW_COUNT,
) -> List[SweepRow]:
    """
    Sensitivity table across bids.

    Row ``i`` evaluates the deal at ``bid + i * increment``. Empty when no
    bid has been entered.

    Args:
        inputs: Simulation inputs (``inputs.bid`` is the first row)
        increment: Bid step (defaults to ``inputs.bid_increment``)
        row_count: Number of rows

    Returns:
        List of SweepRow, one per bid
    """
    base_bid = to_number(inputs.bid)
    if base_bid == 0:
        return []

    step = to_number(inputs.bid_increment if increment is None else increment)
    return [
        calculate_viability(inputs, base_bid + step * i)
        for i in range(max(0, int(to_number(row_count))))
    ]


def update_viability(inputs: ViabilityInputs, field_name: str, value) -> ViabilityInputs:
    """
    Set one input, applying the coupled-field rules of the calculator.

    - sale value: registry and deed costs become 1% of it each
    - bid: auctioneer and ITBI values follow their percentages
    - auctioneer / ITBI percentage: the matching value follows the bid

    Raises:
        ValueError: For an unknown field
    """
    if field_name not in {f.name for f in fields(ViabilityInputs)}:
        raise ValueError(f"Unknown viability input: {field_name}")

    if field_name == "purchase_type":
        value = PurchaseType(value)
    elif field_name == "amortization_system":
        value = AmortizationSystem(value)
    elif field_name != "name":
        value = to_number(value)
        if field_name in ("months_to_sale", "term_months"):
            value = int(value)

    updated = replace(inputs, **{field_name: value})

    if field_name == "sale_value":
        updated = replace(updated, registry_cost=value * REGISTRY_RATE, deed_cost=value * DEED_RATE)
    elif field_name == "bid":
        updated = replace(
            updated,
            auctioneer_value=value * inputs.auctioneer_percent / 100,
            itbi_value=value * inputs.itbi_percent / 100,
        )
    elif field_name == "auctioneer_percent":
        updated = replace(updated, auctioneer_value=inputs.bid * value / 100)
    elif field_name == "itbi_percent":
        updated = replace(updated, itbi_value=inputs.bid * value / 100)

    return updated


def update_coupled_value(inputs: ViabilityInputs, value_field: str, value: float) -> ViabilityInputs:
    """
    Type a commission/ITBI amount directly; its percentage is derived back from the bid.

    Raises:
        ValueError: If ``value_field`` is not 'auctioneer_value' or 'itbi_value'
    """
    percent_fields = {"auctioneer_value": "auctioneer_percent", "itbi_value": "itbi_percent"}
    if value_field not in percent_fields:
        raise ValueError(f"Not a coupled value: {value_field}")

    value = to_number(value)
    updated = replace(inputs, **{value_field: value})
    if inputs.bid > 0:
        updated = replace(updated, **{percent_fields[value_field]: value / inputs.bid * 100})
    return updated
