"""
Derived-Field Engine

Recomputes every dependent line item of a property (commissions, ITBI,
registry and deed fees, financed down payment, installment, outstanding
balance, capital-gains tax) from its root inputs (sale, down payment or
acquisition value, renovation, agent fee).

A pass is pure: root inputs are resolved from the entries as they were
when the pass started, every derived value is computed from those, and
all writes are committed at the end. Fields the user pinned manually are
read but never written, and values within the configured write tolerance of the
stored amount are left alone, so running a pass twice changes nothing.
"""

import enum
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from auction_tracker.calculations.amortization import schedule
from auction_tracker.calculations.resolver import (
    find_entry,
    property_info,
    resolve,
    resolve_percentage,
)
from auction_tracker.config import Settings, get_settings
from auction_tracker.formatters import to_number
from auction_tracker.models import (
    AmortizationSystem,
    FinancialEntry,
    Label,
    PurchaseType,
    Scenario,
    SimulationParams,
)
from auction_tracker import store

logger = logging.getLogger(__name__)

REGISTRY_RATE = 0.01
DEED_FEE_RATE = 0.01

# Month at which the outstanding balance is reported for the year-1 view
BALANCE_SNAPSHOT_MONTH = 12

# Loan figures the user expects to refresh when financing parameters change
LOAN_LABELS = (Label.installment, Label.outstanding_balance)


class PercentageKind(str, enum.Enum):
    """Percentage sliders of the entry form."""
    itbi = "itbi"
    broker = "broker"
    auctioneer = "auctioneer"
    down_payment = "down_payment"
    capital_gains = "capital_gains"


PERCENTAGE_TARGETS: Dict[PercentageKind, Tuple[Label, str]] = {
    PercentageKind.itbi: (Label.itbi, "itbi_percent"),
    PercentageKind.broker: (Label.broker_commission, "broker_percent"),
    PercentageKind.auctioneer: (Label.auctioneer_commission, "auctioneer_percent"),
    PercentageKind.down_payment: (Label.down_payment, "down_payment_percent"),
    PercentageKind.capital_gains: (Label.capital_gains_tax, "capital_gains_percent"),
}

SIMULATION_KEYS = ("annual_interest_rate", "term_months", "amortization_system")


def _pct(percent: float) -> float:
    return to_number(percent) / 100


def compute_derived(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    params: SimulationParams,
) -> Dict[Label, float]:
    """
    Compute the target value of every derived field for one pass.

    Only fields whose preconditions hold are included (no sale, no
    commission). Later computations in the pass see the values of earlier
    ones, except where the field is pinned manually: then the stored value
    is used.
    """
    entries = list(entries)
    info = property_info(entries, property_name, scenario)
    derived: Dict[Label, float] = {}

    def root(label: Label) -> float:
        return resolve(entries, property_name, scenario, label)

    def derive(label: Label, computed: float) -> float:
        derived[label] = computed
        return effective(label)

    def effective(label: Label) -> float:
        entry = find_entry(entries, property_name, scenario, label)
        if entry is not None and entry.manual_override:
            return entry.amount
        if label in derived:
            return derived[label]
        return root(label)

    sale = root(Label.sale)
    down_payment = root(Label.down_payment)
    acquisition_value = root(Label.acquisition_value)
    renovation = root(Label.renovation)
    agent_fee = root(Label.agent_fee)

    financed = info.purchase_type == PurchaseType.financed
    base_acquisition = acquisition_value if financed else down_payment

    if sale > 0:
        derive(Label.broker_commission, sale * _pct(params.broker_percent))
        derive(Label.registry, sale * REGISTRY_RATE)
        derive(Label.deed_fee, sale * DEED_FEE_RATE)

    if base_acquisition > 0:
        derive(Label.itbi, base_acquisition * _pct(params.itbi_percent))

    if not financed:
        if down_payment > 0:
            derive(Label.auctioneer_commission, down_payment * _pct(params.auctioneer_percent))

        deductible = (
            effective(Label.broker_commission)
            + down_payment
            + effective(Label.itbi)
            + effective(Label.registry)
            + agent_fee
            + effective(Label.auctioneer_commission)
            + effective(Label.deed_fee)
            + renovation
        )
    else:
        if acquisition_value > 0:
            financed_down = derive(
                Label.down_payment, acquisition_value * _pct(params.down_payment_percent)
            )
            derive(Label.auctioneer_commission, acquisition_value * _pct(params.auctioneer_percent))

            principal = acquisition_value - financed_down
            if principal > 0 and params.term_months > 0:
                first_month = schedule(
                    principal,
                    params.annual_interest_rate,
                    params.term_months,
                    params.amortization_system,
                    0,
                )
                year_one = schedule(
                    principal,
                    params.annual_interest_rate,
                    params.term_months,
                    params.amortization_system,
                    BALANCE_SNAPSHOT_MONTH,
                )
                derive(Label.installment, first_month.installment * 12)
                derive(Label.outstanding_balance, max(0.0, year_one.outstanding_balance))

        deductible = (
            acquisition_value
            + effective(Label.broker_commission)
            + effective(Label.auctioneer_commission)
            + effective(Label.itbi)
            + effective(Label.registry)
            + agent_fee
            + effective(Label.deed_fee)
            + renovation
        )

    gain = sale - deductible
    tax = gain * _pct(params.capital_gains_percent) if gain > 0 else 0.0
    derived[Label.capital_gains_tax] = tax

    return derived


def recompute_all(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    params: SimulationParams,
    tolerance: Optional[float] = None,
) -> List[FinancialEntry]:
    """
    Recompute and write back every derived field of a property/scenario.

    Args:
        entries: Full entry collection
        property_name: Property to recompute
        scenario: Scenario being edited
        params: Percentages and financing parameters for this property
        tolerance: Differences at or below this are not written
            (defaults to ``Settings.write_tolerance``)

    Returns:
        New entry collection with the derived fields updated
    """
    if tolerance is None:
        tolerance = get_settings().write_tolerance

    snapshot = list(entries)
    derived = compute_derived(snapshot, property_name, scenario, params)

    result = snapshot
    for label, computed in derived.items():
        entry = find_entry(snapshot, property_name, scenario, label)
        if entry is not None and entry.manual_override:
            logger.debug(f"{property_name}/{scenario.value}: '{label.value}' is manual, skipped")
            continue

        current = entry.amount if entry is not None else 0.0
        if abs(current - computed) <= tolerance:
            continue

        logger.debug(
            f"{property_name}/{scenario.value}: '{label.value}' {current:.2f} -> {computed:.2f}"
        )
        result = store.set_value(
            result, property_name, scenario, label.category, label, computed, is_automatic=True
        )

    return result


def simulation_params_for(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    settings: Optional[Settings] = None,
) -> SimulationParams:
    """
    Per-property engine configuration.

    Percentages come from the rate last stored on each derived entry and
    financing parameters from the 'Valor Aquisição' entry, both inheriting
    from the projection, with application defaults for anything unset.
    """
    settings = settings or get_settings()
    entries = list(entries)
    info = property_info(entries, property_name, scenario)

    def pct(label: Label, default: float) -> float:
        return resolve_percentage(entries, property_name, scenario, label, default)

    return SimulationParams(
        itbi_percent=pct(Label.itbi, settings.default_itbi_percent),
        broker_percent=pct(Label.broker_commission, settings.default_broker_percent),
        auctioneer_percent=pct(Label.auctioneer_commission, settings.default_auctioneer_percent),
        down_payment_percent=pct(Label.down_payment, settings.default_down_payment_percent),
        capital_gains_percent=pct(Label.capital_gains_tax, settings.default_capital_gains_percent),
        annual_interest_rate=(
            info.annual_interest_rate
            if info.annual_interest_rate is not None
            else settings.default_annual_interest_rate
        ),
        term_months=info.term_months if info.term_months is not None else settings.default_term_months,
        amortization_system=(
            info.amortization_system
            or AmortizationSystem(settings.default_amortization_system)
        ),
    )


def _percentage_base(
    entries: List[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    kind: PercentageKind,
) -> float:
    """Amount a percentage slider applies to; 0 for capital gains (the engine derives it)."""

    def value(label: Label) -> float:
        return resolve(entries, property_name, scenario, label)

    financed = property_info(entries, property_name, scenario).purchase_type == PurchaseType.financed
    if kind == PercentageKind.broker:
        return value(Label.sale)
    if kind in (PercentageKind.itbi, PercentageKind.auctioneer):
        return value(Label.acquisition_value) if financed else value(Label.down_payment)
    if kind == PercentageKind.down_payment:
        return value(Label.acquisition_value)
    return 0.0


def set_percentage(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    kind: PercentageKind,
    percent: float,
    params: SimulationParams,
) -> Tuple[List[FinancialEntry], SimulationParams]:
    """
    Apply a percentage slider change.

    Writes ``base * percent`` to the target field, unpinning it and storing
    the rate even when the base is still zero, then recomputes the
    property so dependent fields follow.

    Returns:
        (new entries, updated params)
    """
    entries = list(entries)
    kind = PercentageKind(kind)
    percent = to_number(percent)
    label, param_field = PERCENTAGE_TARGETS[kind]
    params = replace(params, **{param_field: percent})

    base = _percentage_base(entries, property_name, scenario, kind)
    amount = base * percent / 100 if base > 0 else 0.0
    entries = store.set_value(
        entries,
        property_name,
        scenario,
        label.category,
        label,
        amount,
        is_automatic=True,
        new_percentage=percent,
    )
    return recompute_all(entries, property_name, scenario, params), params


def change_simulation_parameter(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    key: str,
    value,
    params: SimulationParams,
) -> Tuple[List[FinancialEntry], SimulationParams]:
    """
    Change the interest rate, term or amortization system of a property.

    Unpins the installment and outstanding balance, persists the parameter
    and recomputes so those two fields show fresh figures.

    Raises:
        ValueError: For an unknown parameter name

    Returns:
        (new entries, updated params)
    """
    if key not in SIMULATION_KEYS:
        raise ValueError(f"Unknown simulation parameter: {key}")

    entries = list(entries)
    for label in LOAN_LABELS:
        entries = store.reset_override(entries, property_name, scenario, label)

    entries = store.set_simulation_parameter(entries, property_name, scenario, key, value)
    stored = find_entry(entries, property_name, scenario, Label.acquisition_value)
    params = replace(params, **{key: getattr(stored, key)})

    logger.info(f"{property_name}/{scenario.value}: {key} set to {getattr(stored, key)}")
    return recompute_all(entries, property_name, scenario, params), params
