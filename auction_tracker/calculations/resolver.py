"""
Scenario Inheritance

The executed scenario only holds the lines the user has actually
entered. Any line it lacks is read from the projected scenario of the same
property. Every "current value of field X" question in the engine, the
summary and the API goes through this module so they agree on numbers.
"""

from typing import Iterable, List, Optional

from auction_tracker.models import (
    FinancialEntry,
    Label,
    LabelKey,
    PropertyInfo,
    Scenario,
    label_text,
)


def property_entries(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Optional[Scenario] = None,
) -> List[FinancialEntry]:
    """Entries of a property, optionally restricted to one scenario."""
    return [
        e
        for e in entries
        if e.property_name == property_name and (scenario is None or e.scenario == scenario)
    ]


def find_entry(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
) -> Optional[FinancialEntry]:
    """The scenario's own entry for a label, without inheritance."""
    text = label_text(label)
    for entry in entries:
        if (
            entry.property_name == property_name
            and entry.scenario == scenario
            and entry.label == text
        ):
            return entry
    return None


def resolve_entry(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
) -> Optional[FinancialEntry]:
    """The entry that supplies a label's value, falling back to the projection."""
    entries = list(entries)
    entry = find_entry(entries, property_name, scenario, label)
    if entry is None and scenario == Scenario.executed:
        entry = find_entry(entries, property_name, Scenario.projected, label)
    return entry


def resolve(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
) -> float:
    """
    Effective (unsigned) amount of a label.

    Returns the scenario's own entry if present; for the executed scenario
    the projected entry otherwise; 0 when neither exists.
    """
    entry = resolve_entry(entries, property_name, scenario, label)
    return entry.amount if entry is not None else 0.0


get_effective_value = resolve


def resolve_percentage(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
    default: float,
) -> float:
    """Percentage last used to derive a label, with the same inheritance rule."""
    entry = resolve_entry(entries, property_name, scenario, label)
    if entry is not None and entry.applied_percentage is not None:
        return entry.applied_percentage
    return default


def consolidate(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
) -> List[FinancialEntry]:
    """
    Resolved line items of a property in one scenario.

    Projected: the projected entries. Executed: the projected entries
    overlaid label by label with the executed ones.
    """
    entries = list(entries)
    projected = property_entries(entries, property_name, Scenario.projected)
    if scenario == Scenario.projected:
        return projected

    consolidated = {e.label: e for e in projected}
    for entry in property_entries(entries, property_name, Scenario.executed):
        consolidated[entry.label] = entry
    return list(consolidated.values())


def property_info(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
) -> PropertyInfo:
    """
    Property metadata as seen from a scenario.

    Read from the scenario's anchor (first) entry. The executed scenario
    always shares the projected purchase date, and inherits everything
    else from the projection until it has entries of its own.
    """
    entries = list(entries)
    own = property_entries(entries, property_name, scenario)
    projected = property_entries(entries, property_name, Scenario.projected)

    if own:
        anchor = own[0]
        purchase_date = anchor.purchase_date
        if scenario == Scenario.executed:
            dated = next((p for p in projected if p.purchase_date), None)
            if dated is not None:
                purchase_date = dated.purchase_date
        sim = _simulation_source(own) or (
            _simulation_source(projected) if scenario == Scenario.executed else None
        )
        return PropertyInfo(
            property_name=property_name,
            scenario=scenario,
            state=anchor.state,
            city=anchor.city,
            purchase_type=anchor.purchase_type,
            purchase_date=purchase_date,
            sale_date=anchor.sale_date,
            sold=anchor.sold,
            share_count=anchor.share_count,
            status=anchor.status,
            annual_interest_rate=sim.annual_interest_rate if sim else None,
            term_months=sim.term_months if sim else None,
            amortization_system=sim.amortization_system if sim else None,
        )

    if scenario == Scenario.executed and projected:
        anchor = projected[0]
        sim = _simulation_source(projected)
        return PropertyInfo(
            property_name=property_name,
            scenario=scenario,
            state=anchor.state,
            city=anchor.city,
            purchase_type=anchor.purchase_type,
            purchase_date=next((p.purchase_date for p in projected if p.purchase_date), None),
            sale_date=None,
            sold=anchor.sold,
            share_count=anchor.share_count,
            status=anchor.status,
            annual_interest_rate=sim.annual_interest_rate if sim else None,
            term_months=sim.term_months if sim else None,
            amortization_system=sim.amortization_system if sim else None,
        )

    return PropertyInfo(property_name=property_name, scenario=scenario)


def _simulation_source(entries: List[FinancialEntry]) -> Optional[FinancialEntry]:
    """Entry holding the financing parameters: 'Valor Aquisição', else any with a rate."""
    for entry in entries:
        if entry.label == Label.acquisition_value.value:
            return entry
    for entry in entries:
        if entry.annual_interest_rate is not None:
            return entry
    return None
