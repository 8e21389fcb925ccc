"""
Entry Store

Pure operations over an ordered collection of ``FinancialEntry`` items.
Every function returns a new list and leaves its input untouched;
persisting the result is the caller's job.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from auction_tracker.calculations.resolver import find_entry, property_entries, property_info
from auction_tracker.calculations.summary import sale_duration_from_dates
from auction_tracker.formatters import to_date, to_number, to_share_count
from auction_tracker.models import (
    AmortizationSystem,
    Category,
    EditSource,
    FinancialEntry,
    Label,
    LabelKey,
    OverrideState,
    PropertyStatus,
    PurchaseType,
    Scenario,
    generate_id,
    label_category,
    label_text,
    next_override_state,
)

logger = logging.getLogger(__name__)

# Tolerance when comparing an automatically recorded sale duration
SALE_DURATION_TOLERANCE = 0.01

PROPERTY_FIELDS = (
    "state",
    "city",
    "purchase_type",
    "purchase_date",
    "sale_date",
    "sold",
    "share_count",
    "status",
)


def signed_cash_flow(category: Category, label: str, amount: float) -> float:
    """Sale proceeds are inflows; every other line is an outflow."""
    amount = abs(to_number(amount))
    if category == Category.sale and label == Label.sale.value:
        return amount
    return -amount


def _replace_entry(
    entries: List[FinancialEntry], old: FinancialEntry, new: FinancialEntry
) -> List[FinancialEntry]:
    return [new if e.entry_id == old.entry_id else e for e in entries]


def new_entry(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    category: Category,
    label: str,
    **fields,
) -> FinancialEntry:
    """Build an entry carrying the property's current metadata."""
    info = property_info(entries, property_name, scenario)
    values = dict(
        property_name=property_name,
        scenario=scenario,
        category=category,
        label=label,
        state=info.state,
        city=info.city,
        purchase_type=info.purchase_type,
        purchase_date=info.purchase_date,
        sale_date=info.sale_date,
        sold=info.sold,
        share_count=info.share_count,
        status=info.status,
        annual_interest_rate=info.annual_interest_rate,
        term_months=info.term_months,
        amortization_system=info.amortization_system,
    )
    values.update(fields)
    return FinancialEntry(**values)


def set_value(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    category: Optional[Category],
    label: LabelKey,
    amount: float,
    is_automatic: bool = False,
    new_percentage: Optional[float] = None,
) -> List[FinancialEntry]:
    """
    Write a line item's amount.

    A direct edit (``is_automatic=False``) pins the field as manual. A
    percentage-driven write (``new_percentage`` given) unpins it and stores
    the rate. A plain automatic write keeps whatever state the field had.
    The entry is created on first write.

    Args:
        entries: Current entry collection
        property_name: Property the line belongs to
        scenario: Projected or executed
        category: Expense category (inferred from known labels when None)
        label: Known label, custom label, or label text
        amount: Amount; the sign is applied from the label
        is_automatic: True for engine or percentage writes
        new_percentage: Percentage used to derive the amount

    Returns:
        New entry collection
    """
    entries = list(entries)
    text = label_text(label)
    category = label_category(label, category)
    cash_flow = signed_cash_flow(category, text, amount)
    share_count = property_info(entries, property_name, scenario).share_count

    if not is_automatic:
        source = EditSource.direct_edit
    elif new_percentage is not None:
        source = EditSource.percentage_edit
    else:
        source = EditSource.automatic

    existing = find_entry(entries, property_name, scenario, text)
    current_state = existing.override_state if existing is not None else OverrideState.auto
    manual = next_override_state(current_state, source) == OverrideState.manual

    if existing is not None:
        updated = replace(
            existing,
            cash_flow=cash_flow,
            share_count=share_count,
            manual_override=manual,
            applied_percentage=(
                to_number(new_percentage) if new_percentage is not None else existing.applied_percentage
            ),
        )
        return _replace_entry(entries, existing, updated)

    created = new_entry(
        entries,
        property_name,
        scenario,
        category,
        text,
        cash_flow=cash_flow,
        share_count=share_count,
        manual_override=manual,
        applied_percentage=to_number(new_percentage) if new_percentage is not None else None,
    )
    return entries + [created]


def upsert_entry(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
    category: Optional[Category] = None,
    **changes,
) -> List[FinancialEntry]:
    """Update non-amount fields of a line item, creating it with a zero amount if needed."""
    entries = list(entries)
    text = label_text(label)
    existing = find_entry(entries, property_name, scenario, text)
    if existing is not None:
        return _replace_entry(entries, existing, replace(existing, **changes))

    created = new_entry(
        entries, property_name, scenario, label_category(label, category), text, **changes
    )
    return entries + [created]


def reset_override(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    label: LabelKey,
) -> List[FinancialEntry]:
    """Hand a manually pinned field back to the engine."""
    entries = list(entries)
    existing = find_entry(entries, property_name, scenario, label)
    if existing is None or not existing.manual_override:
        return entries
    state = next_override_state(existing.override_state, EditSource.parameter_reset)
    return _replace_entry(
        entries, existing, replace(existing, manual_override=state == OverrideState.manual)
    )


def set_sale_duration(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    months: float,
) -> List[FinancialEntry]:
    """Record the months-to-sale on the scenario's sale entry."""
    return upsert_entry(
        entries, property_name, scenario, Label.sale, sale_duration_months=to_number(months)
    )


def sync_sale_duration(
    entries: Iterable[FinancialEntry],
    property_name: str,
) -> List[FinancialEntry]:
    """
    Record the executed sale duration from the property dates.

    Only applies when both purchase and sale dates are known; leaves the
    entries alone when the recorded value is already within tolerance.
    """
    entries = list(entries)
    info = property_info(entries, property_name, Scenario.executed)
    if info.purchase_date is None or info.sale_date is None:
        return entries

    months = sale_duration_from_dates(info.purchase_date, info.sale_date)
    sale_entry = find_entry(entries, property_name, Scenario.executed, Label.sale)
    if (
        sale_entry is not None
        and sale_entry.sale_duration_months is not None
        and abs(sale_entry.sale_duration_months - months) <= SALE_DURATION_TOLERANCE
    ):
        return entries

    return set_sale_duration(entries, property_name, Scenario.executed, months)


def set_simulation_parameter(
    entries: Iterable[FinancialEntry],
    property_name: str,
    scenario: Scenario,
    key: str,
    value,
) -> List[FinancialEntry]:
    """Persist a financing parameter on the scenario's 'Valor Aquisição' entry."""
    if key == "annual_interest_rate":
        value = to_number(value)
    elif key == "term_months":
        value = int(to_number(value))
    elif key == "amortization_system":
        value = AmortizationSystem(value)
    else:
        raise ValueError(f"Unknown simulation parameter: {key}")

    return upsert_entry(entries, property_name, scenario, Label.acquisition_value, **{key: value})


def delete_entry(entries: Iterable[FinancialEntry], entry_id: str) -> List[FinancialEntry]:
    return [e for e in entries if e.entry_id != entry_id]


def delete_property(entries: Iterable[FinancialEntry], property_name: str) -> List[FinancialEntry]:
    """Remove every entry of a property, in both scenarios."""
    remaining = [e for e in entries if e.property_name != property_name]
    logger.info(f"Deleted property {property_name}")
    return remaining


def restore_entries(
    entries: Iterable[FinancialEntry], restored: Iterable[FinancialEntry]
) -> List[FinancialEntry]:
    """Put back entries removed by a delete (undo)."""
    entries = list(entries)
    present = {e.entry_id for e in entries}
    return entries + [e for e in restored if e.entry_id not in present]


def list_properties(entries: Iterable[FinancialEntry]) -> Dict[str, List[str]]:
    """Property names, sorted, grouped by status."""
    statuses: Dict[str, PropertyStatus] = {}
    for entry in entries:
        statuses[entry.property_name] = entry.status

    return {
        "all": sorted(statuses),
        PropertyStatus.in_progress.value: sorted(
            name for name, status in statuses.items() if status != PropertyStatus.finished
        ),
        PropertyStatus.finished.value: sorted(
            name for name, status in statuses.items() if status == PropertyStatus.finished
        ),
    }


def duplicate_property(
    entries: Iterable[FinancialEntry], property_name: str
) -> Tuple[List[FinancialEntry], str]:
    """
    Copy every entry of a property under a new name.

    Returns:
        (new entries, name of the copy). The copy is named "X (Cópia)",
        then "X (Cópia 1)", "X (Cópia 2)", ... until the name is free.
    """
    entries = list(entries)
    existing_names = {e.property_name for e in entries}

    new_name = f"{property_name} (Cópia)"
    counter = 1
    while new_name in existing_names:
        new_name = f"{property_name} (Cópia {counter})"
        counter += 1

    clones = [
        replace(e, property_name=new_name, entry_id=generate_id())
        for e in property_entries(entries, property_name)
    ]
    logger.info(f"Duplicated property {property_name} as {new_name}")
    return entries + clones, new_name


def rename_property(
    entries: Iterable[FinancialEntry], old_name: str, new_name: str
) -> List[FinancialEntry]:
    """
    Rename a property across all its entries.

    Raises:
        ValueError: If another property already uses the new name
    """
    entries = list(entries)
    new_name = new_name.strip()
    if not new_name or new_name == old_name:
        return entries
    if any(e.property_name == new_name for e in entries):
        raise ValueError(f"A property named '{new_name}' already exists")

    return [replace(e, property_name=new_name) if e.property_name == old_name else e for e in entries]


def set_property_status(
    entries: Iterable[FinancialEntry], property_name: str, status: PropertyStatus
) -> List[FinancialEntry]:
    return update_property_data(entries, property_name, status=status)


def update_property_data(
    entries: Iterable[FinancialEntry], property_name: str, **fields
) -> List[FinancialEntry]:
    """
    Change property-level metadata on every entry of the property.

    Setting a purchase date moves the sale date to one year later (unless
    a sale date is given in the same call). Changing the co-investor count
    re-derives every share.

    Raises:
        ValueError: For fields that are not property metadata
    """
    entries = list(entries)
    unknown = set(fields) - set(PROPERTY_FIELDS)
    if unknown:
        raise ValueError(f"Not property fields: {', '.join(sorted(unknown))}")

    updates = dict(fields)
    if "purchase_date" in updates:
        updates["purchase_date"] = to_date(updates["purchase_date"])
        if updates["purchase_date"] is not None and "sale_date" not in fields:
            updates["sale_date"] = purchase_anniversary(updates["purchase_date"])
    if "sale_date" in updates:
        updates["sale_date"] = to_date(updates["sale_date"])
    if "share_count" in updates:
        updates["share_count"] = to_share_count(updates["share_count"])
    if "purchase_type" in updates:
        updates["purchase_type"] = PurchaseType(updates["purchase_type"])
    if "status" in updates:
        updates["status"] = PropertyStatus(updates["status"])
    if "sold" in updates:
        updates["sold"] = bool(updates["sold"])

    if not property_entries(entries, property_name):
        logger.warning(f"No entries for property {property_name}; metadata not stored")
        return entries

    return [replace(e, **updates) if e.property_name == property_name else e for e in entries]


def purchase_anniversary(purchase_date: date) -> date:
    """Default sale date for a purchase: one year later."""
    return purchase_date + relativedelta(years=1)
