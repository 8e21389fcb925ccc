"""
Demo portfolio used to populate an empty store.
"""

from datetime import date
from typing import List

from auction_tracker.models import (
    FinancialEntry,
    Label,
    PropertyStatus,
    PurchaseType,
    Scenario,
)
from auction_tracker.store import signed_cash_flow

# (property, state, city, purchase type, purchase date, sale date, shares, status, sold, lines)
DEMO_PROPERTIES = [
    (
        "guapo-casa1", "GO", "Guapó", PurchaseType.cash,
        date(2025, 1, 15), date(2026, 1, 15), 1, PropertyStatus.in_progress, False,
        [
            (Label.sale, 190000),
            (Label.down_payment, 92700),
            (Label.renovation, 10000),
            (Label.vacancy, 5000),
            (Label.property_tax, 300),
            (Label.itbi, 3800),
            (Label.registry, 1900),
        ],
    ),
    (
        "jd-helvecia-casa1", "GO", "Aparecida de Goiânia", PurchaseType.cash,
        date(2025, 3, 12), date(2026, 3, 12), 12, PropertyStatus.in_progress, False,
        [
            (Label.sale, 430000),
            (Label.down_payment, 243000),
            (Label.auctioneer_commission, 12150),
            (Label.renovation, 20000),
            (Label.property_tax, 500),
            (Label.registry, 4900),
        ],
    ),
    (
        "nova-olinda-casa1", "GO", "Aparecida de Goiânia", PurchaseType.financed,
        date(2025, 1, 30), date(2026, 1, 30), 8, PropertyStatus.in_progress, False,
        [
            (Label.sale, 270000),
            (Label.itbi, 5400),
            (Label.registry, 2700),
            (Label.acquisition_value, 0),
        ],
    ),
    (
        "trindade2", "GO", "Trindade", PurchaseType.cash,
        date(2024, 9, 20), date(2025, 6, 20), 1, PropertyStatus.finished, True,
        [
            (Label.sale, 160000),
            (Label.down_payment, 96000),
            (Label.renovation, 11000),
            (Label.condo, 1740),
            (Label.property_tax, 300),
        ],
    ),
]


def demo_entries() -> List[FinancialEntry]:
    """Projected entries of the demo portfolio, fresh ids on every call."""
    entries = []
    for (
        property_name, state, city, purchase_type,
        purchase_date, sale_date, share_count, status, sold, lines,
    ) in DEMO_PROPERTIES:
        for label, amount in lines:
            entries.append(
                FinancialEntry(
                    property_name=property_name,
                    scenario=Scenario.projected,
                    category=label.category,
                    label=label.value,
                    cash_flow=signed_cash_flow(label.category, label.value, amount),
                    share_count=share_count,
                    state=state,
                    city=city,
                    purchase_type=purchase_type,
                    purchase_date=purchase_date,
                    sale_date=sale_date,
                    sold=sold,
                    status=status,
                )
            )
    return entries
