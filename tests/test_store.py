"""
Tests for entry store operations.
"""

from datetime import date

import pytest

from auction_tracker.calculations.resolver import find_entry, property_info
from auction_tracker.models import (
    Category,
    CustomLabel,
    Label,
    PropertyStatus,
    PurchaseType,
    Scenario,
)
from auction_tracker import store

NAME = "guapo-casa1"


class TestSetValue:
    """Test writes and the override state machine."""

    def test_direct_edit_pins_field(self, cash_property):
        entries = store.set_value(
            cash_property, NAME, Scenario.projected, None, Label.broker_commission, 8000
        )
        entry = find_entry(entries, NAME, Scenario.projected, Label.broker_commission)

        assert entry.manual_override is True
        assert entry.cash_flow == -8000
        assert entry.category == Category.sale

    def test_sale_is_inflow(self):
        entries = store.set_value([], "p", Scenario.projected, None, Label.sale, "R$ 150.000,00")
        assert entries[0].cash_flow == 150000

    def test_percentage_edit_unpins_and_stores_rate(self, cash_property):
        entries = store.set_value(cash_property, NAME, Scenario.projected, None, Label.itbi, 5000)
        entries = store.set_value(
            entries, NAME, Scenario.projected, None, Label.itbi, 2781, is_automatic=True, new_percentage=3
        )
        entry = find_entry(entries, NAME, Scenario.projected, Label.itbi)

        assert entry.manual_override is False
        assert entry.applied_percentage == 3
        assert entry.amount == 2781

    def test_automatic_write_keeps_state(self, cash_property):
        entries = store.set_value(cash_property, NAME, Scenario.projected, None, Label.itbi, 5000)
        entries = store.set_value(entries, NAME, Scenario.projected, None, Label.itbi, 1000, is_automatic=True)

        assert find_entry(entries, NAME, Scenario.projected, Label.itbi).manual_override is True

    def test_new_entry_copies_metadata(self, cash_property):
        entries = store.set_value(cash_property, NAME, Scenario.projected, None, Label.condo, 1200)
        entry = find_entry(entries, NAME, Scenario.projected, Label.condo)

        assert entry.city == "Guapó"
        assert entry.purchase_date == date(2025, 1, 15)
        assert len(entries) == len(cash_property) + 1

    def test_custom_label_requires_category(self, cash_property):
        with pytest.raises(ValueError):
            store.set_value(cash_property, NAME, Scenario.projected, None, "Jardinagem", 300)

        entries = store.set_value(
            cash_property,
            NAME,
            Scenario.projected,
            None,
            CustomLabel("Jardinagem", Category.maintenance_cost),
            300,
        )
        assert find_entry(entries, NAME, Scenario.projected, "Jardinagem").cash_flow == -300

    def test_input_not_mutated(self, cash_property):
        before = list(cash_property)
        store.set_value(cash_property, NAME, Scenario.projected, None, Label.sale, 1)
        assert cash_property == before

    def test_reset_override(self, cash_property):
        entries = store.set_value(cash_property, NAME, Scenario.projected, None, Label.itbi, 5000)
        entries = store.reset_override(entries, NAME, Scenario.projected, Label.itbi)

        entry = find_entry(entries, NAME, Scenario.projected, Label.itbi)
        assert entry.manual_override is False
        assert entry.amount == 5000


class TestPropertyOperations:
    """Test property-level operations."""

    def test_list_properties_by_status(self, portfolio):
        listing = store.list_properties(portfolio)

        assert listing["all"] == sorted(
            ["guapo-casa1", "jd-helvecia-casa1", "nova-olinda-casa1", "trindade2"]
        )
        assert listing["finalizado"] == ["trindade2"]
        assert "trindade2" not in listing["em_andamento"]

    def test_duplicate_property_names(self, cash_property):
        entries, first = store.duplicate_property(cash_property, NAME)
        entries, second = store.duplicate_property(entries, NAME)

        assert first == "guapo-casa1 (Cópia)"
        assert second == "guapo-casa1 (Cópia 1)"
        copies = [e for e in entries if e.property_name == first]
        assert len(copies) == len(cash_property)
        assert {e.entry_id for e in copies}.isdisjoint({e.entry_id for e in cash_property})

    def test_rename_property(self, portfolio):
        entries = store.rename_property(portfolio, NAME, "guapo-casa-renomeada")
        assert "guapo-casa-renomeada" in store.list_properties(entries)["all"]
        assert NAME not in store.list_properties(entries)["all"]

    def test_rename_onto_existing_name(self, portfolio):
        with pytest.raises(ValueError):
            store.rename_property(portfolio, NAME, "trindade2")

    def test_delete_and_restore(self, portfolio):
        removed = [e for e in portfolio if e.property_name == NAME]
        entries = store.delete_property(portfolio, NAME)
        assert NAME not in store.list_properties(entries)["all"]

        entries = store.restore_entries(entries, removed)
        assert len(entries) == len(portfolio)

    def test_delete_entry(self, cash_property):
        target = cash_property[0]
        entries = store.delete_entry(cash_property, target.entry_id)
        assert target not in entries

    def test_set_property_status(self, cash_property):
        entries = store.set_property_status(cash_property, NAME, PropertyStatus.finished)
        assert all(e.status == PropertyStatus.finished for e in entries)


class TestUpdatePropertyData:
    """Test metadata propagation."""

    def test_purchase_date_moves_sale_date(self, cash_property):
        entries = store.update_property_data(cash_property, NAME, purchase_date="2025-02-29")
        # Invalid date is ignored
        assert property_info(entries, NAME, Scenario.projected).purchase_date is None

        entries = store.update_property_data(cash_property, NAME, purchase_date="2024-02-29")
        info = property_info(entries, NAME, Scenario.projected)
        assert info.purchase_date == date(2024, 2, 29)
        assert info.sale_date == date(2025, 2, 28)

    def test_explicit_sale_date_kept(self, cash_property):
        entries = store.update_property_data(
            cash_property, NAME, purchase_date="2025-01-01", sale_date="2025-08-01"
        )
        assert property_info(entries, NAME, Scenario.projected).sale_date == date(2025, 8, 1)

    def test_share_count_changes_every_share(self, cash_property):
        entries = store.update_property_data(cash_property, NAME, share_count=4)
        sale = find_entry(entries, NAME, Scenario.projected, Label.sale)

        assert all(e.share_count == 4 for e in entries)
        assert sale.share == 47500

    def test_share_count_clamped(self, cash_property):
        entries = store.update_property_data(cash_property, NAME, share_count=0)
        assert all(e.share_count == 1 for e in entries)

    def test_purchase_type(self, cash_property):
        entries = store.update_property_data(cash_property, NAME, purchase_type="Financiado")
        assert property_info(entries, NAME, Scenario.projected).purchase_type == PurchaseType.financed

    def test_unknown_field(self, cash_property):
        with pytest.raises(ValueError):
            store.update_property_data(cash_property, NAME, price=1)

    def test_no_entries(self):
        assert store.update_property_data([], "nothing", city="X") == []


class TestSaleDuration:
    """Test the recorded executed sale duration."""

    def test_sync_from_dates(self, cash_property):
        entries = store.set_value(cash_property, NAME, Scenario.executed, None, Label.sale, 195000)
        entries = store.update_property_data(entries, NAME, sale_date="2025-07-15")
        entries = store.sync_sale_duration(entries, NAME)

        sale = find_entry(entries, NAME, Scenario.executed, Label.sale)
        assert sale.sale_duration_months == pytest.approx(round(181 / 30.4375, 2))

    def test_sync_without_dates(self, cash_property):
        assert store.sync_sale_duration(cash_property, NAME) == cash_property

    def test_set_sale_duration(self, cash_property):
        entries = store.set_sale_duration(cash_property, NAME, Scenario.executed, 7)
        assert find_entry(entries, NAME, Scenario.executed, Label.sale).sale_duration_months == 7
