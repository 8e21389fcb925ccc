"""
Tests for scenario summaries.
"""

from datetime import date

import pytest

from auction_tracker.calculations.engine import recompute_all
from auction_tracker.calculations.summary import (
    calculate_roi_monthly,
    calculate_roi_total,
    compare,
    duration_months,
    sale_duration_from_dates,
    summarize,
)
from auction_tracker.models import Label, Scenario, SimulationParams
from auction_tracker import store

CASH = "guapo-casa1"


class TestROI:
    """Test ROI conventions."""

    def test_roi_total(self):
        assert calculate_roi_total(25, 100) == 25

    def test_roi_total_without_capital(self):
        assert calculate_roi_total(1000, 0) == 0

    def test_roi_monthly_compounds(self):
        assert calculate_roi_monthly(21, 2) == pytest.approx(10)

    def test_roi_monthly_zero_duration(self):
        assert calculate_roi_monthly(50, 0) == 0

    def test_roi_monthly_total_loss(self):
        assert calculate_roi_monthly(-100, 12) == -100
        assert calculate_roi_monthly(-150, 12) == -100


class TestSummarize:
    """Test profit and capital employed."""

    def test_cash_purchase(self, cash_property):
        entries = recompute_all(cash_property, CASH, Scenario.projected, SimulationParams())
        result = summarize(entries, CASH, Scenario.projected)

        # 92700 down + 1854 ITBI + 1900 registry + 4635 auctioneer + 1900 deed
        # + 10000 renovation + 5000 vacancy + 300 IPTU
        assert result.breakdown.capital_employed == pytest.approx(118289)
        assert result.total_profit == pytest.approx(190000 - 9500 - 10126.65 - 118289)
        assert result.roi_total == pytest.approx(result.total_profit / 118289 * 100)
        assert result.roi_monthly == pytest.approx(
            ((1 + result.roi_total / 100) ** (1 / 12) - 1) * 100
        )
        assert result.breakdown.duration_months == 12

    def test_breakdown_costs(self, cash_property):
        result = summarize(cash_property, CASH, Scenario.projected)
        costs = result.breakdown.costs

        assert costs["renovation"] == 10000
        assert costs["itbi"] == 3800
        assert costs["down_payment"] == 92700
        assert result.breakdown.sale == 190000

    def test_profit_per_share(self, portfolio):
        result = summarize(portfolio, "jd-helvecia-casa1", Scenario.projected)
        assert result.profit_per_share == pytest.approx(result.total_profit / 12)

    def test_outstanding_balance_reduces_profit(self, cash_property):
        before = summarize(cash_property, CASH, Scenario.projected)
        entries = store.set_value(
            cash_property, CASH, Scenario.projected, None, Label.outstanding_balance, 50000
        )
        after = summarize(entries, CASH, Scenario.projected)

        assert after.total_profit == pytest.approx(before.total_profit - 50000)
        assert after.breakdown.capital_employed == before.breakdown.capital_employed

    def test_empty_property(self):
        result = summarize([], "nothing", Scenario.projected)

        assert result.total_profit == 0
        assert result.roi_total == 0
        assert result.roi_monthly == 0

    def test_loss_gives_negative_roi(self, cash_property):
        entries = store.set_value(cash_property, CASH, Scenario.projected, None, Label.sale, 50000)
        result = summarize(entries, CASH, Scenario.projected)

        assert result.total_profit < 0
        assert result.roi_total < 0
        assert -100 < result.roi_monthly < 0

    def test_total_loss_is_minus_one_hundred(self):
        entries = store.set_value([], "p", Scenario.projected, None, Label.down_payment, 10000)
        result = summarize(entries, "p", Scenario.projected)

        assert result.total_profit == -10000
        assert result.roi_total == -100
        assert result.roi_monthly == -100


class TestDuration:
    """Test the holding period."""

    def test_projected_is_twelve_months(self, cash_property):
        assert duration_months(cash_property, CASH, Scenario.projected) == 12

    def test_executed_uses_recorded_duration(self, cash_property):
        entries = store.set_sale_duration(cash_property, CASH, Scenario.executed, 6)
        assert duration_months(entries, CASH, Scenario.executed) == 6

    def test_executed_until_today(self, cash_property):
        months = duration_months(cash_property, CASH, Scenario.executed, today=date(2025, 7, 15))
        assert months == pytest.approx(181 / 30.44)

    def test_executed_month_length(self, cash_property):
        months = duration_months(
            cash_property, CASH, Scenario.executed, today=date(2025, 7, 15), days_per_month=30
        )
        assert months == pytest.approx(181 / 30)

    def test_executed_floored_at_one_month(self, cash_property):
        months = duration_months(cash_property, CASH, Scenario.executed, today=date(2025, 1, 20))
        assert months == 1

    def test_executed_without_purchase_date(self):
        entries = store.set_value([], "p", Scenario.executed, None, Label.sale, 1000)
        assert duration_months(entries, "p", Scenario.executed) == 1

    def test_sale_duration_from_dates(self):
        assert sale_duration_from_dates(date(2025, 1, 15), date(2025, 7, 15)) == round(181 / 30.4375, 2)


class TestCompare:
    """Test projected vs executed comparison."""

    def test_deltas(self, cash_property):
        entries = store.set_value(cash_property, CASH, Scenario.executed, None, Label.renovation, 12500)
        result = compare(entries, CASH, today=date(2026, 1, 15))

        assert result.deltas["renovation"] == 2500
        assert result.executed.total_profit == pytest.approx(result.projected.total_profit - 2500)
        assert result.deltas["roi_total"] < 0
        assert result.deltas["registry_and_taxes"] == 0
