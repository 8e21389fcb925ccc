"""
Recompute the demo portfolio and print a summary of each property.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from auction_tracker.calculations import engine, portfolio, summary
from auction_tracker.formatters import format_currency_brl
from auction_tracker.models import Scenario
from auction_tracker.seed import demo_entries
from auction_tracker import store


def main():
    entries = demo_entries()
    names = store.list_properties(entries)["all"]
    print(f"Loaded {len(entries)} entries for {len(names)} properties")

    for name in names:
        params = engine.simulation_params_for(entries, name, Scenario.projected)
        entries = engine.recompute_all(entries, name, Scenario.projected, params)

        result = summary.summarize(entries, name, Scenario.projected)
        print(f"\n{name}")
        print(f"  Capital employed: {format_currency_brl(result.breakdown.capital_employed)}")
        print(f"  Total profit:     {format_currency_brl(result.total_profit)}")
        print(f"  Profit per share: {format_currency_brl(result.profit_per_share)}")
        print(f"  ROI:              {result.roi_total:.2f}% ({result.roi_monthly:.2f}% a.m.)")

    kpis = portfolio.portfolio_kpis(entries, Scenario.projected)
    print("\nPortfolio (co-investor share)")
    print(f"  Revenue: {format_currency_brl(kpis.revenue)}")
    print(f"  Costs:   {format_currency_brl(kpis.costs)}")
    print(f"  Profit:  {format_currency_brl(kpis.profit)}")


if __name__ == "__main__":
    main()
