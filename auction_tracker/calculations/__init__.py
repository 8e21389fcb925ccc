"""
Financial Calculation Engine

Core calculation modules for auction property investments: scenario
inheritance, loan amortization (SAC and Price), derived line items,
scenario summaries, bid sensitivity and portfolio aggregation.
"""

from auction_tracker.calculations import amortization, resolver, summary, sweep, portfolio, engine

__all__ = ["amortization", "resolver", "summary", "sweep", "portfolio", "engine"]
