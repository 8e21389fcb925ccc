"""
Auction Investment Tracker.
"""
