"""
Currency parsing and numeric coercion.

The entry forms accept free-form, momentarily invalid input, so every
amount or percentage that crosses into the core goes through ``to_number``
first. Nothing here raises.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser

_CURRENCY_PREFIX = re.compile(r"R\$\s?")


def parse_currency_brl(value: Any) -> float:
    """
    Parse a BRL currency string such as ``"R$ 1.234,56"``.

    Args:
        value: String or number

    Returns:
        Parsed amount, or 0.0 when the value cannot be parsed
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return to_number(value)
    if not isinstance(value, str):
        return 0.0

    number_string = _CURRENCY_PREFIX.sub("", value.strip())
    number_string = number_string.replace(".", "").replace(",", ".", 1)
    try:
        return to_number(float(number_string))
    except ValueError:
        return 0.0


def to_number(value: Any) -> float:
    """Coerce any input to a finite float; missing or invalid values become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        return parse_currency_brl(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_share_count(value: Any) -> int:
    """Co-investor count, clamped to at least 1."""
    count = int(to_number(value))
    return count if count >= 1 else 1


def format_currency_brl(value: float) -> str:
    """Format an amount as ``R$ 1.234,56``."""
    value = to_number(value)
    sign = "-" if value < 0 else ""
    formatted = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"


def format_currency_short(value: float) -> str:
    """Compact form used on dashboard axes (``R$ 1,2M``, ``R$ 190 Mil``)."""
    value = to_number(value)
    if abs(value) >= 1_000_000:
        return f"R$ {value / 1_000_000:.1f}M".replace(".", ",")
    if abs(value) >= 1_000:
        return f"R$ {value / 1_000:.0f} Mil"
    return f"R$ {value:.0f}"


def to_date(value: Any) -> Optional[date]:
    """Coerce ``YYYY-MM-DD`` (or full ISO timestamp) strings to a date; invalid input is None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return None
