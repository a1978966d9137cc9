"""Display helpers for currency, counts and percentages."""

from __future__ import annotations

import math
from typing import Optional


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _compact(value: float) -> str:
    """1234 -> '1.2K', 2000000 -> '2M'. Whole multiples drop the decimal."""
    for divisor, suffix in ((1_000_000, "M"), (1_000, "K")):
        if value >= divisor:
            scaled = value / divisor
            text = f"{scaled:.1f}"
            if text.endswith(".0"):
                text = text[:-2]
            return f"{text}{suffix}"
    return f"{value:,.0f}"


def format_currency(amount: Optional[float]) -> str:
    """$950, $79K, $1.2M."""
    if _is_missing(amount):
        return "$0"
    sign = "-" if amount < 0 else ""
    return f"{sign}${_compact(abs(float(amount)))}"


def format_number(num: Optional[float]) -> str:
    if _is_missing(num):
        return "0"
    sign = "-" if num < 0 else ""
    return f"{sign}{_compact(abs(float(num)))}"


def format_percentage(num: Optional[float], decimals: int = 0) -> str:
    if _is_missing(num):
        return "0%"
    text = f"{float(num):.{decimals}f}"
    if decimals > 0 and text.endswith(".0"):
        text = text[:-2]
    return f"{text}%"


def format_number_with_commas(num: float) -> str:
    return f"{num:,.0f}"


def format_multiple(value: Optional[float]) -> str:
    """ROI multiple; 'N/A' when no fee was paid."""
    if _is_missing(value):
        return "N/A"
    return f"{value:.1f}x"
