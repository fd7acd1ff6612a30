"""General-purpose helper utilities for keyword research output."""

import math
import re
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_phrase(text: str) -> str:
    """Lowercase, trim and collapse internal whitespace.

    Examples:
        >>> normalize_phrase("  Content   Marketing ")
        'content marketing'
    """
    return _WHITESPACE_RE.sub(" ", str(text)).strip().lower()


def format_number(n: int | float) -> str:
    """Format a number with human-readable suffixes.

    Args:
        n: Numeric value.

    Returns:
        Formatted string (e.g. 1500 -> '1.5K', 2500000 -> '2.5M').

    Examples:
        >>> format_number(1500)
        '1.5K'
        >>> format_number(2500000)
        '2.5M'
        >>> format_number(999)
        '999'
    """
    abs_n = abs(n)
    sign = "-" if n < 0 else ""
    if abs_n >= 1_000_000_000:
        return f"{sign}{abs_n / 1_000_000_000:.1f}B"
    if abs_n >= 1_000_000:
        return f"{sign}{abs_n / 1_000_000:.1f}M"
    if abs_n >= 1_000:
        return f"{sign}{abs_n / 1_000:.1f}K"
    if isinstance(n, float):
        return f"{sign}{abs_n:.1f}"
    return f"{sign}{abs_n}"


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_volume(volume: Optional[int]) -> str:
    """Monthly search volume for display; zero and unknown read 'No data'."""
    if _is_missing(volume) or volume == 0:
        return "No data"
    return format_number(volume)


def format_cpc(cpc: Optional[float]) -> str:
    """Cost-per-click for display, e.g. '$1.25'."""
    if _is_missing(cpc) or cpc == 0:
        return "No data"
    return f"${cpc:.2f}"


def competition_label(competition: Optional[float]) -> str:
    """Map a 0-1 competition value to a label."""
    if _is_missing(competition):
        return "Unknown"
    if competition >= 0.8:
        return "High"
    if competition >= 0.5:
        return "Medium"
    if competition >= 0.2:
        return "Low"
    return "Very Low"


def score_band(score: int) -> str:
    """Bucket an opportunity score: high (>= 70), medium (>= 50) or low."""
    if score >= 70:
        return "high"
    if score >= 50:
        return "medium"
    return "low"
