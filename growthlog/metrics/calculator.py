"""
Derived growth metrics.

BMI = weight_kg / height_m^2, reported to one decimal place.

Age is counted in whole completed years: the year difference, minus one when
the as-of month/day falls before the birth month/day. A Feb 29 birthday is
therefore reached on Mar 1 in common years.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any


def parse_date(value: Any) -> date | None:
    """
    Coerce a calendar date from a date, datetime or ISO string.

    Returns None for None or blank strings. Raises ValueError for text that
    is not an ISO date (a trailing time component is accepted and dropped).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot interpret {type(value).__name__} as a date")

    text = value.strip()
    if not text:
        return None
    # fromisoformat also takes compact and week dates (20240601, 2024-W23-1)
    if len(text) < 10 or text[4] != "-" or text[7] != "-":
        raise ValueError(f"'{text}' is not a YYYY-MM-DD date")
    if len(text) > 10 and text[10] in ("T", " "):
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def format_date(value: date | None) -> str | None:
    """Format a date as YYYY-MM-DD for the presentation boundary."""
    return value.isoformat() if value is not None else None


def compute_bmi(weight_kg: Any, height_cm: Any) -> float | None:
    """
    Calculate BMI from weight and height.

    Returns None if either input is missing, non-numeric or non-positive.
    """
    try:
        weight = float(weight_kg)
        height_m = float(height_cm) / 100
    except (TypeError, ValueError):
        return None

    if not (math.isfinite(weight) and math.isfinite(height_m)):
        return None
    if weight <= 0 or height_m <= 0:
        return None

    denominator = height_m * height_m
    if denominator == 0:
        return None
    return round(weight / denominator, 1)


def compute_age_years(birth_date: Any, as_of: Any = None) -> int | None:
    """
    Whole years completed between birth_date and as_of (default: today).

    Returns None if birth_date is missing or unparsable, or if as_of is
    earlier than birth_date.
    """
    try:
        born = parse_date(birth_date)
        on = parse_date(as_of) if as_of is not None else date.today()
    except ValueError:
        return None
    if born is None or on is None or on < born:
        return None

    return on.year - born.year - (
        (on.month, on.day) < (born.month, born.day)
    )
