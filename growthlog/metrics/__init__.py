"""
Growth metric calculations.
"""

from .calculator import (
    compute_bmi,
    compute_age_years,
    parse_date,
    format_date,
)

__all__ = [
    "compute_bmi",
    "compute_age_years",
    "parse_date",
    "format_date",
]
