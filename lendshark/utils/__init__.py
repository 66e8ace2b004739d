"""Utility helpers."""

from lendshark.utils.dates import (
    add_days,
    add_months,
    days_between,
    ensure_aware,
    utc_now,
)

__all__ = [
    "add_days",
    "add_months",
    "days_between",
    "ensure_aware",
    "utc_now",
]
