"""Utility helpers for reference cache."""

from .timestamps import DATETIME_FORMAT, format_datetime, now

__all__ = [
    "DATETIME_FORMAT",
    "format_datetime",
    "now",
]
