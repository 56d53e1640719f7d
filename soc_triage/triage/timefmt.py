"""Relative "time ago" labels. The caller always supplies *now*."""

from __future__ import annotations

import math
from datetime import datetime, timezone

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def format_date(value: datetime) -> str:
    """Absolute date as "Jan 5, 2024", independent of the process locale."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_relative(timestamp: datetime, now: datetime) -> str:
    """Bucket the age of *timestamp* relative to *now*.

    Buckets are evaluated in order: seconds (< 60s), minutes (< 1h),
    hours (< 1 day), then the absolute date. Counts are floored. A future
    timestamp is not special-cased and yields a negative seconds count.
    """
    seconds = math.floor((as_utc(now) - as_utc(timestamp)).total_seconds())

    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return format_date(timestamp)
