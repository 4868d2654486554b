"""Timestamp formatting in the UTC+8 (Beijing) time zone."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

BEIJING = timezone(timedelta(hours=8))
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_timestamp(timestamp_ms: int, fmt: str) -> str:
    """Format a Unix timestamp in milliseconds as UTC+8 local time."""
    moment = (_EPOCH + timedelta(milliseconds=timestamp_ms)).astimezone(BEIJING)
    return moment.strftime(fmt)


def format_now_with_diff(fmt: str, diff: int) -> str:
    """Format the current time shifted by ``diff`` milliseconds."""
    now_ms = time.time_ns() // 1_000_000
    return format_timestamp(now_ms + diff, fmt)