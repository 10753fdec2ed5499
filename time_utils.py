"""Timezone and window helpers for consistent timestamp handling."""

from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from runtime.defaults import DEFAULT_TIMEZONE_NAME


def get_timezone(timezone_name: str) -> ZoneInfo:
    """Return a valid ZoneInfo object, falling back to default timezone."""
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, TypeError, ValueError):
        return ZoneInfo(DEFAULT_TIMEZONE_NAME)


def get_config_tz(config: dict) -> ZoneInfo:
    """Return timezone configured in config, defaulting safely."""
    timezone_name = config.get("TIMEZONE_NAME", DEFAULT_TIMEZONE_NAME)
    return get_timezone(timezone_name)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_timestamp_value(value: Any, tz=timezone.utc, naive_policy: str = "utc") -> pd.Timestamp:
    """
    Normalize a single timestamp-like value to the given timezone.

    Policy for naive timestamps:
    - "utc" (default): interpret naive values as UTC then convert.
    - "config_tz": interpret naive values as the target timezone.
    """
    if value is None:
        return pd.NaT

    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return pd.NaT

    if ts.tzinfo is None:
        if naive_policy == "config_tz":
            ts = ts.tz_localize(tz)
        else:
            ts = ts.tz_localize(timezone.utc)
    return ts.tz_convert(tz)


def format_window_ts(value: Any) -> str:
    """Serialize a timestamp as ISO 8601 UTC with millisecond resolution, e.g. 2019-01-01T00:00:00.000Z."""
    ts = normalize_timestamp_value(value)
    if pd.isna(ts):
        raise ValueError(f"Invalid window timestamp: {value!r}")
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def parse_window_ts(text: str) -> datetime:
    """Parse an ISO 8601 window bound into an aware UTC datetime."""
    ts = normalize_timestamp_value(text)
    if pd.isna(ts):
        raise ValueError(f"Invalid window timestamp: {text!r}")
    return ts.to_pydatetime()


def window_ending_now(duration: timedelta, now_value: datetime = None):
    """Return (start, end) covering the last `duration` up to now."""
    end = now_value or now_utc()
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    end = end.astimezone(timezone.utc)
    return end - duration, end
