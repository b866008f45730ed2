"""Clock-time helpers for recording sessions."""

from __future__ import annotations

import re
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from classroom_observations.core.config import Settings, settings

DEFAULT_TIMEZONE: str = Settings.model_fields["TIMEZONE"].default

_CLOCK_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def now_local() -> datetime:
    """Current time in the configured observation timezone."""
    try:
        tz = ZoneInfo(settings.TIMEZONE or DEFAULT_TIMEZONE)
    except ZoneInfoNotFoundError:
        tz = ZoneInfo(DEFAULT_TIMEZONE)
    return datetime.now(tz)


def format_time_of_day(moment: datetime) -> str:
    """Zero-padded 24h display time, e.g. "09:05"."""
    return f"{moment.hour:02d}:{moment.minute:02d}"


def format_entry_timestamp(moment: datetime) -> str:
    """
    Compact timestamp written on paper observation forms.

    Two-digit hours run together ("1305"); single-digit hours keep the
    colon ("9:05").
    """
    if moment.hour >= 10:
        return f"{moment.hour}{moment.minute:02d}"
    return f"{moment.hour}:{moment.minute:02d}"


def normalize_time_of_day(value: str) -> str:
    """
    Zero-pad clock times so they sort correctly as strings.

    "9:05" -> "09:05". Values that are not clock times are returned stripped
    but otherwise unchanged.
    """
    value = value.strip()
    match = _CLOCK_TIME_RE.match(value)
    if not match:
        return value
    hours, minutes, seconds = match.groups()
    if int(hours) > 23 or int(minutes) > 59:
        return value
    normalized = f"{int(hours):02d}:{minutes}"
    if seconds is not None:
        normalized = f"{normalized}:{seconds}"
    return normalized
