"""Tests for recording clock helpers."""
from datetime import datetime

import pytest

from classroom_observations.core.config import Settings, settings
from classroom_observations.utils.clock import (
    format_entry_timestamp,
    format_time_of_day,
    normalize_time_of_day,
    now_local,
)


@pytest.mark.parametrize(
    "hour,minute,expected",
    [(9, 5, "9:05"), (0, 0, "0:00"), (10, 0, "1000"), (13, 5, "1305"), (23, 59, "2359")],
)
def test_format_entry_timestamp(hour, minute, expected):
    assert format_entry_timestamp(datetime(2024, 3, 15, hour, minute)) == expected


def test_format_time_of_day_pads():
    assert format_time_of_day(datetime(2024, 3, 15, 9, 5)) == "09:05"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("9:05", "09:05"),
        ("09:05", "09:05"),
        (" 13:30 ", "13:30"),
        ("9:05:30", "09:05:30"),
        ("25:00", "25:00"),
        ("after lunch", "after lunch"),
    ],
)
def test_normalize_time_of_day(value, expected):
    assert normalize_time_of_day(value) == expected


def test_now_local_is_timezone_aware():
    assert now_local().tzinfo is not None


def test_unknown_timezone_falls_back_to_settings_default(monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "Not/A_Zone")
    assert now_local().tzinfo.key == Settings.model_fields["TIMEZONE"].default
