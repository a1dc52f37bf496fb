from datetime import datetime, timedelta, timezone

import pytest

from worktime.utils.timekeeping import (
    as_utc,
    elapsed_seconds,
    format_duration,
    format_elapsed,
    minutes_between,
    round_half_up,
)

T0 = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("minutes, expected", [
    (0, "0h 0m"),
    (30, "0h 30m"),
    (60, "1h 0m"),
    (135, "2h 15m"),
    (59.6, "1h 0m"),
    (None, "0h 0m"),
    (-5, "0h 0m"),
    (float("nan"), "0h 0m"),
    ("abc", "0h 0m"),
])
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


def test_round_half_up_rounds_halves_away_from_zero_for_positive_values():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2


def test_minutes_between_rounds_half_up():
    assert minutes_between(T0, T0 + timedelta(seconds=89)) == 1
    assert minutes_between(T0, T0 + timedelta(seconds=90)) == 2
    assert minutes_between(T0, T0 + timedelta(minutes=30)) == 30


def test_minutes_between_is_signed():
    assert minutes_between(T0, T0 - timedelta(minutes=3)) == -3


def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2024, 3, 4, 8, 0)
    assert as_utc(naive) == T0
    assert minutes_between(naive, T0 + timedelta(minutes=10)) == 10


def test_elapsed_seconds_never_negative():
    assert elapsed_seconds(T0, T0 + timedelta(seconds=75)) == 75
    assert elapsed_seconds(T0, T0 - timedelta(seconds=5)) == 0


def test_format_elapsed():
    assert format_elapsed(0) == "00:00:00"
    assert format_elapsed(3725) == "01:02:05"
    assert format_elapsed(-10) == "00:00:00"
