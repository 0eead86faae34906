from __future__ import annotations

import pytest

from scheduling.timeutils import calculate_duration, canonical_day_code, format_days, parse_days, parse_time, time_to_decimal


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("09:00", 9.0),
        ("9:30", 9.5),
        ("13:45", 13.75),
        ("12:00 PM", 12.0),
        ("12:00 AM", 0.0),
        ("1:30 PM", 13.5),
        ("11:15am", 11.25),
        ("  8:00 pm ", 20.0),
    ],
)
def test_time_to_decimal(value, expected):
    assert time_to_decimal(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", "noon", "9", "9:7", "25:00", "13:00 PM", "0:30 AM", "9:60"])
def test_malformed_times_fall_back_to_zero(value):
    assert parse_time(value) is None
    assert time_to_decimal(value) == 0.0


def test_calculate_duration_rounds_to_two_places():
    assert calculate_duration("09:00", "09:50") == 0.83
    assert calculate_duration("2:00 PM", "3:15 PM") == 1.25


def test_calculate_duration_defaults_when_unparseable():
    assert calculate_duration("", "10:00") == 1.0
    assert calculate_duration("09:00", "later") == 1.0


def test_parse_days_greedy_two_letter_codes():
    assert parse_days("MWF") == {"Monday", "Wednesday", "Friday"}
    assert parse_days("TuTh") == {"Tuesday", "Thursday"}
    assert parse_days("tuth") == {"Tuesday", "Thursday"}
    assert parse_days("MTuWThF") == {"Monday", "Tuesday", "Wednesday", "Thursday", "Friday"}
    assert parse_days("SaSu") == {"Saturday", "Sunday"}
    assert parse_days("U") == {"Sunday"}


def test_parse_days_skips_unknown_letters():
    assert parse_days("MXW") == {"Monday", "Wednesday"}
    assert parse_days("") == frozenset()
    assert parse_days(None) == frozenset()


def test_format_days_uses_week_order():
    assert format_days({"Thursday", "Tuesday"}) == "TuTh"
    assert canonical_day_code("fwm") == "MWF"
    assert canonical_day_code("ThTu") == "TuTh"


def test_format_days_accepts_any_iterable():
    assert format_days(["Friday", "Monday", "Friday"]) == "MF"
    assert format_days(d for d in ("Sunday", "Saturday")) == "SaSu"
    assert format_days(parse_days("WM")) == "MW"
