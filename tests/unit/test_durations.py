"""
Unit tests — duration vocabulary.
"""
from datetime import timedelta

import pytest

from tsquery.query.durations import resolve_duration


@pytest.mark.parametrize(
    "unit, literal",
    [
        ("hour", "1h"),
        ("minute", "1m"),
        ("second", "1s"),
        ("millisecond", "1u"),
        ("ms", "1u"),
        ("day", "1d"),
        ("week", "1w"),
        ("month", "30d"),
        ("HOUR", "1h"),
    ],
)
def test_named_units(unit, literal):
    assert resolve_duration(unit) == literal


def test_unit_letter_gets_one():
    assert resolve_duration("s") == "1s"
    assert resolve_duration("h") == "1h"


def test_raw_literal_passthrough():
    assert resolve_duration("4d") == "4d"
    assert resolve_duration("90m") == "90m"


def test_numbers_are_seconds():
    assert resolve_duration(86400) == "86400s"
    assert resolve_duration(2.9) == "2s"
    assert resolve_duration(timedelta(minutes=5)) == "300s"


@pytest.mark.parametrize("bad", [None, True, ["1h"]])
def test_unsupported_input(bad):
    with pytest.raises(TypeError):
        resolve_duration(bad)
