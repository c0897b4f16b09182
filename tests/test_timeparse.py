import pytest

from autopoweroff.utils.timeparse import parse_duration


@pytest.mark.parametrize("value, seconds", [
    ("60", 60),
    ("15s", 15),
    ("2m", 120),
    ("1h", 3600),
    ("0.5s", 0.5),
])
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "abc", "10d", "-5s", None])
def test_parse_duration_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)
