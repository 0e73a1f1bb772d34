"""Unit tests for core/utils/dates.py and core/utils/urls.py"""

import datetime

import pytest

from mdsite.core.utils.dates import is_past, parse_date
from mdsite.core.utils.urls import make_absolute


UTC = datetime.timezone.utc
NOW = datetime.datetime(2024, 6, 1, tzinfo=UTC)


@pytest.mark.parametrize("value,expected", [
    (datetime.date(2024, 1, 10), datetime.datetime(2024, 1, 10, tzinfo=UTC)),
    (datetime.datetime(2024, 1, 10, 8, 30), datetime.datetime(2024, 1, 10, 8, 30, tzinfo=UTC)),
    ("2024-01-10", datetime.datetime(2024, 1, 10, tzinfo=UTC)),
    ("2024-01-10T10:00:00Z", datetime.datetime(2024, 1, 10, 10, tzinfo=UTC)),
    ("2024-01-10T12:00:00+02:00", datetime.datetime(2024, 1, 10, 10, tzinfo=UTC)),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "not a date", 20240110, ["2024-01-10"]])
def test_parse_date_rejects(value):
    assert parse_date(value) is None


def test_is_past():
    assert is_past("2024-05-31", NOW)
    assert is_past("2024-06-01T00:00:00Z", NOW)
    assert not is_past("2024-06-02", NOW)
    assert not is_past(None, NOW)
    assert not is_past("garbage", NOW)


@pytest.mark.parametrize("uri,expected", [
    ("/img/a.png", "https://example.com/img/a.png"),
    ("img/a.png", "https://example.com/img/a.png"),
    ("https://cdn.example.org/a.png", "https://cdn.example.org/a.png"),
    ("http://cdn.example.org/a.png", "http://cdn.example.org/a.png"),
    ("", "https://example.com/"),
])
def test_make_absolute(uri, expected):
    assert make_absolute(uri, "https://example.com/") == expected
