"""Tests for API helper functions."""

from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest

from evalportal.api.utils import (
	build_url,
	format_date,
	parse_date,
	parse_datetime,
	sort_newest_first,
)


@dataclass
class _Entry:
	id: str
	date: date


def test_sort_newest_first_regardless_of_input_order():
	entries = [
		_Entry("a", date(2024, 1, 1)),
		_Entry("b", date(2024, 1, 2)),
		_Entry("c", date(2023, 12, 31)),
	]
	assert [e.id for e in sort_newest_first(entries)] == ["b", "a", "c"]


def test_sort_keeps_order_of_equal_dates():
	entries = [_Entry("a", date(2024, 1, 1)), _Entry("b", date(2024, 1, 1))]
	assert [e.id for e in sort_newest_first(entries)] == ["a", "b"]


def test_parse_datetime_with_z_suffix():
	value = parse_datetime("2024-01-02T10:00:00.000Z")
	assert value == datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


def test_parse_date_accepts_plain_dates():
	assert parse_date("2024-01-02") == date(2024, 1, 2)
	assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)


@pytest.mark.parametrize("value", ["", None, 42, "not a date"])
def test_parse_datetime_rejects_garbage(value):
	with pytest.raises(ValueError):
		parse_datetime(value)


def test_format_date():
	assert format_date(date(2024, 1, 2)) == "02-01-2024"
	assert format_date(None) == ""


def test_build_url():
	assert build_url("http://localhost:5000", "/api/users") == "http://localhost:5000/api/users"
	assert build_url("http://host/backend/", "api/users") == "http://host/backend/api/users"
	assert build_url("http://localhost:5000", "https://other.test/x") == "https://other.test/x"

