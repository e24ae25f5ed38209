"""Helper functions shared by the API client and the screens."""

from datetime import date, datetime
from typing import Any, Iterable, List, Optional, TypeVar
from urllib.parse import urljoin

T = TypeVar("T")


def parse_datetime(value: Any) -> datetime:
	"""Parse an ISO 8601 timestamp as sent by the backend.

	Accepts a trailing ``Z`` (JavaScript ``Date.toJSON`` output) and plain
	``YYYY-MM-DD`` dates.
	"""
	if isinstance(value, datetime):
		return value
	if isinstance(value, date):
		return datetime(value.year, value.month, value.day)
	if not isinstance(value, str) or not value.strip():
		raise ValueError(f"Not a timestamp: {value!r}")

	text = value.strip()
	if text.endswith("Z"):
		text = text[:-1] + "+00:00"
	return datetime.fromisoformat(text)


def parse_date(value: Any) -> date:
	"""Parse a calendar date, dropping any time component."""
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	return parse_datetime(value).date()


def format_date(value: Optional[date]) -> str:
	"""Format a date for display, empty string for no date."""
	if value is None:
		return ""
	if isinstance(value, datetime):
		value = value.date()
	return value.strftime("%d-%m-%Y")


def sort_newest_first(items: Iterable[T], key: str = "date") -> List[T]:
	"""Return items ordered by the given date attribute, newest first.

	Items with equal dates keep their relative order.
	"""
	return sorted(items, key=lambda item: getattr(item, key), reverse=True)


def build_url(base_url: str, path: str) -> str:
	"""Join an API path to the base URL; absolute URLs pass through."""
	if path.startswith("http://") or path.startswith("https://"):
		return path
	return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))

