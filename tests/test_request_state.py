"""Tests for the shared request state helper."""

import asyncio

import pytest

from evalportal.api.exceptions import EvalPortalAuthError, EvalPortalConnectionError
from evalportal.request_state import (
	REQUEST_STATUS_ERROR,
	REQUEST_STATUS_LOADING,
	REQUEST_STATUS_SUCCESS,
	RequestState,
	async_track_request,
)


def test_default_state_is_idle():
	state = RequestState.idle()
	assert state.is_idle
	assert state.data is None


def test_success_publishes_loading_then_data():
	published = []

	async def fetch():
		return [1, 2, 3]

	state = asyncio.run(async_track_request(fetch, published.append))

	assert [s.status for s in published] == [REQUEST_STATUS_LOADING, REQUEST_STATUS_SUCCESS]
	assert state.is_success
	assert state.data == [1, 2, 3]


def test_error_keeps_message_and_status():
	published = []

	async def fetch():
		raise EvalPortalAuthError("Unauthorized", status=401)

	state = asyncio.run(async_track_request(fetch, published.append))

	assert published[-1].status == REQUEST_STATUS_ERROR
	assert state.error == "Unauthorized"
	assert state.status_code == 401


def test_connection_error_has_no_status():
	async def fetch():
		raise EvalPortalConnectionError("Connection error: refused")

	state = asyncio.run(async_track_request(fetch, lambda s: None))

	assert state.is_error
	assert state.status_code is None


def test_nothing_published_after_screen_is_gone():
	published = []
	alive = {"value": True}

	async def fetch():
		alive["value"] = False
		return "late"

	state = asyncio.run(async_track_request(fetch, published.append, lambda: alive["value"]))

	assert [s.status for s in published] == [REQUEST_STATUS_LOADING]
	assert state.is_success


def test_unexpected_exceptions_propagate():
	async def fetch():
		raise KeyError("bug")

	with pytest.raises(KeyError):
		asyncio.run(async_track_request(fetch, lambda s: None))
