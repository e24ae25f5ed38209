"""Shared fixtures: a fake aiohttp session that answers from a route table."""

import json
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

import pytest

from evalportal.api.auth import MemoryTokenSession
from evalportal.api.client import EvalPortalClient

BASE_URL = "http://backend.test"


class FakeResponse:
	"""Stands in for aiohttp.ClientResponse inside ``async with``."""

	def __init__(self, status: int = 200, body: Any = "", reason: Optional[str] = None):
		self.status = status
		self.reason = reason if reason is not None else HTTPStatus(status).phrase
		self._body = body if isinstance(body, str) else json.dumps(body)

	async def text(self) -> str:
		return self._body

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc, tb):
		return False


class UndecodableResponse(FakeResponse):
	"""A response whose body is not valid UTF-8, as ``text()`` reports it."""

	async def text(self) -> str:
		return b'["\xff\xfe"]'.decode("utf-8")


class FakeCall:
	def __init__(self, method: str, url: str, kwargs: Dict[str, Any]):
		self.method = method
		self.url = url
		self.path = urlsplit(url).path
		self.headers = kwargs.get("headers") or {}
		self.data = kwargs.get("data")
		self.params = kwargs.get("params")

	@property
	def json(self) -> Any:
		return json.loads(self.data) if self.data is not None else None


class FakeSession:
	"""Records requests and answers them from ``routes``.

	A route value may be a FakeResponse, a list of them (served in order)
	or an exception to raise.
	"""

	def __init__(self) -> None:
		self.routes: Dict[Tuple[str, str], Any] = {}
		self.calls: List[FakeCall] = []
		self.closed = False

	def add(self, method: str, path: str, response: Any) -> None:
		self.routes[(method, path)] = response

	def request(self, method: str, url: str, **kwargs):
		call = FakeCall(method, url, kwargs)
		self.calls.append(call)
		response = self.routes.get((method, call.path), FakeResponse(404, "Not Found"))
		if isinstance(response, list):
			response = response.pop(0)
		if isinstance(response, Exception):
			raise response
		return response

	async def close(self) -> None:
		self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
	return FakeSession()


@pytest.fixture
def token_session() -> MemoryTokenSession:
	return MemoryTokenSession()


@pytest.fixture
def client(fake_session, token_session) -> EvalPortalClient:
	return EvalPortalClient(session=fake_session, token_session=token_session, base_url=BASE_URL)


@pytest.fixture
def navigator() -> List[str]:
	"""A navigate callable that records target paths."""

	class _Navigator(list):
		def __call__(self, path: str) -> None:
			self.append(path)

	return _Navigator()
