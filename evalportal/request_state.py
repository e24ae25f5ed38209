"""Request state shared by every screen."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from .api.exceptions import EvalPortalAPIError, EvalPortalError

_LOGGER = logging.getLogger(__name__)

REQUEST_STATUS_IDLE = "idle"
REQUEST_STATUS_LOADING = "loading"
REQUEST_STATUS_SUCCESS = "success"
REQUEST_STATUS_ERROR = "error"

T = TypeVar("T")


@dataclass(frozen=True)
class RequestState(Generic[T]):
	"""Where a single request stands: idle, loading, success(data) or error(reason)."""
	status: str = REQUEST_STATUS_IDLE
	data: Optional[T] = None
	error: Optional[str] = None
	status_code: Optional[int] = None

	@classmethod
	def idle(cls) -> "RequestState[Any]":
		return cls()

	@classmethod
	def loading(cls) -> "RequestState[Any]":
		return cls(status=REQUEST_STATUS_LOADING)

	@classmethod
	def success(cls, data: T) -> "RequestState[T]":
		return cls(status=REQUEST_STATUS_SUCCESS, data=data)

	@classmethod
	def failure(cls, reason: str, status_code: Optional[int] = None) -> "RequestState[Any]":
		return cls(status=REQUEST_STATUS_ERROR, error=reason, status_code=status_code)

	@property
	def is_idle(self) -> bool:
		return self.status == REQUEST_STATUS_IDLE

	@property
	def is_loading(self) -> bool:
		return self.status == REQUEST_STATUS_LOADING

	@property
	def is_success(self) -> bool:
		return self.status == REQUEST_STATUS_SUCCESS

	@property
	def is_error(self) -> bool:
		return self.status == REQUEST_STATUS_ERROR

	def __str__(self) -> str:
		if self.is_error:
			return f"error: {self.error}"
		return self.status


async def async_track_request(
	fetch: Callable[[], Awaitable[T]],
	publish: Callable[[RequestState], None],
	is_alive: Callable[[], bool] = lambda: True,
) -> RequestState:
	"""Run one request and publish its state transitions.

	Publishes ``loading`` first, then ``success`` or ``error``. Nothing is
	published once ``is_alive`` returns False, so a closed screen is never
	updated by a late response. Cancellation is not caught.
	"""
	if is_alive():
		publish(RequestState.loading())

	try:
		data = await fetch()
	except EvalPortalError as err:
		status_code = err.status if isinstance(err, EvalPortalAPIError) else None
		state = RequestState.failure(str(err), status_code)
	else:
		state = RequestState.success(data)

	if is_alive():
		publish(state)
	else:
		_LOGGER.debug(f"Dropping {state} for a closed screen")
	return state
