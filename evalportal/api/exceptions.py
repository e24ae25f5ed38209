"""Custom exceptions for the evaluation portal client."""

from typing import Optional


class EvalPortalError(Exception):
	"""Base exception for evaluation portal errors."""
	pass


class EvalPortalAPIError(EvalPortalError):
	"""Backend answered with a non-success status."""

	def __init__(self, message: str, status: Optional[int] = None) -> None:
		super().__init__(message)
		self.status = status


class EvalPortalAuthError(EvalPortalAPIError):
	"""Backend rejected the bearer token (HTTP 401)."""
	pass


class EvalPortalConnectionError(EvalPortalError):
	"""Connection to the backend failed."""
	pass


class EvalPortalDataError(EvalPortalError):
	"""Response body could not be decoded or did not match its schema."""
	pass
