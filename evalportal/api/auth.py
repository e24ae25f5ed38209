"""Authentication handling for the evaluation portal.

The bearer token lives in a ``TokenSession``. The client only reads it;
``EvalPortalAuth`` is the one place that writes it (login, register) and
removes it (logout). Screens clear it when the backend answers 401.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .models import TOKEN_SCHEMA, validate_payload

if TYPE_CHECKING:
	from .client import EvalPortalClient

_LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"

DEFAULT_HEADERS = {
	"Content-Type": "application/json",
}

LOGIN_ENDPOINT = "/api/users/login"
REGISTER_ENDPOINT = "/api/users/register"


class TokenSession:
	"""Interface for the single client-side token slot."""

	def get(self) -> Optional[str]:
		raise NotImplementedError

	def set(self, token: str) -> None:
		raise NotImplementedError

	def clear(self) -> None:
		raise NotImplementedError

	@property
	def authenticated(self) -> bool:
		"""A stored token is the only sign of being logged in."""
		return bool(self.get())


class MemoryTokenSession(TokenSession):
	"""Keeps the token in memory for the lifetime of the process."""

	def __init__(self, token: Optional[str] = None) -> None:
		self._token = token or None

	def get(self) -> Optional[str]:
		return self._token

	def set(self, token: str) -> None:
		self._token = token

	def clear(self) -> None:
		self._token = None


class EvalPortalAuth:
	"""Login, registration and logout against the users endpoints."""

	def __init__(self, client: "EvalPortalClient", session: TokenSession) -> None:
		self._client = client
		self.session = session

	@property
	def authenticated(self) -> bool:
		return self.session.authenticated

	async def login(self, email: str, password: str) -> str:
		"""Authenticate and store the returned token.

		Args:
			email: Account email address
			password: Account password

		Returns:
			The bearer token issued by the backend
		"""
		_LOGGER.debug(f"Logging in as {email}")
		data = await self._client.request(
			LOGIN_ENDPOINT,
			method="POST",
			body={"email": email, "password": password},
		)
		return self._store_token(data)

	async def register(
		self,
		first_name: str,
		last_name: str,
		email: str,
		password: str,
		phone: Optional[str] = None,
	) -> str:
		"""Create an account and store the returned token."""
		payload: Dict[str, Any] = {
			"voornaam": first_name,
			"achternaam": last_name,
			"email": email,
			"password": password,
		}
		if phone:
			payload["telefoonnummer"] = phone

		_LOGGER.debug(f"Registering account for {email}")
		data = await self._client.request(REGISTER_ENDPOINT, method="POST", body=payload)
		return self._store_token(data)

	def logout(self) -> None:
		"""Forget the stored token."""
		self.session.clear()
		_LOGGER.info("Logged out")

	def _store_token(self, data: Any) -> str:
		token = validate_payload(TOKEN_SCHEMA, data, "token")["token"]
		self.session.set(token)
		_LOGGER.info("Authentication successful, token stored")
		return token
