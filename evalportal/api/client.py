"""Main client for the evaluation portal REST API."""

import asyncio
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import aiohttp

from .auth import DEFAULT_BASE_URL, DEFAULT_HEADERS, EvalPortalAuth, MemoryTokenSession, TokenSession
from .exceptions import (
	EvalPortalAPIError,
	EvalPortalAuthError,
	EvalPortalConnectionError,
	EvalPortalDataError,
	EvalPortalError,
)
from .models import (
	Assignment,
	ClassGroup,
	Course,
	StageDayEntry,
	Subject,
	User,
)
from .utils import build_url, sort_newest_first

_LOGGER = logging.getLogger(__name__)

USERS_ENDPOINT = "/api/users"
ME_ENDPOINT = "/api/users/me"
ASSIGNMENTS_ENDPOINT = "/api/assignments"
STAGE_DAYS_ENDPOINT = "/api/stagedays"
COURSES_ENDPOINT = "/api/courses"
CLASSES_ENDPOINT = "/api/classes"

DEFAULT_TIMEOUT = 30.0


class EvalPortalClient:
	"""Client for interacting with the evaluation portal API."""

	def __init__(
		self,
		session: Optional[aiohttp.ClientSession] = None,
		token_session: Optional[TokenSession] = None,
		base_url: str = DEFAULT_BASE_URL,
		timeout: float = DEFAULT_TIMEOUT,
	):
		"""Initialise the client.

		Args:
			session: Optional aiohttp session. If None, one is created on enter.
			token_session: Where the bearer token is read from. Defaults to memory.
			base_url: Backend root URL that request paths are joined to.
			timeout: Total request timeout in seconds for an owned session.
		"""
		self._session = session
		self._own_session = session is None
		self._timeout = timeout
		self.base_url = base_url
		self.token_session = token_session if token_session is not None else MemoryTokenSession()
		self.auth = EvalPortalAuth(self, self.token_session)

	async def __aenter__(self):
		"""Async context manager entry."""
		if self._own_session and self._session is None:
			self._session = aiohttp.ClientSession(
				timeout=aiohttp.ClientTimeout(total=self._timeout)
			)
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		"""Async context manager exit."""
		await self.close()

	async def close(self) -> None:
		"""Close the underlying session if this client created it."""
		if self._own_session and self._session is not None:
			await self._session.close()
			self._session = None

	async def request(
		self,
		path: str,
		method: str = "GET",
		body: Any = None,
		headers: Optional[Dict[str, str]] = None,
		params: Optional[Dict[str, str]] = None,
		expect_json: bool = True,
	) -> Any:
		"""Send one authenticated request and return the decoded JSON body.

		Args:
			path: API path joined to the base URL, or a full http(s) URL
			method: HTTP method
			body: Value serialised to JSON as the request body; None sends
				no body at all
			headers: Header overrides, applied last
			params: Query string parameters
			expect_json: When False the response body is not decoded

		Returns:
			The parsed JSON body, or None for 204 responses and when
			``expect_json`` is False

		Raises:
			EvalPortalAuthError: Backend answered 401
			EvalPortalAPIError: Backend answered any other non-2xx status
			EvalPortalConnectionError: Transport failure
			EvalPortalDataError: Body was not valid text or not valid JSON
		"""
		if self._session is None:
			raise EvalPortalError("Client not properly initialised")

		url = build_url(self.base_url, path)
		request_headers = DEFAULT_HEADERS.copy()
		token = self.token_session.get()
		if token:
			request_headers["Authorization"] = f"Bearer {token}"
		if headers:
			request_headers.update(headers)

		data = json.dumps(body) if body is not None else None

		_LOGGER.debug(f"{method} {url}")
		try:
			async with self._session.request(
				method,
				url,
				headers=request_headers,
				data=data,
				params=params,
			) as resp:
				status = resp.status
				text = await resp.text()
				if not 200 <= status < 300:
					message = text or resp.reason or f"HTTP {status}"
					_LOGGER.warning(f"{method} {url} failed: HTTP {status}")
					if status == 401:
						raise EvalPortalAuthError(message, status=status)
					raise EvalPortalAPIError(message, status=status)
		except aiohttp.ClientError as e:
			raise EvalPortalConnectionError(f"Connection error: {e}") from e
		except asyncio.TimeoutError as e:
			raise EvalPortalConnectionError(f"Request to {url} timed out") from e
		except UnicodeDecodeError as e:
			raise EvalPortalDataError(f"Response from {url} is not valid text: {e}") from e

		if not expect_json or status == 204:
			return None

		try:
			return json.loads(text)
		except json.JSONDecodeError as e:
			_LOGGER.error(f"Response from {url} is not JSON: {text[:200]}...")
			raise EvalPortalDataError(f"Invalid JSON response from {path}: {e}") from e

	async def login(self, email: str, password: str) -> str:
		"""Login and keep the issued token in the token session."""
		return await self.auth.login(email, password)

	async def register(
		self,
		first_name: str,
		last_name: str,
		email: str,
		password: str,
		phone: Optional[str] = None,
	) -> str:
		"""Register a new account and keep the issued token."""
		return await self.auth.register(first_name, last_name, email, password, phone)

	async def get_me(self) -> User:
		"""Get the profile of the logged-in user."""
		return User.from_dict(await self.request(ME_ENDPOINT))

	async def get_users(self) -> List[User]:
		"""Get every user account (teacher use)."""
		data = await self.request(USERS_ENDPOINT)
		return [User.from_dict(item) for item in _as_list(data, "user")]

	async def get_assignments(self) -> List[Assignment]:
		"""Get the assignments of the logged-in student."""
		data = await self.request(ASSIGNMENTS_ENDPOINT)
		return [Assignment.from_dict(item) for item in _as_list(data, "assignment")]

	async def get_assignment(self, assignment_id: str) -> Assignment:
		"""Get a single assignment."""
		data = await self.request(f"{ASSIGNMENTS_ENDPOINT}/{assignment_id}")
		return Assignment.from_dict(data)

	async def submit_assignment(
		self,
		assignment_id: str,
		github_url: str = "",
		publication_url: str = "",
	) -> Assignment:
		"""Store the submission URLs of an assignment.

		Returns:
			The updated assignment as stored by the backend
		"""
		data = await self.request(
			f"{ASSIGNMENTS_ENDPOINT}/{assignment_id}",
			method="PUT",
			body={"githubURL": github_url, "publicatieURL": publication_url},
		)
		return Assignment.from_dict(data)

	async def get_stage_days(self) -> List[StageDayEntry]:
		"""Get all diary entries, newest first."""
		data = await self.request(STAGE_DAYS_ENDPOINT)
		entries = [StageDayEntry.from_dict(item) for item in _as_list(data, "stage day")]
		return sort_newest_first(entries)

	async def create_stage_day(
		self,
		day: date,
		description: str,
		image_url: Optional[str] = None,
	) -> StageDayEntry:
		"""Log a new internship day."""
		data = await self.request(
			STAGE_DAYS_ENDPOINT,
			method="POST",
			body=_stage_day_payload(day, description, image_url),
		)
		return StageDayEntry.from_dict(data)

	async def update_stage_day(
		self,
		entry_id: str,
		day: date,
		description: str,
		image_url: Optional[str] = None,
	) -> StageDayEntry:
		"""Replace the contents of an existing diary entry."""
		data = await self.request(
			f"{STAGE_DAYS_ENDPOINT}/{entry_id}",
			method="PUT",
			body=_stage_day_payload(day, description, image_url),
		)
		return StageDayEntry.from_dict(data)

	async def delete_stage_day(self, entry_id: str) -> None:
		"""Delete a diary entry."""
		await self.request(f"{STAGE_DAYS_ENDPOINT}/{entry_id}", method="DELETE", expect_json=False)

	async def get_courses(self) -> List[Course]:
		"""Get the courses of the logged-in teacher."""
		data = await self.request(COURSES_ENDPOINT)
		return [Course.from_dict(item) for item in _as_list(data, "course")]

	async def create_course(self, name: str) -> Course:
		"""Create a course."""
		data = await self.request(COURSES_ENDPOINT, method="POST", body={"name": name})
		return Course.from_dict(data)

	async def add_subject(self, course_id: str, name: str) -> Subject:
		"""Add a subject to a course."""
		data = await self.request(
			f"{COURSES_ENDPOINT}/{course_id}/subjects",
			method="POST",
			body={"name": name},
		)
		return Subject.from_dict(data)

	async def enroll_student(self, course_id: str, student_id: str) -> None:
		"""Enrol a student in a course."""
		await self.request(
			f"{COURSES_ENDPOINT}/{course_id}/students",
			method="PATCH",
			body={"studentId": student_id},
			expect_json=False,
		)

	async def get_class_groups(self, course_id: Optional[str] = None) -> List[ClassGroup]:
		"""Get cohorts, optionally only those of one course."""
		params = {"courseId": course_id} if course_id else None
		data = await self.request(CLASSES_ENDPOINT, params=params)
		return [ClassGroup.from_dict(item) for item in _as_list(data, "class group")]

	async def create_class_group(self, name: str, programme: str, course_id: str) -> ClassGroup:
		"""Create a cohort for a course."""
		data = await self.request(
			CLASSES_ENDPOINT,
			method="POST",
			body={"naam": name, "opleiding": programme, "courseId": course_id},
		)
		return ClassGroup.from_dict(data)


def _as_list(data: Any, what: str) -> List[Any]:
	if not isinstance(data, list):
		raise EvalPortalDataError(f"Unexpected {what} data: expected a list, got {type(data).__name__}")
	return data


def _stage_day_payload(day: date, description: str, image_url: Optional[str]) -> Dict[str, Any]:
	return {
		"datum": day.isoformat(),
		"beschrijving": description,
		"afbeelding": image_url or "",
	}
