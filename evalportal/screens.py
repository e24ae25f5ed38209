"""Screen controllers for the evaluation portal.

A screen owns the view state of one page: a ``RequestState`` per backend
call, the form errors of its last submission and derived views such as the
upcoming/completed split of assignments. Screens never render anything;
a front end reads their attributes after awaiting ``async_load`` or one of
the ``async_*`` actions.

Any call answered with 401 clears the stored token and navigates to the
login screen.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .api.client import EvalPortalClient
from .api.exceptions import EvalPortalAPIError, EvalPortalAuthError, EvalPortalError
from .api.models import Assignment, ClassGroup, Course, StageDayEntry, User
from .api.utils import sort_newest_first
from .const import (
	ERROR_BASE,
	HOME_PATH,
	LOGIN_PATH,
	MSG_ALREADY_GRADED,
	MSG_ASSIGNMENT_NOT_FOUND,
	MSG_NO_ASSIGNMENT_SELECTED,
	MSG_NO_COURSE_SELECTED,
	MSG_UNKNOWN_STUDENT,
	TEACHERS_PATH,
)
from .forms import (
	COHORT_SCHEMA,
	COURSE_SCHEMA,
	DIARY_ENTRY_SCHEMA,
	LOGIN_SCHEMA,
	REGISTER_SCHEMA,
	SUBJECT_SCHEMA,
	SUBMISSION_SCHEMA,
	FormErrors,
	validate_form,
)
from .request_state import RequestState, async_track_request

_LOGGER = logging.getLogger(__name__)

Navigate = Callable[[str], None]


class Screen:
	"""Base class handling navigation, liveness and 401 redirects."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		self.client = client
		self.session = client.token_session
		self.errors: FormErrors = {}
		self._navigate = navigate
		self._alive = True
		self._redirected = False
		self._task: Optional[asyncio.Task] = None

	@property
	def alive(self) -> bool:
		return self._alive

	async def async_load(self) -> None:
		"""Fetch everything the screen shows when it is opened."""

	def start(self) -> "asyncio.Task[None]":
		"""Run ``async_load`` as a task that ``close`` can cancel."""
		self._task = asyncio.ensure_future(self.async_load())
		return self._task

	def close(self) -> None:
		"""Mark the screen as gone; late responses are dropped."""
		self._alive = False
		if self._task is not None and not self._task.done():
			self._task.cancel()

	def navigate(self, path: str) -> None:
		if self._alive:
			_LOGGER.debug(f"{type(self).__name__} navigating to {path}")
			self._navigate(path)

	def _publish(self, attr: str, state: RequestState) -> None:
		if self._alive:
			setattr(self, attr, state)

	def _require_token(self) -> bool:
		if self.session.authenticated:
			return True
		_LOGGER.debug("No token stored, redirecting to login")
		self.navigate(LOGIN_PATH)
		return False

	def _handle_unauthorised(self) -> None:
		self.session.clear()
		if not self._redirected:
			self._redirected = True
			_LOGGER.info("Session rejected by backend, token cleared")
			self.navigate(LOGIN_PATH)

	async def _async_fetch(self, attr: str, fetch: Callable[[], Awaitable[Any]]) -> RequestState:
		async def guarded() -> Any:
			try:
				return await fetch()
			except EvalPortalAuthError:
				self._handle_unauthorised()
				raise

		return await async_track_request(
			guarded,
			lambda state: self._publish(attr, state),
			lambda: self._alive,
		)

	async def _async_submit(self, call: Callable[[], Awaitable[Any]]) -> Tuple[bool, Any]:
		"""Run a user action; failures end up in ``errors["base"]``."""
		self.errors = {}
		try:
			result = await call()
		except EvalPortalAuthError as err:
			self._handle_unauthorised()
			self.errors = {ERROR_BASE: str(err)}
		except EvalPortalError as err:
			_LOGGER.warning(f"{type(self).__name__} action failed: {err}")
			self.errors = {ERROR_BASE: str(err)}
		else:
			return True, result
		return False, None


class LoginScreen(Screen):
	"""Email/password login."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		super().__init__(client, navigate)
		self.loading = False

	async def async_submit(self, user_input: Dict[str, Any]) -> FormErrors:
		data, errors = validate_form(LOGIN_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		self.loading = True
		try:
			await self.client.login(data["email"], data["password"])
		except EvalPortalError as err:
			self.errors = {ERROR_BASE: str(err)}
		else:
			self.errors = {}
			self.navigate(HOME_PATH)
		finally:
			self.loading = False
		return self.errors


class RegisterScreen(Screen):
	"""Account registration."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		super().__init__(client, navigate)
		self.loading = False

	async def async_submit(self, user_input: Dict[str, Any]) -> FormErrors:
		data, errors = validate_form(REGISTER_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		self.loading = True
		try:
			await self.client.register(
				data["voornaam"],
				data["achternaam"],
				data["email"],
				data["password"],
				phone=data.get("telefoonnummer") or None,
			)
		except EvalPortalError as err:
			self.errors = {ERROR_BASE: str(err)}
		else:
			self.errors = {}
			self.navigate(HOME_PATH)
		finally:
			self.loading = False
		return self.errors


class StudentDashboard(Screen):
	"""Assignments of the logged-in student, split into upcoming and completed.

	Teachers are sent on to the teacher dashboard.
	"""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		super().__init__(client, navigate)
		self.user_state: RequestState[User] = RequestState.idle()
		self.assignments_state: RequestState[List[Assignment]] = RequestState.idle()

	async def async_load(self) -> None:
		if not self._require_token():
			return

		user_state = await self._async_fetch("user_state", self.client.get_me)
		if not user_state.is_success or not self._alive:
			return

		if user_state.data.is_teacher:
			self.navigate(TEACHERS_PATH)
			return

		await self._async_fetch("assignments_state", self.client.get_assignments)

	@property
	def user(self) -> Optional[User]:
		return self.user_state.data

	@property
	def assignments(self) -> List[Assignment]:
		return self.assignments_state.data or []

	@property
	def upcoming(self) -> List[Assignment]:
		return [a for a in self.assignments if not a.is_completed]

	@property
	def completed(self) -> List[Assignment]:
		return [a for a in self.assignments if a.is_completed]


class AssignmentDetailScreen(Screen):
	"""One assignment, with its result or a submission form."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate, assignment_id: Optional[str]) -> None:
		super().__init__(client, navigate)
		self.assignment_id = assignment_id
		self.assignment_state: RequestState[Assignment] = RequestState.idle()
		self.github_url = ""
		self.publication_url = ""
		self.submitting = False

	async def async_load(self) -> None:
		if not self.assignment_id:
			self._publish("assignment_state", RequestState.failure(MSG_NO_ASSIGNMENT_SELECTED))
			return
		if not self._require_token():
			return

		state = await self._async_fetch("assignment_state", self._fetch_assignment)
		if state.is_success and self._alive:
			self._prefill(state.data)

	async def _fetch_assignment(self) -> Assignment:
		try:
			return await self.client.get_assignment(self.assignment_id)
		except EvalPortalAPIError as err:
			if err.status == 404:
				raise EvalPortalAPIError(MSG_ASSIGNMENT_NOT_FOUND, status=404) from err
			raise

	def _prefill(self, assignment: Assignment) -> None:
		self.github_url = assignment.github_url or ""
		self.publication_url = assignment.publication_url or ""

	@property
	def assignment(self) -> Optional[Assignment]:
		return self.assignment_state.data

	@property
	def can_submit(self) -> bool:
		"""Graded assignments show their result instead of a form."""
		return self.assignment is not None and not self.assignment.is_completed

	async def async_submit(self, user_input: Optional[Dict[str, Any]] = None) -> FormErrors:
		"""Send the submission URLs; defaults to the prefilled values."""
		assignment = self.assignment
		if assignment is None:
			self.errors = {ERROR_BASE: MSG_NO_ASSIGNMENT_SELECTED}
			return self.errors
		if assignment.is_completed:
			self.errors = {ERROR_BASE: MSG_ALREADY_GRADED}
			return self.errors

		if user_input is None:
			user_input = {"githubURL": self.github_url, "publicatieURL": self.publication_url}
		data, errors = validate_form(SUBMISSION_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		self.submitting = True
		try:
			ok, updated = await self._async_submit(
				lambda: self.client.submit_assignment(
					assignment.id,
					data["githubURL"] or "",
					data["publicatieURL"] or "",
				)
			)
		finally:
			self.submitting = False

		if ok and self._alive:
			self.assignment_state = RequestState.success(updated)
			self._prefill(updated)
		return self.errors


class DiaryScreen(Screen):
	"""The internship diary, always ordered newest day first."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		super().__init__(client, navigate)
		self.entries_state: RequestState[List[StageDayEntry]] = RequestState.idle()
		self.editing_id: Optional[str] = None

	async def async_load(self) -> None:
		if not self._require_token():
			return
		await self._async_fetch("entries_state", self.client.get_stage_days)

	@property
	def entries(self) -> List[StageDayEntry]:
		return self.entries_state.data or []

	def _set_entries(self, entries: List[StageDayEntry]) -> None:
		self._publish("entries_state", RequestState.success(sort_newest_first(entries)))

	def start_editing(self, entry_id: str) -> None:
		self.editing_id = entry_id

	def cancel_editing(self) -> None:
		self.editing_id = None

	async def async_add_entry(self, user_input: Dict[str, Any]) -> FormErrors:
		data, errors = validate_form(DIARY_ENTRY_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		ok, created = await self._async_submit(
			lambda: self.client.create_stage_day(data["datum"], data["beschrijving"], data["afbeelding"] or None)
		)
		if ok:
			self._set_entries([created, *self.entries])
		return self.errors

	async def async_update_entry(self, entry_id: str, user_input: Dict[str, Any]) -> FormErrors:
		data, errors = validate_form(DIARY_ENTRY_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		ok, updated = await self._async_submit(
			lambda: self.client.update_stage_day(
				entry_id, data["datum"], data["beschrijving"], data["afbeelding"] or None
			)
		)
		if ok:
			self._set_entries([updated if e.id == entry_id else e for e in self.entries])
			self.editing_id = None
		return self.errors

	async def async_delete_entry(self, entry_id: str) -> FormErrors:
		ok, _ = await self._async_submit(lambda: self.client.delete_stage_day(entry_id))
		if ok:
			self._set_entries([e for e in self.entries if e.id != entry_id])
			if self.editing_id == entry_id:
				self.editing_id = None
		return self.errors


class TeacherDashboard(Screen):
	"""Courses, subjects, cohorts and enrolment for teachers."""

	def __init__(self, client: EvalPortalClient, navigate: Navigate) -> None:
		super().__init__(client, navigate)
		self.courses_state: RequestState[List[Course]] = RequestState.idle()
		self.users_state: RequestState[List[User]] = RequestState.idle()
		self.cohorts_state: RequestState[List[ClassGroup]] = RequestState.idle()
		self.selected_course_id: Optional[str] = None

	async def async_load(self) -> None:
		if not self._require_token():
			return

		await asyncio.gather(
			self._async_fetch("courses_state", self.client.get_courses),
			self._async_fetch("users_state", self.client.get_users),
		)
		if not self._alive or not self.courses_state.is_success:
			return

		if self.selected_course is None and self.courses:
			await self.async_select_course(self.courses[0].id)

	@property
	def courses(self) -> List[Course]:
		return self.courses_state.data or []

	@property
	def students(self) -> List[User]:
		"""Every user without the teacher flag, for the enrolment picker."""
		return [u for u in (self.users_state.data or []) if not u.is_teacher]

	@property
	def selected_course(self) -> Optional[Course]:
		for course in self.courses:
			if course.id == self.selected_course_id:
				return course
		return None

	@property
	def cohorts(self) -> List[ClassGroup]:
		return self.cohorts_state.data or []

	async def async_select_course(self, course_id: Optional[str]) -> None:
		self.selected_course_id = course_id
		if not course_id:
			self._publish("cohorts_state", RequestState.success([]))
			return
		await self._async_fetch("cohorts_state", lambda: self.client.get_class_groups(course_id))

	async def async_create_course(self, user_input: Dict[str, Any]) -> FormErrors:
		data, errors = validate_form(COURSE_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		ok, course = await self._async_submit(lambda: self.client.create_course(data["name"]))
		if ok and self._alive:
			self.courses_state = RequestState.success([*self.courses, course])
			self.selected_course_id = course.id
			self.cohorts_state = RequestState.success([])
		return self.errors

	async def async_create_subject(self, user_input: Dict[str, Any]) -> FormErrors:
		course = self.selected_course
		if course is None:
			self.errors = {ERROR_BASE: MSG_NO_COURSE_SELECTED}
			return self.errors

		data, errors = validate_form(SUBJECT_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		ok, subject = await self._async_submit(lambda: self.client.add_subject(course.id, data["name"]))
		if ok:
			course.subjects.append(subject)
		return self.errors

	async def async_create_cohort(self, user_input: Dict[str, Any]) -> FormErrors:
		course = self.selected_course
		if course is None:
			self.errors = {ERROR_BASE: MSG_NO_COURSE_SELECTED}
			return self.errors

		data, errors = validate_form(COHORT_SCHEMA, user_input)
		if errors:
			self.errors = errors
			return errors

		ok, cohort = await self._async_submit(
			lambda: self.client.create_class_group(data["naam"], data["opleiding"], course.id)
		)
		if ok and self._alive:
			self.cohorts_state = RequestState.success([*self.cohorts, cohort])
		return self.errors

	async def async_enroll_student(self, student_id: str) -> FormErrors:
		"""Enrol a student in the selected course; enrolling twice is a no-op."""
		course = self.selected_course
		if course is None:
			self.errors = {ERROR_BASE: MSG_NO_COURSE_SELECTED}
			return self.errors

		self.errors = {}
		if course.has_student(student_id):
			return self.errors

		student = next((u for u in self.students if u.id == student_id), None)
		if student is None:
			self.errors = {ERROR_BASE: MSG_UNKNOWN_STUDENT.format(student_id=student_id)}
			return self.errors

		ok, _ = await self._async_submit(lambda: self.client.enroll_student(course.id, student_id))
		if ok:
			course.students.append(student)
		return self.errors
