"""Data models for evaluation portal entities.

Every model is built from backend JSON through a voluptuous schema, so a
payload that does not have the expected shape fails at the client boundary
with ``EvalPortalDataError`` instead of surfacing later as an attribute error.
The backend uses Dutch field names; the models expose English ones.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import voluptuous as vol

from .exceptions import EvalPortalDataError
from .utils import format_date, parse_date, parse_datetime

ASSIGNMENT_STATUS_UPCOMING = "upcoming"
ASSIGNMENT_STATUS_COMPLETED = "completed"


def _with_id(value: Any) -> Dict[str, Any]:
	"""Accept both ``_id`` and ``id`` as the identifier key."""
	if not isinstance(value, dict):
		raise vol.Invalid(f"expected an object, got {type(value).__name__}")
	if "_id" not in value and "id" in value:
		value = dict(value)
		value["_id"] = value["id"]
	return value


def _entity(fields: Dict[Any, Any]) -> vol.All:
	schema = {vol.Required("_id"): vol.Coerce(str)}
	schema.update(fields)
	return vol.All(_with_id, vol.Schema(schema, extra=vol.ALLOW_EXTRA))


_NUMBER = vol.Any(int, float)
_OPTIONAL_TEXT = vol.Any(None, str)

USER_SCHEMA = _entity({
	vol.Required("voornaam"): str,
	vol.Required("achternaam"): str,
	vol.Required("email"): str,
	vol.Optional("isDocent", default=False): bool,
	vol.Optional("classGroupId", default=None): vol.Any(None, vol.Coerce(str)),
	vol.Optional("telefoonnummer", default=None): _OPTIONAL_TEXT,
})

ASSIGNMENT_SCHEMA = _entity({
	vol.Required("naam"): str,
	vol.Optional("course", default=None): _OPTIONAL_TEXT,
	vol.Optional("beschrijving", default=""): _OPTIONAL_TEXT,
	vol.Optional("resultaat", default=None): vol.Any(None, _NUMBER),
	vol.Optional("feedback", default=""): _OPTIONAL_TEXT,
	vol.Optional("githubURL", default=None): _OPTIONAL_TEXT,
	vol.Optional("publicatieURL", default=None): _OPTIONAL_TEXT,
	vol.Optional("deadline", default=None): vol.Any(None, parse_datetime),
	vol.Optional("weging", default=None): vol.Any(None, _NUMBER),
})

STAGE_DAY_SCHEMA = _entity({
	vol.Required("datum"): parse_date,
	vol.Optional("beschrijving", default=""): _OPTIONAL_TEXT,
	vol.Optional("afbeelding", default=None): _OPTIONAL_TEXT,
})

SUBJECT_SCHEMA = _entity({
	vol.Required("name"): str,
})

CLASS_GROUP_SCHEMA = _entity({
	vol.Required("naam"): str,
	vol.Optional("opleiding", default=""): _OPTIONAL_TEXT,
	vol.Optional("courseId", default=None): vol.Any(None, vol.Coerce(str)),
})

COURSE_SCHEMA = _entity({
	vol.Required("name"): str,
	vol.Optional("subjects", default=list): [SUBJECT_SCHEMA],
	vol.Optional("students", default=list): [USER_SCHEMA],
})

TOKEN_SCHEMA = vol.Schema(
	{vol.Required("token"): vol.All(str, vol.Length(min=1))},
	extra=vol.ALLOW_EXTRA,
)


def validate_payload(schema: Any, data: Any, what: str) -> Any:
	"""Run a response schema, translating failures into EvalPortalDataError."""
	try:
		return schema(data)
	except vol.Invalid as err:
		raise EvalPortalDataError(f"Unexpected {what} data: {err}") from err


@dataclass
class User:
	"""A student or teacher account."""
	id: str
	first_name: str
	last_name: str
	email: str
	is_teacher: bool = False
	class_group_id: Optional[str] = None
	phone: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Any) -> "User":
		data = validate_payload(USER_SCHEMA, data, "user")
		return cls(
			id=data["_id"],
			first_name=data["voornaam"],
			last_name=data["achternaam"],
			email=data["email"],
			is_teacher=data["isDocent"],
			class_group_id=data["classGroupId"],
			phone=data["telefoonnummer"],
		)

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()

	def __str__(self) -> str:
		return f"{self.full_name} ({self.email})"


@dataclass
class Assignment:
	"""A gradable unit of coursework."""
	id: str
	name: str
	description: str = ""
	course: Optional[str] = None
	result: Optional[float] = None  # percentage, None until graded
	feedback: str = ""
	github_url: Optional[str] = None
	publication_url: Optional[str] = None
	deadline: Optional[datetime] = None
	weight: Optional[float] = None

	@classmethod
	def from_dict(cls, data: Any) -> "Assignment":
		data = validate_payload(ASSIGNMENT_SCHEMA, data, "assignment")
		return cls(
			id=data["_id"],
			name=data["naam"],
			description=data["beschrijving"] or "",
			course=data["course"],
			result=data["resultaat"],
			feedback=data["feedback"] or "",
			github_url=data["githubURL"],
			publication_url=data["publicatieURL"],
			deadline=data["deadline"],
			weight=data["weging"],
		)

	@property
	def is_completed(self) -> bool:
		"""An assignment counts as completed once it has a result."""
		return self.result is not None

	@property
	def status(self) -> str:
		if self.is_completed:
			return ASSIGNMENT_STATUS_COMPLETED
		return ASSIGNMENT_STATUS_UPCOMING

	@property
	def result_display(self) -> str:
		if self.result is None:
			return "Pending"
		return f"{self.result:g}%"

	def __str__(self) -> str:
		deadline = f" - {format_date(self.deadline)}" if self.deadline else ""
		return f"{self.name} [{self.status}]{deadline}"


@dataclass
class StageDayEntry:
	"""One logged internship day."""
	id: str
	date: date
	description: str = ""
	image_url: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Any) -> "StageDayEntry":
		data = validate_payload(STAGE_DAY_SCHEMA, data, "stage day")
		return cls(
			id=data["_id"],
			date=data["datum"],
			description=data["beschrijving"] or "",
			image_url=data["afbeelding"] or None,
		)

	def __str__(self) -> str:
		return f"{format_date(self.date)}: {self.description}"


@dataclass
class Subject:
	"""A subject taught within a course."""
	id: str
	name: str

	@classmethod
	def from_dict(cls, data: Any) -> "Subject":
		data = validate_payload(SUBJECT_SCHEMA, data, "subject")
		return cls(id=data["_id"], name=data["name"])


@dataclass
class ClassGroup:
	"""A cohort of students tied to a course and programme of study."""
	id: str
	name: str
	programme: str = ""
	course_id: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Any) -> "ClassGroup":
		data = validate_payload(CLASS_GROUP_SCHEMA, data, "class group")
		return cls(
			id=data["_id"],
			name=data["naam"],
			programme=data["opleiding"] or "",
			course_id=data["courseId"],
		)


@dataclass
class Course:
	"""A course with its subjects and enrolled students."""
	id: str
	name: str
	subjects: List[Subject] = field(default_factory=list)
	students: List[User] = field(default_factory=list)

	@classmethod
	def from_dict(cls, data: Any) -> "Course":
		data = validate_payload(COURSE_SCHEMA, data, "course")
		return cls(
			id=data["_id"],
			name=data["name"],
			subjects=[Subject(id=s["_id"], name=s["name"]) for s in data["subjects"]],
			students=[User.from_dict(s) for s in data["students"]],
		)

	def has_student(self, student_id: str) -> bool:
		return any(student.id == student_id for student in self.students)

	def __str__(self) -> str:
		return f"{self.name} ({len(self.subjects)} subjects, {len(self.students)} students)"
