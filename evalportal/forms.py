"""Input form schemas for the evaluation portal screens.

Each form is a voluptuous schema. ``validate_form`` runs one and returns the
cleaned data together with a field to message mapping, the same shape the
screens expose as ``errors``.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, Tuple

import voluptuous as vol

from .api.utils import parse_date
from .const import ERROR_BASE, MSG_PASSWORDS_DO_NOT_MATCH

_LOGGER = logging.getLogger(__name__)

FormErrors = Dict[str, str]


def _form_date(value: Any) -> date:
	"""Accept a date object or an ISO ``YYYY-MM-DD`` string."""
	try:
		return parse_date(value)
	except (TypeError, ValueError) as err:
		raise vol.Invalid("Kies een datum") from err


def _optional_url(msg: str = "Ongeldige URL") -> vol.Any:
	return vol.Any(None, "", vol.All(str, vol.Strip, vol.Url()), msg=msg)


def _min_text(length: int, msg: str) -> vol.All:
	return vol.All(str, vol.Strip, vol.Length(min=length, msg=msg))


LOGIN_SCHEMA = vol.Schema({
	vol.Required("email", msg="Vul je e-mailadres in"): vol.All(
		str, vol.Strip, vol.Email(msg="Ongeldig e-mailadres")
	),
	vol.Required("password", msg="Vul je wachtwoord in"): vol.All(
		str, vol.Length(min=1, msg="Vul je wachtwoord in")
	),
})


def _passwords_match(data: Dict[str, Any]) -> Dict[str, Any]:
	if data["password"] != data["confirm_password"]:
		raise vol.Invalid(MSG_PASSWORDS_DO_NOT_MATCH, path=["confirm_password"])
	return data


REGISTER_SCHEMA = vol.Schema(vol.All(
	{
		vol.Required("voornaam", msg="Vul je voornaam in"): _min_text(1, "Vul je voornaam in"),
		vol.Required("achternaam", msg="Vul je achternaam in"): _min_text(1, "Vul je achternaam in"),
		vol.Required("email", msg="Vul je e-mailadres in"): vol.All(
			str, vol.Strip, vol.Email(msg="Ongeldig e-mailadres")
		),
		vol.Optional("telefoonnummer", default=""): vol.Any(None, vol.All(str, vol.Strip)),
		vol.Required("password", msg="Vul een wachtwoord in"): vol.All(
			str, vol.Length(min=1, msg="Vul een wachtwoord in")
		),
		vol.Required("confirm_password", msg="Herhaal je wachtwoord"): str,
	},
	_passwords_match,
))

DIARY_ENTRY_SCHEMA = vol.Schema({
	vol.Required("datum", msg="Kies een datum"): _form_date,
	vol.Required("beschrijving", msg="Geef ten minste 10 tekens over wat je vandaag deed"): vol.All(
		str, vol.Length(min=10, msg="Geef ten minste 10 tekens over wat je vandaag deed")
	),
	vol.Optional("afbeelding", default=""): _optional_url(),
})

SUBMISSION_SCHEMA = vol.Schema({
	vol.Optional("githubURL", default=""): _optional_url(),
	vol.Optional("publicatieURL", default=""): _optional_url(),
})

COURSE_SCHEMA = vol.Schema({
	vol.Required("name", msg="Vul een cursusnaam in"): _min_text(2, "Vul een cursusnaam in"),
})

SUBJECT_SCHEMA = vol.Schema({
	vol.Required("name", msg="Vul een vaknaam in"): _min_text(2, "Vul een vaknaam in"),
})

COHORT_SCHEMA = vol.Schema({
	vol.Required("naam", msg="Vul een cohortnaam in"): _min_text(2, "Vul een cohortnaam in"),
	vol.Required("opleiding", msg="Vul opleiding in"): _min_text(2, "Vul opleiding in"),
})


def validate_form(schema: vol.Schema, user_input: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], FormErrors]:
	"""Validate form input.

	Returns:
		``(data, {})`` when the input is valid, otherwise ``(None, errors)``
		with one message per offending field. Errors that do not belong to a
		single field are reported under ``"base"``.
	"""
	try:
		data = schema(dict(user_input))
	except vol.MultipleInvalid as err:
		errors = _collect_errors(err.errors)
	except vol.Invalid as err:
		errors = _collect_errors([err])
	else:
		return data, {}

	_LOGGER.debug(f"Form validation failed: {errors}")
	return None, errors


def _collect_errors(invalids) -> FormErrors:
	errors: FormErrors = {}
	for invalid in invalids:
		key = str(invalid.path[0]) if invalid.path else ERROR_BASE
		# first message per field wins
		errors.setdefault(key, invalid.msg)
	return errors
