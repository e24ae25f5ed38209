"""Command line front end for the evaluation portal.

Usage:
    python -m evalportal login [--email you@example.com]
    python -m evalportal assignments
    python -m evalportal diary-add 2024-01-02 "Wat ik vandaag gedaan heb"

Credentials can come from a .env file:
    EVALPORTAL_API_URL=http://localhost:5000
    EVALPORTAL_EMAIL=you@example.com
    EVALPORTAL_PASSWORD=your_password_here
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from typing import List, Optional

from . import create_client
from .api.client import EvalPortalClient
from .api.exceptions import EvalPortalAuthError, EvalPortalError
from .api.models import Assignment
from .api.utils import format_date
from .config import load_config
from .const import ENV_EMAIL, ENV_PASSWORD, LOGIN_PATH, TEACHERS_PATH
from .forms import FormErrors
from .request_state import RequestState
from .screens import (
	AssignmentDetailScreen,
	DiaryScreen,
	LoginScreen,
	RegisterScreen,
	StudentDashboard,
	TeacherDashboard,
)

_LOGGER = logging.getLogger(__name__)


class Navigator:
	"""Remembers where a screen asked to go."""

	def __init__(self) -> None:
		self.history: List[str] = []

	def __call__(self, path: str) -> None:
		self.history.append(path)

	@property
	def last(self) -> Optional[str]:
		return self.history[-1] if self.history else None


def _print_errors(errors: FormErrors) -> None:
	for field, message in errors.items():
		prefix = "" if field == "base" else f"{field}: "
		print(f"❌ {prefix}{message}")


def _print_failure(state: RequestState, navigator: Navigator) -> bool:
	"""Report a failed load; returns True when the caller should stop."""
	if navigator.last == LOGIN_PATH:
		print("🔐 Not logged in (or session expired). Run: python -m evalportal login")
		return True
	if state.is_error:
		print(f"❌ Error: {state.error}")
		return True
	return False


def _print_assignments(title: str, assignments: List[Assignment]) -> None:
	print(f"\n{title}")
	print("-" * len(title))
	if not assignments:
		print("   (none)")
	for a in assignments:
		course = f"{a.course} - " if a.course else ""
		if a.is_completed:
			print(f"   {a.id}  {course}{a.name}  {a.result_display}")
		else:
			print(f"   {a.id}  {course}{a.name}  deadline {format_date(a.deadline) or '-'}")


async def cmd_login(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	email = args.email or os.getenv(ENV_EMAIL) or input("Email: ")
	password = os.getenv(ENV_PASSWORD) or getpass.getpass("Password: ")
	screen = LoginScreen(client, navigator)
	errors = await screen.async_submit({"email": email, "password": password})
	if errors:
		_print_errors(errors)
		return 1
	print("✅ Logged in")
	return 0


async def cmd_register(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	password = getpass.getpass("Password: ")
	confirm = getpass.getpass("Confirm password: ")
	screen = RegisterScreen(client, navigator)
	errors = await screen.async_submit({
		"voornaam": args.first_name,
		"achternaam": args.last_name,
		"email": args.email,
		"telefoonnummer": args.phone or "",
		"password": password,
		"confirm_password": confirm,
	})
	if errors:
		_print_errors(errors)
		return 1
	print("✅ Account created and logged in")
	return 0


async def cmd_logout(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	client.auth.logout()
	print("👋 Logged out")
	return 0


async def cmd_me(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	if not client.token_session.authenticated:
		print("🔐 Not logged in. Run: python -m evalportal login")
		return 1
	try:
		user = await client.get_me()
	except EvalPortalAuthError:
		client.auth.logout()
		print("🔐 Session expired. Run: python -m evalportal login")
		return 1
	except EvalPortalError as e:
		print(f"❌ Error: {e}")
		return 1
	role = "teacher" if user.is_teacher else "student"
	print(f"👤 {user.full_name} <{user.email}> ({role})")
	return 0


async def cmd_assignments(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = StudentDashboard(client, navigator)
	await screen.async_load()
	if navigator.last == TEACHERS_PATH:
		print("ℹ️  Teacher account: use the 'courses' command")
		return 0
	failed = screen.assignments_state if screen.user_state.is_success else screen.user_state
	if _print_failure(failed, navigator):
		return 1
	_print_assignments("Upcoming assignments", screen.upcoming)
	_print_assignments("Submitted / completed", screen.completed)
	return 0


async def cmd_assignment(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = AssignmentDetailScreen(client, navigator, args.id)
	await screen.async_load()
	if _print_failure(screen.assignment_state, navigator):
		return 1
	a = screen.assignment
	print(f"📝 {a.name}")
	print(f"   Beschrijving: {a.description}")
	print(f"   Deadline: {format_date(a.deadline) or '-'}")
	if a.is_completed:
		print(f"   Score: {a.result_display}")
		print(f"   Feedback: {a.feedback}")
	if a.github_url:
		print(f"   GitHub: {a.github_url}")
	if a.publication_url:
		print(f"   Publicatie: {a.publication_url}")
	return 0


async def cmd_submit(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = AssignmentDetailScreen(client, navigator, args.id)
	await screen.async_load()
	if _print_failure(screen.assignment_state, navigator):
		return 1
	errors = await screen.async_submit({
		"githubURL": args.github if args.github is not None else screen.github_url,
		"publicatieURL": args.publication if args.publication is not None else screen.publication_url,
	})
	if errors:
		_print_errors(errors)
		return 1
	print("✅ Opdracht ingediend")
	return 0


async def cmd_diary(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = DiaryScreen(client, navigator)
	await screen.async_load()
	if _print_failure(screen.entries_state, navigator):
		return 1
	if not screen.entries:
		print("📔 No diary entries yet")
	for entry in screen.entries:
		print(f"   {entry.id}  {entry}")
		if entry.image_url:
			print(f"      🖼  {entry.image_url}")
	return 0


async def cmd_diary_add(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = DiaryScreen(client, navigator)
	errors = await screen.async_add_entry({
		"datum": args.date,
		"beschrijving": args.description,
		"afbeelding": args.image or "",
	})
	if errors:
		_print_errors(errors)
		return 1
	print("✅ Dag toegevoegd")
	return 0


async def cmd_diary_delete(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	if not args.yes:
		answer = input("Weet je zeker dat je deze dag wilt verwijderen? [y/N] ")
		if answer.strip().lower() not in ("y", "yes", "j", "ja"):
			return 0
	screen = DiaryScreen(client, navigator)
	errors = await screen.async_delete_entry(args.id)
	if errors:
		_print_errors(errors)
		return 1
	print("🗑  Dag verwijderd")
	return 0


async def cmd_courses(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = TeacherDashboard(client, navigator)
	await screen.async_load()
	if _print_failure(screen.courses_state, navigator):
		return 1
	if not screen.courses:
		print("📚 No courses yet")
	for course in screen.courses:
		marker = "*" if course.id == screen.selected_course_id else " "
		print(f" {marker} {course.id}  {course}")
	selected = screen.selected_course
	if selected is not None:
		print(f"\nStudents in {selected.name}:")
		for student in selected.students:
			print(f"   {student}")
		print(f"\nCohorts in {selected.name}:")
		for cohort in screen.cohorts:
			print(f"   {cohort.name} ({cohort.programme})")
	return 0


async def cmd_enroll(client: EvalPortalClient, navigator: Navigator, args: argparse.Namespace) -> int:
	screen = TeacherDashboard(client, navigator)
	await screen.async_load()
	if _print_failure(screen.courses_state, navigator):
		return 1
	await screen.async_select_course(args.course_id)
	errors = await screen.async_enroll_student(args.student_id)
	if errors:
		_print_errors(errors)
		return 1
	print("✅ Student ingeschreven")
	return 0


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="evalportal", description="Student evaluation portal client")
	parser.add_argument("--env-file", help="Path to a .env file with settings")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="command", required=True)

	p = sub.add_parser("login", help="Log in and store the session token")
	p.add_argument("--email")
	p.set_defaults(func=cmd_login)

	p = sub.add_parser("register", help="Create an account")
	p.add_argument("first_name")
	p.add_argument("last_name")
	p.add_argument("email")
	p.add_argument("--phone")
	p.set_defaults(func=cmd_register)

	sub.add_parser("logout", help="Forget the stored token").set_defaults(func=cmd_logout)
	sub.add_parser("me", help="Show the logged-in user").set_defaults(func=cmd_me)
	sub.add_parser("assignments", help="List your assignments").set_defaults(func=cmd_assignments)

	p = sub.add_parser("assignment", help="Show one assignment")
	p.add_argument("id")
	p.set_defaults(func=cmd_assignment)

	p = sub.add_parser("submit", help="Submit URLs for an assignment")
	p.add_argument("id")
	p.add_argument("--github")
	p.add_argument("--publication")
	p.set_defaults(func=cmd_submit)

	sub.add_parser("diary", help="List diary entries").set_defaults(func=cmd_diary)

	p = sub.add_parser("diary-add", help="Log an internship day")
	p.add_argument("date", help="YYYY-MM-DD")
	p.add_argument("description")
	p.add_argument("--image", help="Image URL")
	p.set_defaults(func=cmd_diary_add)

	p = sub.add_parser("diary-delete", help="Delete a diary entry")
	p.add_argument("id")
	p.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
	p.set_defaults(func=cmd_diary_delete)

	sub.add_parser("courses", help="List your courses (teachers)").set_defaults(func=cmd_courses)

	p = sub.add_parser("enroll", help="Enrol a student in a course (teachers)")
	p.add_argument("course_id")
	p.add_argument("student_id")
	p.set_defaults(func=cmd_enroll)

	return parser


async def run(args: argparse.Namespace) -> int:
	config = load_config(args.env_file)
	navigator = Navigator()
	_LOGGER.debug(f"Running {args.command} against {config.api_url}")
	async with create_client(config) as client:
		return await args.func(client, navigator, args)


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.debug else logging.WARNING,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)
	try:
		return asyncio.run(run(args))
	except KeyboardInterrupt:
		print("\n⏹  Interrupted")
		return 130


if __name__ == "__main__":
	sys.exit(main())
