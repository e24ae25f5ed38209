"""Tests for the command line front end."""

import argparse
import asyncio

from evalportal.__main__ import Navigator, build_parser, cmd_diary, cmd_enroll, cmd_logout, cmd_me, cmd_submit

from conftest import FakeResponse


def test_parser_builds_subcommands():
	args = build_parser().parse_args(["--debug", "submit", "a1", "--github", "https://github.com/me/repo"])

	assert args.debug is True
	assert args.command == "submit"
	assert args.id == "a1"
	assert args.github == "https://github.com/me/repo"
	assert args.publication is None
	assert args.func is cmd_submit


def test_me_without_token(client, fake_session, capsys):
	code = asyncio.run(cmd_me(client, Navigator(), argparse.Namespace()))

	assert code == 1
	assert "Not logged in" in capsys.readouterr().out
	assert fake_session.calls == []


def test_me_prints_user(client, fake_session, token_session, capsys):
	token_session.set("abc")
	fake_session.add("GET", "/api/users/me", FakeResponse(200, {
		"_id": "u1", "voornaam": "Sam", "achternaam": "Jansen", "email": "sam@example.com",
	}))

	code = asyncio.run(cmd_me(client, Navigator(), argparse.Namespace()))

	assert code == 0
	assert "Sam Jansen <sam@example.com> (student)" in capsys.readouterr().out


def test_me_expired_session_logs_out(client, fake_session, token_session, capsys):
	token_session.set("expired")
	fake_session.add("GET", "/api/users/me", FakeResponse(401, ""))

	code = asyncio.run(cmd_me(client, Navigator(), argparse.Namespace()))

	assert code == 1
	assert token_session.get() is None
	assert "Session expired" in capsys.readouterr().out


def test_diary_redirect_is_reported(client, capsys):
	navigator = Navigator()

	code = asyncio.run(cmd_diary(client, navigator, argparse.Namespace()))

	assert code == 1
	assert navigator.last == "/login"
	assert "Not logged in" in capsys.readouterr().out


def test_logout_clears_token(client, token_session):
	token_session.set("abc")

	assert asyncio.run(cmd_logout(client, Navigator(), argparse.Namespace())) == 0
	assert token_session.get() is None


def test_enroll_in_unknown_course_prints_message(client, fake_session, token_session, capsys):
	token_session.set("abc")
	fake_session.add("GET", "/api/courses", FakeResponse(200, [{"_id": "c1", "name": "Web"}]))
	fake_session.add("GET", "/api/users", FakeResponse(200, []))
	fake_session.add("GET", "/api/classes", FakeResponse(200, []))
	args = argparse.Namespace(course_id="nope", student_id="u1")

	code = asyncio.run(cmd_enroll(client, Navigator(), args))

	assert code == 1
	assert "❌ Geen cursus geselecteerd" in capsys.readouterr().out
