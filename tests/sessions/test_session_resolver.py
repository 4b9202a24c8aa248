from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.desk_booking.desk_booking.core.enums import Role
from src.desk_booking.desk_booking.core.exceptions import AuthenticationError, AuthorizationError
from src.desk_booking.desk_booking.sessions.service import AuthService, SessionResolver

NOW = datetime(2026, 3, 2, 12, 0, 0)


@pytest.fixture
def resolver(repos):
    return SessionResolver(repos.sessions, repos.users, clock=lambda: NOW)


def test_missing_token(resolver):
    for token in (None, ""):
        with pytest.raises(AuthenticationError, match="Missing session token"):
            resolver.resolve(token)


def test_unknown_token(resolver):
    with pytest.raises(AuthenticationError, match="Invalid or expired session"):
        resolver.resolve("nope")


def test_session_expiring_exactly_now_is_rejected(resolver, repos, people):
    repos.sessions.create_session(user_id=people.member.user_id, token="t", expires_at=NOW)
    with pytest.raises(AuthenticationError, match="Invalid or expired session"):
        resolver.resolve("t")


def test_valid_session_resolves_context(resolver, repos, people):
    repos.sessions.create_session(user_id=people.admin.user_id, token="t", expires_at=NOW + timedelta(seconds=1))
    ctx = resolver.resolve("t")

    assert ctx.user_id == people.admin.user_id
    assert ctx.username == "alice"
    assert ctx.role == Role.ADMIN


def test_inactive_or_deleted_user_is_forbidden(resolver, repos, people):
    repos.sessions.create_session(user_id=people.inactive.user_id, token="a", expires_at=NOW + timedelta(hours=1))
    repos.sessions.create_session(user_id=404, token="b", expires_at=NOW + timedelta(hours=1))

    for token in ("a", "b"):
        with pytest.raises(AuthorizationError, match="User not found or inactive"):
            resolver.resolve(token)


def test_login_creates_session_for_configured_hours(repos, people):
    auth = AuthService(repos.users, repos.sessions, session_hours=8, clock=lambda: NOW)
    result = auth.login("bob", "secret1")

    assert result.expires_at == NOW + timedelta(hours=8)
    stored = repos.sessions.get_by_token(result.token)
    assert stored.user_id == people.member.user_id
    assert "password_hash" not in result.to_dict()["user"]


@pytest.mark.parametrize("username, password", [("bob", "wrong"), ("ghost", "secret1"), ("dave", "secret1")])
def test_login_failures_share_one_message(repos, people, username, password):
    auth = AuthService(repos.users, repos.sessions, clock=lambda: NOW)
    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        auth.login(username, password)


def test_logout_removes_session_and_is_idempotent(repos, people):
    auth = AuthService(repos.users, repos.sessions, clock=lambda: NOW)
    token = auth.login("bob", "secret1").token

    auth.logout(token)
    auth.logout(token)
    assert repos.sessions.get_by_token(token) is None
