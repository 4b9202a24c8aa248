from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_SESSION_HOURS
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import RequestContext
from .repository import SessionRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class SessionResolver:
    """Read-gate run once per request: token -> unexpired session -> active user."""

    def __init__(self, sessions: SessionRepository, users: UserRepository, *, clock: Clock = now_utc):
        self._sessions = sessions
        self._users = users
        self._clock = clock

    def resolve(self, token: Optional[str]) -> RequestContext:
        if not token:
            raise AuthenticationError("Missing session token")

        session = self._sessions.get_by_token(token)
        if not session or session.is_expired(self._clock()):
            raise AuthenticationError("Invalid or expired session")

        user = self._users.get_by_id(session.user_id)
        if not user or not user.is_active:
            raise AuthorizationError("User not found or inactive")

        return RequestContext(
            user_id=user.user_id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
        )


@dataclass(frozen=True)
class LoginResult:
    token: str
    expires_at: datetime
    user: User

    def to_dict(self) -> dict:
        return {"token": self.token, "expires_at": self.expires_at, "user": self.user.to_public()}


class AuthService:
    """Use case: open and close sessions."""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        *,
        session_hours: int = DEFAULT_SESSION_HOURS,
        clock: Clock = now_utc,
    ):
        self._users = users
        self._sessions = sessions
        self._session_hours = int(session_hours)
        self._clock = clock

    def login(self, username: str, password: str) -> LoginResult:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        token = secrets.token_urlsafe(32)
        expires_at = self._clock() + timedelta(hours=self._session_hours)
        self._sessions.create_session(user_id=user.user_id, token=token, expires_at=expires_at)
        logger.info("User %s logged in, session valid until %s", user.user_id, expires_at.isoformat())
        return LoginResult(token=token, expires_at=expires_at, user=user)

    def logout(self, token: Optional[str]) -> None:
        if not token:
            raise AuthenticationError("Missing session token")
        self._sessions.delete_by_token(token)
