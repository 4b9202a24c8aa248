from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import Role


@dataclass(frozen=True)
class Session:
    token: str
    user_id: int
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(frozen=True)
class RequestContext:
    """Who is calling, resolved once per request from the session token.

    Passed explicitly to every policy check and handler of that request.
    """

    user_id: int
    username: str
    full_name: str
    role: Role
