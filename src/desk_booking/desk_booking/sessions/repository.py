from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Session


class SessionRepository(Protocol):
    def get_by_token(self, token: str) -> Optional[Session]:
        raise NotImplementedError

    def create_session(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def delete_by_token(self, token: str) -> bool:
        raise NotImplementedError
