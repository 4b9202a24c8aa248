from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Session
from .repository import SessionRepository


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_token(self, token: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT session_token, user_id, expires_at FROM user_sessions WHERE session_token=%s",
                (token,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Session(
                token=row["session_token"],
                user_id=int(row["user_id"]),
                expires_at=row["expires_at"],
            )

    def create_session(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO user_sessions(user_id, session_token, expires_at) VALUES(%s,%s,%s)",
                (int(user_id), token, expires_at),
            )

    def delete_by_token(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_sessions WHERE session_token=%s", (token,))
            return cur.rowcount > 0
