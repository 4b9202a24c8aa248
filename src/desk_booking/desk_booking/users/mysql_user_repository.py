from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_clause
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, username, full_name, password_hash, role, is_active, created_at"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        username: str,
        full_name: str,
        password_hash: str,
        role: Role,
        is_active: bool = True,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, full_name, password_hash, role, is_active)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (username, full_name, password_hash, role.value, int(is_active)),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> bool:
        values = [v.value if isinstance(v, Role) else v for v in updates.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {update_clause(updates)} WHERE user_id=%s",
                (*values, int(user_id)),
            )
            # MySQL reports 0 affected rows when values are unchanged; check existence instead.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY created_at DESC, user_id DESC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE is_active=1 ORDER BY full_name")
            return [_row_to_user(r) for r in fetchall(cur)]
