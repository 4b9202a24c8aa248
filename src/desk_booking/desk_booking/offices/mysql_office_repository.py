from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_clause
from .model import Office
from .repository import OfficeRepository

_OFFICE_COLUMNS = "office_id, name, location, is_shared, created_by, created_at"


def _row_to_office(row: dict) -> Office:
    return Office(
        office_id=int(row["office_id"]),
        name=row["name"],
        location=row["location"],
        is_shared=bool(row["is_shared"]),
        created_by=int(row["created_by"]),
        created_at=row.get("created_at"),
    )


class MySQLOfficeRepository(OfficeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, office_id: int) -> Optional[Office]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_OFFICE_COLUMNS} FROM offices WHERE office_id=%s", (int(office_id),))
            row = fetchone(cur)
            return _row_to_office(row) if row else None

    def list_offices(self, *, shared_only: bool) -> Sequence[Office]:
        where = "WHERE is_shared=1" if shared_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_OFFICE_COLUMNS} FROM offices {where} ORDER BY created_at DESC, office_id DESC")
            return [_row_to_office(r) for r in fetchall(cur)]

    def create_office(self, *, name: str, location: str, is_shared: bool, created_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO offices(name, location, is_shared, created_by) VALUES(%s,%s,%s,%s)",
                (name, location, int(is_shared), int(created_by)),
            )
            return int(cur.lastrowid)

    def update_office(self, office_id: int, updates: Dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE offices SET {update_clause(updates)} WHERE office_id=%s",
                (*updates.values(), int(office_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM offices WHERE office_id=%s", (int(office_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, office_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM offices WHERE office_id=%s", (int(office_id),))
            return cur.rowcount > 0
