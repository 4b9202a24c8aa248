from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OfficeBooking
from .repository import OfficeBookingRepository

_BOOKING_COLUMNS = "b.booking_id, b.office_id, b.user_id, b.start_time, b.end_time, b.is_admin_block, b.created_by, b.created_at"


def _row_to_booking(row: dict) -> OfficeBooking:
    return OfficeBooking(
        booking_id=int(row["booking_id"]),
        office_id=int(row["office_id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        start_time=row["start_time"],
        end_time=row["end_time"],
        is_admin_block=bool(row["is_admin_block"]),
        created_by=int(row["created_by"]),
        created_at=row.get("created_at"),
    )


def _find_overlap(cur, office_id: int, start_time: datetime, end_time: datetime, exclude_booking_id: Optional[int]) -> bool:
    # Half-open overlap: existing.start < new.end AND new.start < existing.end
    sql = """
        SELECT booking_id FROM office_bookings
        WHERE office_id=%s AND start_time < %s AND end_time > %s
    """
    params: list = [int(office_id), end_time, start_time]
    if exclude_booking_id is not None:
        sql += " AND booking_id <> %s"
        params.append(int(exclude_booking_id))
    cur.execute(sql + " LIMIT 1", tuple(params))
    return fetchone(cur) is not None


def _lock_office(cur, office_id: int) -> None:
    # Serializes writers of the same office until commit.
    cur.execute("SELECT office_id FROM offices WHERE office_id=%s FOR UPDATE", (int(office_id),))
    if not fetchone(cur):
        raise NotFoundError("Office not found")


class MySQLOfficeBookingRepository(OfficeBookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, booking_id: int) -> Optional[OfficeBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_BOOKING_COLUMNS} FROM office_bookings b WHERE b.booking_id=%s", (int(booking_id),))
            row = fetchone(cur)
            return _row_to_booking(row) if row else None

    def has_conflict(
        self,
        office_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _find_overlap(cur, office_id, start_time, end_time, exclude_booking_id)

    def insert_if_free(
        self,
        *,
        office_id: int,
        user_id: Optional[int],
        start_time: datetime,
        end_time: datetime,
        is_admin_block: bool,
        created_by: int,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            _lock_office(cur, office_id)
            if _find_overlap(cur, office_id, start_time, end_time, None):
                return None
            cur.execute(
                """
                INSERT INTO office_bookings(office_id, user_id, start_time, end_time, is_admin_block, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(office_id), user_id, start_time, end_time, int(is_admin_block), int(created_by)),
            )
            return int(cur.lastrowid)

    def reschedule_if_free(self, booking_id: int, *, office_id: int, start_time: datetime, end_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            _lock_office(cur, office_id)
            if _find_overlap(cur, office_id, start_time, end_time, booking_id):
                return False
            cur.execute(
                "UPDATE office_bookings SET start_time=%s, end_time=%s WHERE booking_id=%s",
                (start_time, end_time, int(booking_id)),
            )
            return True

    def delete_by_id(self, booking_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM office_bookings WHERE booking_id=%s", (int(booking_id),))
            return cur.rowcount > 0

    def list_by_office(self, office_id: int, *, start_from: datetime, end_until: datetime) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_BOOKING_COLUMNS}, u.username, u.full_name
                FROM office_bookings b
                LEFT JOIN users u ON u.user_id = b.user_id
                WHERE b.office_id=%s AND b.start_time >= %s AND b.end_time <= %s
                ORDER BY b.start_time ASC
                """,
                (int(office_id), start_from, end_until),
            )
            out: list[dict] = []
            for r in fetchall(cur):
                item = _row_to_booking(r).to_dict()
                item["users"] = (
                    {"id": int(r["user_id"]), "username": r["username"], "full_name": r["full_name"]}
                    if r.get("user_id") is not None
                    else None
                )
                out.append(item)
            return out

    def list_by_user(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_BOOKING_COLUMNS}, o.name AS office_name, o.location AS office_location
                FROM office_bookings b
                JOIN offices o ON o.office_id = b.office_id
                WHERE b.user_id=%s
                ORDER BY b.start_time ASC
                """,
                (int(user_id),),
            )
            out: list[dict] = []
            for r in fetchall(cur):
                item = _row_to_booking(r).to_dict()
                item["offices"] = {
                    "id": int(r["office_id"]),
                    "name": r["office_name"],
                    "location": r["office_location"],
                }
                out.append(item)
            return out
