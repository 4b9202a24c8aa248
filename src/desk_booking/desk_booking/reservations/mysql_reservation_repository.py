from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ReservationStatus, ReservationType, TimeSegment
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .conflicts import each_day, segments_clash
from .model import FixedAssignment, Reservation
from .repository import ReservationRepository

_COLUMNS = (
    "r.reservation_id, r.room_id, r.cell_id, r.user_id, r.type, r.status, r.date_start, r.date_end, "
    "r.time_segment, r.approved_by, r.approved_at, r.created_at, r.assignment_id"
)
_HELD = (ReservationStatus.PENDING.value, ReservationStatus.APPROVED.value)
_ASSIGNMENT_COLUMNS = "a.assignment_id, a.room_id, a.cell_id, a.assigned_to, a.date_start, a.date_end, a.created_by, a.created_at"


def _row_to_reservation(row: dict) -> Reservation:
    return Reservation(
        reservation_id=int(row["reservation_id"]),
        room_id=int(row["room_id"]),
        cell_id=int(row["cell_id"]),
        user_id=int(row["user_id"]),
        reservation_type=ReservationType(row["type"]),
        status=ReservationStatus(row["status"]),
        date_start=row["date_start"],
        date_end=row["date_end"],
        time_segment=TimeSegment(row["time_segment"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        created_at=row.get("created_at"),
        assignment_id=row.get("assignment_id"),
    )



def _row_to_assignment(row: dict) -> FixedAssignment:
    return FixedAssignment(
        assignment_id=int(row["assignment_id"]),
        room_id=int(row["room_id"]),
        cell_id=int(row["cell_id"]),
        assigned_to=int(row["assigned_to"]),
        date_start=row["date_start"],
        date_end=row["date_end"],
        created_by=int(row["created_by"]),
        created_at=row.get("created_at"),
    )

def _cell_summary(row: dict) -> dict:
    return {"id": int(row["cell_id"]), "label": row.get("cell_label"), "type": row.get("cell_type")}


def _user_summary(row: dict) -> dict:
    return {"id": int(row["user_id"]), "username": row.get("username"), "full_name": row.get("full_name")}


def _user_overlap(cur, user_id: int, date_start: date, date_end: date) -> bool:
    cur.execute(
        """
        SELECT reservation_id FROM reservations
        WHERE user_id=%s AND status IN (%s,%s) AND date_end >= %s AND date_start <= %s
        LIMIT 1
        """,
        (int(user_id), *_HELD, date_start, date_end),
    )
    return fetchone(cur) is not None


def _approved_for_cell(cur, cell_id: int, date_start: date, date_end: date) -> list:
    cur.execute(
        f"""
        SELECT {_COLUMNS} FROM reservations r
        WHERE r.cell_id=%s AND r.status=%s AND r.date_end >= %s AND r.date_start <= %s
        ORDER BY r.date_start
        """,
        (int(cell_id), ReservationStatus.APPROVED.value, date_start, date_end),
    )
    return [_row_to_reservation(r) for r in fetchall(cur)]


def _user_assignment(cur, user_id: int, date_start: date, date_end: date) -> bool:
    cur.execute(
        "SELECT assignment_id FROM fixed_assignments WHERE assigned_to=%s AND date_end >= %s AND date_start <= %s LIMIT 1",
        (int(user_id), date_start, date_end),
    )
    return fetchone(cur) is not None


def _assignments_for_cell(cur, cell_id: int, date_start: date, date_end: date) -> list:
    cur.execute(
        f"""
        SELECT {_ASSIGNMENT_COLUMNS} FROM fixed_assignments a
        WHERE a.cell_id=%s AND a.date_end >= %s AND a.date_start <= %s
        ORDER BY a.date_start
        """,
        (int(cell_id), date_start, date_end),
    )
    return [_row_to_assignment(r) for r in fetchall(cur)]


def _lock_cell(cur, cell_id: int) -> None:
    # Writers of the same desk queue up on the cell row until commit.
    cur.execute("SELECT cell_id FROM room_cells WHERE cell_id=%s FOR UPDATE", (int(cell_id),))
    if not fetchone(cur):
        raise NotFoundError("Cell not found")


class MySQLReservationRepository(ReservationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, reservation_id: int) -> Optional[Reservation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM reservations r WHERE r.reservation_id=%s", (int(reservation_id),))
            row = fetchone(cur)
            return _row_to_reservation(row) if row else None

    def user_has_overlap(self, user_id: int, date_start: date, date_end: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _user_overlap(cur, user_id, date_start, date_end)

    def list_approved_for_cell(self, cell_id: int, date_start: date, date_end: date) -> Sequence[Reservation]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _approved_for_cell(cur, cell_id, date_start, date_end)

    def insert_if_free(
        self,
        *,
        room_id: int,
        cell_id: int,
        user_id: int,
        reservation_type: ReservationType,
        date_start: date,
        date_end: date,
        time_segment: TimeSegment,
        approved_by: int,
        approved_at: datetime,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            _lock_cell(cur, cell_id)
            if _user_overlap(cur, user_id, date_start, date_end):
                return None
            if any(a.assigned_to != int(user_id) for a in _assignments_for_cell(cur, cell_id, date_start, date_end)):
                return None
            for existing in _approved_for_cell(cur, cell_id, date_start, date_end):
                if segments_clash(existing.time_segment, time_segment):
                    return None
            cur.execute(
                """
                INSERT INTO reservations(room_id, cell_id, user_id, type, status, date_start, date_end,
                                         time_segment, approved_by, approved_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(room_id),
                    int(cell_id),
                    int(user_id),
                    reservation_type.value,
                    ReservationStatus.APPROVED.value,
                    date_start,
                    date_end,
                    time_segment.value,
                    int(approved_by),
                    approved_at,
                ),
            )
            return int(cur.lastrowid)

    def set_status(
        self,
        reservation_id: int,
        status: ReservationStatus,
        *,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if approved_by is not None:
                cur.execute(
                    "UPDATE reservations SET status=%s, approved_by=%s, approved_at=%s WHERE reservation_id=%s",
                    (status.value, int(approved_by), approved_at, int(reservation_id)),
                )
            else:
                cur.execute(
                    "UPDATE reservations SET status=%s WHERE reservation_id=%s",
                    (status.value, int(reservation_id)),
                )
            return cur.rowcount > 0

    def list_by_user(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, rm.name AS room_name, c.label AS cell_label, c.type AS cell_type
                FROM reservations r
                JOIN rooms rm ON rm.room_id = r.room_id
                JOIN room_cells c ON c.cell_id = r.cell_id
                WHERE r.user_id=%s
                ORDER BY r.date_start DESC
                """,
                (int(user_id),),
            )
            out: list[dict] = []
            for row in fetchall(cur):
                item = _row_to_reservation(row).to_dict()
                item["rooms"] = {"id": int(row["room_id"]), "name": row["room_name"]}
                item["room_cells"] = _cell_summary(row)
                out.append(item)
            return out

    def list_by_room(self, room_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.username, u.full_name,
                       c.label AS cell_label, c.type AS cell_type, c.x AS cell_x, c.y AS cell_y
                FROM reservations r
                JOIN users u ON u.user_id = r.user_id
                JOIN room_cells c ON c.cell_id = r.cell_id
                WHERE r.room_id=%s
                ORDER BY r.date_start DESC
                """,
                (int(room_id),),
            )
            out: list[dict] = []
            for row in fetchall(cur):
                item = _row_to_reservation(row).to_dict()
                item["users"] = _user_summary(row)
                item["room_cells"] = {**_cell_summary(row), "x": row["cell_x"], "y": row["cell_y"]}
                out.append(item)
            return out

    def list_pending(self, room_ids: Optional[Sequence[int]] = None) -> Sequence[dict]:
        if room_ids is not None and not room_ids:
            return []
        sql = f"""
            SELECT {_COLUMNS}, rm.name AS room_name, u.username, u.full_name,
                   c.label AS cell_label, c.type AS cell_type
            FROM reservations r
            JOIN rooms rm ON rm.room_id = r.room_id
            JOIN users u ON u.user_id = r.user_id
            JOIN room_cells c ON c.cell_id = r.cell_id
            WHERE r.status=%s
        """
        params: list = [ReservationStatus.PENDING.value]
        if room_ids is not None:
            sql += f" AND r.room_id IN ({in_clause(room_ids)})"
            params.extend(int(x) for x in room_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY r.created_at ASC", tuple(params))
            out: list[dict] = []
            for row in fetchall(cur):
                item = _row_to_reservation(row).to_dict()
                item["rooms"] = {"id": int(row["room_id"]), "name": row["room_name"]}
                item["users"] = _user_summary(row)
                item["room_cells"] = _cell_summary(row)
                out.append(item)
            return out

    def list_by_assignment(self, assignment_id: int) -> Sequence[Reservation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM reservations r WHERE r.assignment_id=%s ORDER BY r.date_start",
                (int(assignment_id),),
            )
            return [_row_to_reservation(r) for r in fetchall(cur)]

    def get_assignment(self, assignment_id: int) -> Optional[FixedAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM fixed_assignments a WHERE a.assignment_id=%s",
                (int(assignment_id),),
            )
            row = fetchone(cur)
            return _row_to_assignment(row) if row else None

    def user_has_assignment(self, user_id: int, date_start: date, date_end: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _user_assignment(cur, user_id, date_start, date_end)

    def list_assignments_for_cell(self, cell_id: int, date_start: date, date_end: date) -> Sequence[FixedAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _assignments_for_cell(cur, cell_id, date_start, date_end)

    def create_assignment_if_free(
        self,
        *,
        room_id: int,
        cell_id: int,
        assigned_to: int,
        date_start: date,
        date_end: date,
        created_by: int,
        approved_at: datetime,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            _lock_cell(cur, cell_id)
            if _user_overlap(cur, assigned_to, date_start, date_end) or _user_assignment(
                cur, assigned_to, date_start, date_end
            ):
                return None
            if _approved_for_cell(cur, cell_id, date_start, date_end) or _assignments_for_cell(
                cur, cell_id, date_start, date_end
            ):
                return None

            cur.execute(
                """
                INSERT INTO fixed_assignments(room_id, cell_id, assigned_to, date_start, date_end, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(room_id), int(cell_id), int(assigned_to), date_start, date_end, int(created_by)),
            )
            assignment_id = int(cur.lastrowid)
            cur.executemany(
                """
                INSERT INTO reservations(room_id, cell_id, user_id, type, status, date_start, date_end,
                                         time_segment, approved_by, approved_at, assignment_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        int(room_id),
                        int(cell_id),
                        int(assigned_to),
                        ReservationType.DAY.value,
                        ReservationStatus.APPROVED.value,
                        day,
                        day,
                        TimeSegment.FULL.value,
                        int(created_by),
                        approved_at,
                        assignment_id,
                    )
                    for day in each_day(date_start, date_end)
                ],
            )
            return assignment_id

    def delete_assignment(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE reservations SET status=%s WHERE assignment_id=%s AND status IN (%s,%s)",
                (ReservationStatus.CANCELLED.value, int(assignment_id), *_HELD),
            )
            cur.execute("DELETE FROM fixed_assignments WHERE assignment_id=%s", (int(assignment_id),))
            return cur.rowcount > 0

    def list_assignments_by_room(self, room_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}, u.username, u.full_name
                FROM fixed_assignments a
                JOIN users u ON u.user_id = a.assigned_to
                WHERE a.room_id=%s
                ORDER BY a.date_start
                """,
                (int(room_id),),
            )
            out: list[dict] = []
            for row in fetchall(cur):
                item = _row_to_assignment(row).to_dict()
                item["assigned_user"] = {
                    "id": int(row["assigned_to"]),
                    "username": row["username"],
                    "full_name": row["full_name"],
                }
                out.append(item)
            return out

    def list_assignments_by_user(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}, rm.name AS room_name, c.label AS cell_label, c.type AS cell_type
                FROM fixed_assignments a
                JOIN rooms rm ON rm.room_id = a.room_id
                JOIN room_cells c ON c.cell_id = a.cell_id
                WHERE a.assigned_to=%s
                ORDER BY a.date_start DESC
                """,
                (int(user_id),),
            )
            out: list[dict] = []
            for row in fetchall(cur):
                item = _row_to_assignment(row).as_reservation_dict()
                item["rooms"] = {"id": int(row["room_id"]), "name": row["room_name"]}
                item["room_cells"] = _cell_summary(row)
                out.append(item)
            return out
