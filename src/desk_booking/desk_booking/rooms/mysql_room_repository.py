from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import CellType, ReservationStatus, RoomRole, WallOrientation, WallType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_clause
from .model import Room, RoomAccessGrant, RoomCell, RoomWall
from .repository import RoomRepository

_ROOM_COLUMNS = "r.room_id, r.name, r.description, r.grid_width, r.grid_height, r.created_by, r.created_at"
_CELL_COLUMNS = "cell_id, room_id, x, y, type, label, default_owner_id"
_WALL_COLUMNS = "wall_id, room_id, start_row, start_col, end_row, end_col, orientation, type"
_GRANT_COLUMNS = "a.access_id, a.room_id, a.user_id, a.role, u.username, u.full_name"


def _row_to_room(row: dict) -> Room:
    return Room(
        room_id=int(row["room_id"]),
        name=row["name"],
        description=row.get("description"),
        grid_width=int(row["grid_width"]),
        grid_height=int(row["grid_height"]),
        created_by=int(row["created_by"]),
        created_at=row.get("created_at"),
    )


def _row_to_cell(row: dict) -> RoomCell:
    return RoomCell(
        cell_id=int(row["cell_id"]),
        room_id=int(row["room_id"]),
        x=int(row["x"]),
        y=int(row["y"]),
        cell_type=CellType(row["type"]),
        label=row.get("label"),
        default_owner_id=row.get("default_owner_id"),
    )


def _row_to_wall(row: dict) -> RoomWall:
    return RoomWall(
        wall_id=int(row["wall_id"]),
        room_id=int(row["room_id"]),
        start_row=int(row["start_row"]),
        start_col=int(row["start_col"]),
        end_row=int(row["end_row"]),
        end_col=int(row["end_col"]),
        orientation=WallOrientation(row["orientation"]),
        wall_type=WallType(row["type"]),
    )


def _row_to_grant(row: dict) -> RoomAccessGrant:
    return RoomAccessGrant(
        access_id=int(row["access_id"]),
        room_id=int(row["room_id"]),
        user_id=int(row["user_id"]),
        role=RoomRole(row["role"]),
        username=row.get("username") or "",
        full_name=row.get("full_name") or "",
    )


def _plain(updates: Dict[str, Any]) -> list:
    return [v.value if hasattr(v, "value") else v for v in updates.values()]


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Access grants --------
    def get_room_role(self, room_id: int, user_id: int) -> Optional[RoomRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM room_access WHERE room_id=%s AND user_id=%s",
                (int(room_id), int(user_id)),
            )
            row = fetchone(cur)
            return RoomRole(row["role"]) if row else None

    def list_grants(self, room_id: int) -> Sequence[RoomAccessGrant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_GRANT_COLUMNS}
                FROM room_access a
                JOIN users u ON u.user_id = a.user_id
                WHERE a.room_id=%s
                ORDER BY u.full_name
                """,
                (int(room_id),),
            )
            return [_row_to_grant(r) for r in fetchall(cur)]

    def add_grant(self, *, room_id: int, user_id: int, role: RoomRole) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO room_access(room_id, user_id, role) VALUES(%s,%s,%s)",
                (int(room_id), int(user_id), role.value),
            )
            return int(cur.lastrowid)

    def get_grant(self, access_id: int) -> Optional[RoomAccessGrant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_GRANT_COLUMNS}
                FROM room_access a
                JOIN users u ON u.user_id = a.user_id
                WHERE a.access_id=%s
                """,
                (int(access_id),),
            )
            row = fetchone(cur)
            return _row_to_grant(row) if row else None

    def remove_grant(self, *, room_id: int, access_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM room_access WHERE access_id=%s AND room_id=%s",
                (int(access_id), int(room_id)),
            )
            return cur.rowcount > 0

    def list_admin_room_ids(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT room_id FROM room_access WHERE user_id=%s AND role=%s",
                (int(user_id), RoomRole.ADMIN.value),
            )
            return [int(r["room_id"]) for r in fetchall(cur)]

    # -------- Rooms --------
    def get_by_id(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms r WHERE r.room_id=%s", (int(room_id),))
            row = fetchone(cur)
            return _row_to_room(row) if row else None

    def list_all(self) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms r ORDER BY r.created_at DESC, r.room_id DESC")
            return [_row_to_room(r) for r in fetchall(cur)]

    def list_for_user(self, user_id: int) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ROOM_COLUMNS}
                FROM room_access a
                JOIN rooms r ON r.room_id = a.room_id
                WHERE a.user_id=%s
                ORDER BY r.created_at DESC, r.room_id DESC
                """,
                (int(user_id),),
            )
            return [_row_to_room(r) for r in fetchall(cur)]

    def create_room(
        self,
        *,
        name: str,
        description: Optional[str],
        grid_width: int,
        grid_height: int,
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rooms(name, description, grid_width, grid_height, created_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, description, int(grid_width), int(grid_height), int(created_by)),
            )
            room_id = int(cur.lastrowid)
            cur.execute(
                "INSERT INTO room_access(room_id, user_id, role) VALUES(%s,%s,%s)",
                (room_id, int(created_by), RoomRole.ADMIN.value),
            )
            return room_id

    def update_room(self, room_id: int, updates: Dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE rooms SET {update_clause(updates)} WHERE room_id=%s",
                (*_plain(updates), int(room_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM rooms WHERE room_id=%s", (int(room_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, room_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM rooms WHERE room_id=%s", (int(room_id),))
            return cur.rowcount > 0

    # -------- Aggregates --------
    def count_desks(self, room_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM room_cells WHERE room_id=%s AND type=%s",
                (int(room_id), CellType.DESK.value),
            )
            return int(fetchone(cur)["n"])

    def count_active_reservations(self, room_id: int, *, on: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n FROM reservations
                WHERE room_id=%s AND date_start <= %s AND date_end >= %s
                  AND status NOT IN (%s, %s)
                """,
                (int(room_id), on, on, ReservationStatus.CANCELLED.value, ReservationStatus.REJECTED.value),
            )
            return int(fetchone(cur)["n"])

    # -------- Cells --------
    def list_cells(self, room_id: int) -> Sequence[RoomCell]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CELL_COLUMNS} FROM room_cells WHERE room_id=%s ORDER BY y, x", (int(room_id),))
            return [_row_to_cell(r) for r in fetchall(cur)]

    def get_cell(self, cell_id: int) -> Optional[RoomCell]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CELL_COLUMNS} FROM room_cells WHERE cell_id=%s", (int(cell_id),))
            row = fetchone(cur)
            return _row_to_cell(row) if row else None

    def create_cell(
        self,
        *,
        room_id: int,
        x: int,
        y: int,
        cell_type: CellType,
        label: Optional[str],
        default_owner_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO room_cells(room_id, x, y, type, label, default_owner_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(room_id), int(x), int(y), cell_type.value, label, default_owner_id),
            )
            return int(cur.lastrowid)

    def update_cell(self, cell_id: int, updates: Dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE room_cells SET {update_clause(updates)} WHERE cell_id=%s",
                (*_plain(updates), int(cell_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM room_cells WHERE cell_id=%s", (int(cell_id),))
            return fetchone(cur) is not None

    def delete_cell(self, cell_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_cells WHERE cell_id=%s", (int(cell_id),))
            return cur.rowcount > 0

    # -------- Walls --------
    def list_walls(self, room_id: int) -> Sequence[RoomWall]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_WALL_COLUMNS} FROM room_walls WHERE room_id=%s", (int(room_id),))
            return [_row_to_wall(r) for r in fetchall(cur)]

    def get_wall(self, wall_id: int) -> Optional[RoomWall]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_WALL_COLUMNS} FROM room_walls WHERE wall_id=%s", (int(wall_id),))
            row = fetchone(cur)
            return _row_to_wall(row) if row else None

    def create_wall(
        self,
        *,
        room_id: int,
        start_row: int,
        start_col: int,
        end_row: int,
        end_col: int,
        orientation: WallOrientation,
        wall_type: WallType,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO room_walls(room_id, start_row, start_col, end_row, end_col, orientation, type)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(room_id),
                    int(start_row),
                    int(start_col),
                    int(end_row),
                    int(end_col),
                    orientation.value,
                    wall_type.value,
                ),
            )
            return int(cur.lastrowid)

    def delete_wall(self, wall_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_walls WHERE wall_id=%s", (int(wall_id),))
            return cur.rowcount > 0

    def clear_layout(self, room_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_walls WHERE room_id=%s", (int(room_id),))
            cur.execute("DELETE FROM room_cells WHERE room_id=%s", (int(room_id),))
