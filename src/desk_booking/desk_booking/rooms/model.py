from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CellType, RoomRole, WallOrientation, WallType


@dataclass(frozen=True)
class Room:
    room_id: int
    name: str
    description: Optional[str]
    grid_width: int
    grid_height: int
    created_by: int
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.room_id,
            "name": self.name,
            "description": self.description,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class RoomCell:
    cell_id: int
    room_id: int
    x: int
    y: int
    cell_type: CellType
    label: Optional[str] = None
    default_owner_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.cell_id,
            "room_id": self.room_id,
            "x": self.x,
            "y": self.y,
            "type": self.cell_type.value,
            "label": self.label,
            "default_owner_id": self.default_owner_id,
        }


@dataclass(frozen=True)
class RoomWall:
    wall_id: int
    room_id: int
    start_row: int
    start_col: int
    end_row: int
    end_col: int
    orientation: WallOrientation
    wall_type: WallType = WallType.WALL

    def to_dict(self) -> dict:
        return {
            "id": self.wall_id,
            "room_id": self.room_id,
            "start_row": self.start_row,
            "start_col": self.start_col,
            "end_row": self.end_row,
            "end_col": self.end_col,
            "orientation": self.orientation.value,
            "type": self.wall_type.value,
        }


@dataclass(frozen=True)
class RoomAccessGrant:
    """A row of room_access joined with the user it grants."""

    access_id: int
    room_id: int
    user_id: int
    role: RoomRole
    username: str = ""
    full_name: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.access_id,
            "role": self.role.value,
            "user_id": self.user_id,
            "users": {"id": self.user_id, "username": self.username, "full_name": self.full_name},
        }
