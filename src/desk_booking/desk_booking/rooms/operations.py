from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional

from ..common.operations import operation_registry
from ..common.validators import (
    optional_enum,
    optional_int,
    optional_str,
    require_enum,
    require_int,
    require_mapping,
    require_str,
)
from ..core.constants import MAX_GRID_SIZE
from ..core.enums import CellType, RoomRole, WallOrientation, WallType
from ..core.exceptions import ValidationError


def _grid_size(data: Mapping[str, Any], key: str) -> int:
    value = require_int(data, key)
    if not 1 <= value <= MAX_GRID_SIZE:
        raise ValidationError(f"{key} must be between 1 and {MAX_GRID_SIZE}")
    return value


def _coordinate(data: Mapping[str, Any], key: str) -> int:
    value = require_int(data, key)
    if value < 0:
        raise ValidationError(f"{key} must not be negative")
    return value


def _require_updates(updates: Dict[str, Any], allowed: str) -> Dict[str, Any]:
    if not updates:
        raise ValidationError(f"updates must contain at least one of: {allowed}")
    return updates


@dataclass(frozen=True)
class CreateRoom:
    name: ClassVar[str] = "create"
    room_name: str
    description: Optional[str]
    grid_width: int
    grid_height: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateRoom":
        return cls(
            room_name=require_str(data, "name"),
            description=optional_str(data, "description"),
            grid_width=_grid_size(data, "grid_width"),
            grid_height=_grid_size(data, "grid_height"),
        )


@dataclass(frozen=True)
class UpdateRoom:
    name: ClassVar[str] = "update"
    room_id: int
    updates: Dict[str, Any]

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateRoom":
        raw = require_mapping(data.get("updates"), "updates")
        updates: Dict[str, Any] = {}
        if "name" in raw:
            updates["name"] = require_str(raw, "name")
        if "description" in raw:
            updates["description"] = optional_str(raw, "description")
        for key in ("grid_width", "grid_height"):
            if key in raw:
                updates[key] = _grid_size(raw, key)
        return cls(
            room_id=require_int(data, "id"),
            updates=_require_updates(updates, "name, description, grid_width, grid_height"),
        )


@dataclass(frozen=True)
class DeleteRoom:
    name: ClassVar[str] = "delete"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteRoom":
        return cls(room_id=require_int(data, "id"))


@dataclass(frozen=True)
class ListRooms:
    name: ClassVar[str] = "list"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListRooms":
        return cls()


@dataclass(frozen=True)
class GetRoom:
    name: ClassVar[str] = "get"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "GetRoom":
        return cls(room_id=require_int(data, "roomId"))


@dataclass(frozen=True)
class CreateCell:
    name: ClassVar[str] = "create_cell"
    room_id: int
    x: int
    y: int
    cell_type: CellType
    label: Optional[str]
    default_owner_id: Optional[int]

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateCell":
        cell = require_mapping(data.get("cell"), "cell")
        return cls(
            room_id=require_int(cell, "room_id"),
            x=_coordinate(cell, "x"),
            y=_coordinate(cell, "y"),
            cell_type=optional_enum(cell, "type", CellType, CellType.DESK),
            label=optional_str(cell, "label"),
            default_owner_id=optional_int(cell, "default_owner_id"),
        )


@dataclass(frozen=True)
class UpdateCell:
    name: ClassVar[str] = "update_cell"
    cell_id: int
    updates: Dict[str, Any]

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateCell":
        raw = require_mapping(data.get("updates"), "updates")
        updates: Dict[str, Any] = {}
        for key in ("x", "y"):
            if key in raw:
                updates[key] = _coordinate(raw, key)
        if "type" in raw:
            updates["type"] = require_enum(raw, "type", CellType)
        if "label" in raw:
            updates["label"] = optional_str(raw, "label")
        if "default_owner_id" in raw:
            updates["default_owner_id"] = optional_int(raw, "default_owner_id")
        return cls(
            cell_id=require_int(data, "cellId"),
            updates=_require_updates(updates, "x, y, type, label, default_owner_id"),
        )


@dataclass(frozen=True)
class DeleteCell:
    name: ClassVar[str] = "delete_cell"
    cell_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteCell":
        return cls(cell_id=require_int(data, "cellId"))


@dataclass(frozen=True)
class CreateWall:
    name: ClassVar[str] = "create_wall"
    room_id: int
    start_row: int
    start_col: int
    end_row: int
    end_col: int
    orientation: WallOrientation
    wall_type: WallType

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateWall":
        wall = require_mapping(data.get("wall"), "wall")
        return cls(
            room_id=require_int(wall, "room_id"),
            start_row=_coordinate(wall, "start_row"),
            start_col=_coordinate(wall, "start_col"),
            end_row=_coordinate(wall, "end_row"),
            end_col=_coordinate(wall, "end_col"),
            orientation=require_enum(wall, "orientation", WallOrientation),
            wall_type=optional_enum(wall, "type", WallType, WallType.WALL),
        )


@dataclass(frozen=True)
class DeleteWall:
    name: ClassVar[str] = "delete_wall"
    wall_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteWall":
        return cls(wall_id=require_int(data, "wallId"))


@dataclass(frozen=True)
class DeleteAllCells:
    name: ClassVar[str] = "delete_all_cells"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteAllCells":
        return cls(room_id=require_int(data, "roomId"))


@dataclass(frozen=True)
class ListRoomUsers:
    name: ClassVar[str] = "list_room_users"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListRoomUsers":
        return cls(room_id=require_int(data, "roomId"))


@dataclass(frozen=True)
class AddRoomUser:
    name: ClassVar[str] = "add_room_user"
    room_id: int
    user_id: int
    role: RoomRole

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "AddRoomUser":
        return cls(
            room_id=require_int(data, "roomId"),
            user_id=require_int(data, "userId"),
            role=optional_enum(data, "role", RoomRole, RoomRole.MEMBER),
        )


@dataclass(frozen=True)
class RemoveRoomUser:
    name: ClassVar[str] = "remove_room_user"
    room_id: int
    access_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "RemoveRoomUser":
        return cls(room_id=require_int(data, "roomId"), access_id=require_int(data, "accessId"))


@dataclass(frozen=True)
class ListAvailableUsers:
    name: ClassVar[str] = "list_available_users"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListAvailableUsers":
        return cls(room_id=require_int(data, "roomId"))


ROOM_OPERATIONS = operation_registry(
    CreateRoom,
    UpdateRoom,
    DeleteRoom,
    ListRooms,
    GetRoom,
    CreateCell,
    UpdateCell,
    DeleteCell,
    CreateWall,
    DeleteWall,
    DeleteAllCells,
    ListRoomUsers,
    AddRoomUser,
    RemoveRoomUser,
    ListAvailableUsers,
)
