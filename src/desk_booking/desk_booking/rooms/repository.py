from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import CellType, RoomRole, WallOrientation, WallType
from .model import Room, RoomAccessGrant, RoomCell, RoomWall


class RoomRepository(Protocol):
    """Rooms, their layout (cells, walls) and their access grants."""

    # Access grants
    def get_room_role(self, room_id: int, user_id: int) -> Optional[RoomRole]:
        raise NotImplementedError

    def list_grants(self, room_id: int) -> Sequence[RoomAccessGrant]:
        raise NotImplementedError

    def add_grant(self, *, room_id: int, user_id: int, role: RoomRole) -> int:
        raise NotImplementedError

    def get_grant(self, access_id: int) -> Optional[RoomAccessGrant]:
        raise NotImplementedError

    def remove_grant(self, *, room_id: int, access_id: int) -> bool:
        raise NotImplementedError

    def list_admin_room_ids(self, user_id: int) -> Sequence[int]:
        raise NotImplementedError

    # Rooms
    def get_by_id(self, room_id: int) -> Optional[Room]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Room]:
        """Newest first."""
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Room]:
        """Rooms the user holds a grant for, newest first."""
        raise NotImplementedError

    def create_room(
        self,
        *,
        name: str,
        description: Optional[str],
        grid_width: int,
        grid_height: int,
        created_by: int,
    ) -> int:
        """Create the room and grant its creator the room ``admin`` role."""
        raise NotImplementedError

    def update_room(self, room_id: int, updates: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, room_id: int) -> bool:
        raise NotImplementedError

    # Read-side aggregates for room listings
    def count_desks(self, room_id: int) -> int:
        raise NotImplementedError

    def count_active_reservations(self, room_id: int, *, on: date) -> int:
        """Reservations covering ``on`` whose status is neither cancelled nor rejected."""
        raise NotImplementedError

    # Layout
    def list_cells(self, room_id: int) -> Sequence[RoomCell]:
        raise NotImplementedError

    def get_cell(self, cell_id: int) -> Optional[RoomCell]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_cell(self, cell_id: int, updates: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_cell(self, cell_id: int) -> bool:
        raise NotImplementedError

    def list_walls(self, room_id: int) -> Sequence[RoomWall]:
        raise NotImplementedError

    def get_wall(self, wall_id: int) -> Optional[RoomWall]:
        raise NotImplementedError

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
        raise NotImplementedError

    def delete_wall(self, wall_id: int) -> bool:
        raise NotImplementedError

    def clear_layout(self, room_id: int) -> None:
        """Delete every wall and cell of the room."""
        raise NotImplementedError
