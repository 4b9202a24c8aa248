from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

from ..access.policy import AccessPolicy, is_super_admin
from ..common.datetime_utils import today_utc
from ..core.exceptions import NotFoundError, ValidationError
from ..sessions.model import RequestContext
from ..users.repository import UserRepository
from .model import Room, RoomCell
from .operations import (
    AddRoomUser,
    CreateCell,
    CreateRoom,
    CreateWall,
    DeleteAllCells,
    DeleteCell,
    DeleteRoom,
    DeleteWall,
    GetRoom,
    ListAvailableUsers,
    ListRooms,
    ListRoomUsers,
    RemoveRoomUser,
    UpdateCell,
    UpdateRoom,
)
from .repository import RoomRepository

logger = logging.getLogger(__name__)

LAYOUT_DENIED = "Only room admins can modify the layout"
USERS_DENIED = "Only room admins can manage room users"


class RoomService:
    """Use case: rooms, their grid layout and who may use them.

    Layout and membership changes need the room admin role (or super_admin);
    reading a room needs any grant in it.
    """

    def __init__(
        self,
        rooms: RoomRepository,
        users: UserRepository,
        policy: AccessPolicy,
        clock: Callable[[], date] = today_utc,
    ):
        self._rooms = rooms
        self._users = users
        self._policy = policy
        self._today = clock
        self._handlers: Dict[type, Callable[[RequestContext, Any], Any]] = {
            CreateRoom: self._create,
            UpdateRoom: self._update,
            DeleteRoom: self._delete,
            ListRooms: self._list,
            GetRoom: self._get,
            CreateCell: self._create_cell,
            UpdateCell: self._update_cell,
            DeleteCell: self._delete_cell,
            CreateWall: self._create_wall,
            DeleteWall: self._delete_wall,
            DeleteAllCells: self._delete_all_cells,
            ListRoomUsers: self._list_room_users,
            AddRoomUser: self._add_room_user,
            RemoveRoomUser: self._remove_room_user,
            ListAvailableUsers: self._list_available_users,
        }

    def dispatch(self, ctx: RequestContext, op) -> Any:
        return self._handlers[type(op)](ctx, op)

    def get_room(self, room_id: int) -> Room:
        room = self._rooms.get_by_id(room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room

    def _get_cell(self, cell_id: int) -> RoomCell:
        cell = self._rooms.get_cell(cell_id)
        if not cell:
            raise NotFoundError("Cell not found")
        return cell

    def _check_position(self, room: Room, x: int, y: int, *, ignore_cell_id: Optional[int] = None) -> None:
        if x >= room.grid_width or y >= room.grid_height:
            raise ValidationError("Cell position is outside the room grid")
        for cell in self._rooms.list_cells(room.room_id):
            if cell.x == x and cell.y == y and cell.cell_id != ignore_cell_id:
                raise ValidationError("A cell already exists at this position")

    # -------- Rooms --------
    def _create(self, ctx: RequestContext, op: CreateRoom) -> dict:
        self._policy.require_global_admin(ctx, "Only admins can create rooms")
        room_id = self._rooms.create_room(
            name=op.room_name,
            description=op.description,
            grid_width=op.grid_width,
            grid_height=op.grid_height,
            created_by=ctx.user_id,
        )
        logger.info("Room %s created by user %s", room_id, ctx.user_id)
        return self.get_room(room_id).to_dict()

    def _update(self, ctx: RequestContext, op: UpdateRoom) -> dict:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, "Only room admins can update rooms")
        if not self._rooms.update_room(op.room_id, op.updates):
            raise NotFoundError("Room not found")
        return self.get_room(op.room_id).to_dict()

    def _delete(self, ctx: RequestContext, op: DeleteRoom) -> dict:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, "Only room admins can delete rooms")
        if not self._rooms.delete_by_id(op.room_id):
            raise NotFoundError("Room not found")
        logger.info("Room %s deleted by user %s", op.room_id, ctx.user_id)
        return {"success": True}

    def _list(self, ctx: RequestContext, op: ListRooms) -> list:
        if is_super_admin(ctx):
            rooms = self._rooms.list_all()
        else:
            rooms = self._rooms.list_for_user(ctx.user_id)

        today = self._today()
        result = []
        for room in rooms:
            item = room.to_dict()
            item["totalDesks"] = self._rooms.count_desks(room.room_id)
            item["activeReservations"] = self._rooms.count_active_reservations(room.room_id, on=today)
            result.append(item)
        return result

    def _get(self, ctx: RequestContext, op: GetRoom) -> dict:
        room = self.get_room(op.room_id)
        self._policy.require_room_access(ctx, op.room_id, "You do not have access to this room")
        return {
            "room": room.to_dict(),
            "cells": [c.to_dict() for c in self._rooms.list_cells(room.room_id)],
            "walls": [w.to_dict() for w in self._rooms.list_walls(room.room_id)],
        }

    # -------- Layout --------
    def _create_cell(self, ctx: RequestContext, op: CreateCell) -> dict:
        room = self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, LAYOUT_DENIED)
        self._check_position(room, op.x, op.y)
        cell_id = self._rooms.create_cell(
            room_id=op.room_id,
            x=op.x,
            y=op.y,
            cell_type=op.cell_type,
            label=op.label,
            default_owner_id=op.default_owner_id,
        )
        return self._get_cell(cell_id).to_dict()

    def _update_cell(self, ctx: RequestContext, op: UpdateCell) -> dict:
        cell = self._get_cell(op.cell_id)
        self._policy.require_room_admin(ctx, cell.room_id, LAYOUT_DENIED)
        if "x" in op.updates or "y" in op.updates:
            room = self.get_room(cell.room_id)
            x = op.updates.get("x", cell.x)
            y = op.updates.get("y", cell.y)
            self._check_position(room, x, y, ignore_cell_id=cell.cell_id)
        if not self._rooms.update_cell(cell.cell_id, op.updates):
            raise NotFoundError("Cell not found")
        return self._get_cell(cell.cell_id).to_dict()

    def _delete_cell(self, ctx: RequestContext, op: DeleteCell) -> dict:
        cell = self._get_cell(op.cell_id)
        self._policy.require_room_admin(ctx, cell.room_id, LAYOUT_DENIED)
        if not self._rooms.delete_cell(cell.cell_id):
            raise NotFoundError("Cell not found")
        return {"success": True}

    def _create_wall(self, ctx: RequestContext, op: CreateWall) -> dict:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, LAYOUT_DENIED)
        wall_id = self._rooms.create_wall(
            room_id=op.room_id,
            start_row=op.start_row,
            start_col=op.start_col,
            end_row=op.end_row,
            end_col=op.end_col,
            orientation=op.orientation,
            wall_type=op.wall_type,
        )
        wall = self._rooms.get_wall(wall_id)
        if not wall:
            raise NotFoundError("Wall not found")
        return wall.to_dict()

    def _delete_wall(self, ctx: RequestContext, op: DeleteWall) -> dict:
        wall = self._rooms.get_wall(op.wall_id)
        if not wall:
            raise NotFoundError("Wall not found")
        self._policy.require_room_admin(ctx, wall.room_id, LAYOUT_DENIED)
        self._rooms.delete_wall(wall.wall_id)
        return {"success": True}

    def _delete_all_cells(self, ctx: RequestContext, op: DeleteAllCells) -> dict:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, LAYOUT_DENIED)
        self._rooms.clear_layout(op.room_id)
        logger.info("Layout of room %s cleared by user %s", op.room_id, ctx.user_id)
        return {"success": True}

    # -------- Membership --------
    def _list_room_users(self, ctx: RequestContext, op: ListRoomUsers) -> list:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, USERS_DENIED)
        return [g.to_dict() for g in self._rooms.list_grants(op.room_id)]

    def _add_room_user(self, ctx: RequestContext, op: AddRoomUser) -> dict:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, USERS_DENIED)
        user = self._users.get_by_id(op.user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found")
        if self._rooms.get_room_role(op.room_id, user.user_id) is not None:
            raise ValidationError("User already has access to this room")

        access_id = self._rooms.add_grant(room_id=op.room_id, user_id=user.user_id, role=op.role)
        logger.info("User %s granted %s in room %s by user %s", user.user_id, op.role.value, op.room_id, ctx.user_id)
        grant = self._rooms.get_grant(access_id)
        if not grant:
            raise NotFoundError("Access grant not found")
        return grant.to_dict()

    def _remove_room_user(self, ctx: RequestContext, op: RemoveRoomUser) -> dict:
        self._policy.require_room_admin(ctx, op.room_id, USERS_DENIED)
        if not self._rooms.remove_grant(room_id=op.room_id, access_id=op.access_id):
            raise NotFoundError("Access grant not found")
        return {"success": True}

    def _list_available_users(self, ctx: RequestContext, op: ListAvailableUsers) -> list:
        self.get_room(op.room_id)
        self._policy.require_room_admin(ctx, op.room_id, USERS_DENIED)
        granted = {g.user_id for g in self._rooms.list_grants(op.room_id)}
        return [u.to_summary() for u in self._users.list_active() if u.user_id not in granted]
