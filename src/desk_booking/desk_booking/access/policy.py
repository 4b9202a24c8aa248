"""Authorization predicates.

Global role and per-room role are two separate capability sets. A global
``super_admin`` short-circuits every room-level check; otherwise the role in
``room_access`` decides room-scoped actions. Nothing here is cached: grants
can change between requests, so each call reads the store again.
"""
from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role, RoomRole
from ..core.exceptions import AuthorizationError
from ..offices.model import Office
from ..sessions.model import RequestContext


class RoomRoleLookup(Protocol):
    def get_room_role(self, room_id: int, user_id: int) -> Optional[RoomRole]:
        raise NotImplementedError


def is_global_admin(ctx: RequestContext) -> bool:
    return ctx.role in {Role.ADMIN, Role.SUPER_ADMIN}


def is_super_admin(ctx: RequestContext) -> bool:
    return ctx.role == Role.SUPER_ADMIN


def can_access_office(ctx: RequestContext, office: Office) -> bool:
    return is_global_admin(ctx) or office.is_shared


class AccessPolicy:
    def __init__(self, grants: RoomRoleLookup):
        self._grants = grants

    def room_role(self, ctx: RequestContext, room_id: int) -> Optional[RoomRole]:
        return self._grants.get_room_role(int(room_id), ctx.user_id)

    def is_room_admin(self, ctx: RequestContext, room_id: int) -> bool:
        if is_super_admin(ctx):
            return True
        return self.room_role(ctx, room_id) == RoomRole.ADMIN

    def has_room_access(self, ctx: RequestContext, room_id: int) -> bool:
        if is_super_admin(ctx):
            return True
        return self.room_role(ctx, room_id) is not None

    # Raising variants used by the handlers.

    def require_global_admin(self, ctx: RequestContext, message: str) -> None:
        if not is_global_admin(ctx):
            raise AuthorizationError(message)

    def require_room_admin(self, ctx: RequestContext, room_id: int, message: str) -> None:
        if not self.is_room_admin(ctx, room_id):
            raise AuthorizationError(message)

    def require_room_access(self, ctx: RequestContext, room_id: int, message: str) -> None:
        if not self.has_room_access(ctx, room_id):
            raise AuthorizationError(message)
