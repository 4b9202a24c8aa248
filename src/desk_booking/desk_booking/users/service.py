from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from werkzeug.security import generate_password_hash

from ..access.policy import AccessPolicy
from ..common.validators import require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..sessions.model import RequestContext
from .model import User
from .operations import CreateUser, DeleteUser, ListUsers, UpdateUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Use case: manage user accounts (global admins only)."""

    def __init__(self, users: UserRepository, policy: AccessPolicy):
        self._users = users
        self._policy = policy
        self._handlers: Dict[type, Callable[[RequestContext, Any], Any]] = {
            CreateUser: self._create,
            UpdateUser: self._update,
            DeleteUser: self._delete,
            ListUsers: self._list,
        }

    def dispatch(self, ctx: RequestContext, op) -> Any:
        self._policy.require_global_admin(ctx, "Unauthorized")
        return self._handlers[type(op)](ctx, op)

    def _get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _create(self, ctx: RequestContext, op: CreateUser) -> dict:
        require_min_length(op.password, "password", MIN_PASSWORD_LENGTH)
        if self._users.get_by_username(op.username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            username=op.username,
            full_name=op.full_name,
            password_hash=generate_password_hash(op.password),
            role=op.role,
            is_active=op.is_active,
        )
        logger.info("User %s created by %s with role %s", user_id, ctx.user_id, op.role.value)
        return self._get_user(user_id).to_public()

    def _update(self, ctx: RequestContext, op: UpdateUser) -> dict:
        self._get_user(op.user_id)

        updates: Dict[str, Any] = {}
        if op.username is not None:
            other = self._users.get_by_username(op.username)
            if other and other.user_id != op.user_id:
                raise ValidationError("Username already exists")
            updates["username"] = op.username
        if op.full_name is not None:
            updates["full_name"] = op.full_name
        if op.role is not None:
            updates["role"] = op.role
        if op.is_active is not None:
            updates["is_active"] = op.is_active
        if op.password is not None:
            require_min_length(op.password, "password", MIN_PASSWORD_LENGTH)
            updates["password_hash"] = generate_password_hash(op.password)

        if not self._users.update_user(op.user_id, updates):
            raise NotFoundError("User not found")
        return self._get_user(op.user_id).to_public()

    def _delete(self, ctx: RequestContext, op: DeleteUser) -> dict:
        if op.user_id == ctx.user_id:
            raise ValidationError("You cannot delete your own account")
        if not self._users.delete_by_id(op.user_id):
            raise NotFoundError("User not found")
        logger.info("User %s deleted by %s", op.user_id, ctx.user_id)
        return {"success": True}

    def _list(self, ctx: RequestContext, op: ListUsers) -> list:
        return [u.to_public() for u in self._users.list_all()]
