from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional

from ..common.operations import operation_registry
from ..common.validators import (
    optional_bool,
    optional_enum,
    require_bool,
    require_enum,
    require_int,
    require_mapping,
    require_str,
)
from ..core.enums import Role
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class CreateUser:
    name: ClassVar[str] = "create"
    username: str
    password: str
    full_name: str
    role: Role = Role.MEMBER
    is_active: bool = True

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateUser":
        password = data.get("password")
        if not isinstance(password, str) or not password:
            raise ValidationError("password is required")
        return cls(
            username=require_str(data, "username"),
            password=password,
            full_name=require_str(data, "full_name"),
            role=optional_enum(data, "role", Role, Role.MEMBER),
            is_active=optional_bool(data, "is_active", True),
        )


@dataclass(frozen=True)
class UpdateUser:
    name: ClassVar[str] = "update"
    user_id: int
    username: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateUser":
        updates = require_mapping(data.get("updates"), "updates")
        password = updates.get("password")
        if password is not None and (not isinstance(password, str) or not password):
            raise ValidationError("password must be a non-empty string")
        op = cls(
            user_id=require_int(data, "id"),
            username=require_str(updates, "username") if "username" in updates else None,
            full_name=require_str(updates, "full_name") if "full_name" in updates else None,
            role=require_enum(updates, "role", Role) if "role" in updates else None,
            is_active=require_bool(updates, "is_active") if "is_active" in updates else None,
            password=password,
        )
        if all(v is None for v in (op.username, op.full_name, op.role, op.is_active, op.password)):
            raise ValidationError("updates must contain at least one of: username, full_name, role, is_active, password")
        return op


@dataclass(frozen=True)
class DeleteUser:
    name: ClassVar[str] = "delete"
    user_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteUser":
        return cls(user_id=require_int(data, "id"))


@dataclass(frozen=True)
class ListUsers:
    name: ClassVar[str] = "list"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListUsers":
        return cls()


USER_OPERATIONS = operation_registry(CreateUser, UpdateUser, DeleteUser, ListUsers)
