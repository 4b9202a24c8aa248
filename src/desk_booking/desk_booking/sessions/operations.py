from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from ..common.operations import operation_registry
from ..common.validators import require_str


@dataclass(frozen=True)
class Login:
    name: ClassVar[str] = "login"
    username: str
    password: str

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Login":
        return cls(username=require_str(data, "username"), password=require_str(data, "password"))


@dataclass(frozen=True)
class Logout:
    name: ClassVar[str] = "logout"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Logout":
        return cls()


AUTH_OPERATIONS = operation_registry(Login, Logout)
