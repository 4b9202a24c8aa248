from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional

from ..common.operations import operation_registry
from ..common.validators import optional_bool, require_bool, require_int, require_mapping, require_str
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ListOffices:
    name: ClassVar[str] = "list"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListOffices":
        return cls()


@dataclass(frozen=True)
class GetOffice:
    name: ClassVar[str] = "get"
    office_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "GetOffice":
        return cls(office_id=require_int(data, "officeId"))


@dataclass(frozen=True)
class CreateOffice:
    name: ClassVar[str] = "create"
    office_name: str
    location: str
    is_shared: bool

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateOffice":
        return cls(
            office_name=require_str(data, "name"),
            location=require_str(data, "location"),
            is_shared=optional_bool(data, "is_shared", False),
        )


@dataclass(frozen=True)
class UpdateOffice:
    name: ClassVar[str] = "update"
    office_id: int
    office_name: Optional[str] = None
    location: Optional[str] = None
    is_shared: Optional[bool] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateOffice":
        updates = require_mapping(data.get("updates"), "updates")
        op = cls(
            office_id=require_int(data, "officeId"),
            office_name=require_str(updates, "name") if "name" in updates else None,
            location=require_str(updates, "location") if "location" in updates else None,
            is_shared=require_bool(updates, "is_shared") if "is_shared" in updates else None,
        )
        if not op.columns():
            raise ValidationError("updates must contain at least one of: name, location, is_shared")
        return op

    def columns(self) -> dict:
        cols = {"name": self.office_name, "location": self.location, "is_shared": self.is_shared}
        return {k: v for k, v in cols.items() if v is not None}


@dataclass(frozen=True)
class DeleteOffice:
    name: ClassVar[str] = "delete"
    office_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteOffice":
        return cls(office_id=require_int(data, "officeId"))


@dataclass(frozen=True)
class ToggleShare:
    name: ClassVar[str] = "toggle_share"
    office_id: int
    is_shared: bool

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ToggleShare":
        return cls(office_id=require_int(data, "officeId"), is_shared=require_bool(data, "is_shared"))


OFFICE_OPERATIONS = operation_registry(ListOffices, GetOffice, CreateOffice, UpdateOffice, DeleteOffice, ToggleShare)
