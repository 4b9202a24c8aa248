from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Mapping

from ..common.operations import operation_registry
from ..common.validators import require_int, require_timestamp


@dataclass(frozen=True)
class ListByOffice:
    name: ClassVar[str] = "list_by_office"
    office_id: int
    start_date: datetime
    end_date: datetime

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListByOffice":
        return cls(
            office_id=require_int(data, "officeId"),
            start_date=require_timestamp(data, "startDate"),
            end_date=require_timestamp(data, "endDate"),
        )


@dataclass(frozen=True)
class ListByUser:
    name: ClassVar[str] = "list_by_user"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListByUser":
        return cls()


@dataclass(frozen=True)
class CreateBooking:
    name: ClassVar[str] = "create"
    office_id: int
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateBooking":
        return cls(
            office_id=require_int(data, "officeId"),
            start_time=require_timestamp(data, "startTime"),
            end_time=require_timestamp(data, "endTime"),
        )


@dataclass(frozen=True)
class CreateAdminBlock(CreateBooking):
    name: ClassVar[str] = "create_admin_block"


@dataclass(frozen=True)
class UpdateBooking:
    name: ClassVar[str] = "update"
    booking_id: int
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateBooking":
        return cls(
            booking_id=require_int(data, "bookingId"),
            start_time=require_timestamp(data, "startTime"),
            end_time=require_timestamp(data, "endTime"),
        )


@dataclass(frozen=True)
class DeleteBooking:
    name: ClassVar[str] = "delete"
    booking_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteBooking":
        return cls(booking_id=require_int(data, "bookingId"))


BOOKING_OPERATIONS = operation_registry(
    ListByOffice, ListByUser, CreateBooking, CreateAdminBlock, UpdateBooking, DeleteBooking
)
