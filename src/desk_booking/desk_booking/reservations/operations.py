from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, ClassVar, Mapping

from ..common.operations import operation_registry
from ..common.validators import optional_enum, require_date, require_enum, require_int
from ..core.enums import ReservationType, TimeSegment


@dataclass(frozen=True)
class CreateReservation:
    name: ClassVar[str] = "create"
    room_id: int
    cell_id: int
    date_start: date
    date_end: date
    reservation_type: ReservationType
    time_segment: TimeSegment

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateReservation":
        return cls(
            room_id=require_int(data, "room_id"),
            cell_id=require_int(data, "cell_id"),
            date_start=require_date(data, "date_start"),
            date_end=require_date(data, "date_end"),
            reservation_type=require_enum(data, "type", ReservationType),
            time_segment=optional_enum(data, "time_segment", TimeSegment, TimeSegment.FULL),
        )


@dataclass(frozen=True)
class ListMyReservations:
    name: ClassVar[str] = "list_my_reservations"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListMyReservations":
        return cls()


@dataclass(frozen=True)
class ListRoomReservations:
    name: ClassVar[str] = "list_room_reservations"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListRoomReservations":
        return cls(room_id=require_int(data, "roomId"))


@dataclass(frozen=True)
class ListPendingApprovals:
    name: ClassVar[str] = "list_pending_approvals"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListPendingApprovals":
        return cls()


@dataclass(frozen=True)
class ApproveReservation:
    name: ClassVar[str] = "approve"
    reservation_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ApproveReservation":
        return cls(reservation_id=require_int(data, "reservationId"))


@dataclass(frozen=True)
class RejectReservation(ApproveReservation):
    name: ClassVar[str] = "reject"


@dataclass(frozen=True)
class CancelReservation(ApproveReservation):
    name: ClassVar[str] = "cancel"


@dataclass(frozen=True)
class CheckAvailability:
    name: ClassVar[str] = "check_availability"
    cell_id: int
    date_start: date
    date_end: date

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CheckAvailability":
        return cls(
            cell_id=require_int(data, "cellId"),
            date_start=require_date(data, "date_start"),
            date_end=require_date(data, "date_end"),
        )


@dataclass(frozen=True)
class CreateFixedAssignment:
    name: ClassVar[str] = "create_fixed_assignment"
    room_id: int
    cell_id: int
    assigned_to: int
    date_start: date
    date_end: date

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateFixedAssignment":
        return cls(
            room_id=require_int(data, "room_id"),
            cell_id=require_int(data, "cell_id"),
            assigned_to=require_int(data, "assigned_to"),
            date_start=require_date(data, "date_start"),
            date_end=require_date(data, "date_end"),
        )


@dataclass(frozen=True)
class ListFixedAssignments:
    name: ClassVar[str] = "list_fixed_assignments"
    room_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListFixedAssignments":
        return cls(room_id=require_int(data, "roomId"))


@dataclass(frozen=True)
class DeleteFixedAssignment:
    name: ClassVar[str] = "delete_fixed_assignment"
    assignment_id: int

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DeleteFixedAssignment":
        return cls(assignment_id=require_int(data, "assignmentId"))


RESERVATION_OPERATIONS = operation_registry(
    CreateReservation,
    ListMyReservations,
    ListRoomReservations,
    ListPendingApprovals,
    ApproveReservation,
    RejectReservation,
    CancelReservation,
    CheckAvailability,
    CreateFixedAssignment,
    ListFixedAssignments,
    DeleteFixedAssignment,
)
