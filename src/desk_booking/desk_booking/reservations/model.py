from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ReservationStatus, ReservationType, TimeSegment


@dataclass(frozen=True)
class Reservation:
    """A desk (room cell) held by one user for an inclusive date range."""

    reservation_id: int
    room_id: int
    cell_id: int
    user_id: int
    reservation_type: ReservationType
    status: ReservationStatus
    date_start: date
    date_end: date
    time_segment: TimeSegment = TimeSegment.FULL
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    assignment_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.reservation_id,
            "room_id": self.room_id,
            "cell_id": self.cell_id,
            "user_id": self.user_id,
            "type": self.reservation_type.value,
            "status": self.status.value,
            "date_start": self.date_start.isoformat(),
            "date_end": self.date_end.isoformat(),
            "time_segment": self.time_segment.value,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at,
            "created_at": self.created_at,
            "assignment_id": self.assignment_id,
        }


@dataclass(frozen=True)
class FixedAssignment:
    """A desk handed to one user for a whole period by a room admin.

    Every day of the period is also held as an approved FULL reservation
    that points back at the assignment.
    """

    assignment_id: int
    room_id: int
    cell_id: int
    assigned_to: int
    date_start: date
    date_end: date
    created_by: int
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.assignment_id,
            "room_id": self.room_id,
            "cell_id": self.cell_id,
            "assigned_to": self.assigned_to,
            "date_start": self.date_start.isoformat(),
            "date_end": self.date_end.isoformat(),
            "created_by": self.created_by,
            "created_at": self.created_at,
        }

    def as_reservation_dict(self) -> dict:
        """Shape used when assignments are listed next to reservations."""
        return {
            **self.to_dict(),
            "user_id": self.assigned_to,
            "status": ReservationStatus.APPROVED.value,
            "type": "fixed_assignment",
            "time_segment": TimeSegment.FULL.value,
            "approved_by": self.created_by,
            "approved_at": self.created_at,
        }
