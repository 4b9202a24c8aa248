from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReservationStatus, ReservationType, TimeSegment
from .model import FixedAssignment, Reservation


class ReservationRepository(Protocol):
    def get_by_id(self, reservation_id: int) -> Optional[Reservation]:
        raise NotImplementedError

    def user_has_overlap(self, user_id: int, date_start: date, date_end: date) -> bool:
        """True if the user holds a pending or approved reservation on any of the days."""
        raise NotImplementedError

    def list_approved_for_cell(self, cell_id: int, date_start: date, date_end: date) -> Sequence[Reservation]:
        raise NotImplementedError

    def insert_if_free(
        self,
        *,
        room_id: int,
        cell_id: int,
        user_id: int,
        reservation_type: ReservationType,
        date_start: date,
        date_end: date,
        time_segment: TimeSegment,
        approved_by: int,
        approved_at: datetime,
    ) -> Optional[int]:
        """Insert an approved reservation after re-checking the desk under a lock.

        Returns the new id, or None when a clashing reservation appeared meanwhile.
        """
        raise NotImplementedError

    def set_status(
        self,
        reservation_id: int,
        status: ReservationStatus,
        *,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        raise NotImplementedError

    def list_by_user(self, user_id: int) -> Sequence[dict]:
        """Newest ``date_start`` first, with ``rooms`` and ``room_cells`` summaries."""
        raise NotImplementedError

    def list_by_room(self, room_id: int) -> Sequence[dict]:
        """Newest ``date_start`` first, with ``users`` and ``room_cells`` summaries."""
        raise NotImplementedError

    def list_pending(self, room_ids: Optional[Sequence[int]] = None) -> Sequence[dict]:
        """Pending reservations, oldest request first; all rooms when ``room_ids`` is None."""
        raise NotImplementedError

    def list_by_assignment(self, assignment_id: int) -> Sequence[Reservation]:
        raise NotImplementedError

    def get_assignment(self, assignment_id: int) -> Optional[FixedAssignment]:
        raise NotImplementedError

    def user_has_assignment(self, user_id: int, date_start: date, date_end: date) -> bool:
        raise NotImplementedError

    def list_assignments_for_cell(self, cell_id: int, date_start: date, date_end: date) -> Sequence[FixedAssignment]:
        raise NotImplementedError

    def create_assignment_if_free(
        self,
        *,
        room_id: int,
        cell_id: int,
        assigned_to: int,
        date_start: date,
        date_end: date,
        created_by: int,
        approved_at: datetime,
    ) -> Optional[int]:
        """Store the assignment plus one approved FULL reservation per day, under the cell lock.

        Returns the new assignment id, or None when the assignee or the desk
        got a clashing booking meanwhile.
        """
        raise NotImplementedError

    def delete_assignment(self, assignment_id: int) -> bool:
        """Drop the assignment and cancel the daily reservations it still holds."""
        raise NotImplementedError

    def list_assignments_by_room(self, room_id: int) -> Sequence[dict]:
        """Oldest ``date_start`` first, with an ``assigned_user`` summary."""
        raise NotImplementedError

    def list_assignments_by_user(self, user_id: int) -> Sequence[dict]:
        """The user's assignments in reservation shape, with ``rooms`` and ``room_cells`` summaries."""
        raise NotImplementedError
