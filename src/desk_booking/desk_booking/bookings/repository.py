from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import OfficeBooking


class OfficeBookingRepository(Protocol):
    def get_by_id(self, booking_id: int) -> Optional[OfficeBooking]:
        raise NotImplementedError

    def has_conflict(
        self,
        office_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """True if any booking of the office overlaps ``[start_time, end_time)``."""
        raise NotImplementedError

    def insert_if_free(
        self,
        *,
        office_id: int,
        user_id: Optional[int],
        start_time: datetime,
        end_time: datetime,
        is_admin_block: bool,
        created_by: int,
    ) -> Optional[int]:
        """Insert atomically with a fresh conflict check.

        Returns the new id, or None when the slot was taken meanwhile.
        """
        raise NotImplementedError

    def reschedule_if_free(self, booking_id: int, *, office_id: int, start_time: datetime, end_time: datetime) -> bool:
        """Move a booking atomically; False when the new slot overlaps another booking."""
        raise NotImplementedError

    def delete_by_id(self, booking_id: int) -> bool:
        raise NotImplementedError

    def list_by_office(self, office_id: int, *, start_from: datetime, end_until: datetime) -> Sequence[dict]:
        """Bookings fully inside the window, by start time, with a ``users`` summary."""
        raise NotImplementedError

    def list_by_user(self, user_id: int) -> Sequence[dict]:
        """The user's bookings by start time, with an ``offices`` summary."""
        raise NotImplementedError
