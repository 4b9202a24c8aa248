from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class OfficeBooking:
    """A reserved ``[start_time, end_time)`` slot of one office.

    ``user_id`` is None exactly for admin blocks.
    """

    booking_id: int
    office_id: int
    user_id: Optional[int]
    start_time: datetime
    end_time: datetime
    is_admin_block: bool
    created_by: int
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "office_id": self.office_id,
            "user_id": self.user_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_admin_block": self.is_admin_block,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }
