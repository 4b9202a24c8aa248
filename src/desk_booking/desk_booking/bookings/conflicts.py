"""Time rules for office bookings.

Intervals are half-open, ``[start, end)``: a booking ending at 11:00 and one
starting at 11:00 do not overlap.
"""
from __future__ import annotations

from datetime import datetime

from ..core.constants import BOOKING_INCREMENT_MINUTES
from ..core.exceptions import ValidationError


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def is_valid_15min_increment(value: datetime) -> bool:
    return value.minute % BOOKING_INCREMENT_MINUTES == 0


def validate_booking_window(start_time: datetime, end_time: datetime) -> None:
    """Checks that need no store access, in order: increments, then range."""
    if not is_valid_15min_increment(start_time) or not is_valid_15min_increment(end_time):
        raise ValidationError(f"Booking times must be in {BOOKING_INCREMENT_MINUTES}-minute increments")
    if end_time <= start_time:
        raise ValidationError("End time must be after start time")
