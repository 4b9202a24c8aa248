"""Date and half-day rules for desk reservations.

Date ranges are inclusive on both ends. Two reservations of the same desk on
overlapping days clash unless they take different halves of the day.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

from ..core.enums import TimeSegment
from ..core.exceptions import ValidationError


def dates_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a <= end_b and start_b <= end_a


def segments_clash(a: TimeSegment, b: TimeSegment) -> bool:
    if a == TimeSegment.FULL or b == TimeSegment.FULL:
        return True
    return a == b


def validate_date_range(date_start: date, date_end: date) -> None:
    if date_end < date_start:
        raise ValidationError("End date must not be before start date")


def one_year_after(day: date) -> date:
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        # 29 February
        return day.replace(year=day.year + 1, day=28)


def validate_assignment_period(date_start: date, date_end: date) -> None:
    validate_date_range(date_start, date_end)
    if date_end > one_year_after(date_start):
        raise ValidationError("Assignment period cannot exceed 1 year")


def each_day(date_start: date, date_end: date) -> Iterator[date]:
    day = date_start
    while day <= date_end:
        yield day
        day += timedelta(days=1)
