from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Global user role."""

    MEMBER = "member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class RoomRole(str, Enum):
    """Role granted to a user inside a single room (room_access.role)."""

    ADMIN = "admin"
    MEMBER = "member"


class CellType(str, Enum):
    EMPTY = "empty"
    DESK = "desk"
    PREMIUM_DESK = "premium_desk"
    OFFICE = "office"
    ENTRANCE = "entrance"
    WALL = "wall"


class WallOrientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class WallType(str, Enum):
    WALL = "wall"
    ENTRANCE = "entrance"


class ReservationType(str, Enum):
    HALF_DAY = "half_day"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    SEMESTER = "semester"
    MEETING = "meeting"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class TimeSegment(str, Enum):
    AM = "AM"
    PM = "PM"
    FULL = "FULL"
