from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    Accepts a trailing ``Z`` or an explicit offset. Values without an offset
    are taken as UTC already.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (the way it is stored).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_utc() -> date:
    return now_utc().date()
