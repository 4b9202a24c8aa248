from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_timestamp

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


# Payload helpers: every operation payload is a JSON object decoded by Flask.

def require_mapping(data: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(f"{field_name} must be an object")
    return data


def require_str(data: Mapping[str, Any], key: str) -> str:
    return require_non_empty(data.get(key), key)


def optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip() or None


def require_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass; JSON true/false is never a valid id or coordinate
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{key} is required")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    if data.get(key) is None:
        return None
    return require_int(data, key)


def require_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def optional_bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    if data.get(key) is None:
        return default
    return require_bool(data, key)


def require_enum(data: Mapping[str, Any], key: str, enum_cls: Type[E]) -> E:
    value = data.get(key)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{key} must be one of: {allowed}")


def optional_enum(data: Mapping[str, Any], key: str, enum_cls: Type[E], default: Optional[E]) -> Optional[E]:
    if data.get(key) is None:
        return default
    return require_enum(data, key, enum_cls)


def require_timestamp(data: Mapping[str, Any], key: str) -> datetime:
    value = require_str(data, key)
    try:
        return parse_timestamp(value)
    except ValueError:
        raise ValidationError(f"{key} is not a valid ISO-8601 timestamp")


def require_date(data: Mapping[str, Any], key: str) -> date:
    value = require_str(data, key)
    try:
        # Full timestamps are accepted too; only the calendar day is kept.
        return parse_iso_date(value[:10])
    except ValueError:
        raise ValidationError(f"{key} is not a valid date (YYYY-MM-DD)")
