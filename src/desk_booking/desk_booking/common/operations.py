"""Closed operation sets for the ``{operation, data}`` endpoints.

Each resource declares its operations as frozen dataclasses with a ``name``
class attribute and a ``from_payload`` constructor. ``parse_operation`` turns
the raw request into one of them: an unknown name and a malformed payload are
reported as different errors.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Protocol, Type, TypeVar

from ..core.exceptions import InvalidOperationError
from .validators import require_mapping


class Operation(Protocol):
    name: ClassVar[str]

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Operation":
        raise NotImplementedError


O = TypeVar("O", bound=Operation)


def operation_registry(*operations: Type[O]) -> Dict[str, Type[O]]:
    return {op.name: op for op in operations}


def parse_operation(registry: Mapping[str, Type[O]], name: Any, data: Any) -> O:
    op_cls = registry.get(name) if isinstance(name, str) else None
    if op_cls is None:
        raise InvalidOperationError("Invalid operation")
    payload = require_mapping({} if data is None else data, "data")
    return op_cls.from_payload(payload)
