from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; ``password_hash`` never leaves the service layer, use
    ``to_public`` for API output.
    """

    user_id: int
    username: str
    full_name: str
    password_hash: str
    role: Role
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_public(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }

    def to_summary(self) -> dict:
        return {"id": self.user_id, "username": self.username, "full_name": self.full_name}
