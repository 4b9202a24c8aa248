from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Office:
    office_id: int
    name: str
    location: str
    is_shared: bool
    created_by: int
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.office_id,
            "name": self.name,
            "location": self.location,
            "is_shared": self.is_shared,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }
