from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from .model import Office


class OfficeRepository(Protocol):
    def get_by_id(self, office_id: int) -> Optional[Office]:
        raise NotImplementedError

    def list_offices(self, *, shared_only: bool) -> Sequence[Office]:
        """Newest first."""
        raise NotImplementedError

    def create_office(self, *, name: str, location: str, is_shared: bool, created_by: int) -> int:
        raise NotImplementedError

    def update_office(self, office_id: int, updates: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, office_id: int) -> bool:
        raise NotImplementedError
