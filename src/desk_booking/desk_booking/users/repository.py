from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        full_name: str,
        password_hash: str,
        role: Role,
        is_active: bool = True,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> bool:
        """``updates`` maps column names to already-validated values."""
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        """Newest first."""
        raise NotImplementedError

    def list_active(self) -> Sequence[User]:
        raise NotImplementedError
