"""
User Repository Interface.
"""

from datetime import datetime
from typing import List, Optional

from cinegate.domain.repositories.base import BaseRepository
from cinegate.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup."""
        ...

    def username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        ...

    def add(self, user: User) -> User:
        """Stage a new user in the current transaction without committing."""
        ...

    def save(self, user: User) -> User:
        """Commit pending changes to a user."""
        ...

    def discard(self, user: User) -> None:
        """Stage a user deletion in the current transaction."""
        ...

    def touch_last_active(self, user_id: str, now: datetime) -> None:
        ...

    def list_all(self) -> List[User]:
        """All users, newest first."""
        ...
