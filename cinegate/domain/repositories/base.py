"""
Base Repository Interface.
Unit-of-work and lookup operations every repository shares.
"""

from typing import Any, Optional, Protocol, TypeVar

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface shared by all repositories."""

    def commit(self) -> None:
        """Commit the current unit of work."""
        ...

    def rollback(self) -> None:
        """Discard the current unit of work."""
        ...

    def savepoint(self):
        """Context manager for a nested transaction (SAVEPOINT)."""
        ...

    def get_by_id(self, id: Any) -> Optional[T]:
        """Get a single entity by ID."""
        ...
