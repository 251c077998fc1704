"""
Access Code Repository Interface.
Storage operations the access code engine relies on.
"""

from datetime import datetime
from typing import List, Optional

from cinegate.domain.repositories.base import BaseRepository
from cinegate.domain.models.access_code import AccessCode


class AccessCodeRepository(BaseRepository[AccessCode]):
    """Interface for AccessCode-specific operations."""

    def get_by_code(self, code: str) -> Optional[AccessCode]:
        """Get a code by its (already normalized) text, whatever its state."""
        ...

    def code_exists(self, code: str) -> bool:
        ...

    def reload(self, code_id: int) -> Optional[AccessCode]:
        """Fetch a code bypassing any state cached in the current session."""
        ...

    def create_code(self, code: str, created_by: str, created_at: datetime, expires_at: datetime) -> AccessCode:
        """Persist a new active code. Raises IntegrityError on a duplicate code."""
        ...

    def deactivate_others(self, created_by: str, keep_id: int, action: str) -> int:
        """Deactivate every other active code of an owner. Returns the row count."""
        ...

    def consume(self, code_id: int, used_by: Optional[str], now: datetime, commit: bool = True) -> bool:
        """Mark a code used only if it is still consumable at write time."""
        ...

    def revoke(self, code_id: int) -> bool:
        """Deactivate a code if it is active. Returns False when nothing changed."""
        ...

    def get_current_for_owner(self, created_by: str, now: datetime) -> Optional[AccessCode]:
        ...

    def list_all(self) -> List[AccessCode]:
        """All codes, newest first."""
        ...

    def delete_by_owner(self, created_by: str) -> int:
        ...
