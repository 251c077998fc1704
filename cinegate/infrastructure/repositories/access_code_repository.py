"""
SQLAlchemy Implementation of AccessCode Repository.
"""

from datetime import datetime
from typing import List, Optional

from cinegate.domain.models.access_code import AccessCode
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyAccessCodeRepository(SQLAlchemyRepository[AccessCode], AccessCodeRepository):
    """AccessCode repository implementation using SQLAlchemy."""

    def get_by_code(self, code: str) -> Optional[AccessCode]:
        return self.db.query(AccessCode).filter(AccessCode.code == code).first()

    def code_exists(self, code: str) -> bool:
        return self.db.query(AccessCode.id).filter(AccessCode.code == code).first() is not None

    def reload(self, code_id: int) -> Optional[AccessCode]:
        return (
            self.db.query(AccessCode)
            .populate_existing()
            .filter(AccessCode.id == code_id)
            .first()
        )

    def create_code(self, code: str, created_by: str, created_at: datetime, expires_at: datetime) -> AccessCode:
        access_code = AccessCode(
            code=code,
            created_by=created_by,
            created_at=created_at,
            expires_at=expires_at,
            is_active=True,
        )
        self.db.add(access_code)
        self.commit()
        self.db.refresh(access_code)
        return access_code

    def deactivate_others(self, created_by: str, keep_id: int, action: str) -> int:
        count = (
            self.db.query(AccessCode)
            .filter(
                AccessCode.created_by == created_by,
                AccessCode.id != keep_id,
                AccessCode.is_active.is_(True),
            )
            .update({AccessCode.is_active: False, AccessCode.admin_action: action}, synchronize_session=False)
        )
        self.commit()
        return count

    def consume(self, code_id: int, used_by: Optional[str], now: datetime, commit: bool = True) -> bool:
        # Single UPDATE ... WHERE still-consumable: the database arbitrates concurrent consumers
        count = (
            self.db.query(AccessCode)
            .filter(
                AccessCode.id == code_id,
                AccessCode.is_active.is_(True),
                AccessCode.used_at.is_(None),
                AccessCode.expires_at > now,
            )
            .update(
                {
                    AccessCode.used_by: used_by,
                    AccessCode.used_at: now,
                    AccessCode.is_active: False,
                    AccessCode.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if commit:
            self.commit()
        return count == 1

    def revoke(self, code_id: int) -> bool:
        count = (
            self.db.query(AccessCode)
            .filter(AccessCode.id == code_id, AccessCode.is_active.is_(True))
            .update({AccessCode.is_active: False, AccessCode.admin_action: "revoked"}, synchronize_session=False)
        )
        self.commit()
        return count == 1

    def get_current_for_owner(self, created_by: str, now: datetime) -> Optional[AccessCode]:
        return (
            self.db.query(AccessCode)
            .filter(
                AccessCode.created_by == created_by,
                AccessCode.is_active.is_(True),
                AccessCode.used_at.is_(None),
                AccessCode.expires_at > now,
            )
            .order_by(AccessCode.created_at.desc())
            .first()
        )

    def list_all(self) -> List[AccessCode]:
        return self.db.query(AccessCode).order_by(AccessCode.created_at.desc(), AccessCode.id.desc()).all()

    def delete_by_owner(self, created_by: str) -> int:
        return (
            self.db.query(AccessCode)
            .filter(AccessCode.created_by == created_by)
            .delete(synchronize_session=False)
        )
