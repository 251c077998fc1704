"""Access code domain model — one-time registration codes, maps to 'access_codes'."""

from sqlalchemy import Column, Integer, String, Boolean

from cinegate.core.clock import utcnow
from cinegate.infrastructure.database import Base, UTCDateTime

ADMIN_OWNER = "admin"


class AccessCode(Base):
    __tablename__ = "access_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(12), unique=True, nullable=False, index=True)
    # A user id, or ADMIN_OWNER for codes issued from the dashboard
    created_by = Column(String(36), nullable=False, index=True)
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(UTCDateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    used_by = Column(String(36), nullable=True)
    used_at = Column(UTCDateTime(timezone=True), nullable=True)
    admin_action = Column(String(50), nullable=True)  # revoked, superseded
    updated_at = Column(UTCDateTime(timezone=True), nullable=True, onupdate=utcnow)

    def __repr__(self):
        return f"<AccessCode {self.id} by {self.created_by}>"
