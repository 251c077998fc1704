"""User domain model — maps to the 'user_profiles' table."""

import uuid

from sqlalchemy import Column, String, Boolean

from cinegate.core.clock import utcnow
from cinegate.infrastructure.database import Base, UTCDateTime


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=_new_id)
    # Guest profiles have neither a username nor a password
    username = Column(String(100), unique=True, nullable=True, index=True)
    password_hash = Column(String(255), nullable=True)
    is_guest = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)
    last_active = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<User {self.username or self.id}>"
