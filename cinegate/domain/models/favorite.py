"""Favorite domain model — maps to the 'favorites' table."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from cinegate.core.clock import utcnow
from cinegate.infrastructure.database import Base, UTCDateTime


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "tmdb_id", name="uq_favorites_user_media"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    tmdb_id = Column(Integer, nullable=False)
    imdb_id = Column(String(20), nullable=True)
    title = Column(String(500), nullable=False)
    year = Column(String(10), nullable=True)
    poster = Column(String(1000), nullable=True)
    backdrop = Column(String(1000), nullable=True)
    media_type = Column(String(10), nullable=False, default="movie")  # movie, tv
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Favorite {self.tmdb_id} - {self.title}>"
