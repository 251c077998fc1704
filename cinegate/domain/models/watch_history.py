"""Watch history domain model — maps to the 'watch_history' table."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from cinegate.core.clock import utcnow
from cinegate.infrastructure.database import Base, UTCDateTime


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"
    __table_args__ = (UniqueConstraint("user_id", "tmdb_id", name="uq_watch_history_user_media"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    tmdb_id = Column(Integer, nullable=False)
    imdb_id = Column(String(20), nullable=True)
    title = Column(String(500), nullable=False)
    year = Column(String(10), nullable=True)
    poster = Column(String(1000), nullable=True)
    genre = Column(String(200), nullable=True)
    runtime = Column(Integer, nullable=True)  # minutes
    media_type = Column(String(10), nullable=False, default="movie")
    # Last episode watched, for TV
    season_number = Column(Integer, nullable=True)
    episode_number = Column(Integer, nullable=True)
    episode_title = Column(String(500), nullable=True)
    last_watched = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<WatchHistoryEntry {self.tmdb_id} - {self.title}>"
