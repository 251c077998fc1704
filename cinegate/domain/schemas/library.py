"""Pydantic schemas for favorites, watch history and the leaderboard."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tmdb_id: int = Field(alias="tmdbId")
    imdb_id: Optional[str] = Field(default=None, alias="imdbId")
    title: str = Field(min_length=1)
    year: Optional[str] = None
    poster: Optional[str] = None
    media_type: Literal["movie", "tv"] = Field(default="movie", alias="mediaType")


class FavoriteCreate(MediaBase):
    backdrop: Optional[str] = None


class FavoriteRead(FavoriteCreate):
    id: int
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class WatchHistoryCreate(MediaBase):
    genre: Optional[str] = None
    runtime: Optional[int] = Field(default=None, ge=0)
    season_number: Optional[int] = Field(default=None, alias="seasonNumber")
    episode_number: Optional[int] = Field(default=None, alias="episodeNumber")
    episode_title: Optional[str] = Field(default=None, alias="episodeTitle")


class WatchHistoryRead(WatchHistoryCreate):
    id: int
    last_watched: datetime = Field(alias="lastWatched")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    total_watch_hours: int = Field(alias="totalWatchHours")
    total_watched: int = Field(alias="totalWatched")
    join_date: Optional[datetime] = Field(default=None, alias="joinDate")
    last_active: Optional[datetime] = Field(default=None, alias="lastActive")
