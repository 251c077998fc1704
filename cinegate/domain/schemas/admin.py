"""Pydantic schemas for the admin control plane."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cinegate.domain.schemas.access_code import AccessCodeStatus


class AdminLoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self):
        if not self.username or not self.password:
            raise ValueError("Username and password are required")
        return self


class RevokeAccessCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code_id: Optional[int] = Field(default=None, alias="codeId")

    @model_validator(mode="after")
    def check_fields(self):
        if self.code_id is None:
            raise ValueError("Code ID is required")
        return self


class RemoveUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")

    @model_validator(mode="after")
    def check_fields(self):
        if not self.user_id:
            raise ValueError("User ID is required")
        return self


class AdminUserRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: Optional[str] = None
    is_guest: bool = Field(serialization_alias="isGuest")
    join_date: Optional[datetime] = Field(default=None, serialization_alias="joinDate")
    last_active: Optional[datetime] = Field(default=None, serialization_alias="lastActive")
    total_watched: int = Field(default=0, serialization_alias="totalWatched")
    total_favorites: int = Field(default=0, serialization_alias="totalFavorites")
    is_active: bool = Field(default=False, serialization_alias="isActive")


class AdminAccessCodeRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    code: str
    created_by: str
    created_by_name: str = Field(serialization_alias="createdBy")
    created_at: datetime
    expires_at: datetime
    used_by: Optional[str] = None
    used_at: Optional[datetime] = None
    is_active: bool
    admin_action: Optional[str] = None
    status: AccessCodeStatus


class AdminStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(serialization_alias="totalUsers")
    active_users: int = Field(serialization_alias="activeUsers")
    total_access_codes: int = Field(serialization_alias="totalAccessCodes")
    active_access_codes: int = Field(serialization_alias="activeAccessCodes")
    used_access_codes: int = Field(serialization_alias="usedAccessCodes")
    expired_access_codes: int = Field(serialization_alias="expiredAccessCodes")
    revoked_access_codes: int = Field(serialization_alias="revokedAccessCodes")
    total_watch_time: int = Field(serialization_alias="totalWatchTime")
    total_movies_watched: int = Field(serialization_alias="totalMoviesWatched")
    total_tv_watched: int = Field(serialization_alias="totalTvWatched")
    total_favorites: int = Field(serialization_alias="totalFavorites")
