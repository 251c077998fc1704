"""Pydantic schemas for User and Auth.

Request bodies use the camelCase keys the web client sends. Validation rules
run in a fixed order so the first failing rule decides the message.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserRead(BaseModel):
    id: str
    username: Optional[str] = None
    is_guest: bool = False
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    access_code: Optional[str] = Field(default=None, alias="accessCode")

    @model_validator(mode="after")
    def check_fields(self):
        if not all([self.username, self.password, self.confirm_password, self.access_code]):
            raise ValueError("All fields are required")
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(self.username) < MIN_USERNAME_LENGTH:
            raise ValueError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
        return self


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self):
        if not self.username or not self.password:
            raise ValueError("Username and password are required")
        return self


class ChangePasswordRequest(CamelModel):
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")

    @model_validator(mode="after")
    def check_fields(self):
        if not all([self.current_password, self.new_password, self.confirm_password]):
            raise ValueError("All fields are required")
        if self.new_password != self.confirm_password:
            raise ValueError("New passwords do not match")
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return self


class UpdateUsernameRequest(BaseModel):
    username: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self):
        self.username = (self.username or "").strip()
        if not self.username:
            raise ValueError("Invalid username")
        if len(self.username) < MIN_USERNAME_LENGTH:
            raise ValueError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
        return self


class PasswordRequest(BaseModel):
    """Body of the platform password gate and guest profile creation."""
    password: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self):
        if not self.password:
            raise ValueError("Invalid password format")
        return self


class AuthResponse(BaseModel):
    success: bool = True
    user: UserRead


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class SessionIdentity(BaseModel):
    """Who a valid session token belongs to."""
    user_id: str
    username: Optional[str] = None
