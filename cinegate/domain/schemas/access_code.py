"""Pydantic schemas for access codes."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AccessCodeStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    REVOKED = "revoked"


class GenerateAccessCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


class VerifyAccessCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")

    @model_validator(mode="after")
    def check_fields(self):
        if not self.code or not self.code.strip():
            raise ValueError("Invalid access code")
        return self


class IssuedAccessCode(BaseModel):
    """A freshly generated code, returned once to its issuer."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    code: str
    expires_at: datetime = Field(serialization_alias="expiresAt")


class AccessCodeRead(BaseModel):
    id: int
    code: str
    created_by: str
    created_at: datetime
    expires_at: datetime
    is_active: bool
    used_by: Optional[str] = None
    used_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
