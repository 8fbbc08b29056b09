"""Request/response schemas for admin user management."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UserAdminView(BaseModel):
    """User entry for the admin list (no password hash, no reset token)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: str
    google_linked: bool = Field(default=False, description="Whether a Google account is linked")
    created_at: datetime
    updated_at: datetime


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "admin"] = Field(..., description="New role for the user")
