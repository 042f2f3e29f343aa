"""Admin Schemas — moderator accounts and password changes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from epetitions.core.domain_types import AdminRole


class AdminUserCreate(BaseModel):
    email: str = Field(max_length=255)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    password: str
    role: AdminRole = AdminRole.MODERATOR


class AdminUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    force_password_reset: bool
    last_login_at: datetime | None = None


class PasswordChange(BaseModel):
    current_password: str
    password: str
    password_confirmation: str
