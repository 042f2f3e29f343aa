"""Signature Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignatureCreate(BaseModel):
    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    postcode: str = Field(max_length=255)
    country: str = Field("United Kingdom", max_length=255)
    uk_citizenship: bool = False
    notify_by_email: bool = False


class SignatureResponse(BaseModel):
    """Signer-facing confirmation. Never exposes email or token."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    petition_id: int
    name: str
    state: str
    created_at: datetime
    validated_at: datetime | None = None
