"""Petition Schemas — public and moderation views of petitions."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from epetitions.core.domain_types import MODERATED_STATES, PetitionState, RejectionCode
from epetitions.schemas.signature import SignatureCreate


class PetitionCreate(BaseModel):
    """New petition with its creator's signature."""
    action: str = Field(max_length=255)
    background: str = Field(max_length=1_000)
    additional_details: str | None = Field(None, max_length=5_000)
    creator_signature: SignatureCreate


class PetitionResponse(BaseModel):
    """Public petition data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    background: str
    additional_details: str | None = None
    state: str
    signature_count: int
    response_summary: str | None = None
    response: str | None = None
    scheduled_debate_date: date | None = None
    open_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime


class PetitionAdminResponse(PetitionResponse):
    """Moderation view — adds thresholds and rejection details."""
    rejection_code: str | None = None
    rejection_details: str | None = None
    response_threshold_reached_at: datetime | None = None
    debate_threshold_reached_at: datetime | None = None
    updated_at: datetime

    @computed_field
    @property
    def moderated(self) -> bool:
        return PetitionState(self.state) in MODERATED_STATES


class ResponseUpdate(BaseModel):
    response: str | None = None
    response_summary: str | None = None
    email_signees: bool = False


class ScheduledDebateDateUpdate(BaseModel):
    scheduled_debate_date: str | None = None
    email_signees: bool = False


class RejectionRequest(BaseModel):
    code: RejectionCode
    details: str | None = Field(None, max_length=4_000)


PetitionStateFilter = Literal[
    "validated", "sponsored", "open", "closed", "rejected", "hidden",
]
