"""Signature ORM — one person's signature on one petition.

Invariants:
    - Unique per (petition_id, email, name)
    - email stored lower-cased and stripped
    - creator is True for exactly one signature per petition (the first one)
    - perishable_token is unique and used for email validation links
"""

from datetime import datetime

from sqlalchemy import (
    Boolean, ForeignKey, Index, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from epetitions.core.domain_types import SignatureState
from epetitions.db.base import Base
from epetitions.db.types import UTCDateTime, utcnow


class Signature(Base):
    __tablename__ = "signatures"
    __table_args__ = (
        UniqueConstraint("petition_id", "email", "name", name="uq_signatures_petition_email_name"),
        Index("ix_signatures_petition_state_notify", "petition_id", "state", "notify_by_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    petition_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("petitions.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    postcode: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    uk_citizenship: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notify_by_email: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    state: Mapped[str] = mapped_column(
        String(10), nullable=False, default=SignatureState.PENDING.value,
    )
    creator: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    perishable_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    validated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow,
    )
