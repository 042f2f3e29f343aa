"""Petition ORM — a citizen petition and its moderation/response state.

Invariants:
    - state is a PetitionState value; transitions go through core/petition_rules.py
    - signature_count counts VALIDATED signatures only (creator included)
    - response_threshold_reached_at / debate_threshold_reached_at are set once
    - open_at and closed_at are set together on publish

Design Decisions:
    - Integer ids: petitions are addressed publicly as /petitions/{id}
    - No ORM relationships to signatures: petitions can carry hundreds of thousands
      of signatures, so they are always queried explicitly
"""

from datetime import date, datetime

from sqlalchemy import Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from epetitions.core.domain_types import PetitionState
from epetitions.db.base import Base
from epetitions.db.types import UTCDateTime, utcnow


class Petition(Base):
    __tablename__ = "petitions"
    __table_args__ = (
        Index("ix_petitions_state_signature_count", "state", "signature_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    background: Mapped[str] = mapped_column(String(300), nullable=False)
    additional_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PetitionState.PENDING.value,
    )
    signature_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    response_summary: Mapped[str | None] = mapped_column(String(500), nullable=True)
    response_threshold_reached_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    debate_threshold_reached_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    scheduled_debate_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rejection_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rejection_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    open_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow,
    )
