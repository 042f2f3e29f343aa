"""Email Receipt ORMs — when a named email batch was requested, and when each signer got it.

Invariants:
    - One EmailRequestedReceipt per petition, one EmailSentReceipt per signature
    - Column names are the EmailReceiptName values; one timestamp per batch name
    - A signature needs emailing for a batch while its sent timestamp is NULL or
      older than the petition's requested timestamp

Design Decisions:
    - Separate tables rather than columns on petitions/signatures: receipts are
      only touched by moderation and the notification job
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from epetitions.db.base import Base
from epetitions.db.types import UTCDateTime


class EmailRequestedReceipt(Base):
    __tablename__ = "email_requested_receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    petition_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("petitions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    government_response: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    debate_scheduled: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    debate_outcome: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    petition_email: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class EmailSentReceipt(Base):
    __tablename__ = "email_sent_receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    signature_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("signatures.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    government_response: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    debate_scheduled: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    debate_outcome: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    petition_email: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
