"""Site ORM — the single row holding site-wide configuration.

Invariants:
    - At most one row; created on first access from environment defaults
    - password_digest is a bcrypt digest or NULL (never a plain password)
    - Read through the cached SiteConfig snapshot, never per-request queries

Design Decisions:
    - last_checked_at / last_petition_created_at are bookkeeping timestamps updated
      via the site service's touch()
"""

from datetime import datetime

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from epetitions.db.base import Base
from epetitions.db.types import UTCDateTime, utcnow


class Site(Base):
    """Site-wide configuration singleton."""
    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(String(50), nullable=False)
    email_from: Mapped[str] = mapped_column(String(100), nullable=False)
    feedback_email: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str | None] = mapped_column(String(30), nullable=True)
    password_digest: Mapped[str | None] = mapped_column(String(60), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    protected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    petition_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    minimum_number_of_sponsors: Mapped[int] = mapped_column(
        Integer, nullable=False, default=5,
    )
    maximum_number_of_sponsors: Mapped[int] = mapped_column(
        Integer, nullable=False, default=20,
    )
    threshold_for_moderation: Mapped[int] = mapped_column(
        Integer, nullable=False, default=5,
    )
    threshold_for_response: Mapped[int] = mapped_column(
        Integer, nullable=False, default=10_000,
    )
    threshold_for_debate: Mapped[int] = mapped_column(
        Integer, nullable=False, default=100_000,
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    last_petition_created_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow,
    )
