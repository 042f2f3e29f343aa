"""AdminUser ORM — moderators and sysadmins of the moderation interface.

Invariants:
    - email unique, stored lower-cased
    - role is an AdminRole value
    - failed_login_count resets to 0 on successful authentication
"""

from datetime import datetime

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from epetitions.core.domain_types import AdminRole
from epetitions.db.base import Base
from epetitions.db.types import UTCDateTime, utcnow


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(10), nullable=False, default=AdminRole.MODERATOR.value,
    )
    password_digest: Mapped[str] = mapped_column(String(60), nullable=False)
    force_password_reset: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    failed_login_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow,
    )

    @property
    def is_sysadmin(self) -> bool:
        return self.role == AdminRole.SYSADMIN.value

    @property
    def has_to_change_password(self) -> bool:
        return self.force_password_reset
