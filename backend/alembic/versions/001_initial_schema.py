"""Initial schema — sites, petitions, signatures, email receipts, admin_users.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RECEIPT_NAMES = ("government_response", "debate_scheduled", "debate_outcome", "petition_email")


def _receipt_columns():
    return [sa.Column(name, sa.DateTime(timezone=True), nullable=True) for name in RECEIPT_NAMES]


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(50), nullable=False),
        sa.Column("url", sa.String(50), nullable=False),
        sa.Column("email_from", sa.String(100), nullable=False),
        sa.Column("feedback_email", sa.String(100), nullable=False),
        sa.Column("username", sa.String(30), nullable=True),
        sa.Column("password_digest", sa.String(60), nullable=True),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("protected", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("petition_duration", sa.Integer, nullable=False, server_default="6"),
        sa.Column("minimum_number_of_sponsors", sa.Integer, nullable=False, server_default="5"),
        sa.Column("maximum_number_of_sponsors", sa.Integer, nullable=False, server_default="20"),
        sa.Column("threshold_for_moderation", sa.Integer, nullable=False, server_default="5"),
        sa.Column("threshold_for_response", sa.Integer, nullable=False, server_default="10000"),
        sa.Column("threshold_for_debate", sa.Integer, nullable=False, server_default="100000"),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_petition_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "petitions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(255), nullable=False),
        sa.Column("background", sa.String(300), nullable=False),
        sa.Column("additional_details", sa.Text, nullable=True),
        sa.Column("state", sa.String(10), nullable=False, server_default="pending"),
        sa.Column("signature_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("response", sa.Text, nullable=True),
        sa.Column("response_summary", sa.String(500), nullable=True),
        sa.Column("response_threshold_reached_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("debate_threshold_reached_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_debate_date", sa.Date, nullable=True),
        sa.Column("rejection_code", sa.String(50), nullable=True),
        sa.Column("rejection_details", sa.Text, nullable=True),
        sa.Column("open_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_petitions_state_signature_count", "petitions", ["state", "signature_count"],
    )

    op.create_table(
        "signatures",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "petition_id", sa.Integer,
            sa.ForeignKey("petitions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("postcode", sa.String(255), nullable=False),
        sa.Column("country", sa.String(255), nullable=False),
        sa.Column("uk_citizenship", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notify_by_email", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("state", sa.String(10), nullable=False, server_default="pending"),
        sa.Column("creator", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("perishable_token", sa.String(64), nullable=False, unique=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "petition_id", "email", "name", name="uq_signatures_petition_email_name",
        ),
    )
    op.create_index(
        "ix_signatures_petition_state_notify", "signatures",
        ["petition_id", "state", "notify_by_email"],
    )

    op.create_table(
        "email_requested_receipts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "petition_id", sa.Integer,
            sa.ForeignKey("petitions.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        *_receipt_columns(),
    )

    op.create_table(
        "email_sent_receipts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "signature_id", sa.Integer,
            sa.ForeignKey("signatures.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        *_receipt_columns(),
    )

    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="moderator"),
        sa.Column("password_digest", sa.String(60), nullable=False),
        sa.Column("force_password_reset", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("failed_login_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("admin_users")
    op.drop_table("email_sent_receipts")
    op.drop_table("email_requested_receipts")
    op.drop_index("ix_signatures_petition_state_notify", table_name="signatures")
    op.drop_table("signatures")
    op.drop_index("ix_petitions_state_signature_count", table_name="petitions")
    op.drop_table("petitions")
    op.drop_table("sites")
