"""Email Receipts — read/write the requested and sent timestamps per named batch."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.core.domain_types import EmailReceiptName
from epetitions.models.email_receipt import EmailRequestedReceipt, EmailSentReceipt


async def _requested_receipt(db: AsyncSession, petition_id: int) -> EmailRequestedReceipt | None:
    result = await db.execute(
        select(EmailRequestedReceipt)
        .where(EmailRequestedReceipt.petition_id == petition_id),
    )
    return result.scalar_one_or_none()


async def _sent_receipt(db: AsyncSession, signature_id: int) -> EmailSentReceipt | None:
    result = await db.execute(
        select(EmailSentReceipt).where(EmailSentReceipt.signature_id == signature_id),
    )
    return result.scalar_one_or_none()


async def get_email_requested_at_for(
    db: AsyncSession, petition_id: int, name: EmailReceiptName | str,
) -> datetime | None:
    receipt = await _requested_receipt(db, petition_id)
    return getattr(receipt, EmailReceiptName(name).value) if receipt else None


async def set_email_requested_at_for(
    db: AsyncSession, petition_id: int, name: EmailReceiptName | str, when: datetime,
) -> None:
    """Stamp the requested time. Flushes, the caller commits."""
    receipt = await _requested_receipt(db, petition_id)
    if receipt is None:
        receipt = EmailRequestedReceipt(petition_id=petition_id)
        db.add(receipt)
    setattr(receipt, EmailReceiptName(name).value, when)
    await db.flush()


async def get_email_sent_at_for(
    db: AsyncSession, signature_id: int, name: EmailReceiptName | str,
) -> datetime | None:
    receipt = await _sent_receipt(db, signature_id)
    return getattr(receipt, EmailReceiptName(name).value) if receipt else None


async def set_email_sent_at_for(
    db: AsyncSession, signature_id: int, name: EmailReceiptName | str, when: datetime,
) -> None:
    receipt = await _sent_receipt(db, signature_id)
    if receipt is None:
        receipt = EmailSentReceipt(signature_id=signature_id)
        db.add(receipt)
    setattr(receipt, EmailReceiptName(name).value, when)
    await db.flush()
