"""Notification Jobs — background delivery of signer emails.

Invariants:
    - EmailThresholdJob runs three sequential steps: select validated, opted-in
      signatures whose sent receipt is missing or older than requested_at; stamp
      each sent receipt with requested_at and commit; deliver one email each
    - Stamping commits before any delivery, so a re-run of the same request finds
      nothing left to send (each signer is emailed at most once per request)
    - A failed delivery is logged and the batch continues; there is no retry
    - Jobs open their own session via db_manager: the request session is closed
      by the time BackgroundTasks run

Design Decisions:
    - FastAPI BackgroundTasks as the queue: jobs are short, in-process and
      fire-and-forget (no dead-letter queue, no retry)
    - Blocking SMTP runs in the threadpool so the event loop is never stalled
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from epetitions.core.domain_types import EmailReceiptName
from epetitions.core.errors import MailDeliveryError
from epetitions.core.format_emails import EmailContent, format_threshold_email
from epetitions.infrastructure.mailer import Mailer, get_mailer
from epetitions.models.petition import Petition
from epetitions.services import site_service
from epetitions.services.email_receipts import set_email_sent_at_for
from epetitions.services.signature_service import signatures_needing_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailThresholdJob:
    """Email every opted-in, validated signer of a petition once for a request."""
    petition_id: int
    requested_at: datetime
    name: EmailReceiptName = EmailReceiptName.GOVERNMENT_RESPONSE

    async def perform(self, db: AsyncSession, mailer: Mailer) -> int:
        """Run the job. Returns the number of signers emailed (or attempted)."""
        log_extra = {
            "job": "email_threshold", "petition_id": self.petition_id,
            "email_name": self.name.value,
        }
        petition = await db.get(Petition, self.petition_id)
        if petition is None:
            logger.warning("Petition vanished before email job ran", extra=log_extra)
            return 0

        site = await site_service.instance(db)
        signatures = await signatures_needing_email(
            db, self.petition_id, self.name, self.requested_at,
        )
        for signature in signatures:
            await set_email_sent_at_for(db, signature.id, self.name, self.requested_at)
        await db.commit()

        for signature in signatures:
            content = format_threshold_email(site, petition, signature, self.name)
            try:
                await run_in_threadpool(mailer.deliver, content)
            except MailDeliveryError as e:
                logger.error(
                    f"Threshold email not delivered: {e.message}",
                    extra={**log_extra, "signature_id": signature.id},
                )

        logger.info(
            f"Threshold email sent to {len(signatures)} signers", extra=log_extra,
        )
        return len(signatures)


async def run_email_threshold_job(job: EmailThresholdJob) -> None:
    """Background entry point: own session, own mailer."""
    from epetitions.infrastructure.database import db_manager

    if not db_manager:
        logger.error(
            f"Cannot run email job for petition {job.petition_id}: database not initialized",
        )
        return
    async with db_manager.session() as db:
        await job.perform(db, get_mailer())


def enqueue_email_threshold_job(
    background_tasks: BackgroundTasks,
    petition_id: int,
    requested_at: datetime,
    name: EmailReceiptName = EmailReceiptName.GOVERNMENT_RESPONSE,
) -> EmailThresholdJob:
    job = EmailThresholdJob(petition_id, requested_at, EmailReceiptName(name))
    background_tasks.add_task(run_email_threshold_job, job)
    logger.info(
        "Email threshold job enqueued",
        extra={"job": "email_threshold", "petition_id": petition_id, "email_name": job.name.value},
    )
    return job


def deliver_email(content: EmailContent) -> None:
    """Background entry point for a single transactional email (sync, threadpool)."""
    try:
        get_mailer().deliver(content)
    except MailDeliveryError as e:
        logger.error(f"Email to {content.recipient} not delivered: {e.message}")


def enqueue_email(background_tasks: BackgroundTasks, content: EmailContent) -> None:
    background_tasks.add_task(deliver_email, content)
