"""Petition Service — creation, moderation, responses and closing.

Invariants:
    - create_petition() stores a PENDING petition with its PENDING creator signature
      in one commit, then touches the site's last_petition_created_at
    - update_response() changes nothing when validation fails; on success with
      email_signees it stamps the government_response requested receipt and returns
      that timestamp so the caller can enqueue exactly one notification job
    - Scheduled debate dates can only be set on OPEN petitions; any other state is
      reported as not found
    - close_expired() closes OPEN petitions opened at or before
      opened_at_for_closing(now)

Design Decisions:
    - Functions return the requested_at timestamp instead of enqueueing jobs: the
      route owns BackgroundTasks, the service stays usable from scripts
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.core.calendar import parse_debate_date
from epetitions.core.domain_types import (
    EmailReceiptName,
    PetitionState,
    RejectionCode,
    SELECTABLE_STATES,
    THRESHOLD_STATES,
    VISIBLE_STATES,
)
from epetitions.core.errors import (
    ErrorContext, RecordValidationError, ResourceNotFoundError,
)
from epetitions.core.petition_rules import check_transition, rejection_state
from epetitions.core.site_config import SiteConfig
from epetitions.core.validate_records import (
    validate_petition, validate_response, validate_signature,
)
from epetitions.db.types import utcnow
from epetitions.models.petition import Petition
from epetitions.models.signature import Signature
from epetitions.services import site_service
from epetitions.services.email_receipts import set_email_requested_at_for
from epetitions.services.signature_service import build_signature

logger = logging.getLogger(__name__)


async def get_petition(
    db: AsyncSession, petition_id: int, states=None,
) -> Petition:
    """Load a petition, optionally restricted to some states. Raises 404 otherwise."""
    query = select(Petition).where(Petition.id == petition_id)
    if states is not None:
        query = query.where(Petition.state.in_([PetitionState(s).value for s in states]))
    petition = (await db.execute(query)).scalar_one_or_none()
    if petition is None:
        raise ResourceNotFoundError("Petition", str(petition_id))
    return petition


async def create_petition(
    db: AsyncSession,
    petition_attrs: dict,
    creator_attrs: dict,
    ip_address: str | None = None,
) -> tuple[Petition, Signature]:
    errors = validate_petition(petition_attrs)
    for name, messages in validate_signature(creator_attrs).items():
        errors[f"creator_signature.{name}"] = messages
    if errors:
        raise RecordValidationError(errors)

    petition = Petition(
        action=petition_attrs["action"].strip(),
        background=petition_attrs["background"].strip(),
        additional_details=(petition_attrs.get("additional_details") or "").strip() or None,
        state=PetitionState.PENDING.value,
    )
    db.add(petition)
    await db.flush()

    creator = build_signature(petition.id, creator_attrs, creator=True, ip_address=ip_address)
    db.add(creator)
    await db.commit()
    await db.refresh(petition)
    await db.refresh(creator)

    await site_service.touch(db, "last_petition_created_at")
    logger.info("Petition created", extra={"petition_id": petition.id})
    return petition, creator


async def list_visible(
    db: AsyncSession, state: PetitionState | None = None, limit: int = 50, offset: int = 0,
) -> list[Petition]:
    """Public listing: open, closed and rejected petitions, most signed first."""
    if state is not None and state not in VISIBLE_STATES:
        return []
    states = [state] if state is not None else list(VISIBLE_STATES)
    query = (
        select(Petition)
        .where(Petition.state.in_([s.value for s in states]))
        .order_by(Petition.signature_count.desc(), Petition.id.desc())
        .limit(limit).offset(offset)
    )
    return list((await db.execute(query)).scalars().all())


async def selectable(
    db: AsyncSession, state: PetitionState | None = None, limit: int = 50, offset: int = 0,
) -> list[Petition]:
    """Moderation listing: every petition except unvalidated ones, newest first."""
    if state is not None and state not in SELECTABLE_STATES:
        return []
    states = [state] if state is not None else list(SELECTABLE_STATES)
    query = (
        select(Petition)
        .where(Petition.state.in_([s.value for s in states]))
        .order_by(Petition.created_at.desc(), Petition.id.desc())
        .limit(limit).offset(offset)
    )
    return list((await db.execute(query)).scalars().all())


async def threshold_petitions(db: AsyncSession, site: SiteConfig) -> list[Petition]:
    """Open or closed petitions at or above the debate threshold, fewest signatures first."""
    query = (
        select(Petition)
        .where(Petition.state.in_([s.value for s in THRESHOLD_STATES]))
        .where(Petition.signature_count >= site.threshold_for_debate)
        .order_by(Petition.signature_count.asc(), Petition.id.asc())
    )
    return list((await db.execute(query)).scalars().all())


async def publish(
    db: AsyncSession, site: SiteConfig, petition: Petition, now: datetime | None = None,
) -> Petition:
    check_transition(petition.state, PetitionState.OPEN)
    moment = now or utcnow()
    petition.state = PetitionState.OPEN.value
    petition.open_at = moment
    petition.closed_at = site.closed_at_for_opening(moment)
    await db.commit()
    logger.info("Petition published", extra={"petition_id": petition.id})
    return petition


async def reject(
    db: AsyncSession,
    petition: Petition,
    code: RejectionCode | str,
    details: str | None = None,
) -> Petition:
    check_transition(petition.state, PetitionState.REJECTED)
    target = rejection_state(code)
    petition.state = target.value
    petition.rejection_code = RejectionCode(code).value
    petition.rejection_details = details
    await db.commit()
    logger.info(
        f"Petition rejected ({petition.rejection_code})",
        extra={"petition_id": petition.id, "state": target.value},
    )
    return petition


async def hide(db: AsyncSession, petition: Petition) -> Petition:
    check_transition(petition.state, PetitionState.HIDDEN)
    petition.state = PetitionState.HIDDEN.value
    await db.commit()
    logger.info("Petition hidden", extra={"petition_id": petition.id})
    return petition


async def close_expired(
    db: AsyncSession, site: SiteConfig, now: datetime | None = None,
) -> int:
    """Close every open petition past its duration. Returns how many were closed."""
    cutoff = site.opened_at_for_closing(now)
    result = await db.execute(
        update(Petition)
        .where(Petition.state == PetitionState.OPEN.value)
        .where(Petition.open_at <= cutoff)
        .values(state=PetitionState.CLOSED.value, updated_at=utcnow()),
    )
    await db.commit()
    closed = result.rowcount or 0
    logger.info(f"Closed {closed} expired petitions")
    return closed


async def update_response(
    db: AsyncSession,
    petition: Petition,
    response: str | None,
    response_summary: str | None,
    email_signees: bool = False,
    now: datetime | None = None,
) -> datetime | None:
    """Record the government response. Returns the email requested_at, if any."""
    errors = validate_response(response, response_summary)
    if errors:
        raise RecordValidationError(errors, ErrorContext(petition_id=petition.id))

    petition.response = response
    petition.response_summary = response_summary
    requested_at = None
    if email_signees:
        requested_at = now or utcnow()
        await set_email_requested_at_for(
            db, petition.id, EmailReceiptName.GOVERNMENT_RESPONSE, requested_at,
        )
    await db.commit()
    logger.info(
        "Petition response updated",
        extra={"petition_id": petition.id, "email_name": "government_response" if requested_at else None},
    )
    return requested_at


async def update_scheduled_debate_date(
    db: AsyncSession,
    petition: Petition,
    value: str | None,
    email_signees: bool = False,
    now: datetime | None = None,
) -> datetime | None:
    """Set (or clear, with a blank value) the debate date of an open petition."""
    if petition.state != PetitionState.OPEN.value:
        raise ResourceNotFoundError("Petition", str(petition.id))

    if value is None or not value.strip():
        petition.scheduled_debate_date = None
    else:
        try:
            petition.scheduled_debate_date = parse_debate_date(value)
        except ValueError:
            raise RecordValidationError(
                {"scheduled_debate_date": ["is not a valid date"]},
                ErrorContext(petition_id=petition.id),
            )

    requested_at = None
    if email_signees and petition.scheduled_debate_date is not None:
        requested_at = now or utcnow()
        await set_email_requested_at_for(
            db, petition.id, EmailReceiptName.DEBATE_SCHEDULED, requested_at,
        )
    await db.commit()
    return requested_at
