"""Signature Service — signing, email validation and the scopes used for mailing.

Invariants:
    - New signatures are PENDING; only validate_signature() moves them to VALIDATED
    - validate_signature() is idempotent: a second validation never double counts
    - Every validation increments the petition's signature_count by exactly one
    - Creator validation moves a PENDING petition to VALIDATED; sponsor validation
      moves a VALIDATED petition to SPONSORED once threshold_for_moderation sponsors
      have validated
    - Signing a VALIDATED/SPONSORED petition is refused once validated sponsors
      reach maximum_number_of_sponsors
"""

import logging
import secrets
from datetime import datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.core.domain_types import EmailReceiptName, PetitionState, SignatureState
from epetitions.core.errors import (
    ErrorContext, RecordValidationError, ResourceNotFoundError, SigningClosedError,
)
from epetitions.core.petition_rules import (
    ThresholdMarkers,
    accepts_signatures,
    accepts_sponsors,
    should_become_sponsored,
    sponsor_cap_reached,
    threshold_markers,
)
from epetitions.core.site_config import SiteConfig
from epetitions.core.validate_records import validate_signature
from epetitions.db.types import utcnow
from epetitions.infrastructure.database import translate_integrity_error
from epetitions.models.email_receipt import EmailSentReceipt
from epetitions.models.petition import Petition
from epetitions.models.signature import Signature

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_signature(
    petition_id: int, attrs: dict, creator: bool = False, ip_address: str | None = None,
) -> Signature:
    """New PENDING signature with a fresh validation token. Not added to a session."""
    return Signature(
        petition_id=petition_id,
        name=attrs["name"].strip(),
        email=normalize_email(attrs["email"]),
        postcode=attrs["postcode"].strip().upper(),
        country=attrs.get("country") or "United Kingdom",
        uk_citizenship=bool(attrs.get("uk_citizenship")),
        notify_by_email=bool(attrs.get("notify_by_email")),
        state=SignatureState.PENDING.value,
        creator=creator,
        perishable_token=secrets.token_urlsafe(24),
        ip_address=ip_address,
    )


async def count_validated_sponsors(db: AsyncSession, petition_id: int) -> int:
    result = await db.execute(
        select(func.count(Signature.id))
        .where(Signature.petition_id == petition_id)
        .where(Signature.creator.is_(False))
        .where(Signature.state == SignatureState.VALIDATED.value),
    )
    return result.scalar_one()


async def _already_signed(db: AsyncSession, petition_id: int, attrs: dict) -> bool:
    result = await db.execute(
        select(Signature.id)
        .where(Signature.petition_id == petition_id)
        .where(Signature.email == normalize_email(attrs["email"]))
        .where(Signature.name == attrs["name"].strip())
        .limit(1),
    )
    return result.scalar_one_or_none() is not None


async def create_signature(
    db: AsyncSession,
    site: SiteConfig,
    petition: Petition,
    attrs: dict,
    ip_address: str | None = None,
) -> Signature:
    """Sign an open petition, or sponsor one that is still gathering sponsors."""
    context = ErrorContext(petition_id=petition.id)
    if accepts_sponsors(petition.state):
        sponsors = await count_validated_sponsors(db, petition.id)
        if sponsor_cap_reached(sponsors, site.maximum_number_of_sponsors):
            raise SigningClosedError(
                "This petition already has the maximum number of sponsors", context,
            )
    elif not accepts_signatures(petition.state):
        raise SigningClosedError("This petition is not accepting signatures", context)

    errors = validate_signature(attrs)
    if not errors and await _already_signed(db, petition.id, attrs):
        errors = {"email": ["has already signed this petition"]}
    if errors:
        raise RecordValidationError(errors, context)

    signature = build_signature(petition.id, attrs, ip_address=ip_address)
    db.add(signature)
    try:
        await db.commit()
    except IntegrityError as e:
        # a concurrent request signed with the same email and name
        await db.rollback()
        raise translate_integrity_error(e, context) from e
    await db.refresh(signature)
    logger.info(
        "Signature created",
        extra={"petition_id": petition.id, "signature_id": signature.id},
    )
    return signature


async def validate_signature_token(
    db: AsyncSession, site: SiteConfig, token: str, now: datetime | None = None,
) -> Signature:
    """Confirm a signature from its emailed token and update the petition."""
    result = await db.execute(
        select(Signature).where(Signature.perishable_token == token),
    )
    signature = result.scalar_one_or_none()
    if signature is None:
        raise ResourceNotFoundError("Signature", "token")
    if signature.state == SignatureState.VALIDATED.value:
        return signature

    moment = now or utcnow()
    petition = (await db.execute(
        select(Petition).where(Petition.id == signature.petition_id).with_for_update(),
    )).scalar_one()

    signature.state = SignatureState.VALIDATED.value
    signature.validated_at = moment
    petition.signature_count += 1
    await db.flush()

    if signature.creator and petition.state == PetitionState.PENDING.value:
        petition.state = PetitionState.VALIDATED.value
        logger.info("Petition validated by creator", extra={"petition_id": petition.id})
    elif not signature.creator and accepts_sponsors(petition.state):
        sponsors = await count_validated_sponsors(db, petition.id)
        if should_become_sponsored(
            petition.state, sponsors, site.threshold_for_moderation,
        ):
            petition.state = PetitionState.SPONSORED.value
            logger.info(
                "Petition reached moderation threshold",
                extra={"petition_id": petition.id},
            )

    markers = threshold_markers(
        petition.signature_count,
        site.threshold_for_response,
        site.threshold_for_debate,
        ThresholdMarkers(
            petition.response_threshold_reached_at,
            petition.debate_threshold_reached_at,
        ),
        moment,
    )
    petition.response_threshold_reached_at = markers.response_threshold_reached_at
    petition.debate_threshold_reached_at = markers.debate_threshold_reached_at
    await db.commit()
    return signature


async def signatures_needing_email(
    db: AsyncSession,
    petition_id: int,
    name: EmailReceiptName | str,
    requested_at: datetime,
) -> list[Signature]:
    """Validated, opted-in signatures not yet emailed for this request, by id."""
    sent_at = getattr(EmailSentReceipt, EmailReceiptName(name).value)
    result = await db.execute(
        select(Signature)
        .outerjoin(EmailSentReceipt, EmailSentReceipt.signature_id == Signature.id)
        .where(
            and_(
                Signature.petition_id == petition_id,
                Signature.state == SignatureState.VALIDATED.value,
                Signature.notify_by_email.is_(True),
                or_(sent_at.is_(None), sent_at < requested_at),
            ),
        )
        .order_by(Signature.id),
    )
    return list(result.scalars().all())


async def get_creator_signature(db: AsyncSession, petition_id: int) -> Signature | None:
    result = await db.execute(
        select(Signature)
        .where(Signature.petition_id == petition_id)
        .where(Signature.creator.is_(True)),
    )
    return result.scalar_one_or_none()
