"""Admin Petitions — moderation queue, responses, debate dates and state changes.

Invariants:
    - Every route requires an admin user who is not due a password reset
    - PATCH response with email_signees enqueues exactly one threshold email job;
      a validation failure changes nothing and enqueues nothing
    - Scheduled debate date routes only accept OPEN petitions (404 otherwise)
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.api.dependencies import current_site, require_admin
from epetitions.core.domain_types import EmailReceiptName, PetitionState
from epetitions.core.format_emails import format_creator_confirmation_email
from epetitions.core.site_config import SiteConfig
from epetitions.infrastructure.database import get_db
from epetitions.models.admin_user import AdminUser
from epetitions.schemas.petition import (
    PetitionAdminResponse,
    PetitionStateFilter,
    RejectionRequest,
    ResponseUpdate,
    ScheduledDebateDateUpdate,
)
from epetitions.services import petition_service, signature_service
from epetitions.services.notification_jobs import (
    enqueue_email, enqueue_email_threshold_job,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin/petitions",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _admin_view(petition) -> dict:
    return PetitionAdminResponse.model_validate(petition).model_dump(mode="json")


@router.get("")
async def index(
    state: PetitionStateFilter | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """All selectable (non-pending) petitions, newest first."""
    petitions = await petition_service.selectable(
        db, state=PetitionState(state) if state else None, limit=limit, offset=offset,
    )
    return {
        "petitions": [_admin_view(p) for p in petitions],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/threshold")
async def threshold(
    site: SiteConfig = Depends(current_site),
    db: AsyncSession = Depends(get_db),
):
    """Petitions at or above the debate threshold, in ascending signature count."""
    petitions = await petition_service.threshold_petitions(db, site)
    return {
        "threshold_for_debate": site.threshold_for_debate,
        "petitions": [_admin_view(p) for p in petitions],
    }


@router.get("/{petition_id}", response_model=PetitionAdminResponse)
async def show(petition_id: int, db: AsyncSession = Depends(get_db)):
    return await petition_service.get_petition(db, petition_id)


@router.get("/{petition_id}/response")
async def edit_response(petition_id: int, db: AsyncSession = Depends(get_db)):
    petition = await petition_service.get_petition(db, petition_id)
    return {
        "petition": _admin_view(petition),
        "response": petition.response,
        "response_summary": petition.response_summary,
    }


@router.patch("/{petition_id}/response")
async def update_response(
    petition_id: int,
    body: ResponseUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(db, petition_id)
    requested_at = await petition_service.update_response(
        db, petition, body.response, body.response_summary, body.email_signees,
    )
    if requested_at is not None:
        enqueue_email_threshold_job(
            background_tasks, petition.id, requested_at,
            EmailReceiptName.GOVERNMENT_RESPONSE,
        )
    return {
        "petition": _admin_view(petition),
        "email_requested_at": requested_at.isoformat() if requested_at else None,
    }


@router.get("/{petition_id}/scheduled-debate-date")
async def edit_scheduled_debate_date(
    petition_id: int, db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(
        db, petition_id, [PetitionState.OPEN],
    )
    return {
        "petition": _admin_view(petition),
        "scheduled_debate_date": (
            petition.scheduled_debate_date.isoformat()
            if petition.scheduled_debate_date else None
        ),
    }


@router.patch("/{petition_id}/scheduled-debate-date")
async def update_scheduled_debate_date(
    petition_id: int,
    body: ScheduledDebateDateUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(
        db, petition_id, [PetitionState.OPEN],
    )
    requested_at = await petition_service.update_scheduled_debate_date(
        db, petition, body.scheduled_debate_date, body.email_signees,
    )
    if requested_at is not None:
        enqueue_email_threshold_job(
            background_tasks, petition.id, requested_at,
            EmailReceiptName.DEBATE_SCHEDULED,
        )
    return {
        "petition": _admin_view(petition),
        "email_requested_at": requested_at.isoformat() if requested_at else None,
    }


@router.post("/{petition_id}/publish", response_model=PetitionAdminResponse)
async def publish(
    petition_id: int,
    background_tasks: BackgroundTasks,
    site: SiteConfig = Depends(current_site),
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(db, petition_id)
    await petition_service.publish(db, site, petition)
    creator = await signature_service.get_creator_signature(db, petition.id)
    if creator is not None:
        enqueue_email(
            background_tasks, format_creator_confirmation_email(site, petition, creator),
        )
    return petition


@router.post("/{petition_id}/reject", response_model=PetitionAdminResponse)
async def reject(
    petition_id: int,
    body: RejectionRequest,
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(db, petition_id)
    return await petition_service.reject(db, petition, body.code, body.details)


@router.post("/{petition_id}/hide", response_model=PetitionAdminResponse)
async def hide(
    petition_id: int,
    user: AdminUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(db, petition_id)
    await petition_service.hide(db, petition)
    logger.info(
        "Petition hidden by moderator",
        extra={"petition_id": petition.id, "admin_user_id": user.id},
    )
    return petition
