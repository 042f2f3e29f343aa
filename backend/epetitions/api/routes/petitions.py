"""Public Petitions — create, browse, sign, and validate signatures.

Invariants:
    - Only open, closed and rejected petitions are visible publicly
    - Creating a petition or signing emails a validation link in the background
    - Validation links are idempotent
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.api.dependencies import require_public_access
from epetitions.core.domain_types import PetitionState, VISIBLE_STATES
from epetitions.core.format_emails import format_validation_email
from epetitions.core.site_config import SiteConfig
from epetitions.infrastructure.database import get_db
from epetitions.schemas.petition import PetitionCreate, PetitionResponse
from epetitions.schemas.signature import SignatureCreate, SignatureResponse
from epetitions.services import petition_service, signature_service
from epetitions.services.notification_jobs import enqueue_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/petitions", tags=["petitions"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post(
    "", response_model=PetitionResponse, status_code=status.HTTP_201_CREATED,
)
async def create_petition(
    body: PetitionCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    site: SiteConfig = Depends(require_public_access),
    db: AsyncSession = Depends(get_db),
):
    """Create a pending petition; the creator must confirm their email."""
    petition, creator = await petition_service.create_petition(
        db,
        body.model_dump(exclude={"creator_signature"}),
        body.creator_signature.model_dump(),
        ip_address=_client_ip(request),
    )
    enqueue_email(background_tasks, format_validation_email(site, petition, creator))
    return PetitionResponse.model_validate(petition)


@router.get("")
async def list_petitions(
    state: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    site: SiteConfig = Depends(require_public_access),
    db: AsyncSession = Depends(get_db),
):
    pagination = {"limit": limit, "offset": offset}
    state_filter = None
    if state:
        try:
            state_filter = PetitionState(state)
        except ValueError:
            return {"petitions": [], "pagination": pagination}
    petitions = await petition_service.list_visible(
        db, state=state_filter, limit=limit, offset=offset,
    )
    return {
        "petitions": [
            PetitionResponse.model_validate(p).model_dump(mode="json") for p in petitions
        ],
        "pagination": pagination,
    }


@router.get("/{petition_id}", response_model=PetitionResponse)
async def get_petition(
    petition_id: int,
    site: SiteConfig = Depends(require_public_access),
    db: AsyncSession = Depends(get_db),
):
    petition = await petition_service.get_petition(db, petition_id, VISIBLE_STATES)
    return PetitionResponse.model_validate(petition)


@router.post(
    "/{petition_id}/signatures",
    response_model=SignatureResponse,
    status_code=status.HTTP_201_CREATED,
)
async def sign_petition(
    petition_id: int,
    body: SignatureCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    site: SiteConfig = Depends(require_public_access),
    db: AsyncSession = Depends(get_db),
):
    """Sign an open petition, or sponsor a petition still gathering sponsors."""
    petition = await petition_service.get_petition(db, petition_id)
    signature = await signature_service.create_signature(
        db, site, petition, body.model_dump(), ip_address=_client_ip(request),
    )
    enqueue_email(background_tasks, format_validation_email(site, petition, signature))
    return SignatureResponse.model_validate(signature)


@router.post("/signatures/{token}/validate", response_model=SignatureResponse)
async def validate_signature(
    token: str,
    site: SiteConfig = Depends(require_public_access),
    db: AsyncSession = Depends(get_db),
):
    signature = await signature_service.validate_signature_token(db, site, token)
    return SignatureResponse.model_validate(signature)
