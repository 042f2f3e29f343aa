"""Admin Site — view and edit the site singleton.

Invariants:
    - Reading requires any admin; editing requires a sysadmin
    - A successful edit resets the site cache before the response is built
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.api.dependencies import current_site, require_admin, require_sysadmin
from epetitions.core.site_config import SiteConfig
from epetitions.infrastructure.database import get_db
from epetitions.schemas.site import SiteAdminResponse, SiteUpdate
from epetitions.services import site_service

router = APIRouter(prefix="/api/v1/admin/site", tags=["admin"])


@router.get(
    "", response_model=SiteAdminResponse, dependencies=[Depends(require_admin)],
)
async def show_site(site: SiteConfig = Depends(current_site)):
    return SiteAdminResponse.from_site(site)


@router.patch(
    "", response_model=SiteAdminResponse, dependencies=[Depends(require_sysadmin)],
)
async def update_site(body: SiteUpdate, db: AsyncSession = Depends(get_db)):
    site = await site_service.update_site(db, body.model_dump(exclude_unset=True))
    return SiteAdminResponse.from_site(site)
