"""Admin Jobs — on-demand maintenance tasks, triggered by a scheduler or a sysadmin."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.api.dependencies import current_site, require_sysadmin
from epetitions.core.site_config import SiteConfig
from epetitions.infrastructure.database import get_db
from epetitions.services import petition_service, site_service

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin/jobs",
    tags=["admin"],
    dependencies=[Depends(require_sysadmin)],
)


@router.post("/close-petitions")
async def close_petitions(
    site: SiteConfig = Depends(current_site),
    db: AsyncSession = Depends(get_db),
):
    closed = await petition_service.close_expired(db, site)
    await site_service.touch(db, "last_checked_at")
    logger.info(f"close-petitions job closed {closed} petitions", extra={"job": "close_petitions"})
    return {"closed": closed}
