"""Public Site Info — title, host and formatted thresholds for the public interface."""

from fastapi import APIRouter, Depends

from epetitions.api.dependencies import require_public_access
from epetitions.core.site_config import SiteConfig
from epetitions.schemas.site import SitePublicResponse

router = APIRouter(prefix="/api/v1/site", tags=["site"])


@router.get("", response_model=SitePublicResponse)
async def get_site(site: SiteConfig = Depends(require_public_access)):
    return SitePublicResponse.from_site(site)
