"""Access Guards — site availability, site password and moderator authentication.

Invariants:
    - Public routes: a disabled site answers 503; a protected site requires HTTP
      Basic credentials matching the site username/password
    - Admin routes always require HTTP Basic credentials of an admin user
    - An admin user flagged force_password_reset may only reach the password
      change endpoint (PASSWORD_RESET_REQUIRED elsewhere)
    - Sysadmin-only routes additionally check the role

Design Decisions:
    - HTTP Basic per request instead of login sessions: the API is stateless and
      sits behind TLS
"""

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.core.domain_types import AdminRole
from epetitions.core.errors import (
    AuthenticationRequiredError,
    PasswordResetRequiredError,
    PermissionDeniedError,
    ServiceUnavailableError,
)
from epetitions.core.site_config import SiteConfig
from epetitions.infrastructure.database import get_db
from epetitions.models.admin_user import AdminUser
from epetitions.services import admin_auth, site_service

PUBLIC_REALM = "Petitions"
MODERATION_REALM = "Petitions moderation"

basic_auth = HTTPBasic(auto_error=False)


async def current_site(db: AsyncSession = Depends(get_db)) -> SiteConfig:
    return await site_service.instance(db)


async def require_public_access(
    site: SiteConfig = Depends(current_site),
    credentials: HTTPBasicCredentials | None = Depends(basic_auth),
) -> SiteConfig:
    """Guard for public routes. Returns the site so handlers can reuse it."""
    if not site.enabled:
        raise ServiceUnavailableError()
    if site.protected:
        if credentials is None or not site.authenticate(
            credentials.username, credentials.password,
        ):
            raise AuthenticationRequiredError(PUBLIC_REALM)
    return site


async def authenticated_admin(
    credentials: HTTPBasicCredentials | None = Depends(basic_auth),
    db: AsyncSession = Depends(get_db),
) -> AdminUser:
    """Any admin user, including one who still has to change their password."""
    if credentials is None:
        raise AuthenticationRequiredError(MODERATION_REALM)
    user = await admin_auth.authenticate_admin(
        db, credentials.username, credentials.password,
    )
    if user is None:
        raise AuthenticationRequiredError(MODERATION_REALM)
    return user


async def require_admin(user: AdminUser = Depends(authenticated_admin)) -> AdminUser:
    if user.has_to_change_password:
        raise PasswordResetRequiredError(user.id)
    return user


async def require_sysadmin(user: AdminUser = Depends(require_admin)) -> AdminUser:
    if not user.is_sysadmin:
        raise PermissionDeniedError(AdminRole.SYSADMIN.value)
    return user
