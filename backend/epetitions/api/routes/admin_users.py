"""Admin Users — account management and the forced password change."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.api.dependencies import authenticated_admin, require_sysadmin
from epetitions.infrastructure.database import get_db
from epetitions.models.admin_user import AdminUser
from epetitions.schemas.admin import AdminUserCreate, AdminUserResponse, PasswordChange
from epetitions.services import admin_auth

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get(
    "/users",
    response_model=list[AdminUserResponse],
    dependencies=[Depends(require_sysadmin)],
)
async def list_users(db: AsyncSession = Depends(get_db)):
    return await admin_auth.list_admin_users(db)


@router.post(
    "/users",
    response_model=AdminUserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_sysadmin)],
)
async def create_user(body: AdminUserCreate, db: AsyncSession = Depends(get_db)):
    return await admin_auth.create_admin_user(
        db, body.email, body.first_name, body.last_name, body.password, body.role,
    )


@router.patch("/profile/password", response_model=AdminUserResponse)
async def change_password(
    body: PasswordChange,
    user: AdminUser = Depends(authenticated_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reachable while force_password_reset is set."""
    return await admin_auth.change_password(
        db, user, body.current_password, body.password, body.password_confirmation,
    )
