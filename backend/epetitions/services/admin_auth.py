"""Admin Authentication — moderator accounts, credential checks and password changes.

Invariants:
    - MAX_FAILED_LOGINS consecutive failures lock an account; a locked account
      never authenticates, even with the right password
    - A successful check resets failed_login_count and stamps last_login_at
    - New accounts start with force_password_reset=True; changing the password
      clears it
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.core.domain_types import AdminRole
from epetitions.core.errors import RecordValidationError
from epetitions.core.passwords import (
    hash_password, password_policy_errors, verify_password,
)
from epetitions.db.types import utcnow
from epetitions.infrastructure.database import translate_integrity_error
from epetitions.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

MAX_FAILED_LOGINS = 5


async def find_by_email(db: AsyncSession, email: str) -> AdminUser | None:
    result = await db.execute(
        select(AdminUser).where(AdminUser.email == email.strip().lower()),
    )
    return result.scalar_one_or_none()


async def authenticate_admin(
    db: AsyncSession, email: str, password: str,
) -> AdminUser | None:
    user = await find_by_email(db, email)
    if user is None:
        return None
    if user.failed_login_count >= MAX_FAILED_LOGINS:
        logger.warning("Locked admin account login attempt", extra={"admin_user_id": user.id})
        return None
    if not verify_password(password, user.password_digest):
        user.failed_login_count += 1
        await db.commit()
        return None
    user.failed_login_count = 0
    user.last_login_at = utcnow()
    await db.commit()
    return user


async def create_admin_user(
    db: AsyncSession,
    email: str,
    first_name: str,
    last_name: str,
    password: str,
    role: AdminRole = AdminRole.MODERATOR,
    force_password_reset: bool = True,
) -> AdminUser:
    errors: dict[str, list[str]] = {}
    policy = password_policy_errors(password)
    if policy:
        errors["password"] = policy
    if await find_by_email(db, email) is not None:
        errors["email"] = ["has already been taken"]
    if errors:
        raise RecordValidationError(errors)

    user = AdminUser(
        email=email.strip().lower(),
        first_name=first_name,
        last_name=last_name,
        role=AdminRole(role).value,
        password_digest=hash_password(password),
        force_password_reset=force_password_reset,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e) from e
    await db.refresh(user)
    logger.info("Admin user created", extra={"admin_user_id": user.id})
    return user


async def change_password(
    db: AsyncSession,
    user: AdminUser,
    current_password: str,
    new_password: str,
    password_confirmation: str,
) -> AdminUser:
    errors: dict[str, list[str]] = {}
    if not verify_password(current_password, user.password_digest):
        errors["current_password"] = ["is incorrect"]
    policy = password_policy_errors(new_password)
    if policy:
        errors["password"] = policy
    elif current_password == new_password:
        errors["password"] = ["must be different from the current password"]
    if new_password != password_confirmation:
        errors["password_confirmation"] = ["doesn't match Password"]
    if errors:
        raise RecordValidationError(errors)

    user.password_digest = hash_password(new_password)
    user.force_password_reset = False
    await db.commit()
    logger.info("Admin password changed", extra={"admin_user_id": user.id})
    return user


async def list_admin_users(db: AsyncSession) -> list[AdminUser]:
    result = await db.execute(select(AdminUser).order_by(AdminUser.last_name, AdminUser.id))
    return list(result.scalars().all())
