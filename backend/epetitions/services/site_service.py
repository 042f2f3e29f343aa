"""Site Service — the process-wide cached site singleton.

Invariants:
    - instance() lookup order: request-local slot -> shared cache (expires after
      site_cache_ttl_seconds, default five minutes) -> database
    - The database lookup is first-or-create: a cold start with an empty `sites`
      table inserts a row built from environment defaults
    - reset() drops both the shared entry and the local slot; reload() drops only
      the local slot
    - Every write (update_site, touch) ends with reset() so the next read is fresh
    - update_site() validates the plain password before hashing it; a blank
      password clears the digest
    - An environment password bcrypt cannot hash leaves the cold-start row
      without a digest (logged), so a protected site refuses every login

Design Decisions:
    - Callers receive a frozen SiteConfig, never the ORM row: the cached value
      outlives the session that loaded it
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from epetitions.config import get_settings
from epetitions.core.errors import RecordValidationError
from epetitions.core.passwords import (
    PASSWORD_TOO_LONG, exceeds_digest_limit, hash_password,
)
from epetitions.core.site_config import SITE_CACHE_KEY, SiteConfig, site_defaults
from epetitions.core.validate_records import validate_site
from epetitions.db.types import utcnow
from epetitions.infrastructure.site_cache import local_site, shared_cache
from epetitions.models.site import Site

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title", "url", "email_from", "feedback_email", "username", "enabled",
    "protected", "petition_duration", "minimum_number_of_sponsors",
    "maximum_number_of_sponsors", "threshold_for_moderation",
    "threshold_for_response", "threshold_for_debate",
)
TOUCHABLE_FIELDS = ("last_checked_at", "last_petition_created_at")


def defaults() -> dict:
    return site_defaults(get_settings())


def reset() -> None:
    shared_cache.delete(SITE_CACHE_KEY)
    local_site.set(None)


def reload() -> None:
    local_site.set(None)


def _snapshot(row: Site) -> SiteConfig:
    return SiteConfig.from_row(row, development=get_settings().is_development)


async def _load_row(db: AsyncSession) -> Site | None:
    result = await db.execute(select(Site).order_by(Site.id).limit(1))
    return result.scalar_one_or_none()


async def _first_or_create(db: AsyncSession) -> Site:
    row = await _load_row(db)
    if row is not None:
        return row

    attrs = defaults()
    password = attrs.pop("password")
    errors = validate_site(attrs, bool(password), password)
    if password and exceeds_digest_limit(password):
        errors.setdefault("password", []).append(PASSWORD_TOO_LONG)
        password = None
    if errors:
        logger.warning(f"Site created from environment with invalid settings: {errors}")
    row = Site(**attrs)
    row.password_digest = hash_password(password) if password else None
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info(f"Site created from environment defaults for {row.url}")
    return row


async def instance(db: AsyncSession) -> SiteConfig:
    """Current site configuration."""
    site = local_site.get()
    if site is not None:
        return site

    site = shared_cache.get(SITE_CACHE_KEY)
    if site is None:
        site = _snapshot(await _first_or_create(db))
        shared_cache.set(
            SITE_CACHE_KEY, site, get_settings().site_cache_ttl_seconds,
        )
    local_site.set(site)
    return site


async def authenticate(
    db: AsyncSession, username: str | None, password: str | None,
) -> bool:
    site = await instance(db)
    return site.authenticate(username, password)


async def update_site(db: AsyncSession, changes: dict) -> SiteConfig:
    """Validate and persist site changes. Raises RecordValidationError."""
    row = await _first_or_create(db)
    password = changes.get("password")
    password_confirmation = changes.get("password_confirmation")

    attrs = {name: getattr(row, name) for name in EDITABLE_FIELDS}
    attrs.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})

    has_digest = row.password_digest is not None
    if "password" in changes:
        has_digest = bool(password)

    errors = validate_site(attrs, has_digest, password, password_confirmation)
    if errors:
        raise RecordValidationError(errors)

    digest = row.password_digest
    if "password" in changes:
        digest = hash_password(password) if password else None

    for name, value in attrs.items():
        setattr(row, name, value)
    row.password_digest = digest
    await db.commit()
    reset()
    logger.info("Site settings updated")
    return await instance(db)


async def touch(db: AsyncSession, *names: str, now: datetime | None = None) -> None:
    """Stamp bookkeeping timestamps on the site row."""
    unknown = [n for n in names if n not in TOUCHABLE_FIELDS]
    if unknown:
        raise ValueError(f"Cannot touch site attributes: {', '.join(unknown)}")
    row = await _first_or_create(db)
    moment = now or utcnow()
    for name in names:
        setattr(row, name, moment)
    row.updated_at = moment
    await db.commit()
    reset()
