"""Service test fixtures — async DB, FastAPI test client and record factories.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for background jobs that bypass get_db
    - Factories insert rows directly (no HTTP) so each test seeds only what it needs

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (row locks from with_for_update are a no-op there)
    - Admin credentials sent as HTTP Basic headers built by basic_auth()
"""

import secrets
from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from epetitions.core.domain_types import AdminRole, PetitionState, SignatureState
from epetitions.core.passwords import hash_password
from epetitions.db.base import Base
from epetitions.infrastructure.database import get_db, DatabaseSessionManager
from epetitions.models.admin_user import AdminUser
from epetitions.models.petition import Petition
from epetitions.models.signature import Signature
from epetitions.models.site import Site
from epetitions.services import site_service
import epetitions.infrastructure.database as db_module
from epetitions.main import app
from tests.services.auth_headers import ADMIN_PASSWORD, basic_auth


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Patch db_manager for background jobs that use it directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Factories ───────────────────────────────────────────────────

@pytest.fixture
def configure_site(test_db):
    """Set columns on the site row (created from defaults if missing)."""
    async def _configure(**attrs) -> Site:
        await site_service.instance(test_db)
        row = (await test_db.execute(select(Site))).scalar_one()
        password = attrs.pop("password", None)
        if password is not None:
            row.password_digest = hash_password(password)
        for name, value in attrs.items():
            setattr(row, name, value)
        await test_db.commit()
        site_service.reset()
        return row
    return _configure


def _signature(
    petition_id: int,
    name: str = "Jo Bloggs",
    email: str = "jo@example.com",
    state: SignatureState = SignatureState.PENDING,
    notify_by_email: bool = False,
    creator: bool = False,
) -> Signature:
    validated = SignatureState(state) == SignatureState.VALIDATED
    return Signature(
        petition_id=petition_id,
        name=name,
        email=email,
        postcode="SW1A 1AA",
        country="United Kingdom",
        uk_citizenship=True,
        notify_by_email=notify_by_email,
        state=SignatureState(state).value,
        creator=creator,
        perishable_token=secrets.token_urlsafe(24),
        validated_at=datetime.now(timezone.utc) if validated else None,
    )


@pytest.fixture
def make_petition(test_db):
    """Insert a petition with its creator signature (validated unless overridden)."""
    async def _make(
        state: PetitionState = PetitionState.OPEN,
        action: str = "Fund more public libraries",
        signature_count: int = 1,
        creator: dict | None = None,
        **attrs,
    ) -> Petition:
        petition = Petition(
            action=action,
            background="Libraries are closing across the country.",
            state=PetitionState(state).value,
            signature_count=signature_count,
            **attrs,
        )
        if petition.state in (PetitionState.OPEN.value, PetitionState.CLOSED.value):
            petition.open_at = petition.open_at or datetime.now(timezone.utc)
        test_db.add(petition)
        await test_db.flush()

        creator_attrs = {
            "name": "Creator",
            "email": f"creator{petition.id}@example.com",
            "state": SignatureState.VALIDATED,
        }
        creator_attrs.update(creator or {})
        test_db.add(_signature(petition.id, creator=True, **creator_attrs))
        await test_db.commit()
        await test_db.refresh(petition)
        return petition
    return _make


@pytest.fixture
def make_signature(test_db):
    async def _make(petition: Petition, **attrs) -> Signature:
        signature = _signature(petition.id, **attrs)
        test_db.add(signature)
        await test_db.commit()
        await test_db.refresh(signature)
        return signature
    return _make


@pytest.fixture
def make_admin(test_db):
    async def _make(
        role: AdminRole = AdminRole.MODERATOR,
        email: str | None = None,
        force_password_reset: bool = False,
        password: str = ADMIN_PASSWORD,
    ) -> AdminUser:
        user = AdminUser(
            email=email or f"{role.value}-{secrets.token_hex(4)}@example.com",
            first_name="Ada",
            last_name="Admin",
            role=AdminRole(role).value,
            password_digest=hash_password(password),
            force_password_reset=force_password_reset,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user
    return _make


@pytest.fixture
async def moderator(make_admin):
    return await make_admin(AdminRole.MODERATOR)


@pytest.fixture
async def sysadmin(make_admin):
    return await make_admin(AdminRole.SYSADMIN)


@pytest.fixture
def moderator_auth(moderator):
    return basic_auth(moderator.email)


@pytest.fixture
def sysadmin_auth(sysadmin):
    return basic_auth(sysadmin.email)
