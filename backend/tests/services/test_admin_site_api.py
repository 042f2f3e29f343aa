"""Admin Site, Users and Jobs API — sysadmin-only settings, accounts and maintenance."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from epetitions.core.domain_types import AdminRole, PetitionState
from epetitions.models.site import Site
from epetitions.services import admin_auth
from tests.services.auth_headers import basic_auth


# ─── Site settings ───────────────────────────────────────────────

async def test_moderator_can_view_site(client, moderator_auth):
    res = await client.get("/api/v1/admin/site", headers=moderator_auth)

    assert res.status_code == 200
    body = res.json()
    assert body["moderate_host_with_port"] == "moderate.petition.parliament.uk"
    assert body["has_password"] is False
    assert "password_digest" not in body


async def test_moderator_cannot_edit_site(client, moderator_auth):
    res = await client.patch(
        "/api/v1/admin/site", json={"title": "Mine"}, headers=moderator_auth,
    )

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "PERMISSION_DENIED"


async def test_sysadmin_edit_is_visible_immediately(client, sysadmin_auth):
    res = await client.patch(
        "/api/v1/admin/site",
        json={"title": "Petitions", "threshold_for_debate": 250},
        headers=sysadmin_auth,
    )
    assert res.status_code == 200
    assert res.json()["threshold_for_debate"] == 250

    res = await client.get("/api/v1/site")
    assert res.json()["title"] == "Petitions"
    assert res.json()["formatted_threshold_for_debate"] == "250"


async def test_invalid_site_edit(client, sysadmin_auth):
    res = await client.patch(
        "/api/v1/admin/site", json={"protected": True}, headers=sysadmin_auth,
    )

    assert res.status_code == 422
    fields = res.json()["error"]["fields"]
    assert fields["username"] == ["can't be blank"]
    assert fields["password"] == ["can't be blank"]


async def test_site_password_longer_than_credential_limit(client, sysadmin_auth):
    password = "x" * 80

    res = await client.patch("/api/v1/admin/site", json={
        "protected": True,
        "username": "admin",
        "password": password,
        "password_confirmation": password,
    }, headers=sysadmin_auth)

    assert res.status_code == 422
    assert res.json()["error"]["fields"] == {
        "password": ["is too long (maximum is 30 characters)"],
    }


async def test_unhashable_password_on_open_site(client, sysadmin_auth):
    res = await client.patch(
        "/api/v1/admin/site", json={"password": "x" * 80}, headers=sysadmin_auth,
    )

    assert res.status_code == 422
    assert res.json()["error"]["fields"] == {
        "password": ["is too long (maximum is 72 bytes)"],
    }


async def test_blank_password_clears_digest(client, test_db, sysadmin_auth):
    res = await client.patch("/api/v1/admin/site", json={
        "password": "s3cret", "password_confirmation": "s3cret",
    }, headers=sysadmin_auth)
    assert res.json()["has_password"] is True

    res = await client.patch(
        "/api/v1/admin/site", json={"password": ""}, headers=sysadmin_auth,
    )

    assert res.status_code == 200
    assert res.json()["has_password"] is False
    row = (await test_db.execute(select(Site))).scalar_one()
    await test_db.refresh(row)
    assert row.password_digest is None


async def test_blank_password_on_protected_site(client, sysadmin_auth, configure_site):
    await configure_site(protected=True, username="admin", password="s3cret")

    res = await client.patch(
        "/api/v1/admin/site", json={"password": ""}, headers=sysadmin_auth,
    )

    assert res.status_code == 422
    assert res.json()["error"]["fields"] == {"password": ["can't be blank"]}


# ─── Admin users ─────────────────────────────────────────────────

async def test_sysadmin_creates_moderator(client, sysadmin_auth):
    res = await client.post("/api/v1/admin/users", json={
        "email": "New.Mod@Example.com",
        "first_name": "New",
        "last_name": "Moderator",
        "password": "Letmein1",
    }, headers=sysadmin_auth)

    assert res.status_code == 201
    assert res.json()["email"] == "new.mod@example.com"
    assert res.json()["role"] == "moderator"
    assert res.json()["force_password_reset"] is True

    res = await client.get("/api/v1/admin/users", headers=sysadmin_auth)
    assert "new.mod@example.com" in [u["email"] for u in res.json()]


async def test_weak_admin_password_rejected(client, sysadmin_auth):
    res = await client.post("/api/v1/admin/users", json={
        "email": "weak@example.com",
        "first_name": "Weak",
        "last_name": "Password",
        "password": "password",
    }, headers=sysadmin_auth)

    assert res.status_code == 422
    assert "must contain a digit" in res.json()["error"]["fields"]["password"]


async def test_admin_password_measured_in_bytes(client, sysadmin_auth):
    res = await client.post("/api/v1/admin/users", json={
        "email": "accents@example.com",
        "first_name": "Accent",
        "last_name": "Aigu",
        "password": "Aa1" + "\u00e9" * 60,
    }, headers=sysadmin_auth)

    assert res.status_code == 422
    assert res.json()["error"]["fields"]["password"] == [
        "is too long (maximum is 72 bytes)",
    ]


async def test_password_change_measured_in_bytes(client, make_admin):
    user = await make_admin(AdminRole.MODERATOR, force_password_reset=True)
    password = "Aa1" + "\u00e9" * 60

    res = await client.patch("/api/v1/admin/profile/password", json={
        "current_password": "Letmein1",
        "password": password,
        "password_confirmation": password,
    }, headers=basic_auth(user.email))

    assert res.status_code == 422
    assert res.json()["error"]["fields"] == {
        "password": ["is too long (maximum is 72 bytes)"],
    }


async def test_forced_reset_then_moderate(client, make_admin):
    user = await make_admin(AdminRole.MODERATOR, force_password_reset=True)

    res = await client.patch("/api/v1/admin/profile/password", json={
        "current_password": "Letmein1",
        "password": "Changed99",
        "password_confirmation": "Changed99",
    }, headers=basic_auth(user.email))
    assert res.status_code == 200
    assert res.json()["force_password_reset"] is False

    res = await client.get(
        "/api/v1/admin/petitions", headers=basic_auth(user.email, "Changed99"),
    )
    assert res.status_code == 200


async def test_repeated_failures_lock_account(client, test_db, moderator):
    for _ in range(admin_auth.MAX_FAILED_LOGINS):
        res = await client.get(
            "/api/v1/admin/petitions", headers=basic_auth(moderator.email, "Wrong123"),
        )
        assert res.status_code == 401

    res = await client.get("/api/v1/admin/petitions", headers=basic_auth(moderator.email))
    assert res.status_code == 401

    await test_db.refresh(moderator)
    assert moderator.failed_login_count == admin_auth.MAX_FAILED_LOGINS


# ─── Jobs ────────────────────────────────────────────────────────

async def test_close_petitions_job(client, sysadmin_auth, make_petition):
    now = datetime.now(timezone.utc)
    await make_petition(PetitionState.OPEN, open_at=now - timedelta(days=400))
    await make_petition(PetitionState.OPEN, open_at=now - timedelta(days=1))

    res = await client.post("/api/v1/admin/jobs/close-petitions", headers=sysadmin_auth)

    assert res.status_code == 200
    assert res.json() == {"closed": 1}

    res = await client.get("/api/v1/admin/site", headers=sysadmin_auth)
    assert res.json()["last_checked_at"] is not None


async def test_close_petitions_job_is_sysadmin_only(client, moderator_auth):
    res = await client.post("/api/v1/admin/jobs/close-petitions", headers=moderator_auth)

    assert res.status_code == 403
