"""Public API — petitions, signing, validation links and the site access guard.

Invariants:
    - Disabled site answers 503 on public routes; health probes stay up
    - Protected site answers 401 with a Basic challenge unless credentials match
    - Only open, closed and rejected petitions are visible

Design Decisions:
    - Background tasks run synchronously in httpx test client (FastAPI behavior)
      so delivered mail can be asserted after the response
"""

from sqlalchemy import select

from epetitions.core.domain_types import PetitionState, SignatureState
from epetitions.infrastructure import mailer
from epetitions.models.signature import Signature
from tests.services.auth_headers import basic_auth

SIGNER = {
    "name": "Jo Bloggs",
    "email": "jo@example.com",
    "postcode": "SW1A 1AA",
    "uk_citizenship": True,
    "notify_by_email": True,
}


# ─── Site guard ──────────────────────────────────────────────────

async def test_health_probes(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"

    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200


async def test_public_site_facts(client):
    res = await client.get("/api/v1/site")

    assert res.status_code == 200
    body = res.json()
    assert body["host"] == "petition.parliament.uk"
    assert body["formatted_threshold_for_debate"] == "100,000"
    assert body["constraints_for_public"]["port"] == 443
    assert "password_digest" not in body


async def test_disabled_site_is_unavailable(client, configure_site):
    await configure_site(enabled=False)

    res = await client.get("/api/v1/petitions")

    assert res.status_code == 503
    assert res.json()["error"]["code"] == "SERVICE_UNAVAILABLE"
    assert (await client.get("/api/v1/health/")).status_code == 200


async def test_protected_site_requires_credentials(client, configure_site):
    await configure_site(protected=True, username="petitions", password="s3cret")

    res = await client.get("/api/v1/petitions")
    assert res.status_code == 401
    assert res.headers["WWW-Authenticate"] == 'Basic realm="Petitions"'

    res = await client.get(
        "/api/v1/petitions", headers=basic_auth("petitions", "wrong"),
    )
    assert res.status_code == 401

    res = await client.get(
        "/api/v1/petitions", headers=basic_auth("petitions", "s3cret"),
    )
    assert res.status_code == 200


# ─── Petitions ───────────────────────────────────────────────────

async def test_create_petition_emails_creator(client):
    res = await client.post("/api/v1/petitions", json={
        "action": "Make me the PM",
        "background": "Because I'm worth it",
        "creator_signature": {**SIGNER, "email": "jason@example.com", "name": "Jason"},
    })

    assert res.status_code == 201
    body = res.json()
    assert body["state"] == "pending"
    assert body["signature_count"] == 0
    assert [m["To"] for m in mailer.deliveries] == ["jason@example.com"]
    assert "Make me the PM" in mailer.deliveries[0]["Subject"]


async def test_create_invalid_petition_returns_field_errors(client):
    res = await client.post("/api/v1/petitions", json={
        "action": "",
        "background": "Because",
        "creator_signature": {**SIGNER, "uk_citizenship": False},
    })

    assert res.status_code == 422
    fields = res.json()["error"]["fields"]
    assert fields["action"] == ["can't be blank"]
    assert fields["creator_signature.uk_citizenship"] == ["must be accepted"]
    assert mailer.deliveries == []


async def test_malformed_body_is_bad_request(client):
    res = await client.post("/api/v1/petitions", json={"action": "No background"})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_list_shows_only_visible_petitions(client, make_petition):
    visible = await make_petition(PetitionState.OPEN, signature_count=3)
    await make_petition(PetitionState.PENDING)
    await make_petition(PetitionState.HIDDEN)

    res = await client.get("/api/v1/petitions")

    assert res.status_code == 200
    assert [p["id"] for p in res.json()["petitions"]] == [visible.id]


async def test_list_with_unknown_state_is_empty(client, make_petition):
    await make_petition(PetitionState.OPEN)

    res = await client.get("/api/v1/petitions", params={"state": "bogus"})

    assert res.status_code == 200
    assert res.json()["petitions"] == []


async def test_show_hidden_petition_is_not_found(client, make_petition):
    petition = await make_petition(PetitionState.HIDDEN)

    res = await client.get(f"/api/v1/petitions/{petition.id}")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


# ─── Signing ─────────────────────────────────────────────────────

async def test_sign_and_validate(client, test_db, make_petition):
    petition = await make_petition(PetitionState.OPEN, signature_count=1)

    res = await client.post(f"/api/v1/petitions/{petition.id}/signatures", json=SIGNER)
    assert res.status_code == 201
    assert res.json()["state"] == "pending"
    assert "email" not in res.json()
    assert [m["To"] for m in mailer.deliveries] == ["jo@example.com"]

    signer = (await test_db.execute(
        select(Signature).where(Signature.email == "jo@example.com"),
    )).scalar_one()

    res = await client.post(f"/api/v1/petitions/signatures/{signer.perishable_token}/validate")
    assert res.status_code == 200
    assert res.json()["state"] == SignatureState.VALIDATED.value

    res = await client.post(f"/api/v1/petitions/signatures/{signer.perishable_token}/validate")
    assert res.status_code == 200

    await test_db.refresh(petition)
    assert petition.signature_count == 2


async def test_signing_twice_is_rejected(client, make_petition):
    petition = await make_petition(PetitionState.OPEN)
    url = f"/api/v1/petitions/{petition.id}/signatures"

    assert (await client.post(url, json=SIGNER)).status_code == 201
    res = await client.post(url, json={**SIGNER, "email": "JO@example.com"})

    assert res.status_code == 422
    assert res.json()["error"]["fields"] == {"email": ["has already signed this petition"]}


async def test_signing_closed_petition_conflicts(client, make_petition):
    petition = await make_petition(PetitionState.CLOSED)

    res = await client.post(f"/api/v1/petitions/{petition.id}/signatures", json=SIGNER)

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "SIGNING_CLOSED"


async def test_unknown_validation_token(client):
    res = await client.post("/api/v1/petitions/signatures/nope/validate")

    assert res.status_code == 404
