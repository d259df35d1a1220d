"""Integration tests for the auth API endpoints, in-process with SQLite."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from auth_manager.api.deps import get_password_hasher, get_token_issuer
from auth_manager.database import get_db
from auth_manager.kernel.identity.jwt import JWTManager
from auth_manager.kernel.identity.password import PasswordHasher
from auth_manager.main import app


@pytest_asyncio.fixture
async def client(session_maker, password_hasher: PasswordHasher, jwt_manager: JWTManager):
    """Async client wired to the per-test database and cheap hashing."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: password_hasher
    app.dependency_overrides[get_token_issuer] = lambda: jwt_manager
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_register_player(client: AsyncClient):
    r = await client.post(
        "/api/auth/register/player",
        json={"email": "a@x.com", "password": "Secret123", "display_name": "Ace"},
    )

    assert r.status_code == 201, r.text
    data = r.json()
    assert data["id"]
    assert data["email"] == "a@x.com"
    assert data["role"] == "Player"
    assert data["profile"] == {"display_name": "Ace"}
    assert "password" not in r.text
    assert "$2b$" not in r.text
    assert r.headers["location"] == f"/api/users/{data['id']}"


@pytest.mark.asyncio
async def test_register_publisher(client: AsyncClient):
    r = await client.post(
        "/api/auth/register/publisher",
        json={"email": "studio@x.com", "password": "Secret123", "company_name": "Forge", "country": "BR"},
    )

    assert r.status_code == 201, r.text
    data = r.json()
    assert data["role"] == "Publisher"
    assert data["profile"] == {"company_name": "Forge", "country": "BR"}


@pytest.mark.asyncio
async def test_scenario(client: AsyncClient, jwt_manager: JWTManager):
    r = await client.post("/api/auth/register/player", json={"email": "a@x.com", "password": "Secret123"})
    assert r.status_code == 201
    user_id = r.json()["id"]

    r = await client.post("/api/auth/authenticate", json={"email": "a@x.com", "password": "Secret123"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3600
    assert jwt_manager.verify(body["token"]).sub == user_id

    r = await client.post("/api/auth/authenticate", json={"email": "a@x.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_CREDENTIALS"

    r = await client.post("/api/auth/register/player", json={"email": "a@x.com", "password": "Secret123"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "EMAIL_ALREADY_REGISTERED"


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client: AsyncClient):
    await client.post("/api/auth/register/player", json={"email": "real@x.com", "password": "Secret123"})

    unknown = await client.post("/api/auth/authenticate", json={"email": "ghost@x.com", "password": "Secret123"})
    wrong = await client.post("/api/auth/authenticate", json={"email": "real@x.com", "password": "Nope12345"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["error"] == wrong.json()["error"]


@pytest.mark.asyncio
async def test_validation_error_lists_fields(client: AsyncClient):
    r = await client.post(
        "/api/auth/register/publisher",
        json={"email": "broken", "password": "short", "password_hash": "sneaky"},
    )

    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in error["details"]}
    assert fields == {"email", "password", "profile.password_hash"}


@pytest.mark.asyncio
async def test_password_over_72_bytes_is_rejected(client: AsyncClient):
    r = await client.post(
        "/api/auth/register/player",
        json={"email": "long@x.com", "password": "Aa1" + "x" * 80},
    )

    assert r.status_code == 400
    assert [d["field"] for d in r.json()["error"]["details"]] == ["password"]


@pytest.mark.asyncio
async def test_malformed_body_is_400(client: AsyncClient):
    r = await client.post("/api/auth/authenticate", json={"email": "a@x.com"})

    assert r.status_code == 400
    assert r.json()["error"]["details"][0]["field"] == "password"


@pytest.mark.asyncio
async def test_correlation_id_round_trip(client: AsyncClient):
    r = await client.post(
        "/api/auth/authenticate",
        json={"email": "nobody@x.com", "password": "Secret123"},
        headers={"X-Correlation-ID": "corr-123"},
    )

    assert r.headers["x-correlation-id"] == "corr-123"
    assert r.json()["correlation_id"] == "corr-123"


@pytest.mark.asyncio
async def test_correlation_id_generated(client: AsyncClient):
    r = await client.get("/health")
    assert r.headers["x-correlation-id"]
