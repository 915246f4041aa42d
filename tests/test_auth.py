"""Account, login and password reset flows through the API."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import inspect, select, update

from store_directory.models import User
from store_directory.services.auth import create_access_token, get_user
from store_directory.settings import get_settings
from store_directory.stores.postgres import get_session
from tests.conftest import auth_headers


def _register_body(email: str = "wes@example.com", password: str = "hunter2", confirm: str | None = None) -> dict:
    return {
        "name": "Wes",
        "email": email,
        "password": password,
        "password-confirm": password if confirm is None else confirm,
    }


async def _reset_token(email: str) -> str:
    async with get_session() as session:
        result = await session.execute(select(User.reset_password_token).where(User.email == email))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_register_returns_token_for_account(client: AsyncClient):
    response = await client.post("/v1/auth/register", json=_register_body())
    assert response.status_code == 201
    token = response.json()["access_token"]

    account = await client.get("/v1/account", headers={"Authorization": f"Bearer {token}"})
    assert account.status_code == 200
    data = account.json()
    assert data["name"] == "Wes"
    assert data["email"] == "wes@example.com"
    assert data["hearts"] == []
    assert data["gravatar"].startswith("https://gravatar.com/avatar/")


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client: AsyncClient):
    await client.post("/v1/auth/register", json=_register_body())
    response = await client.post("/v1/auth/register", json=_register_body(email="WES@example.com"))

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_register_rejects_mismatched_passwords(client: AsyncClient):
    response = await client.post("/v1/auth/register", json=_register_body(confirm="other"))

    assert response.status_code == 422
    assert "Passwords do not match!" in response.text


@pytest.mark.asyncio
async def test_register_requires_name(client: AsyncClient):
    body = _register_body()
    body["name"] = "   "
    response = await client.post("/v1/auth/register", json=body)

    assert response.status_code == 422
    assert "You must supply a name!" in response.text


@pytest.mark.asyncio
async def test_login(client: AsyncClient, make_user):
    await make_user(email="debbie@example.com", password="pw1")

    ok = await client.post("/v1/auth/login", json={"email": "Debbie@example.com", "password": "pw1"})
    bad = await client.post("/v1/auth/login", json={"email": "debbie@example.com", "password": "nope"})
    unknown = await client.post("/v1/auth/login", json={"email": "nobody@example.com", "password": "pw1"})

    assert ok.status_code == 200
    assert ok.json()["token_type"] == "bearer"
    assert bad.status_code == 401
    assert bad.json()["error"]["message"] == "Failed Login!"
    assert unknown.status_code == 401
    assert unknown.json() == bad.json()


@pytest.mark.asyncio
async def test_account_requires_valid_token(client: AsyncClient, make_user):
    missing = await client.get("/v1/account")
    garbage = await client.get("/v1/account", headers={"Authorization": "Bearer not-a-jwt"})
    expired = await client.get(
        "/v1/account",
        headers={"Authorization": f"Bearer {create_access_token(1, expires_delta=timedelta(seconds=-5))}"},
    )
    unknown_user = await client.get("/v1/account", headers={"Authorization": f"Bearer {create_access_token(999)}"})

    assert missing.status_code == 401
    assert missing.headers["WWW-Authenticate"] == "Bearer"
    assert missing.json()["error"]["code"] == "NOT_AUTHENTICATED"
    assert garbage.status_code == 401
    assert expired.status_code == 401
    assert expired.json()["error"]["message"] == "Token has expired"
    assert unknown_user.status_code == 401


@pytest.mark.asyncio
async def test_update_account(client: AsyncClient, make_user):
    user = await make_user(name="Wes")
    await make_user(email="taken@example.com")

    renamed = await client.patch("/v1/account", json={"name": "Wesley"}, headers=auth_headers(user))
    taken = await client.patch("/v1/account", json={"email": "taken@example.com"}, headers=auth_headers(user))

    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Wesley"
    assert taken.status_code == 409


@pytest.mark.asyncio
async def test_forgot_gives_same_answer_for_unknown_email(client: AsyncClient, make_user):
    await make_user(email="wes@example.com")

    known = await client.post("/v1/auth/forgot", json={"email": "wes@example.com"})
    unknown = await client.post("/v1/auth/forgot", json={"email": "nobody@example.com"})

    assert known.status_code == 200
    assert known.json() == unknown.json()
    assert known.json()["reset_url"] is None


@pytest.mark.asyncio
async def test_forgot_can_expose_reset_link(client: AsyncClient, make_user, monkeypatch: pytest.MonkeyPatch):
    await make_user(email="wes@example.com")
    monkeypatch.setattr(get_settings(), "expose_reset_links", True)

    response = await client.post("/v1/auth/forgot", json={"email": "wes@example.com"})

    token = await _reset_token("wes@example.com")
    assert response.json()["reset_url"] == f"http://test/v1/auth/reset/{token}"


@pytest.mark.asyncio
async def test_reset_password_flow(client: AsyncClient, make_user):
    await make_user(email="wes@example.com", password="old")
    await client.post("/v1/auth/forgot", json={"email": "wes@example.com"})
    token = await _reset_token("wes@example.com")

    check = await client.get(f"/v1/auth/reset/{token}")
    assert check.status_code == 200
    assert check.json() == {"valid": True}

    mismatch = await client.post(
        f"/v1/auth/reset/{token}", json={"password": "new", "password-confirm": "other"}
    )
    assert mismatch.status_code == 422

    reset = await client.post(f"/v1/auth/reset/{token}", json={"password": "new", "password-confirm": "new"})
    assert reset.status_code == 200

    login = await client.post("/v1/auth/login", json={"email": "wes@example.com", "password": "new"})
    assert login.status_code == 200

    reused = await client.post(f"/v1/auth/reset/{token}", json={"password": "x", "password-confirm": "x"})
    assert reused.status_code == 400
    assert reused.json()["error"]["message"] == "Password reset is invalid or has expired"


@pytest.mark.asyncio
async def test_expired_reset_token_rejected(client: AsyncClient, make_user):
    await make_user(email="wes@example.com")
    await client.post("/v1/auth/forgot", json={"email": "wes@example.com"})
    token = await _reset_token("wes@example.com")

    async with get_session() as session:
        await session.execute(
            update(User)
            .where(User.email == "wes@example.com")
            .values(reset_password_expires=datetime.now(timezone.utc) - timedelta(minutes=1))
        )

    response = await client.get(f"/v1/auth/reset/{token}")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_RESET_TOKEN"


@pytest.mark.asyncio
async def test_auth_lookup_does_not_load_hearted_stores(client: AsyncClient, make_user, make_store):
    user = await make_user()
    store = await make_store(user)
    await client.post(f"/v1/stores/{store.id}/heart", headers=auth_headers(user))

    loaded = await get_user(user.id)
    account = await client.get("/v1/account", headers=auth_headers(user))

    assert "hearts" in inspect(loaded).unloaded
    assert account.json()["hearts"] == [store.id]
