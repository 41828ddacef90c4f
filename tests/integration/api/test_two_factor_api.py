import time

import pyotp
import pytest
from httpx import AsyncClient


def _auth(token: str):
    return {"Authorization": f"Bearer {token}"}


def _next_code(totp: pyotp.TOTP) -> str:
    """Code for the next step; still inside the skew window, unlike a used one"""
    return totp.at(time.time() + totp.interval)


async def _bearer(accounts):
    tokens = (await accounts.login()).json()["tokens"]
    return _auth(tokens["access_token"])


async def _enable_two_factor(client: AsyncClient, accounts) -> pyotp.TOTP:
    """Set up and confirm 2FA for the default account; returns its TOTP"""
    headers = await _bearer(accounts)
    secret = (await client.post("/auth/2fa/setup", headers=headers)).json()["secret"]
    totp = pyotp.TOTP(secret)
    verify = await client.post("/auth/2fa/verify", json={"code": totp.now()}, headers=headers)
    assert verify.status_code == 200
    return totp


@pytest.mark.asyncio
async def test_two_factor_login_flow(client: AsyncClient, accounts):
    """Setup, first verify, then login requires the second step"""
    await accounts.register_verified()
    headers = await _bearer(accounts)

    setup = await client.post("/auth/2fa/setup", headers=headers)
    assert setup.status_code == 200
    secret = setup.json()["secret"]
    assert setup.json()["qr_code"].startswith("data:image/png;base64,")

    # Setup alone does not gate login
    assert (await accounts.login()).json()["two_factor_required"] is False

    totp = pyotp.TOTP(secret)
    verify = await client.post("/auth/2fa/verify", json={"code": totp.now()}, headers=headers)
    assert verify.status_code == 200
    assert verify.json()["verified"] is True

    login = await accounts.login()
    assert login.status_code == 200
    assert login.json()["two_factor_required"] is True
    assert login.json()["tokens"] is None
    assert login.json()["two_factor_token"]


@pytest.mark.asyncio
async def test_two_factor_login_completes_with_challenge_token(client: AsyncClient, accounts):
    await accounts.register_verified()
    totp = await _enable_two_factor(client, accounts)
    challenge = (await accounts.login()).json()["two_factor_token"]

    response = await client.post(
        "/auth/2fa/verify", json={"code": _next_code(totp)}, headers=_auth(challenge)
    )

    assert response.status_code == 200
    tokens = response.json()["tokens"]
    setup = await client.post("/auth/2fa/setup", headers=_auth(tokens["access_token"]))
    # Authenticated as the same user, who already has 2FA on
    assert setup.status_code == 400
    assert setup.json()["error"]["message"] == "2FA already enabled"


@pytest.mark.asyncio
async def test_two_factor_verify_requires_token(client: AsyncClient, accounts):
    """A user id and a valid code without a token is not a login"""
    user = await accounts.register_verified()
    totp = await _enable_two_factor(client, accounts)

    response = await client.post(
        "/auth/2fa/verify", json={"user_id": user["id"], "code": _next_code(totp)}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
    assert "tokens" not in response.json()


@pytest.mark.asyncio
async def test_two_factor_verify_rejects_refresh_token(client: AsyncClient, accounts):
    await accounts.register_verified()
    refresh_token = (await accounts.login()).json()["tokens"]["refresh_token"]

    response = await client.post(
        "/auth/2fa/verify", json={"code": "123456"}, headers=_auth(refresh_token)
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_challenge_token_only_opens_the_verify_step(client: AsyncClient, accounts):
    await accounts.register_verified()
    await _enable_two_factor(client, accounts)
    challenge = (await accounts.login()).json()["two_factor_token"]

    setup = await client.post("/auth/2fa/setup", headers=_auth(challenge))
    disable = await client.post("/auth/2fa/disable", headers=_auth(challenge))
    refresh = await client.post("/auth/refresh", json={"refresh_token": challenge})

    assert setup.status_code == 401
    assert disable.status_code == 401
    assert refresh.status_code == 401


@pytest.mark.asyncio
async def test_two_factor_verify_wrong_code(client: AsyncClient, accounts):
    await accounts.register_verified()
    headers = await _bearer(accounts)
    secret = (await client.post("/auth/2fa/setup", headers=headers)).json()["secret"]
    current = pyotp.TOTP(secret).now()
    wrong = f"{(int(current) + 500000) % 1000000:06d}"

    response = await client.post("/auth/2fa/verify", json={"code": wrong}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"
    assert (await accounts.login()).json()["two_factor_required"] is False


@pytest.mark.asyncio
async def test_two_factor_verify_without_setup(client: AsyncClient, accounts):
    await accounts.register_verified()
    headers = await _bearer(accounts)

    response = await client.post("/auth/2fa/verify", json={"code": "123456"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


@pytest.mark.asyncio
async def test_two_factor_disable(client: AsyncClient, accounts):
    await accounts.register_verified()
    headers = await _bearer(accounts)
    await _enable_two_factor(client, accounts)

    first = await client.post("/auth/2fa/disable", headers=headers)
    second = await client.post("/auth/2fa/disable", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 400
    assert (await accounts.login()).json()["two_factor_required"] is False


@pytest.mark.asyncio
async def test_setup_requires_bearer_token(client: AsyncClient):
    response = await client.post("/auth/2fa/setup")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_setup_rejects_refresh_token(client: AsyncClient, accounts):
    await accounts.register_verified()
    tokens = (await accounts.login()).json()["tokens"]

    response = await client.post("/auth/2fa/setup", headers=_auth(tokens["refresh_token"]))

    assert response.status_code == 401
