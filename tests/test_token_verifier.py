import base64
import time

import httpx
import pytest
from fastapi import HTTPException
from jose import jwt

from app.core.auth import TokenVerifier

SECRET = "a-very-long-shared-secret-for-tests"
AUDIENCE = "gym-console"
ISSUER = "https://securetoken.google.com/gym-console"


def jwks():
    k = base64.urlsafe_b64encode(SECRET.encode()).rstrip(b"=").decode()
    return {"keys": [{"kty": "oct", "kid": "key-1", "alg": "HS256", "k": k}]}


def make_verifier(calls):
    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=jwks())

    return TokenVerifier(
        jwks_url="https://keys.test/jwks",
        audience=AUDIENCE,
        issuer=ISSUER,
        algorithms=["HS256"],
        transport=httpx.MockTransport(handler),
    )


def make_token(kid="key-1", **overrides):
    now = int(time.time())
    claims = {
        "sub": "admin-1",
        "user_id": "admin-1",
        "email": "admin@irontemple.com",
        "aud": AUDIENCE,
        "iss": ISSUER,
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, SECRET, algorithm="HS256", headers={"kid": kid})


@pytest.mark.asyncio
async def test_valid_token_returns_claims_and_caches_keys():
    calls = []
    verifier = make_verifier(calls)

    claims = await verifier.verify_token(make_token())
    await verifier.verify_token(make_token())

    assert claims["user_id"] == "admin-1"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_expired_token_is_rejected():
    verifier = make_verifier([])
    past = int(time.time()) - 7200
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(iat=past, exp=past + 60))
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "El token ha expirado"


@pytest.mark.asyncio
async def test_wrong_audience_is_rejected():
    verifier = make_verifier([])
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(aud="another-project"))
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_unknown_kid_refreshes_keys_once():
    calls = []
    verifier = make_verifier(calls)
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(kid="rotated"))
    assert exc_info.value.status_code == 401
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_garbage_token_is_rejected():
    verifier = make_verifier([])
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token("not-a-jwt")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_token_from_another_project_is_rejected():
    verifier = make_verifier([])
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(
            aud="other-project", iss="https://securetoken.google.com/other-project"
        ))
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_wrong_issuer_is_rejected():
    verifier = make_verifier([])
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(iss="https://securetoken.google.com/other-project"))
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_verifier_without_audience_refuses_every_token():
    calls = []
    verifier = TokenVerifier(
        jwks_url="https://keys.test/jwks",
        audience="",
        issuer="",
        algorithms=["HS256"],
        transport=httpx.MockTransport(lambda request: calls.append(request) or httpx.Response(200, json=jwks())),
    )
    with pytest.raises(HTTPException) as exc_info:
        await verifier.verify_token(make_token(aud="any-project", iss="https://securetoken.google.com/any-project"))
    assert exc_info.value.status_code == 503
    assert calls == []
