"""Tests for authentication strategies and the token cache."""

import asyncio
import base64
from urllib.parse import parse_qs

import httpx
import pytest

from checkout_connector import (
    Authorizer,
    BearerToken,
    ClientCredentials,
    DeserializationError,
    OAuthClientCredentialsAuth,
    SecretKeyAuth,
    TokenCache,
    TokenRequestError,
    TransportError,
    UnauthorizedError,
)

ACCESS_URL = "https://access.test"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def credentials():
    return ClientCredentials(username="ack_user", password="s3cret")


@pytest.fixture
def clock():
    return FakeClock()


class TestAuthorizer:
    """Test the client-credentials token request."""

    async def test_sends_form_and_basic_auth(self, recording_transport, credentials, token_response):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        async with transport.client() as http_client:
            token = await Authorizer().authorize(http_client, credentials, ACCESS_URL)

        assert token.access_token == "tok_abc123"
        assert token.expires_in == 3600
        request = transport.requests[0]
        assert str(request.url) == f"{ACCESS_URL}/connect/token"
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {
            "grant_type": ["client_credentials"],
            "scope": ["gateway"],
        }
        expected = base64.b64encode(b"ack_user:s3cret").decode()
        assert request.headers["authorization"] == f"Basic {expected}"

    async def test_custom_scope(self, recording_transport, credentials, token_response):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        async with transport.client() as http_client:
            await Authorizer(scope="gateway:payment").authorize(http_client, credentials, ACCESS_URL)
        assert parse_qs(transport.requests[0].content.decode())["scope"] == ["gateway:payment"]

    async def test_defaults_when_lifetime_missing(self, recording_transport, credentials):
        transport = recording_transport({"POST /connect/token": (200, {"access_token": "tok"})})
        async with transport.client() as http_client:
            token = await Authorizer().authorize(http_client, credentials, ACCESS_URL)
        assert token.expires_in == 3600
        assert token.token_type == "Bearer"

    @pytest.mark.parametrize("status", [400, 401, 403, 500])
    async def test_non_200_is_unauthorized(self, recording_transport, credentials, status):
        transport = recording_transport({"POST /connect/token": (status, '{"error":"invalid_client"}')})
        async with transport.client() as http_client:
            with pytest.raises(TokenRequestError) as exc_info:
                await Authorizer().authorize(http_client, credentials, ACCESS_URL)
        assert isinstance(exc_info.value, UnauthorizedError)
        assert exc_info.value.status_code == status
        assert "invalid_client" in exc_info.value.body
        assert "s3cret" not in str(exc_info.value)

    async def test_malformed_token_body(self, recording_transport, credentials):
        transport = recording_transport({"POST /connect/token": (200, {"token": "nope"})})
        async with transport.client() as http_client:
            with pytest.raises(DeserializationError) as exc_info:
                await Authorizer().authorize(http_client, credentials, ACCESS_URL)
        assert exc_info.value.status_code == 200

    async def test_connection_failure(self, credentials):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
            with pytest.raises(TransportError) as exc_info:
                await Authorizer().authorize(http_client, credentials, ACCESS_URL)
        assert isinstance(exc_info.value.cause, httpx.ConnectError)


class TestBearerToken:
    """Test token expiry arithmetic."""

    def test_expiry_with_leeway(self):
        token = BearerToken(access_token="tok", expires_in=100, obtained_at=0.0)
        assert not token.is_expired(69.0, leeway=30)
        assert token.is_expired(70.0, leeway=30)

    def test_repr_hides_token(self):
        token = BearerToken(access_token="tok_secret", expires_in=100, obtained_at=0.0)
        assert "tok_secret" not in repr(token)


class TestTokenCache:
    """Test token reuse and refresh."""

    async def test_reuses_fresh_token(self, clock):
        cache = TokenCache(clock=clock)
        calls = []

        async def fetch():
            calls.append(1)
            return BearerToken(access_token=f"tok{len(calls)}", expires_in=3600, obtained_at=clock())

        first = await cache.get(fetch)
        second = await cache.get(fetch)
        assert first is second
        assert len(calls) == 1

    async def test_refreshes_expired_token(self, clock):
        cache = TokenCache(clock=clock, leeway=30)
        calls = []

        async def fetch():
            calls.append(1)
            return BearerToken(access_token=f"tok{len(calls)}", expires_in=60, obtained_at=clock())

        assert (await cache.get(fetch)).access_token == "tok1"
        clock.now += 31
        assert (await cache.get(fetch)).access_token == "tok2"

    async def test_invalidate_forces_refresh(self, clock):
        cache = TokenCache(clock=clock)
        calls = []

        async def fetch():
            calls.append(1)
            return BearerToken(access_token=f"tok{len(calls)}", expires_in=3600, obtained_at=clock())

        await cache.get(fetch)
        cache.invalidate()
        assert (await cache.get(fetch)).access_token == "tok2"

    async def test_invalidating_stale_token_keeps_newer_one(self, clock):
        cache = TokenCache(clock=clock)
        calls = []

        async def fetch():
            calls.append(1)
            return BearerToken(access_token=f"tok{len(calls)}", expires_in=3600, obtained_at=clock())

        await cache.get(fetch)
        cache.invalidate("tok1")
        assert (await cache.get(fetch)).access_token == "tok2"

        cache.invalidate("tok1")
        assert (await cache.get(fetch)).access_token == "tok2"
        assert len(calls) == 2

    async def test_concurrent_callers_share_one_refresh(self, clock):
        cache = TokenCache(clock=clock)
        calls = []

        async def fetch():
            calls.append(1)
            await asyncio.sleep(0.01)
            return BearerToken(access_token="tok", expires_in=3600, obtained_at=clock())

        tokens = await asyncio.gather(*(cache.get(fetch) for _ in range(10)))
        assert len(calls) == 1
        assert {t.access_token for t in tokens} == {"tok"}

    async def test_failed_refresh_leaves_cache_empty(self, clock):
        cache = TokenCache(clock=clock)

        async def failing():
            raise TokenRequestError(401, "")

        with pytest.raises(TokenRequestError):
            await cache.get(failing)

        async def fetch():
            return BearerToken(access_token="tok", expires_in=3600, obtained_at=clock())

        assert (await cache.get(fetch)).access_token == "tok"


class TestSecretKeyAuth:
    """Test the static secret key strategy."""

    async def test_header_is_raw_key(self):
        auth = SecretKeyAuth("sk_test_123")
        async with httpx.AsyncClient() as http_client:
            assert await auth.authorization_header(http_client) == {"Authorization": "sk_test_123"}

    def test_repr_masks_key(self):
        assert "sk_test_123" not in repr(SecretKeyAuth("sk_test_123"))


class TestOAuthClientCredentialsAuth:
    """Test the bearer token strategy."""

    async def test_bearer_header_and_caching(self, recording_transport, credentials, token_response, clock):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        auth = OAuthClientCredentialsAuth(credentials, ACCESS_URL, clock=clock)
        async with transport.client() as http_client:
            first = await auth.authorization_header(http_client)
            second = await auth.authorization_header(http_client)

        assert first == {"Authorization": "Bearer tok_abc123"}
        assert second == first
        assert transport.paths() == ["POST /connect/token"]

    async def test_refreshes_after_expiry(self, recording_transport, credentials, token_response, clock):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        auth = OAuthClientCredentialsAuth(credentials, ACCESS_URL, clock=clock)
        async with transport.client() as http_client:
            await auth.authorization_header(http_client)
            clock.now += 3600
            await auth.authorization_header(http_client)
        assert len(transport.requests) == 2

    async def test_caching_disabled(self, recording_transport, credentials, token_response):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        auth = OAuthClientCredentialsAuth(credentials, ACCESS_URL, cache_tokens=False)
        async with transport.client() as http_client:
            await auth.authorization_header(http_client)
            await auth.authorization_header(http_client)
        assert len(transport.requests) == 2

    async def test_on_unauthorized_drops_cached_token(self, recording_transport, credentials, token_response):
        transport = recording_transport({"POST /connect/token": (200, token_response)})
        auth = OAuthClientCredentialsAuth(credentials, ACCESS_URL)
        async with transport.client() as http_client:
            await auth.authorization_header(http_client)
            auth.on_unauthorized("Bearer tok_abc123")
            await auth.authorization_header(http_client)
        assert len(transport.requests) == 2

    def test_repr_hides_credentials(self, credentials):
        text = repr(OAuthClientCredentialsAuth(credentials, ACCESS_URL))
        assert "s3cret" not in text
        assert "ack_user" not in text

    async def test_late_rejection_of_old_token_keeps_new_one(self, recording_transport, credentials, clock):
        issued = iter(["tok_old", "tok_new"])
        transport = recording_transport({
            "POST /connect/token": lambda request: httpx.Response(
                200, json={"access_token": next(issued), "expires_in": 3600}
            ),
        })
        auth = OAuthClientCredentialsAuth(credentials, ACCESS_URL, clock=clock)
        async with transport.client() as http_client:
            old = await auth.authorization_header(http_client)
            auth.on_unauthorized(old["Authorization"])
            new = await auth.authorization_header(http_client)
            auth.on_unauthorized(old["Authorization"])
            assert await auth.authorization_header(http_client) == new
        assert new == {"Authorization": "Bearer tok_new"}
        assert len(transport.requests) == 2
