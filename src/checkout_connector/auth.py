"""Credentials and the strategies that turn them into Authorization headers.

Two ways of authenticating are supported:

- ``SecretKeyAuth`` sends a secret key as a static header value.
- ``OAuthClientCredentialsAuth`` exchanges a username/password pair for a
  short-lived bearer token at ``{access_url}/connect/token``.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError

from .errors import DeserializationError, TokenRequestError, TransportError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/connect/token"
DEFAULT_SCOPE = "gateway"
DEFAULT_TOKEN_LIFETIME = 3600
# Tokens are treated as expired this many seconds early.
TOKEN_EXPIRY_LEEWAY = 30


class SecretKeyCredentials(BaseModel):
    """A secret key sent as-is in the Authorization header."""

    model_config = ConfigDict(frozen=True)

    secret_key: SecretStr


class ClientCredentials(BaseModel):
    """A username/password pair used only against the token endpoint."""

    model_config = ConfigDict(frozen=True)

    username: SecretStr
    password: SecretStr


class OAuthTokenRequest(BaseModel):
    """Form body sent to the token endpoint."""

    grant_type: str = "client_credentials"
    scope: str = DEFAULT_SCOPE


class OAuthTokenResponse(BaseModel):
    access_token: str
    expires_in: int = DEFAULT_TOKEN_LIFETIME
    token_type: str = "Bearer"


@dataclass(frozen=True)
class BearerToken:
    """An access token and the monotonic time it was obtained."""

    access_token: str = field(repr=False)
    expires_in: int
    obtained_at: float
    token_type: str = "Bearer"

    def is_expired(self, now: float, leeway: float = TOKEN_EXPIRY_LEEWAY) -> bool:
        return now >= self.obtained_at + self.expires_in - leeway


class Authorizer:
    """Requests bearer tokens with the OAuth client-credentials grant."""

    def __init__(self, scope: str = DEFAULT_SCOPE, clock: Callable[[], float] = time.monotonic):
        self.scope = scope
        self._clock = clock

    async def authorize(
        self,
        http_client: httpx.AsyncClient,
        credentials: ClientCredentials,
        access_base_url: str,
    ) -> BearerToken:
        """Exchange client credentials for a bearer token.

        Args:
            http_client: Transport used for the token request.
            credentials: Username and password, sent as HTTP Basic auth.
            access_base_url: Base URL of the access service.

        Returns:
            The issued BearerToken.

        Raises:
            TokenRequestError: If the endpoint answers anything but 200.
            DeserializationError: If a 200 body carries no access token.
            TransportError: If no response was received.
        """
        url = f"{access_base_url.rstrip('/')}{TOKEN_PATH}"
        form = OAuthTokenRequest(scope=self.scope).model_dump()
        basic_auth = httpx.BasicAuth(
            credentials.username.get_secret_value(),
            credentials.password.get_secret_value(),
        )

        logger.debug(f"Requesting access token from {url}")
        try:
            response = await http_client.post(url, data=form, auth=basic_auth)
        except httpx.RequestError as exc:
            logger.warning(f"Token request to {url} failed: {type(exc).__name__}")
            raise TransportError(exc) from exc

        if response.status_code != 200:
            logger.warning(f"Token request to {url} rejected with status {response.status_code}")
            raise TokenRequestError(response.status_code, response.text)

        try:
            payload = OAuthTokenResponse.model_validate_json(response.content)
        except ValidationError as exc:
            # The body may hold a partial token, so it is not kept on the error.
            raise DeserializationError(
                "Token response did not contain an access token", status_code=200
            ) from exc

        return BearerToken(
            access_token=payload.access_token,
            expires_in=payload.expires_in,
            obtained_at=self._clock(),
            token_type=payload.token_type,
        )


class TokenCache:
    """Holds one bearer token and refreshes it when it expires.

    Concurrent callers that find the token missing or stale wait on a single
    refresh instead of each requesting their own.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, leeway: float = TOKEN_EXPIRY_LEEWAY):
        self._clock = clock
        self._leeway = leeway
        self._token: Optional[BearerToken] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self, token: Optional[BearerToken]) -> bool:
        return token is not None and not token.is_expired(self._clock(), self._leeway)

    async def get(self, fetch: Callable[[], Awaitable[BearerToken]]) -> BearerToken:
        token = self._token
        if self._is_fresh(token):
            return token
        async with self._lock:
            if not self._is_fresh(self._token):
                logger.debug("Cached access token missing or expired; refreshing")
                self._token = await fetch()
            return self._token

    def invalidate(self, access_token: Optional[str] = None) -> None:
        """Drop the cached token.

        With ``access_token`` given, the cache is cleared only if it still holds
        that token, so a late rejection of an old token keeps a newer one.
        """
        if access_token is None or (
            self._token is not None and self._token.access_token == access_token
        ):
            self._token = None


class AuthStrategy(ABC):
    """Produces the Authorization header for a resource request."""

    @abstractmethod
    async def authorization_header(self, http_client: httpx.AsyncClient) -> Dict[str, str]:
        raise NotImplementedError

    def on_unauthorized(self, authorization: str) -> None:
        """Called with the rejected header value when a resource endpoint answers 401."""


class SecretKeyAuth(AuthStrategy):
    """Sends the secret key directly in the Authorization header."""

    def __init__(self, credentials: Union[SecretKeyCredentials, str]):
        if isinstance(credentials, str):
            credentials = SecretKeyCredentials(secret_key=credentials)
        self._credentials = credentials

    def __repr__(self) -> str:
        return "SecretKeyAuth(secret_key='**********')"

    async def authorization_header(self, http_client: httpx.AsyncClient) -> Dict[str, str]:
        return {"Authorization": self._credentials.secret_key.get_secret_value()}


class OAuthClientCredentialsAuth(AuthStrategy):
    """Authenticates with a bearer token obtained from the access service.

    With ``cache_tokens=True`` (the default) a token is reused until it is
    about to expire, and dropped as soon as a resource rejects it. With
    ``cache_tokens=False`` every request is preceded by a fresh token request.
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        access_url: str,
        *,
        scope: str = DEFAULT_SCOPE,
        cache_tokens: bool = True,
        authorizer: Optional[Authorizer] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._credentials = credentials
        self.access_url = access_url
        self.cache_tokens = cache_tokens
        self._authorizer = authorizer or Authorizer(scope=scope, clock=clock)
        self._cache = TokenCache(clock=clock)

    def __repr__(self) -> str:
        return (
            f"OAuthClientCredentialsAuth(access_url={self.access_url!r}, "
            f"cache_tokens={self.cache_tokens})"
        )

    async def _fetch_token(self, http_client: httpx.AsyncClient) -> BearerToken:
        return await self._authorizer.authorize(http_client, self._credentials, self.access_url)

    async def authorization_header(self, http_client: httpx.AsyncClient) -> Dict[str, str]:
        if self.cache_tokens:
            token = await self._cache.get(lambda: self._fetch_token(http_client))
        else:
            token = await self._fetch_token(http_client)
        return {"Authorization": f"Bearer {token.access_token}"}

    def on_unauthorized(self, authorization: str) -> None:
        scheme, _, access_token = authorization.partition(" ")
        if scheme == "Bearer":
            self._cache.invalidate(access_token)
