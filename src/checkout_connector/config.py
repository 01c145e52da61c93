"""Client configuration loaded from environment variables.

Recognized variables:

- ``CKO_ENVIRONMENT``: ``production``/``prod`` or ``sandbox``/``dev``/``development``
- ``CKO_SECRET_KEY``: secret key, sent as a static Authorization header
- ``CKO_USERNAME`` and ``CKO_PASSWORD``: OAuth client credentials
- ``CKO_SCOPE``: OAuth scope (default ``gateway``)
- ``CKO_CACHE_TOKENS``: reuse OAuth tokens until expiry (default ``true``)
- ``CKO_TIMEOUT_SECONDS``: transport timeout; the httpx default when unset
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from .auth import (
    DEFAULT_SCOPE,
    AuthStrategy,
    ClientCredentials,
    OAuthClientCredentialsAuth,
    SecretKeyAuth,
    SecretKeyCredentials,
)
from .environment import Environment
from .errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off"])


class ClientConfig(BaseModel):
    """Everything needed to build a client. Secrets never appear in repr."""

    model_config = ConfigDict(frozen=True)

    environment: Environment
    secret_key: Optional[SecretStr] = None
    username: Optional[SecretStr] = None
    password: Optional[SecretStr] = None
    scope: str = DEFAULT_SCOPE
    cache_tokens: bool = True
    timeout_seconds: Optional[float] = None

    @property
    def uses_oauth(self) -> bool:
        return self.username is not None

    def auth_strategy(self, access_url: Optional[str] = None) -> AuthStrategy:
        """Build the auth strategy these credentials call for.

        Args:
            access_url: Override for the token service base URL.
        """
        if self.uses_oauth:
            return OAuthClientCredentialsAuth(
                ClientCredentials(username=self.username, password=self.password),
                access_url or self.environment.access_url,
                scope=self.scope,
                cache_tokens=self.cache_tokens,
            )
        return SecretKeyAuth(SecretKeyCredentials(secret_key=self.secret_key))


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_config(environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Read client configuration from ``environ`` (defaults to ``os.environ``).

    Raises:
        ConfigError: If credentials are missing, incomplete or ambiguous.
        ParseEnvironmentError: If CKO_ENVIRONMENT is not a known environment.
    """
    values = os.environ if environ is None else environ

    raw_environment = values.get("CKO_ENVIRONMENT")
    if not raw_environment:
        raise ConfigError("CKO_ENVIRONMENT must be provided")
    environment = Environment.parse(raw_environment)

    secret_key = values.get("CKO_SECRET_KEY") or None
    username = values.get("CKO_USERNAME") or None
    password = values.get("CKO_PASSWORD") or None

    if secret_key and (username or password):
        raise ConfigError("Set either CKO_SECRET_KEY or CKO_USERNAME/CKO_PASSWORD, not both")
    if bool(username) != bool(password):
        raise ConfigError("CKO_USERNAME and CKO_PASSWORD must be provided together")
    if not secret_key and not username:
        raise ConfigError("CKO_SECRET_KEY or CKO_USERNAME/CKO_PASSWORD must be provided")

    timeout_seconds = None
    raw_timeout = values.get("CKO_TIMEOUT_SECONDS")
    if raw_timeout:
        try:
            timeout_seconds = float(raw_timeout)
        except ValueError as exc:
            raise ConfigError(f"CKO_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}") from exc

    config = ClientConfig(
        environment=environment,
        secret_key=secret_key,
        username=username,
        password=password,
        scope=values.get("CKO_SCOPE") or DEFAULT_SCOPE,
        cache_tokens=_parse_bool("CKO_CACHE_TOKENS", values.get("CKO_CACHE_TOKENS", "true")),
        timeout_seconds=timeout_seconds,
    )
    logger.debug(
        f"Loaded configuration for {config.environment} "
        f"({'oauth' if config.uses_oauth else 'secret key'} auth)"
    )
    return config
