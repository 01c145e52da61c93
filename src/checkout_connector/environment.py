"""API environments: the live gateway and its sandbox."""

import enum
from typing import Union

from .errors import ParseEnvironmentError

_ALIASES = {
    "prod": "production",
    "production": "production",
    "dev": "sandbox",
    "development": "sandbox",
    "sandbox": "sandbox",
}


class Environment(str, enum.Enum):
    """Selects the base URLs a client talks to."""

    PRODUCTION = "production"
    SANDBOX = "sandbox"

    def __str__(self) -> str:
        return self.value

    @property
    def api_url(self) -> str:
        if self is Environment.PRODUCTION:
            return "https://api.checkout.com"
        return "https://api.sandbox.checkout.com"

    @property
    def access_url(self) -> str:
        """Base URL of the OAuth token endpoint."""
        if self is Environment.PRODUCTION:
            return "https://access.checkout.com"
        return "https://access.sandbox.checkout.com"

    @classmethod
    def parse(cls, value: Union[str, "Environment"]) -> "Environment":
        """Parse an environment name, case-insensitively.

        ``prod``/``production`` select production; ``dev``/``development``/
        ``sandbox`` select the sandbox.

        Raises:
            ParseEnvironmentError: carrying the original string.
        """
        if isinstance(value, Environment):
            return value
        canonical = _ALIASES.get(str(value).strip().lower())
        if canonical is None:
            raise ParseEnvironmentError(value)
        return cls(canonical)
