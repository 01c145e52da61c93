"""Error taxonomy for calls made against the Checkout API.

Every failure a caller can observe is a subclass of :class:`CheckoutError`, so
retry and backoff decisions can be made on the exception type alone. Nothing
in this package retries on the caller's behalf.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiError(BaseModel):
    """Structured error body returned by the API on a 422."""

    model_config = ConfigDict(frozen=True)

    request_id: str = Field(..., description="Identifier of the failed request")
    error_type: str = Field(..., description="Category of the error, e.g. request_invalid")
    error_codes: List[str] = Field(default_factory=list, description="Ordered error codes")


class CheckoutError(Exception):
    """Base class for every error raised by this package."""


class TransportError(CheckoutError):
    """The request never produced an HTTP response (connection, timeout, protocol)."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Transport failure: {type(cause).__name__}: {cause}")
        self.cause = cause


class UnauthorizedError(CheckoutError):
    """The resource rejected the credentials or bearer token (HTTP 401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class TokenRequestError(UnauthorizedError):
    """The token endpoint refused to issue a bearer token.

    The status and raw body are kept for diagnostics only; they never contain
    the client credentials.
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Token request rejected with status {status_code}")
        self.status_code = status_code
        self.body = body


class InvalidDataError(CheckoutError):
    """The API rejected the request body as invalid (HTTP 422)."""

    def __init__(self, api_error: ApiError):
        super().__init__(
            f"Invalid data ({api_error.error_type}): {', '.join(api_error.error_codes)} "
            f"[request_id={api_error.request_id}]"
        )
        self.api_error = api_error


class RateLimitedError(CheckoutError):
    """HTTP 429.

    The API uses this status both for rate limiting and for a repeated
    idempotency key, and gives no way to tell the two apart.
    """

    def __init__(self, body: str = ""):
        super().__init__("Too many requests or duplicate request detected")
        self.body = body


class UnexpectedStatusError(CheckoutError):
    """A status code the client has no mapping for; the raw body is preserved."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Unexpected status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DeserializationError(CheckoutError):
    """A response body did not match the expected schema."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ConversionError(CheckoutError, ValueError):
    """A monetary value could not be converted to or from minor units."""


class AmountOverflowError(ConversionError):
    """The scaled amount is negative or does not fit the wire integer width."""


class AmountPrecisionError(ConversionError):
    """The value has more decimal places than the currency's minor unit."""


class ParseEnvironmentError(CheckoutError, ValueError):
    """The string does not name a known environment."""

    def __init__(self, value: str):
        super().__init__(f"Unknown environment: {value!r}")
        self.value = value


class ConfigError(CheckoutError, ValueError):
    """Required configuration is missing or contradictory."""
