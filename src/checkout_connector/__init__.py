# checkout_connector package
__version__ = "0.1.0"

from .amount import MAX_AMOUNT, Amount, decode, encode
from .auth import (
    AuthStrategy,
    Authorizer,
    BearerToken,
    ClientCredentials,
    OAuthClientCredentialsAuth,
    SecretKeyAuth,
    SecretKeyCredentials,
    TokenCache,
)
from .client import CheckoutClient
from .config import ClientConfig, load_config
from .currency import Currency, minor_unit_exponent
from .environment import Environment
from .errors import (
    AmountOverflowError,
    AmountPrecisionError,
    ApiError,
    CheckoutError,
    ConfigError,
    ConversionError,
    DeserializationError,
    InvalidDataError,
    ParseEnvironmentError,
    RateLimitedError,
    TokenRequestError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
)

__all__ = [
    "__version__",
    # Money
    "Amount",
    "Currency",
    "MAX_AMOUNT",
    "decode",
    "encode",
    "minor_unit_exponent",
    # Client and configuration
    "CheckoutClient",
    "ClientConfig",
    "Environment",
    "load_config",
    # Authentication
    "AuthStrategy",
    "Authorizer",
    "BearerToken",
    "ClientCredentials",
    "OAuthClientCredentialsAuth",
    "SecretKeyAuth",
    "SecretKeyCredentials",
    "TokenCache",
    # Errors
    "AmountOverflowError",
    "AmountPrecisionError",
    "ApiError",
    "CheckoutError",
    "ConfigError",
    "ConversionError",
    "DeserializationError",
    "InvalidDataError",
    "ParseEnvironmentError",
    "RateLimitedError",
    "TokenRequestError",
    "TransportError",
    "UnauthorizedError",
    "UnexpectedStatusError",
]
