"""The request pipeline shared by every endpoint.

A call goes through three steps: obtain the Authorization header from the
auth strategy, send the request, and classify the response into a typed
result or one of the errors in :mod:`checkout_connector.errors`. Failures are
terminal; nothing here retries.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .auth import AuthStrategy
from .errors import (
    ApiError,
    DeserializationError,
    InvalidDataError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset(["GET", "DELETE"])


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def _deserialize(response: httpx.Response, response_type: Any) -> Any:
    try:
        return _adapter(response_type).validate_json(response.content)
    except ValidationError as exc:
        raise DeserializationError(
            f"Response with status {response.status_code} did not match "
            f"{getattr(response_type, '__name__', response_type)}",
            status_code=response.status_code,
            body=response.text,
        ) from exc


def classify_response(
    response: httpx.Response,
    response_type: Any = None,
    status_types: Optional[Mapping[int, Any]] = None,
) -> Any:
    """Map a response onto a typed result or raise the matching error.

    Args:
        response: The received response.
        response_type: Type to parse any 2xx body into. ``None`` means the body
            is ignored and ``None`` returned.
        status_types: Per-status success types. When given, only the listed
            statuses are successes; other 2xx statuses are unexpected.

    Raises:
        UnauthorizedError: on 401.
        InvalidDataError: on 422, carrying the parsed ApiError.
        RateLimitedError: on 429.
        UnexpectedStatusError: on any other unmapped status.
        DeserializationError: if a body does not match its expected type.
    """
    status = response.status_code

    if status_types is not None:
        if status in status_types:
            return _deserialize(response, status_types[status])
    elif response.is_success:
        if response_type is None:
            return None
        return _deserialize(response, response_type)

    if status == 401:
        raise UnauthorizedError()
    if status == 422:
        try:
            api_error = ApiError.model_validate_json(response.content)
        except ValidationError as exc:
            raise DeserializationError(
                "Could not parse the 422 error body", status_code=status, body=response.text
            ) from exc
        raise InvalidDataError(api_error)
    if status == 429:
        raise RateLimitedError(response.text)
    raise UnexpectedStatusError(status, response.text)


class RequestPipeline:
    """Sends authenticated JSON requests over an ``httpx.AsyncClient``."""

    def __init__(self, http_client: httpx.AsyncClient, auth: AuthStrategy):
        self._http_client = http_client
        self._auth = auth

    async def send(
        self,
        method: str,
        url: str,
        *,
        body: Optional[BaseModel] = None,
        response_type: Any = None,
        status_types: Optional[Mapping[int, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        endpoint: Optional[str] = None,
    ) -> Any:
        """Send one request and return its classified result.

        Args:
            method: HTTP verb.
            url: Absolute URL.
            body: Model serialized as the JSON body. Not allowed on GET/DELETE.
            response_type: See :func:`classify_response`.
            status_types: See :func:`classify_response`.
            headers: Extra headers, e.g. an idempotency key.
            endpoint: Route template for log lines, e.g.
                ``GET /customers/{id}``. Defaults to the method.

        Raises:
            TransportError: If no response was received.
            ValueError: If a body is given for GET or DELETE.
        """
        method = method.upper()
        if body is not None and method in BODYLESS_METHODS:
            raise ValueError(f"{method} requests cannot carry a body")

        request_headers = {"Accept": "application/json"}
        request_headers.update(headers or {})
        auth_header = await self._auth.authorization_header(self._http_client)
        request_headers.update(auth_header)
        label = endpoint or method

        payload = None
        if body is not None:
            payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)

        try:
            response = await self._http_client.request(
                method, url, json=payload, headers=request_headers
            )
        except httpx.RequestError as exc:
            logger.warning(f"{label} failed: {type(exc).__name__}")
            raise TransportError(exc) from exc

        logger.debug(f"{label} -> {response.status_code}")
        if response.is_error:
            logger.warning(f"{label} returned status {response.status_code}")
        if response.status_code == 401:
            self._auth.on_unauthorized(auth_header.get("Authorization", ""))

        return classify_response(response, response_type, status_types)
