"""Shared test fixtures and configuration."""

import json
import os
from typing import Any, Callable, Dict, List

import httpx
import pytest

from checkout_connector import CheckoutClient
from checkout_connector.models import CardSource, CreatePaymentRequest
from checkout_connector.simulator import SIMULATOR_BASE_URL, Simulator

# Keep real credentials in the developer's shell away from the tests
for _name in ("CKO_ENVIRONMENT", "CKO_SECRET_KEY", "CKO_USERNAME", "CKO_PASSWORD"):
    os.environ.pop(_name, None)


class RecordingTransport:
    """An ``httpx.MockTransport`` that keeps every request it serves.

    ``routes`` maps ``"METHOD /path"`` to a ``(status, body)`` pair or to a
    callable taking the request and returning an ``httpx.Response``.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def recording_transport() -> Callable[[Dict[str, Any]], RecordingTransport]:
    """Return a factory for RecordingTransport instances."""
    return RecordingTransport


@pytest.fixture
def token_response() -> Dict[str, Any]:
    return {"access_token": "tok_abc123", "expires_in": 3600, "token_type": "Bearer"}


@pytest.fixture
def processed_payment_body() -> Dict[str, Any]:
    """Return a 201 body for an approved card payment."""
    return {
        "id": "pay_mbabizu24mvu3mela5njyhpit4",
        "action_id": "act_mbabizu24mvu3mela5njyhpit4",
        "amount": 2000,
        "currency": "USD",
        "approved": True,
        "status": "Authorized",
        "auth_code": "770687",
        "response_code": "10000",
        "response_summary": "Approved",
        "3ds": {"downgraded": True, "enrolled": "N"},
        "risk": {"flagged": False},
        "source": {
            "type": "card",
            "id": "src_nwd3m4in3hkuddfpjsaevunhdy",
            "expiry_month": 6,
            "expiry_year": 2030,
            "scheme": "Visa",
            "last4": "4242",
            "fingerprint": "F31828E2BDABAE63EB694903825CDD36041CC6ED461440B81415895855502832",
            "bin": "424242",
            "card_type": "CREDIT",
        },
        "customer": {"id": "cus_ebxb5bmlf2wu5cd3lgsexqp3qi"},
        "processed_on": "2026-10-17T12:00:00Z",
        "reference": "ORD-5023-4E89",
        "_links": {
            "self": {"href": "https://api.test/payments/pay_mbabizu24mvu3mela5njyhpit4"},
            "actions": {"href": "https://api.test/payments/pay_mbabizu24mvu3mela5njyhpit4/actions"},
            "capture": {"href": "https://api.test/payments/pay_mbabizu24mvu3mela5njyhpit4/captures"},
            "void": {"href": "https://api.test/payments/pay_mbabizu24mvu3mela5njyhpit4/voids"},
        },
    }


@pytest.fixture
def card_source() -> CardSource:
    return CardSource(number="4242424242424242", expiry_month=6, expiry_year=2030, cvv="100")


@pytest.fixture
def payment_request(card_source) -> CreatePaymentRequest:
    """Return a 20.00 USD card payment request."""
    return CreatePaymentRequest(
        source=card_source,
        amount=2000,
        currency="USD",
        reference="ORD-5023-4E89",
        metadata={"order_id": "order_456"},
    )


@pytest.fixture
def simulator() -> Simulator:
    return Simulator()


@pytest.fixture
async def sim_client(simulator):
    """A secret-key client served by the in-process simulator."""
    client = CheckoutClient.with_secret_key(
        simulator.config.secret_key,
        http_client=simulator.http_client(),
        api_url=SIMULATOR_BASE_URL,
    )
    yield client
    await client._http_client.aclose()


@pytest.fixture
async def oauth_sim_client(simulator):
    """A client-credentials client served by the in-process simulator."""
    client = CheckoutClient.with_client_credentials(
        simulator.config.username,
        simulator.config.password,
        http_client=simulator.http_client(),
        api_url=SIMULATOR_BASE_URL,
        access_url=SIMULATOR_BASE_URL,
    )
    yield client
    await client._http_client.aclose()
