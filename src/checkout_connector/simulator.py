"""In-process simulator of the Checkout API for offline tests and local development.

The simulator is a FastAPI application holding payments, customers and
issued tokens in memory. Mount it under a client with
:meth:`Simulator.http_client`, which routes requests through
``httpx.ASGITransport`` without opening sockets.

Special card numbers:

- ``4000000000000002``: declined, response code 20005
- ``4000000000009995``: declined for insufficient funds, response code 20051

Sending ``3ds.enabled`` returns a pending payment with a ``redirect`` link;
call :meth:`Simulator.complete_redirect` to settle it.
"""

import base64
import binascii
import hashlib
import json
import logging
import secrets
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type
from urllib.parse import parse_qs

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .auth import TOKEN_PATH
from .models import (
    ACTIONS_LINK,
    CAPTURE_LINK,
    PAYMENT_LINK,
    REDIRECT_LINK,
    REFUND_LINK,
    SELF_LINK,
    VOID_LINK,
    ActionType,
    CapturePaymentBody,
    CreateCustomerRequest,
    CreatePaymentRequest,
    PaymentStatus,
    RefundPaymentBody,
    UpdateCustomerBody,
    VoidPaymentBody,
)

logger = logging.getLogger(__name__)

SIMULATOR_BASE_URL = "http://checkout.simulator"

APPROVED_CODE = ("10000", "Approved")
DECLINED_CODE = ("20005", "Declined - Do Not Honour")
INSUFFICIENT_FUNDS_CODE = ("20051", "Insufficient Funds")


@dataclass
class SimulatorConfig:
    """Credentials the simulator accepts and scenario switches."""
    username: str = "sim_user"
    password: str = "sim_password"
    secret_key: str = "sk_sim_secret"
    token_lifetime: int = 3600
    rate_limited: bool = False  # every resource call answers 429
    forced_status: Optional[int] = None  # every resource call answers this status


@dataclass
class SimulatedCustomer:
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    default: Optional[str] = None


@dataclass
class SimulatedPayment:
    """In-memory representation of a simulated payment."""
    id: str
    amount: int
    currency: str
    status: PaymentStatus
    approved: bool
    requested_on: str
    payment_type: str
    source: Optional[Dict[str, Any]] = None
    destination: Optional[Dict[str, Any]] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    customer_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    captured_amount: int = 0
    refunded_amount: int = 0
    actions: List[Dict[str, Any]] = field(default_factory=list)
    three_ds: bool = False


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:26]}"


def _card_scheme(number: str) -> str:
    if number.startswith("4"):
        return "Visa"
    if number.startswith("5"):
        return "Mastercard"
    if number.startswith(("34", "37")):
        return "American Express"
    return "Unknown"


def _processed_card(card: Dict[str, Any]) -> Dict[str, Any]:
    number = card["number"]
    return {
        "type": "card",
        "id": f"src_{hashlib.sha256(number.encode()).hexdigest()[:26]}",
        "expiry_month": int(card["expiry_month"]),
        "expiry_year": int(card["expiry_year"]),
        "name": card.get("name"),
        "scheme": _card_scheme(number),
        "last4": number[-4:],
        "fingerprint": hashlib.sha256(number.encode()).hexdigest().upper(),
        "bin": number[:6],
        "card_type": "CREDIT",
        "card_category": "CONSUMER",
    }


def _error(status_code: int, error_type: str, error_codes: List[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "request_id": uuid.uuid4().hex,
            "error_type": error_type,
            "error_codes": error_codes,
        },
    )


def _same(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode(), expected.encode())


def _validation_codes(exc: ValidationError) -> List[str]:
    codes = []
    for err in exc.errors():
        name = "_".join(str(part) for part in err["loc"] if isinstance(part, str)) or "request"
        suffix = "required" if err["type"] == "missing" else "invalid"
        codes.append(f"{name}_{suffix}")
    return codes


class Simulator:
    """Emulates the payments, customers and token endpoints in memory.

    Example::

        simulator = Simulator()
        client = CheckoutClient.with_secret_key(
            simulator.config.secret_key,
            http_client=simulator.http_client(),
            api_url=SIMULATOR_BASE_URL,
        )
    """

    CARD_DECLINE = "4000000000000002"
    CARD_INSUFFICIENT = "4000000000009995"

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self.payments: Dict[str, SimulatedPayment] = {}
        self.customers: Dict[str, SimulatedCustomer] = {}
        self.request_log: List[str] = []
        self._tokens: Dict[str, float] = {}
        self._idempotency_keys: Dict[str, str] = {}
        self._app: Optional[FastAPI] = None
        logger.info("Simulator initialized")

    @property
    def app(self) -> FastAPI:
        if self._app is None:
            self._app = self.create_app()
        return self._app

    def http_client(self, base_url: str = SIMULATOR_BASE_URL) -> httpx.AsyncClient:
        """Return an ``httpx.AsyncClient`` whose requests are served by this simulator."""
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app), base_url=base_url)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def issue_token(self) -> str:
        now = time.time()
        self._tokens = {t: exp for t, exp in self._tokens.items() if exp > now}
        token = f"tok_{uuid.uuid4().hex}"
        self._tokens[token] = now + self.config.token_lifetime
        return token

    def revoke_tokens(self) -> None:
        """Forget every issued token so later Bearer calls answer 401."""
        self._tokens.clear()

    def _valid_basic_auth(self, header: Optional[str]) -> bool:
        if not header or not header.startswith("Basic "):
            return False
        try:
            decoded = base64.b64decode(header[len("Basic "):]).decode()
        except (binascii.Error, UnicodeDecodeError):
            return False
        username, _, password = decoded.partition(":")
        return _same(username, self.config.username) and _same(password, self.config.password)

    def _authorized(self, request: Request) -> bool:
        header = request.headers.get("authorization")
        if not header:
            return False
        if _same(header, self.config.secret_key):
            return True
        if header.startswith("Bearer "):
            expires_at = self._tokens.get(header[len("Bearer "):])
            return expires_at is not None and expires_at > time.time()
        return False

    # ------------------------------------------------------------------
    # Payment flows
    # ------------------------------------------------------------------
    def _record_action(
        self,
        payment: SimulatedPayment,
        action_type: ActionType,
        amount: int,
        code: Tuple[str, str] = APPROVED_CODE,
        reference: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        action_id = _new_id("act")
        payment.actions.append({
            "id": action_id,
            "type": action_type.value,
            "processed_on": _now(),
            "amount": amount,
            "approved": code == APPROVED_CODE,
            "auth_code": f"{uuid.uuid4().int % 1000000:06d}" if code == APPROVED_CODE else None,
            "response_code": code[0],
            "response_summary": code[1],
            "reference": reference,
            "metadata": metadata or {},
        })
        return action_id

    def _authorize(self, payment: SimulatedPayment) -> Tuple[str, Tuple[str, str]]:
        number = (payment.source or {}).get("number", "")
        if number == self.CARD_DECLINE:
            code = DECLINED_CODE
        elif number == self.CARD_INSUFFICIENT:
            code = INSUFFICIENT_FUNDS_CODE
        else:
            code = APPROVED_CODE

        if code != APPROVED_CODE:
            payment.status = PaymentStatus.DECLINED
            payment.approved = False
            action_type = ActionType.AUTHORIZATION
        elif payment.amount == 0:
            payment.status = PaymentStatus.CARD_VERIFIED
            payment.approved = True
            action_type = ActionType.CARD_VERIFICATION
        else:
            payment.status = PaymentStatus.AUTHORIZED
            payment.approved = True
            action_type = ActionType.AUTHORIZATION
        action_id = self._record_action(payment, action_type, payment.amount, code, payment.reference)
        return action_id, code

    def complete_redirect(self, payment_id: str, success: bool = True) -> SimulatedPayment:
        """Settle a payment waiting on a 3DS redirect, as the customer would.

        Raises:
            KeyError: If the payment is unknown.
            ValueError: If the payment is not pending.
        """
        payment = self.payments[payment_id]
        if payment.status != PaymentStatus.PENDING:
            raise ValueError(f"Payment {payment_id} is {payment.status.value}, not Pending")
        if success:
            self._authorize(payment)
        else:
            payment.status = PaymentStatus.DECLINED
            payment.approved = False
            self._record_action(payment, ActionType.AUTHORIZATION, payment.amount, DECLINED_CODE)
        logger.info(f"Redirect completed for {payment_id}: {payment.status.value}")
        return payment

    def _resolve_customer(self, descriptor: Optional[Dict[str, Any]]) -> Optional[str]:
        if not descriptor:
            return None
        if descriptor.get("id"):
            return descriptor["id"]
        email = descriptor.get("email")
        if not email:
            return None
        existing = self._find_customer(email)
        if existing:
            return existing.id
        customer = SimulatedCustomer(id=_new_id("cus"), email=email, name=descriptor.get("name"))
        self.customers[customer.id] = customer
        return customer.id

    def _find_customer(self, id_or_email: str) -> Optional[SimulatedCustomer]:
        if id_or_email in self.customers:
            return self.customers[id_or_email]
        for customer in self.customers.values():
            if customer.email == id_or_email:
                return customer
        return None

    def _payment_links(self, base: str, payment: SimulatedPayment) -> Dict[str, Dict[str, str]]:
        url = f"{base}/payments/{payment.id}"
        links = {SELF_LINK: {"href": url}, ACTIONS_LINK: {"href": f"{url}/actions"}}
        if payment.status == PaymentStatus.PENDING and payment.three_ds:
            links[REDIRECT_LINK] = {"href": f"{base}/3ds/{payment.id}"}
        if payment.status in (PaymentStatus.AUTHORIZED, PaymentStatus.PARTIALLY_CAPTURED):
            links[CAPTURE_LINK] = {"href": f"{url}/captures"}
        if payment.status == PaymentStatus.AUTHORIZED and payment.captured_amount == 0:
            links[VOID_LINK] = {"href": f"{url}/voids"}
        if payment.captured_amount > payment.refunded_amount:
            links[REFUND_LINK] = {"href": f"{url}/refunds"}
        return links

    def _details(self, base: str, payment: SimulatedPayment) -> Dict[str, Any]:
        body = {
            "id": payment.id,
            "requested_on": payment.requested_on,
            "amount": payment.amount,
            "currency": payment.currency,
            "payment_type": payment.payment_type,
            "reference": payment.reference,
            "description": payment.description,
            "approved": payment.approved,
            "status": payment.status.value,
            "metadata": payment.metadata,
            "_links": self._payment_links(base, payment),
        }
        if payment.source:
            body["source"] = _processed_card(payment.source)
        if payment.destination:
            body["destination"] = _processed_card(payment.destination)
        if payment.customer_id:
            body["customer"] = {"id": payment.customer_id}
        return body

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------
    def create_app(self) -> FastAPI:
        app = FastAPI(title="Checkout API Simulator")
        sim = self

        async def read_json(request: Request) -> Any:
            content = await request.body()
            if not content:
                return {}
            return json.loads(content)

        async def parse(request: Request, model: Type[BaseModel]):
            try:
                return model.model_validate(await read_json(request)), None
            except (json.JSONDecodeError, UnicodeDecodeError):
                return None, _error(422, "request_invalid", ["request_body_malformed"])
            except ValidationError as exc:
                return None, _error(422, "request_invalid", _validation_codes(exc))

        def base_url(request: Request) -> str:
            return str(request.base_url).rstrip("/")

        @app.middleware("http")
        async def gatekeeper(request: Request, call_next):
            sim.request_log.append(f"{request.method} {request.url.path}")
            logger.debug(f"Simulator received {request.method} {request.url.path}")
            if request.url.path == TOKEN_PATH:
                return await call_next(request)
            if not sim._authorized(request):
                return Response(status_code=401)
            if sim.config.rate_limited:
                return Response(status_code=429)
            if sim.config.forced_status is not None:
                return Response(status_code=sim.config.forced_status, content="simulated status")
            return await call_next(request)

        @app.post(TOKEN_PATH)
        async def issue_token(request: Request):
            if not sim._valid_basic_auth(request.headers.get("authorization")):
                return JSONResponse(status_code=401, content={"error": "invalid_client"})
            try:
                form = parse_qs((await request.body()).decode())
            except UnicodeDecodeError:
                return JSONResponse(status_code=400, content={"error": "invalid_request"})
            if form.get("grant_type") != ["client_credentials"]:
                return JSONResponse(status_code=400, content={"error": "unsupported_grant_type"})
            return {
                "access_token": sim.issue_token(),
                "expires_in": sim.config.token_lifetime,
                "token_type": "Bearer",
                "scope": form.get("scope", [""])[0],
            }

        @app.post("/payments")
        async def create_payment(request: Request):
            body, error = await parse(request, CreatePaymentRequest)
            if error is not None:
                return error
            if body.source is None and body.destination is None:
                return _error(422, "request_invalid", ["payment_source_required"])

            idempotency_key = request.headers.get("cko-idempotency-key")
            if idempotency_key and idempotency_key in sim._idempotency_keys:
                logger.info(f"Duplicate idempotency key {idempotency_key}")
                return JSONResponse(status_code=429, content={"error_type": "request_duplicated"})

            payment = SimulatedPayment(
                id=_new_id("pay"),
                amount=body.amount or 0,
                currency=body.currency.value,
                status=PaymentStatus.PENDING,
                approved=False,
                requested_on=_now(),
                payment_type=body.payment_type.value,
                source=body.source.model_dump() if body.source else None,
                destination=body.destination.model_dump() if body.destination else None,
                reference=body.reference,
                description=body.description,
                customer_id=sim._resolve_customer(body.customer.model_dump() if body.customer else None),
                metadata=body.metadata or {},
                three_ds=bool(body.three_ds and body.three_ds.enabled),
            )
            sim.payments[payment.id] = payment
            if idempotency_key:
                sim._idempotency_keys[idempotency_key] = payment.id

            base = base_url(request)
            if payment.three_ds or payment.destination is not None:
                if payment.destination is not None:
                    sim._record_action(payment, ActionType.PAYOUT, payment.amount, reference=payment.reference)
                pending = {
                    "id": payment.id,
                    "status": payment.status.value,
                    "reference": payment.reference,
                    "_links": sim._payment_links(base, payment),
                }
                if payment.customer_id:
                    pending["customer"] = {"id": payment.customer_id}
                if payment.three_ds:
                    pending["3ds"] = {"downgraded": False, "enrolled": "Y"}
                return JSONResponse(status_code=202, content=pending)

            action_id, code = sim._authorize(payment)
            action = payment.actions[-1]
            processed = {
                "id": payment.id,
                "action_id": action_id,
                "amount": payment.amount,
                "currency": payment.currency,
                "approved": payment.approved,
                "status": payment.status.value,
                "auth_code": action["auth_code"],
                "response_code": code[0],
                "response_summary": code[1],
                "risk": {"flagged": False},
                "source": _processed_card(payment.source),
                "processed_on": action["processed_on"],
                "reference": payment.reference,
                "_links": sim._payment_links(base, payment),
            }
            if payment.customer_id:
                processed["customer"] = {"id": payment.customer_id}
            logger.info(f"Simulated payment {payment.id}: {payment.status.value}")
            return JSONResponse(status_code=201, content=processed)

        @app.get("/payments/{payment_id}")
        async def get_payment(payment_id: str, request: Request):
            payment = sim.payments.get(payment_id)
            if payment is None:
                return Response(status_code=404)
            return sim._details(base_url(request), payment)

        @app.get("/payments/{payment_id}/actions")
        async def get_actions(payment_id: str):
            payment = sim.payments.get(payment_id)
            if payment is None:
                return Response(status_code=404)
            return list(reversed(payment.actions))

        def accepted(request: Request, payment: SimulatedPayment, action_id: str, reference: Optional[str]):
            return JSONResponse(
                status_code=202,
                content={
                    "action_id": action_id,
                    "reference": reference,
                    "_links": {PAYMENT_LINK: {"href": f"{base_url(request)}/payments/{payment.id}"}},
                },
            )

        @app.post("/payments/{payment_id}/captures")
        async def capture(payment_id: str, request: Request):
            payment = sim.payments.get(payment_id)
            if payment is None:
                return Response(status_code=404)
            body, error = await parse(request, CapturePaymentBody)
            if error is not None:
                return error
            if payment.status not in (PaymentStatus.AUTHORIZED, PaymentStatus.PARTIALLY_CAPTURED):
                return _error(422, "action_not_allowed", ["action_not_allowed"])
            remaining = payment.amount - payment.captured_amount
            amount = remaining if body.amount is None else body.amount
            if amount > remaining:
                return _error(422, "request_invalid", ["amount_exceeds_balance"])
            payment.captured_amount += amount
            payment.status = (
                PaymentStatus.CAPTURED
                if payment.captured_amount == payment.amount
                else PaymentStatus.PARTIALLY_CAPTURED
            )
            action_id = sim._record_action(
                payment, ActionType.CAPTURE, amount, reference=body.reference, metadata=body.metadata
            )
            return accepted(request, payment, action_id, body.reference)

        @app.post("/payments/{payment_id}/refunds")
        async def refund(payment_id: str, request: Request):
            payment = sim.payments.get(payment_id)
            if payment is None:
                return Response(status_code=404)
            body, error = await parse(request, RefundPaymentBody)
            if error is not None:
                return error
            refundable = payment.captured_amount - payment.refunded_amount
            if refundable <= 0:
                return _error(422, "action_not_allowed", ["action_not_allowed"])
            amount = refundable if body.amount is None else body.amount
            if amount > refundable:
                return _error(422, "request_invalid", ["refund_amount_exceeds_balance"])
            payment.refunded_amount += amount
            payment.status = (
                PaymentStatus.REFUNDED
                if payment.refunded_amount == payment.captured_amount
                else PaymentStatus.PARTIALLY_REFUNDED
            )
            action_id = sim._record_action(
                payment, ActionType.REFUND, amount, reference=body.reference, metadata=body.metadata
            )
            return accepted(request, payment, action_id, body.reference)

        @app.post("/payments/{payment_id}/voids")
        async def void(payment_id: str, request: Request):
            payment = sim.payments.get(payment_id)
            if payment is None:
                return Response(status_code=404)
            body, error = await parse(request, VoidPaymentBody)
            if error is not None:
                return error
            if payment.status != PaymentStatus.AUTHORIZED or payment.captured_amount:
                return _error(422, "action_not_allowed", ["action_not_allowed"])
            payment.status = PaymentStatus.VOIDED
            action_id = sim._record_action(
                payment, ActionType.VOID, payment.amount, reference=body.reference, metadata=body.metadata
            )
            return accepted(request, payment, action_id, body.reference)

        @app.post("/customers")
        async def create_customer(request: Request):
            body, error = await parse(request, CreateCustomerRequest)
            if error is not None:
                return error
            if sim._find_customer(body.email):
                return _error(422, "request_invalid", ["customer_email_already_exists"])
            customer = SimulatedCustomer(
                id=_new_id("cus"),
                email=body.email,
                name=body.name,
                phone=body.phone.model_dump() if body.phone else None,
                metadata=body.metadata or {},
            )
            sim.customers[customer.id] = customer
            return JSONResponse(status_code=201, content={"id": customer.id})

        @app.get("/customers/{id_or_email}")
        async def get_customer(id_or_email: str):
            customer = sim._find_customer(id_or_email)
            if customer is None:
                return Response(status_code=404)
            return {
                "id": customer.id,
                "email": customer.email,
                "name": customer.name,
                "phone": customer.phone,
                "metadata": customer.metadata,
                "default": customer.default,
                "instruments": [],
            }

        @app.patch("/customers/{customer_id}")
        async def update_customer(customer_id: str, request: Request):
            customer = sim.customers.get(customer_id)
            if customer is None:
                return Response(status_code=404)
            body, error = await parse(request, UpdateCustomerBody)
            if error is not None:
                return error
            if body.email is not None:
                customer.email = body.email
            if body.name is not None:
                customer.name = body.name
            if body.default is not None:
                customer.default = body.default
            if body.phone is not None:
                customer.phone = body.phone.model_dump()
            if body.metadata is not None:
                customer.metadata = body.metadata
            return Response(status_code=204)

        @app.delete("/customers/{customer_id}")
        async def delete_customer(customer_id: str):
            if sim.customers.pop(customer_id, None) is None:
                return Response(status_code=404)
            return Response(status_code=204)

        return app
