"""Async client for the Checkout payments and customers API.

Documentation: https://docs.checkout.com
API reference: https://api-reference.checkout.com
"""

import logging
from typing import List, Mapping, Optional, Union
from urllib.parse import quote

import httpx

from .auth import (
    DEFAULT_SCOPE,
    AuthStrategy,
    ClientCredentials,
    OAuthClientCredentialsAuth,
    SecretKeyAuth,
)
from .config import ClientConfig, load_config
from .environment import Environment
from .models import (
    Action,
    CapturePaymentRequest,
    CapturePaymentResponse,
    CreateCustomerRequest,
    CreateCustomerResponse,
    CreatePaymentRequest,
    CustomerDetails,
    DeleteCustomerRequest,
    GetCustomerDetailsRequest,
    GetPaymentActionsRequest,
    GetPaymentDetailsRequest,
    PaymentDetails,
    PaymentPending,
    PaymentProcessed,
    RefundPaymentRequest,
    RefundPaymentResponse,
    UpdateCustomerRequest,
    VoidPaymentRequest,
    VoidPaymentResponse,
)
from .pipeline import RequestPipeline

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Cko-Idempotency-Key"

CREATE_PAYMENT_RESPONSES = {
    201: PaymentProcessed,
    202: PaymentPending,
}


class CheckoutClient:
    """Typed access to the payments and customers endpoints.

    Every operation raises a subclass of
    :class:`~checkout_connector.errors.CheckoutError` on failure and never
    retries. The client holds no per-call state, so one instance can serve
    concurrent calls.

    Example::

        async with CheckoutClient.from_env() as client:
            result = await client.create_payment(request)
    """

    def __init__(
        self,
        auth: AuthStrategy,
        environment: Union[Environment, str] = Environment.SANDBOX,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Create a client.

        Args:
            auth: Strategy producing the Authorization header.
            environment: Selects the API base URL.
            http_client: Transport to use. A client created here is closed by
                :meth:`close`; an injected one is left to its owner.
            api_url: Override for the API base URL.
            timeout: Transport timeout in seconds for a client created here.
        """
        self.environment = Environment.parse(environment)
        self.api_url = (api_url or self.environment.api_url).rstrip("/")
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=timeout) if timeout is not None else httpx.AsyncClient()
        self._http_client = http_client
        self._pipeline = RequestPipeline(http_client, auth)

    @classmethod
    def with_secret_key(
        cls,
        secret_key: str,
        environment: Union[Environment, str] = Environment.SANDBOX,
        **kwargs,
    ) -> "CheckoutClient":
        return cls(SecretKeyAuth(secret_key), environment, **kwargs)

    @classmethod
    def with_client_credentials(
        cls,
        username: str,
        password: str,
        environment: Union[Environment, str] = Environment.SANDBOX,
        *,
        scope: str = DEFAULT_SCOPE,
        cache_tokens: bool = True,
        access_url: Optional[str] = None,
        **kwargs,
    ) -> "CheckoutClient":
        environment = Environment.parse(environment)
        auth = OAuthClientCredentialsAuth(
            ClientCredentials(username=username, password=password),
            access_url or environment.access_url,
            scope=scope,
            cache_tokens=cache_tokens,
        )
        return cls(auth, environment, **kwargs)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        access_url: Optional[str] = None,
        **kwargs,
    ) -> "CheckoutClient":
        kwargs.setdefault("timeout", config.timeout_seconds)
        return cls(config.auth_strategy(access_url), config.environment, **kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "CheckoutClient":
        """Create a client from ``CKO_*`` environment variables.

        See :mod:`checkout_connector.config` for the variables read.
        """
        return cls.from_config(load_config(environ), **kwargs)

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "CheckoutClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _url(self, *segments: str) -> str:
        return "/".join([self.api_url] + [quote(str(s), safe="@") for s in segments])

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------
    async def create_payment(
        self,
        request: CreatePaymentRequest,
        idempotency_key: Optional[str] = None,
    ) -> Union[PaymentProcessed, PaymentPending]:
        """Request a payment or payout.

        Returns ``PaymentProcessed`` when the payment was handled synchronously
        (201) and ``PaymentPending`` when it needs a redirect or completes
        asynchronously (202). Check ``approved`` on a processed payment.

        A repeated ``idempotency_key`` is answered with 429 and surfaces as
        :class:`~checkout_connector.errors.RateLimitedError`.

        ``POST /payments``
        """
        headers = {IDEMPOTENCY_HEADER: idempotency_key} if idempotency_key else None
        logger.info(f"Creating payment: amount={request.amount} currency={request.currency.value}")
        result = await self._pipeline.send(
            "POST",
            self._url("payments"),
            body=request,
            status_types=CREATE_PAYMENT_RESPONSES,
            headers=headers,
            endpoint="POST /payments",
        )
        logger.info(f"Payment {result.id} created with status {result.status.value}")
        return result

    async def get_payment_details(self, request: GetPaymentDetailsRequest) -> PaymentDetails:
        """Return the details of a payment by id or ``cko-session-id``.

        ``GET /payments/{id}``
        """
        return await self._pipeline.send(
            "GET",
            self._url("payments", request.payment_id),
            response_type=PaymentDetails,
            endpoint="GET /payments/{id}",
        )

    async def get_payment_actions(self, request: GetPaymentActionsRequest) -> List[Action]:
        """Return the payment's actions, latest first.

        ``GET /payments/{id}/actions``
        """
        return await self._pipeline.send(
            "GET",
            self._url("payments", request.payment_id, "actions"),
            response_type=List[Action],
            endpoint="GET /payments/{id}/actions",
        )

    async def capture_payment(self, request: CapturePaymentRequest) -> CapturePaymentResponse:
        """Capture a payment; card captures complete asynchronously.

        ``POST /payments/{id}/captures``
        """
        return await self._pipeline.send(
            "POST",
            self._url("payments", request.payment_id, "captures"),
            body=request.body,
            response_type=CapturePaymentResponse,
            endpoint="POST /payments/{id}/captures",
        )

    async def refund_payment(self, request: RefundPaymentRequest) -> RefundPaymentResponse:
        """``POST /payments/{id}/refunds``"""
        return await self._pipeline.send(
            "POST",
            self._url("payments", request.payment_id, "refunds"),
            body=request.body,
            response_type=RefundPaymentResponse,
            endpoint="POST /payments/{id}/refunds",
        )

    async def void_payment(self, request: VoidPaymentRequest) -> VoidPaymentResponse:
        """``POST /payments/{id}/voids``"""
        return await self._pipeline.send(
            "POST",
            self._url("payments", request.payment_id, "voids"),
            body=request.body,
            response_type=VoidPaymentResponse,
            endpoint="POST /payments/{id}/voids",
        )

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    async def create_customer(self, request: CreateCustomerRequest) -> CreateCustomerResponse:
        """``POST /customers``"""
        return await self._pipeline.send(
            "POST",
            self._url("customers"),
            body=request,
            response_type=CreateCustomerResponse,
            endpoint="POST /customers",
        )

    async def get_customer_details(self, request: GetCustomerDetailsRequest) -> CustomerDetails:
        """``GET /customers/{id_or_email}``"""
        return await self._pipeline.send(
            "GET",
            self._url("customers", request.id_or_email),
            response_type=CustomerDetails,
            endpoint="GET /customers/{id_or_email}",
        )

    async def update_customer(self, request: UpdateCustomerRequest) -> None:
        """``PATCH /customers/{id}``; the response carries no body."""
        await self._pipeline.send(
            "PATCH",
            self._url("customers", request.customer_id),
            body=request.body,
            endpoint="PATCH /customers/{id}",
        )

    async def delete_customer(self, request: DeleteCustomerRequest) -> None:
        """``DELETE /customers/{id}``; the response carries no body."""
        await self._pipeline.send(
            "DELETE", self._url("customers", request.customer_id), endpoint="DELETE /customers/{id}"
        )
