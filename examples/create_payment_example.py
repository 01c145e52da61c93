"""
Merchant usage example (server-side). Runs a payment through authorize, capture
and refund. With CKO_ENVIRONMENT and credentials set it talks to the real API;
without them it uses the in-process simulator.
"""
import asyncio
import os
from decimal import Decimal

from checkout_connector import CheckoutClient, Currency, encode
from checkout_connector.models import (
    CapturePaymentRequest,
    CardSource,
    CreatePaymentRequest,
    GetPaymentActionsRequest,
    PaymentProcessed,
    RefundPaymentBody,
    RefundPaymentRequest,
)
from checkout_connector.simulator import SIMULATOR_BASE_URL, Simulator


def build_client() -> CheckoutClient:
    if os.environ.get("CKO_ENVIRONMENT"):
        return CheckoutClient.from_env()
    simulator = Simulator()
    return CheckoutClient.with_secret_key(
        simulator.config.secret_key,
        http_client=simulator.http_client(),
        api_url=SIMULATOR_BASE_URL,
    )


async def run():
    request = CreatePaymentRequest(
        source=CardSource(number="4242424242424242", expiry_month=6, expiry_year=2030, cvv="100"),
        amount=encode(Currency.USD, Decimal("20.00")),
        currency=Currency.USD,
        reference="ORD-5023-4E89",
    )
    async with build_client() as client:
        payment = await client.create_payment(request, idempotency_key="ORD-5023-4E89")
        print("Payment:", payment.id, payment.status.value)
        if not isinstance(payment, PaymentProcessed) or not payment.approved:
            print("Redirect to:", payment.link("redirect"))
            return

        await client.capture_payment(CapturePaymentRequest(payment_id=payment.id))
        await client.refund_payment(
            RefundPaymentRequest(payment_id=payment.id, body=RefundPaymentBody(amount=500))
        )
        for action in await client.get_payment_actions(GetPaymentActionsRequest(payment_id=payment.id)):
            print("Action:", action.type.value, action.amount, action.response_code)

if __name__ == "__main__":
    asyncio.run(run())
