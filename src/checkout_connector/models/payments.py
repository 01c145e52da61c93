"""Request and response shapes for the payments endpoints."""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from ..amount import MAX_AMOUNT, decode
from ..currency import Currency
from .common import (
    Address,
    BillingDescriptor,
    CustomerDescriptor,
    CustomerInfo,
    HasLinks,
    Metadata,
    PhoneNumber,
    ShippingDescriptor,
    WireModel,
)
from .enums import (
    ActionType,
    CardCategory,
    CardType,
    PaymentStatus,
    PaymentType,
    ScaExemption,
    ThreeDSAuthenticationStatus,
    ThreeDSEnrollmentStatus,
)


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------

class CardSource(WireModel):
    """Full card details as a payment source. Requires SAQ D PCI compliance."""

    type: Literal["card"] = "card"
    number: str = Field(..., description="Card number without separators (<= 19 characters)")
    expiry_month: int = Field(..., ge=1, le=12)
    expiry_year: int
    name: Optional[str] = None
    cvv: Optional[str] = None
    stored: Optional[bool] = Field(None, description="True when using stored card details")
    billing_address: Optional[Address] = None
    phone: Optional[PhoneNumber] = None


class CardDestination(WireModel):
    """Card to pay out to."""

    type: Literal["card"] = "card"
    number: str
    expiry_month: str
    expiry_year: str
    first_name: str
    last_name: str
    name: Optional[str] = None
    billing_address: Optional[Address] = None
    phone: Optional[PhoneNumber] = None


class ThreeDSRequest(WireModel):
    enabled: Optional[bool] = None
    attempt_n3d: Optional[bool] = Field(None, description="Fall back to non-3DS if the issuer is not enrolled")
    eci: Optional[str] = None
    cryptogram: Optional[str] = None
    xid: Optional[str] = None
    version: Optional[str] = None
    exemption: Optional[ScaExemption] = None


class RiskRequest(WireModel):
    enabled: bool = True


class PaymentRecipient(WireModel):
    """Recipient of the funds, for account funding and UK domestic transactions."""

    dob: Optional[str] = Field(None, description="yyyy-mm-dd")
    account_number: Optional[str] = None
    zip: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PaymentProcessingDescriptor(WireModel):
    aft: bool = Field(..., description="Whether the payment is an Account Funding Transaction")


class CreatePaymentRequest(WireModel):
    """Request a payment (with ``source``) or a payout (with ``destination``).

    Omit the amount, or send 0, to perform a card verification.
    """

    source: Optional[CardSource] = None
    destination: Optional[CardDestination] = None
    amount: Optional[int] = Field(None, ge=0, le=MAX_AMOUNT, description="Amount in minor units")
    currency: Currency
    payment_type: PaymentType = PaymentType.REGULAR
    merchant_initiated: bool = False
    reference: Optional[str] = None
    description: Optional[str] = None
    capture: Optional[bool] = None
    capture_on: Optional[str] = Field(None, description="ISO 8601 timestamp; implies capture")
    customer: Optional[CustomerDescriptor] = None
    billing_descriptor: Optional[BillingDescriptor] = None
    shipping: Optional[ShippingDescriptor] = None
    three_ds: Optional[ThreeDSRequest] = Field(None, alias="3ds")
    previous_payment_id: Optional[str] = None
    risk: Optional[RiskRequest] = None
    success_url: Optional[str] = None
    failure_url: Optional[str] = None
    payment_ip: Optional[str] = None
    recipient: Optional[PaymentRecipient] = None
    processing: Optional[PaymentProcessingDescriptor] = None
    processing_channel_id: Optional[str] = None
    metadata: Optional[Metadata] = None

    def amount_decimal(self) -> Optional[Decimal]:
        """The face value of ``amount`` in ``currency``."""
        if self.amount is None:
            return None
        return decode(self.currency, self.amount)


class ActionBody(WireModel):
    reference: Optional[str] = None
    metadata: Optional[Metadata] = None


class CapturePaymentBody(ActionBody):
    amount: Optional[int] = Field(None, ge=0, le=MAX_AMOUNT, description="Defaults to the full amount")


class RefundPaymentBody(ActionBody):
    amount: Optional[int] = Field(None, ge=0, le=MAX_AMOUNT, description="Defaults to the full amount")


class VoidPaymentBody(ActionBody):
    pass


class GetPaymentDetailsRequest(WireModel):
    payment_id: str = Field(..., description="Payment id (pay_*) or a cko-session-id")


class GetPaymentActionsRequest(WireModel):
    payment_id: str


class CapturePaymentRequest(WireModel):
    payment_id: str
    body: CapturePaymentBody = Field(default_factory=CapturePaymentBody)


class RefundPaymentRequest(WireModel):
    payment_id: str
    body: RefundPaymentBody = Field(default_factory=RefundPaymentBody)


class VoidPaymentRequest(WireModel):
    payment_id: str
    body: VoidPaymentBody = Field(default_factory=VoidPaymentBody)


# ---------------------------------------------------------------------------
# Response side
# ---------------------------------------------------------------------------

class ThreeDSStatus(WireModel):
    downgraded: bool
    enrolled: ThreeDSEnrollmentStatus
    signature_valid: Optional[str] = None
    authentication_response: Optional[ThreeDSAuthenticationStatus] = None
    cryptogram: Optional[str] = None
    xid: Optional[str] = None
    version: Optional[str] = None
    exemption: Optional[ScaExemption] = None


class RiskResults(WireModel):
    flagged: bool


class ProcessedCard(WireModel):
    """A card as returned on a processed payment's source or destination."""

    type: Literal["card"] = "card"
    id: Optional[str] = Field(None, description="Source id usable for later payments")
    billing_address: Optional[Address] = None
    phone: Optional[PhoneNumber] = None
    expiry_month: int
    expiry_year: int
    name: Optional[str] = None
    scheme: Optional[str] = None
    last4: str
    fingerprint: str
    bin: str
    card_type: Optional[CardType] = None
    card_category: Optional[CardCategory] = None
    issuer: Optional[str] = None
    issuer_country: Optional[str] = None
    product_id: Optional[str] = None
    product_type: Optional[str] = None
    cvv_result: Optional[str] = None
    payouts: Optional[bool] = None
    fast_funds: Optional[bool] = None
    payment_account_reference: Optional[str] = None


class PaymentProcessingInfo(WireModel):
    retrieval_reference_number: Optional[str] = None
    acquirer_transaction_id: Optional[str] = None


class PaymentProcessed(HasLinks):
    """The payment was processed synchronously (HTTP 201).

    Check ``approved`` to learn whether the authorization or capture succeeded.
    """

    id: str = Field(..., description="Payment id (pay_*)")
    action_id: str = Field(..., description="Id of the action performed (act_*)")
    amount: int
    currency: str
    approved: bool
    status: PaymentStatus
    auth_code: Optional[str] = None
    response_code: Optional[str] = None
    response_summary: Optional[str] = None
    three_ds: Optional[ThreeDSStatus] = Field(None, alias="3ds")
    risk: Optional[RiskResults] = None
    source: Optional[ProcessedCard] = None
    customer: Optional[CustomerInfo] = None
    processed_on: Optional[str] = None
    reference: Optional[str] = None
    processing: Optional[PaymentProcessingInfo] = None
    eci: Optional[str] = None
    scheme_id: Optional[str] = None


class PaymentPending(HasLinks):
    """The payment needs further action or completes asynchronously (HTTP 202).

    When present, the ``redirect`` link is where the customer must be sent.
    """

    id: str
    status: PaymentStatus
    customer: Optional[CustomerInfo] = None
    reference: Optional[str] = None
    three_ds: Optional[ThreeDSStatus] = Field(None, alias="3ds")


class ActionSummary(WireModel):
    id: str
    type: str
    response_code: str
    response_summary: Optional[str] = None


class PaymentDetails(HasLinks):
    id: str
    requested_on: str
    source: Optional[ProcessedCard] = None
    destination: Optional[ProcessedCard] = None
    amount: int
    currency: str
    payment_type: Optional[PaymentType] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    approved: bool
    status: PaymentStatus
    three_ds: Optional[ThreeDSStatus] = Field(None, alias="3ds")
    risk: Optional[RiskResults] = None
    customer: Optional[CustomerInfo] = None
    billing_descriptor: Optional[BillingDescriptor] = None
    shipping: Optional[ShippingDescriptor] = None
    payment_ip: Optional[str] = None
    recipient: Optional[PaymentRecipient] = None
    metadata: Optional[Metadata] = None
    eci: Optional[str] = None
    scheme_id: Optional[str] = None
    actions: Optional[List[ActionSummary]] = Field(
        None, description="Present when details are fetched with a session id"
    )

    def amount_decimal(self) -> Decimal:
        return decode(self.currency, self.amount)


class ActionProcessingInfo(WireModel):
    retrieval_reference_number: Optional[str] = None
    acquirer_reference_number: Optional[str] = None
    acquirer_transaction_id: Optional[str] = None


class Action(WireModel):
    id: str = Field(..., description="Action id (act_*)")
    type: ActionType
    processed_on: str
    amount: int
    approved: Optional[bool] = None
    auth_code: Optional[str] = None
    response_code: str
    response_summary: Optional[str] = None
    reference: Optional[str] = None
    processing: Optional[ActionProcessingInfo] = None
    metadata: Metadata = Field(default_factory=dict)


class ActionAccepted(HasLinks):
    """Acknowledgement of a capture, refund or void (processed asynchronously)."""

    action_id: str
    reference: Optional[str] = None


class CapturePaymentResponse(ActionAccepted):
    pass


class RefundPaymentResponse(ActionAccepted):
    pass


class VoidPaymentResponse(ActionAccepted):
    pass
