"""Typed messages exchanged with the Checkout API."""

from .common import (
    ACTIONS_LINK,
    CAPTURE_LINK,
    NEXT_LINK,
    PAYMENT_LINK,
    REDIRECT_LINK,
    REFUND_LINK,
    SELF_LINK,
    VOID_LINK,
    Address,
    BillingDescriptor,
    CustomerDescriptor,
    CustomerInfo,
    HasLinks,
    Link,
    Links,
    Metadata,
    PhoneNumber,
    ShippingDescriptor,
    WireModel,
)
from .customers import (
    CreateCustomerRequest,
    CreateCustomerResponse,
    CustomerDetails,
    DeleteCustomerRequest,
    GetCustomerDetailsRequest,
    Instrument,
    UpdateCustomerBody,
    UpdateCustomerRequest,
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
from .payments import (
    Action,
    ActionProcessingInfo,
    ActionSummary,
    CapturePaymentBody,
    CapturePaymentRequest,
    CapturePaymentResponse,
    CardDestination,
    CardSource,
    CreatePaymentRequest,
    GetPaymentActionsRequest,
    GetPaymentDetailsRequest,
    PaymentDetails,
    PaymentPending,
    PaymentProcessed,
    PaymentProcessingDescriptor,
    PaymentProcessingInfo,
    PaymentRecipient,
    ProcessedCard,
    RefundPaymentBody,
    RefundPaymentRequest,
    RefundPaymentResponse,
    RiskRequest,
    RiskResults,
    ThreeDSRequest,
    ThreeDSStatus,
    VoidPaymentBody,
    VoidPaymentRequest,
    VoidPaymentResponse,
)

__all__ = [
    # Common shapes and links
    "Address",
    "BillingDescriptor",
    "CustomerDescriptor",
    "CustomerInfo",
    "HasLinks",
    "Link",
    "Links",
    "Metadata",
    "PhoneNumber",
    "ShippingDescriptor",
    "WireModel",
    "ACTIONS_LINK",
    "CAPTURE_LINK",
    "NEXT_LINK",
    "PAYMENT_LINK",
    "REDIRECT_LINK",
    "REFUND_LINK",
    "SELF_LINK",
    "VOID_LINK",
    # Enumerations
    "ActionType",
    "CardCategory",
    "CardType",
    "PaymentStatus",
    "PaymentType",
    "ScaExemption",
    "ThreeDSAuthenticationStatus",
    "ThreeDSEnrollmentStatus",
    # Payments
    "Action",
    "ActionProcessingInfo",
    "ActionSummary",
    "CapturePaymentBody",
    "CapturePaymentRequest",
    "CapturePaymentResponse",
    "CardDestination",
    "CardSource",
    "CreatePaymentRequest",
    "GetPaymentActionsRequest",
    "GetPaymentDetailsRequest",
    "PaymentDetails",
    "PaymentPending",
    "PaymentProcessed",
    "PaymentProcessingDescriptor",
    "PaymentProcessingInfo",
    "PaymentRecipient",
    "ProcessedCard",
    "RefundPaymentBody",
    "RefundPaymentRequest",
    "RefundPaymentResponse",
    "RiskRequest",
    "RiskResults",
    "ThreeDSRequest",
    "ThreeDSStatus",
    "VoidPaymentBody",
    "VoidPaymentRequest",
    "VoidPaymentResponse",
    # Customers
    "CreateCustomerRequest",
    "CreateCustomerResponse",
    "CustomerDetails",
    "DeleteCustomerRequest",
    "GetCustomerDetailsRequest",
    "Instrument",
    "UpdateCustomerBody",
    "UpdateCustomerRequest",
]
