"""Closed string enumerations used on the wire."""

import enum


class PaymentType(str, enum.Enum):
    """Required for card-not-present payments (recurring, mail/telephone order)."""
    REGULAR = "Regular"
    RECURRING = "Recurring"
    MOTO = "MOTO"


class PaymentStatus(str, enum.Enum):
    AUTHORIZED = "Authorized"
    PENDING = "Pending"
    CARD_VERIFIED = "Card Verified"
    VOIDED = "Voided"
    PARTIALLY_CAPTURED = "Partially Captured"
    CAPTURED = "Captured"
    PARTIALLY_REFUNDED = "Partially Refunded"
    REFUNDED = "Refunded"
    DECLINED = "Declined"
    CANCELLED = "Cancelled"
    PAID = "Paid"
    EXPIRED = "Expired"


class ThreeDSEnrollmentStatus(str, enum.Enum):
    ISSUER_ENROLLED = "Y"
    NOT_ENROLLED = "N"
    UNKNOWN = "U"


class ThreeDSAuthenticationStatus(str, enum.Enum):
    AUTHENTICATED = "Y"
    NOT_AUTHENTICATED = "N"
    ATTEMPTED = "A"
    UNABLE = "U"


class ScaExemption(str, enum.Enum):
    """Reason for processing a payment without 3D Secure authentication."""
    LOW_VALUE = "low_value"
    SECURE_CORPORATE_PAYMENT = "secure_corporate_payment"
    TRUSTED_LISTING = "trusted_listing"


class CardType(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    PREPAID = "PREPAID"
    CHARGE = "CHARGE"
    DEFERRED_DEBIT = "DEFERRED DEBIT"


class CardCategory(str, enum.Enum):
    CONSUMER = "CONSUMER"
    COMMERCIAL = "COMMERCIAL"


class ActionType(str, enum.Enum):
    AUTHORIZATION = "Authorization"
    CARD_VERIFICATION = "Card Verification"
    VOID = "Void"
    CAPTURE = "Capture"
    REFUND = "Refund"
    PAYOUT = "Payout"
