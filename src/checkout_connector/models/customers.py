"""Request and response shapes for the customers endpoints."""

from typing import List, Optional

from pydantic import Field

from .common import Metadata, PhoneNumber, WireModel
from .enums import CardCategory, CardType


class CreateCustomerRequest(WireModel):
    email: str
    name: Optional[str] = None
    phone: Optional[PhoneNumber] = None
    metadata: Optional[Metadata] = None


class CreateCustomerResponse(WireModel):
    id: str = Field(..., description="Customer id (cus_*)")


class GetCustomerDetailsRequest(WireModel):
    id_or_email: str = Field(..., description="Customer id (cus_*) or email address")


class Instrument(WireModel):
    """A stored payment instrument linked to a customer."""

    id: str
    type: str
    fingerprint: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    name: Optional[str] = None
    scheme: Optional[str] = None
    last4: Optional[str] = None
    bin: Optional[str] = None
    card_type: Optional[CardType] = None
    card_category: Optional[CardCategory] = None
    issuer: Optional[str] = None
    issuer_country: Optional[str] = None


class CustomerDetails(WireModel):
    id: str
    email: str
    default: Optional[str] = Field(None, description="Id of the default instrument")
    name: Optional[str] = None
    phone: Optional[PhoneNumber] = None
    metadata: Optional[Metadata] = None
    instruments: Optional[List[Instrument]] = None


class UpdateCustomerBody(WireModel):
    email: Optional[str] = None
    name: Optional[str] = None
    default: Optional[str] = None
    phone: Optional[PhoneNumber] = None
    metadata: Optional[Metadata] = None


class UpdateCustomerRequest(WireModel):
    customer_id: str
    body: UpdateCustomerBody = Field(default_factory=UpdateCustomerBody)


class DeleteCustomerRequest(WireModel):
    customer_id: str
