"""Shapes shared by payment and customer messages."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Free-form key/value pairs attached to payments, actions and customers.
Metadata = Dict[str, Any]

# Link names that appear in ``_links`` maps.
SELF_LINK = "self"
ACTIONS_LINK = "actions"
VOID_LINK = "void"
CAPTURE_LINK = "capture"
REFUND_LINK = "refund"
PAYMENT_LINK = "payment"
REDIRECT_LINK = "redirect"
NEXT_LINK = "next"


class WireModel(BaseModel):
    """Base for every message exchanged with the API.

    Fields are populated by name or wire alias, and unknown fields in
    responses are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready body: wire aliases, ``None`` fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Link(WireModel):
    href: str


Links = Dict[str, Link]


class HasLinks(WireModel):
    """Mixin for responses carrying a ``_links`` map."""

    links: Optional[Links] = Field(None, alias="_links")

    def link(self, name: str) -> Optional[str]:
        """Return the href for ``name``, or None when the link is absent."""
        if not self.links or name not in self.links:
            return None
        return self.links[name].href


class PhoneNumber(WireModel):
    country_code: str = Field(..., description="International calling code (1-7 characters)")
    number: str = Field(..., description="Phone number (6-25 characters)")


class Address(WireModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = Field(None, description="Two-letter ISO country code")


class CustomerDescriptor(WireModel):
    """Customer reference on a payment request.

    An unknown email creates a new customer; ``name`` only applies to new ones.
    """

    id: Optional[str] = Field(None, description="Existing customer id (cus_*)")
    email: Optional[str] = None
    name: Optional[str] = None


class CustomerInfo(WireModel):
    id: str = Field(..., description="Customer id (cus_*)")
    email: Optional[str] = None
    name: Optional[str] = None


class BillingDescriptor(WireModel):
    """Dynamic descriptor shown on the account owner's statement."""

    name: str = Field(..., description="Description of the charge (<= 25 characters)")
    city: str = Field(..., description="City the charge originated from (1-13 characters)")


class ShippingDescriptor(WireModel):
    address: Optional[Address] = None
    phone: Optional[PhoneNumber] = None
