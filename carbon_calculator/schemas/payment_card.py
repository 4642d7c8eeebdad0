"""
Pydantic schemas for payment card enrolment.

The full card number is only ever sent, never returned: responses carry
the enrolled card's id and the last four digits for display.
"""

from pydantic import Field

from carbon_calculator.schemas.base import WireModel


class PaymentCard(WireModel):
    """Request body for POST /payment-cards (and each item of a bulk enrolment)."""
    fpan: str = Field(min_length=1, repr=False)
    card_base_currency: str = Field(min_length=1)


class PaymentCardReference(WireModel):
    """Response body for a single card registration."""
    payment_card_id: str = Field(min_length=1)
    # to_camel would produce "last4Fpan"
    last4fpan: str = Field(alias="last4fpan", pattern=r"^\d{4}$")


class PaymentCardEnrolment(WireModel):
    """One entry of a bulk enrolment response, in request order."""
    payment_card_id: str = Field(min_length=1)
    last4fpan: str = Field(alias="last4fpan", pattern=r"^\d{4}$")
