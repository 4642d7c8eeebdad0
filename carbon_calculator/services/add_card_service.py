"""
Add card service: enrols payment cards with the Carbon Calculator API.

Two operations:
  1. register_payment_card: one card, one POST, one reference back
  2. register_batch_payment_cards: many cards in one POST; the response
     has one enrolment per card, in request order

Bulk enrolment is all-or-nothing: if the remote rejects any card, the
whole call fails with a ServiceError listing the rejected entries.
Partial success is never reported.
"""

import logging
from collections.abc import Sequence

from carbon_calculator.client import ApiClient, parse_response
from carbon_calculator.exceptions import ServiceError
from carbon_calculator.schemas.payment_card import (
    PaymentCard,
    PaymentCardEnrolment,
    PaymentCardReference,
)

logger = logging.getLogger(__name__)


class AddCardService:
    """Card registration façade. Satisfies the CardRegistrar protocol."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def register_payment_card(self, payment_card: PaymentCard) -> PaymentCardReference:
        """
        Register a single payment card.

        Returns:
            The reference of the enrolled card (id and last four digits).

        Raises:
            ServiceError: If the remote rejects the card or the call fails.
        """
        body = await self.api_client.request(
            "POST", "/payment-cards", json_body=payment_card.to_wire()
        )
        reference = parse_response(PaymentCardReference, body)
        logger.info("Registered payment card %s ending in %s",
                    reference.payment_card_id, reference.last4fpan)
        return reference

    async def register_batch_payment_cards(
        self, payment_cards: Sequence[PaymentCard]
    ) -> list[PaymentCardEnrolment]:
        """
        Register several payment cards in one call.

        Returns:
            One enrolment per submitted card, in the same order.

        Raises:
            ServiceError: If the batch is empty, any card is rejected, the
                call fails, or the response count doesn't match the request.
        """
        if not payment_cards:
            raise ServiceError.local("INVALID_REQUEST", "At least one payment card is required")

        body = await self.api_client.request(
            "POST",
            "/payment-card-enrolments",
            json_body=[card.to_wire() for card in payment_cards],
        )
        enrolments = parse_response(list[PaymentCardEnrolment], body)

        if len(enrolments) != len(payment_cards):
            raise ServiceError.local(
                "ENROLMENT_COUNT_MISMATCH",
                f"Submitted {len(payment_cards)} cards but received {len(enrolments)} enrolments",
            )

        logger.info("Enrolled %d payment cards", len(enrolments))
        return enrolments
