"""
Payment card service: footprint queries and card deletion.

Operations:
  - get_payment_card_aggregate_transactions: footprints grouped into
    daily/weekly/monthly/yearly buckets for one or more cards
  - get_payment_card_transaction_history: a page of one card's
    transaction footprints over a date window
  - delete_payment_cards: remove enrolled cards by id

Only shape checks happen locally (pagination bounds, non-empty id lists).
Date strings are passed through untouched: the remote API owns their
format and range semantics, and rejects bad values with an error envelope.
"""

import logging
from collections.abc import Sequence
from urllib.parse import quote

from carbon_calculator.client import ApiClient, parse_response
from carbon_calculator.exceptions import ServiceError
from carbon_calculator.schemas.footprint import (
    AggregateSearchCriteria,
    AggregateType,
    AggregateTransactionFootprint,
    HistoricalTransactionFootprints,
)

logger = logging.getLogger(__name__)


def _search_criteria(criteria: AggregateSearchCriteria) -> AggregateSearchCriteria:
    """Reject criteria with empty ids or an unknown aggregate type."""
    if not criteria.payment_card_ids:
        raise ServiceError.local("INVALID_CRITERIA", "paymentCardIds must not be empty")
    if criteria.aggregate_type not in set(AggregateType):
        raise ServiceError.local(
            "INVALID_CRITERIA", f"Unknown aggregateType {criteria.aggregate_type!r}"
        )
    return criteria


class PaymentCardService:
    """Footprint query and deletion façade. Satisfies the FootprintQuerier protocol."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def get_payment_card_aggregate_transactions(
        self, criteria: AggregateSearchCriteria
    ) -> list[AggregateTransactionFootprint]:
        """
        Fetch aggregate footprints for the cards named in ``criteria``.

        An empty result is valid (no transactions yet).

        Raises:
            ServiceError: If the remote rejects the criteria or the call fails.
        """
        criteria = _search_criteria(criteria)
        body = await self.api_client.request(
            "POST", "/aggregate-transaction-footprints", json_body=criteria.to_wire()
        )
        return parse_response(list[AggregateTransactionFootprint], body)

    async def get_payment_card_transaction_history(
        self,
        payment_card_id: str,
        start_date: str,
        end_date: str,
        page_offset: int = 0,
        page_size: int = 50,
    ) -> HistoricalTransactionFootprints:
        """
        Fetch one page of a card's transaction footprints.

        Args:
            payment_card_id: Id returned by card registration.
            start_date: "YYYY-MM-DD", sent as-is.
            end_date: "YYYY-MM-DD", sent as-is.
            page_offset: Number of records to skip (>= 0).
            page_size: Maximum records to return (> 0).

        Raises:
            ServiceError: On bad pagination, unknown card id, malformed or
                inverted dates, or a failed call.
        """
        if page_offset < 0:
            raise ServiceError.local("INVALID_PAGE_OFFSET", "page_offset must be >= 0")
        if page_size <= 0:
            raise ServiceError.local("INVALID_PAGE_SIZE", "page_size must be > 0")

        body = await self.api_client.request(
            "GET",
            f"/payment-cards/{quote(payment_card_id, safe='')}/transaction-footprints",
            params={
                "fromDate": start_date,
                "toDate": end_date,
                "offset": page_offset,
                "limit": page_size,
            },
        )
        return parse_response(HistoricalTransactionFootprints, body)

    async def delete_payment_cards(self, card_ids: Sequence[str]) -> None:
        """
        Delete enrolled cards.

        Deleting an id the remote no longer knows is not an error.

        Raises:
            ServiceError: If ``card_ids`` is empty or the call fails.
        """
        if not card_ids:
            raise ServiceError.local("INVALID_REQUEST", "At least one payment card id is required")

        await self.api_client.request("DELETE", "/payment-cards", json_body=list(card_ids))
        logger.info("Deleted payment cards %s", list(card_ids))
