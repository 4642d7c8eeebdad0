"""
Narrow interfaces the use cases depend on.

Scenarios receive these instead of concrete façades, so a run can be
wired to the real API, the sandbox, or a test double without changes.
AddCardService satisfies CardRegistrar; PaymentCardService satisfies
FootprintQuerier.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from carbon_calculator.schemas.footprint import (
    AggregateSearchCriteria,
    AggregateTransactionFootprint,
    HistoricalTransactionFootprints,
)
from carbon_calculator.schemas.payment_card import (
    PaymentCard,
    PaymentCardEnrolment,
    PaymentCardReference,
)


@runtime_checkable
class CardRegistrar(Protocol):
    async def register_payment_card(self, payment_card: PaymentCard) -> PaymentCardReference: ...

    async def register_batch_payment_cards(
        self, payment_cards: Sequence[PaymentCard]
    ) -> list[PaymentCardEnrolment]: ...


@runtime_checkable
class FootprintQuerier(Protocol):
    async def get_payment_card_aggregate_transactions(
        self, criteria: AggregateSearchCriteria
    ) -> list[AggregateTransactionFootprint]: ...

    async def get_payment_card_transaction_history(
        self,
        payment_card_id: str,
        start_date: str,
        end_date: str,
        page_offset: int = 0,
        page_size: int = 50,
    ) -> HistoricalTransactionFootprints: ...

    async def delete_payment_cards(self, card_ids: Sequence[str]) -> None: ...
