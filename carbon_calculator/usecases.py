"""
Carbon Calculator use cases.

Each scenario takes a UseCaseContext, calls one capability and returns a
Result. State that later steps need, such as the id of a freshly
registered card, is passed along as an argument rather than kept on the
context.

    Use case 4   register_payment_card            enrol one FPAN
    Use case 5   aggregate_transaction_footprints  aggregate carbon impact
    Use case 6   historical_transaction_footprints historical carbon impact
    Use case 4   delete_payment_cards             remove enrolled cards
    Use case 10  enroll_bulk_payment_cards        enrol several FPANs

run_all() executes them in that order, since queries and deletion need
the id produced by registration.
"""

import logging
from dataclasses import dataclass

from carbon_calculator.capabilities import CardRegistrar, FootprintQuerier
from carbon_calculator.client import ApiClient
from carbon_calculator.config import Settings, settings as default_settings
from carbon_calculator.pan_generator import generate_fpan
from carbon_calculator.result import Err, Ok, Result, capture
from carbon_calculator.schemas.footprint import (
    AggregateSearchCriteria,
    AggregateTransactionFootprint,
    AggregateType,
    HistoricalTransactionFootprints,
)
from carbon_calculator.schemas.payment_card import (
    PaymentCard,
    PaymentCardEnrolment,
    PaymentCardReference,
)
from carbon_calculator.services import build_services

logger = logging.getLogger(__name__)

HISTORY_START_DATE = "2020-09-19"
HISTORY_END_DATE = "2020-10-01"


@dataclass(frozen=True)
class UseCaseContext:
    """Collaborators and test data shared by every scenario of one run."""
    registrar: CardRegistrar
    querier: FootprintQuerier
    bin: str
    card_base_currency: str

    @classmethod
    def from_settings(cls, api_client: ApiClient, settings: Settings = default_settings) -> "UseCaseContext":
        add_card_service, payment_card_service = build_services(api_client)
        return cls(
            registrar=add_card_service,
            querier=payment_card_service,
            bin=settings.TEST_DATA_BIN,
            card_base_currency=settings.TEST_DATA_CARD_BASE_CURRENCY,
        )

    def new_payment_card(self) -> PaymentCard:
        return PaymentCard(fpan=generate_fpan(card_bin=self.bin), card_base_currency=self.card_base_currency)


def _log_failure(action: str, result: Result) -> None:
    if isinstance(result, Err):
        logger.info("%s API call failed with error msg %s", action, result.error.service_errors)


async def register_payment_card(ctx: UseCaseContext) -> Result[PaymentCardReference]:
    """Use case 4: enrol a freshly generated FPAN."""
    result = await capture(ctx.registrar.register_payment_card(ctx.new_payment_card()))
    _log_failure("Add Card", result)
    return result


async def aggregate_transaction_footprints(
    ctx: UseCaseContext,
    payment_card_id: str,
    aggregate_type: AggregateType = AggregateType.DAILY,
) -> Result[list[AggregateTransactionFootprint]]:
    """Use case 5: aggregate carbon score for a card's transactions."""
    criteria = AggregateSearchCriteria(payment_card_ids={payment_card_id}, aggregate_type=aggregate_type)
    result = await capture(ctx.querier.get_payment_card_aggregate_transactions(criteria))
    if isinstance(result, Ok):
        logger.info("%s", result.value)
    _log_failure("Aggregate Footprints", result)
    return result


async def historical_transaction_footprints(
    ctx: UseCaseContext,
    payment_card_id: str,
    start_date: str = HISTORY_START_DATE,
    end_date: str = HISTORY_END_DATE,
    page_offset: int = 0,
    page_size: int = 50,
) -> Result[HistoricalTransactionFootprints]:
    """Use case 6: historical transaction footprint data for one card."""
    result = await capture(
        ctx.querier.get_payment_card_transaction_history(
            payment_card_id, start_date, end_date, page_offset, page_size
        )
    )
    if isinstance(result, Ok):
        logger.info("%s", result.value)
    _log_failure("Historical Footprints", result)
    return result


async def delete_payment_cards(ctx: UseCaseContext, card_ids: list[str]) -> Result[None]:
    """Use case 4: delete registered payment cards."""
    result = await capture(ctx.querier.delete_payment_cards(card_ids))
    _log_failure("Delete Card", result)
    return result


async def enroll_bulk_payment_cards(ctx: UseCaseContext, count: int = 2) -> Result[list[PaymentCardEnrolment]]:
    """Use case 10: enrol several FPANs in one call."""
    cards = [ctx.new_payment_card() for _ in range(count)]
    result = await capture(ctx.registrar.register_batch_payment_cards(cards))
    if isinstance(result, Ok):
        logger.info("Enrolled payment cards are %s", result.value)
    _log_failure("Bulk Enrol", result)
    return result


async def run_all(ctx: UseCaseContext) -> Result[dict]:
    """
    Run every use case in order, stopping at the first failure.

    Returns:
        Ok with a summary dict, or the Err of the step that failed.
    """
    registered = await register_payment_card(ctx)
    if isinstance(registered, Err):
        return registered
    payment_card_id = registered.value.payment_card_id

    aggregates = await aggregate_transaction_footprints(ctx, payment_card_id)
    if isinstance(aggregates, Err):
        return aggregates

    history = await historical_transaction_footprints(ctx, payment_card_id)
    if isinstance(history, Err):
        return history

    deleted = await delete_payment_cards(ctx, [payment_card_id])
    if isinstance(deleted, Err):
        return deleted

    enrolled = await enroll_bulk_payment_cards(ctx)
    if isinstance(enrolled, Err):
        return enrolled

    return Ok({
        "payment_card_id": payment_card_id,
        "aggregate_footprints": len(aggregates.value),
        "historical_total": history.value.total,
        "bulk_enrolled": [enrolment.payment_card_id for enrolment in enrolled.value],
    })
