"""
Payment cards router.

Endpoints:
  POST   /payment-cards                                 Enrol one card
  POST   /payment-card-enrolments                       Enrol several cards
  DELETE /payment-cards                                 Delete cards by id
  GET    /payment-cards/{id}/transaction-footprints     Historical footprints
"""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_calculator.sandbox.database import get_db
from carbon_calculator.sandbox.dependencies import verify_request_signature
from carbon_calculator.sandbox.services import card_service, footprint_service
from carbon_calculator.schemas.footprint import HistoricalTransactionFootprints
from carbon_calculator.schemas.payment_card import (
    PaymentCard,
    PaymentCardEnrolment,
    PaymentCardReference,
)

router = APIRouter(dependencies=[Depends(verify_request_signature)])


@router.post(
    "/payment-cards",
    response_model=PaymentCardReference,
    summary="Enrol a payment card",
)
async def register_payment_card(
    payment_card: PaymentCard,
    db: AsyncSession = Depends(get_db),
):
    """Only the enrolled card's id and last four digits are returned."""
    card = await card_service.register_card(db, payment_card)
    return PaymentCardReference(payment_card_id=card.id, last4fpan=card.last4fpan)


@router.post(
    "/payment-card-enrolments",
    response_model=list[PaymentCardEnrolment],
    summary="Enrol several payment cards",
)
async def register_payment_cards(
    payment_cards: list[PaymentCard],
    db: AsyncSession = Depends(get_db),
):
    """All-or-nothing: one rejected card rejects the whole batch."""
    cards = await card_service.register_cards(db, payment_cards)
    return [PaymentCardEnrolment(payment_card_id=card.id, last4fpan=card.last4fpan) for card in cards]


@router.delete(
    "/payment-cards",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete payment cards",
)
async def delete_payment_cards(
    payment_card_ids: list[str] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Unknown ids are ignored."""
    await card_service.delete_cards(db, payment_card_ids)


@router.get(
    "/payment-cards/{payment_card_id}/transaction-footprints",
    response_model=HistoricalTransactionFootprints,
    summary="Historical transaction footprints",
)
async def get_transaction_footprints(
    payment_card_id: str,
    from_date: str = Query(alias="fromDate"),
    to_date: str = Query(alias="toDate"),
    offset: int = Query(0),
    limit: int = Query(50),
    db: AsyncSession = Depends(get_db),
):
    return await footprint_service.transaction_history(
        db, payment_card_id, from_date, to_date, offset, limit
    )
