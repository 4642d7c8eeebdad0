"""
Sandbox-only router for seeding test data.

Endpoints:
  POST /sandbox/payment-cards/{id}/transactions   Record a transaction

The real API receives transactions from the card network; the sandbox
needs a way to create them so footprint queries have something to return.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_calculator.sandbox.database import get_db
from carbon_calculator.sandbox.dependencies import verify_request_signature
from carbon_calculator.sandbox.schemas import TransactionCreateRequest
from carbon_calculator.sandbox.services import footprint_service
from carbon_calculator.schemas.footprint import TransactionFootprint

router = APIRouter(dependencies=[Depends(verify_request_signature)])


@router.post(
    "/payment-cards/{payment_card_id}/transactions",
    response_model=TransactionFootprint,
    status_code=status.HTTP_201_CREATED,
    summary="Record a transaction on an enrolled card",
)
async def create_transaction(
    payment_card_id: str,
    body: TransactionCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    footprint = await footprint_service.record_transaction(
        db,
        payment_card_id=payment_card_id,
        transaction_date=body.transaction_date,
        mcc=body.mcc,
        amount_cents=body.amount_cents,
        currency_code=body.currency_code,
    )
    return footprint_service.to_response(footprint)
