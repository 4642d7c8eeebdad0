"""
Aggregate footprints router.

Endpoints:
  POST /aggregate-transaction-footprints   Footprints bucketed by day/week/month/year
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_calculator.sandbox.database import get_db
from carbon_calculator.sandbox.dependencies import verify_request_signature
from carbon_calculator.sandbox.services import footprint_service
from carbon_calculator.schemas.footprint import (
    AggregateSearchCriteria,
    AggregateTransactionFootprint,
)

router = APIRouter(dependencies=[Depends(verify_request_signature)])


@router.post(
    "/aggregate-transaction-footprints",
    response_model=list[AggregateTransactionFootprint],
    summary="Aggregate transaction footprints",
)
async def aggregate_transaction_footprints(
    criteria: AggregateSearchCriteria,
    db: AsyncSession = Depends(get_db),
):
    """aggregateType: 0=daily, 1=weekly, 2=monthly, 3=yearly."""
    return await footprint_service.aggregate_footprints(
        db, criteria.payment_card_ids, criteria.aggregate_type
    )
