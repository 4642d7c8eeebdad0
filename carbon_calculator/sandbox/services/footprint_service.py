"""
Sandbox footprint service: recording transactions and querying footprints.

Carbon model:
  Each transaction's footprint is its amount multiplied by the emission
  factor of its merchant category (grams CO2e per unit of currency).
  Amounts are not converted between currencies.

Aggregation buckets:
  DAILY    "2020-09-21"   the transaction date
  WEEKLY   "2020-09-21"   the Monday starting the ISO week
  MONTHLY  "2020-09"
  YEARLY   "2020"

History windows:
  fromDate and toDate are both inclusive and must be YYYY-MM-DD with
  fromDate <= toDate. Results are newest first and paginated by offset/limit.
"""

import re
from collections import defaultdict
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_calculator.sandbox.exceptions import InvalidRequestError
from carbon_calculator.sandbox.models.transaction_footprint import TransactionFootprint
from carbon_calculator.sandbox.services.card_service import ensure_cards_exist
from carbon_calculator.schemas.footprint import (
    AggregateCarbonScore,
    AggregateTransactionFootprint,
    AggregateType,
    HistoricalTransactionFootprints,
    TransactionFootprint as TransactionFootprintResponse,
)

# Grams CO2e per unit of currency, by merchant category code
EMISSION_FACTORS: dict[str, float] = {
    "4511": 1800.0,  # airlines
    "4111": 250.0,   # commuter transport
    "4900": 1300.0,  # utilities
    "5411": 350.0,   # grocery stores
    "5541": 1500.0,  # service stations
    "5651": 280.0,   # clothing
    "5732": 420.0,   # electronics
    "5812": 300.0,   # restaurants
}
DEFAULT_EMISSION_FACTOR = 400.0

MAX_PAGE_SIZE = 100

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def carbon_emission_in_grams(mcc: str, amount_cents: int) -> float:
    factor = EMISSION_FACTORS.get(mcc, DEFAULT_EMISSION_FACTOR)
    return round(amount_cents / 100 * factor, 2)


def bucket_key(transaction_date: date, aggregate_type: AggregateType) -> str:
    """Label of the aggregation bucket a date falls into."""
    if aggregate_type == AggregateType.DAILY:
        return transaction_date.isoformat()
    if aggregate_type == AggregateType.WEEKLY:
        return (transaction_date - timedelta(days=transaction_date.weekday())).isoformat()
    if aggregate_type == AggregateType.MONTHLY:
        return transaction_date.strftime("%Y-%m")
    return str(transaction_date.year)


def parse_date(value: str, field: str) -> date:
    """Parse a strict YYYY-MM-DD string, raising InvalidRequestError otherwise."""
    if not _DATE_PATTERN.match(value):
        raise InvalidRequestError("INVALID_DATE", "Dates must be formatted YYYY-MM-DD", [f"{field}={value}"])
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(
            "INVALID_DATE", "Date is not a valid calendar date", [f"{field}={value}"]
        ) from None


def to_response(footprint: TransactionFootprint) -> TransactionFootprintResponse:
    return TransactionFootprintResponse(
        transaction_id=footprint.id,
        payment_card_id=footprint.payment_card_id,
        transaction_date=footprint.transaction_date.isoformat(),
        mcc=footprint.mcc,
        amount_cents=footprint.amount_cents,
        currency_code=footprint.currency_code,
        carbon_emission_in_grams=footprint.carbon_emission_in_grams,
    )


async def record_transaction(
    db: AsyncSession,
    payment_card_id: str,
    transaction_date: date,
    mcc: str,
    amount_cents: int,
    currency_code: str,
) -> TransactionFootprint:
    """
    Record a transaction on an enrolled card and compute its footprint.

    Raises:
        PaymentCardNotFoundError: If the card is not enrolled.
    """
    await ensure_cards_exist(db, [payment_card_id])

    footprint = TransactionFootprint(
        payment_card_id=payment_card_id,
        transaction_date=transaction_date,
        mcc=mcc,
        amount_cents=amount_cents,
        currency_code=currency_code,
        carbon_emission_in_grams=carbon_emission_in_grams(mcc, amount_cents),
    )
    db.add(footprint)
    await db.flush()
    return footprint


async def aggregate_footprints(
    db: AsyncSession,
    payment_card_ids: set[str],
    aggregate_type: AggregateType,
) -> list[AggregateTransactionFootprint]:
    """
    Bucket each card's transaction footprints.

    Returns:
        One entry per requested card (sorted by id), buckets in ascending
        order. Cards with no transactions get an empty bucket list.

    Raises:
        PaymentCardNotFoundError: If any requested card is not enrolled.
    """
    card_ids = sorted(payment_card_ids)
    await ensure_cards_exist(db, card_ids)

    result = await db.execute(
        select(TransactionFootprint).where(TransactionFootprint.payment_card_id.in_(card_ids))
    )

    buckets: dict[str, dict[str, list[float]]] = {card_id: defaultdict(list) for card_id in card_ids}
    for footprint in result.scalars().all():
        key = bucket_key(footprint.transaction_date, aggregate_type)
        buckets[footprint.payment_card_id][key].append(footprint.carbon_emission_in_grams)

    return [
        AggregateTransactionFootprint(
            payment_card_id=card_id,
            aggregate_carbon_score=[
                AggregateCarbonScore(
                    aggregate_date=key,
                    carbon_emission_in_grams=round(sum(emissions), 2),
                    transaction_count=len(emissions),
                )
                for key, emissions in sorted(buckets[card_id].items())
            ],
        )
        for card_id in card_ids
    ]


async def transaction_history(
    db: AsyncSession,
    payment_card_id: str,
    from_date: str,
    to_date: str,
    offset: int,
    limit: int,
) -> HistoricalTransactionFootprints:
    """
    Page through one card's transaction footprints within a date window.

    Raises:
        InvalidRequestError: On malformed or inverted dates, or bad paging.
        PaymentCardNotFoundError: If the card is not enrolled.
    """
    start = parse_date(from_date, "fromDate")
    end = parse_date(to_date, "toDate")
    if start > end:
        raise InvalidRequestError(
            "INVALID_DATE_RANGE", "fromDate must not be after toDate", [f"{from_date} > {to_date}"]
        )
    if offset < 0:
        raise InvalidRequestError("INVALID_OFFSET", "offset must be >= 0")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidRequestError("INVALID_LIMIT", f"limit must be between 1 and {MAX_PAGE_SIZE}")

    await ensure_cards_exist(db, [payment_card_id])

    in_window = (
        (TransactionFootprint.payment_card_id == payment_card_id)
        & (TransactionFootprint.transaction_date >= start)
        & (TransactionFootprint.transaction_date <= end)
    )
    total = await db.scalar(select(func.count()).select_from(TransactionFootprint).where(in_window))

    result = await db.execute(
        select(TransactionFootprint)
        .where(in_window)
        .order_by(TransactionFootprint.transaction_date.desc(), TransactionFootprint.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    page = [to_response(footprint) for footprint in result.scalars().all()]

    return HistoricalTransactionFootprints(
        count=len(page),
        offset=offset,
        limit=limit,
        total=total or 0,
        transaction_footprints=page,
    )
