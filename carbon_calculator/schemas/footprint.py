"""
Pydantic schemas for carbon footprint queries.

Aggregate queries group a card's transaction footprints into buckets of
the requested size; historical queries page through individual
transaction footprints over a date window.
"""

from enum import IntEnum

from pydantic import Field

from carbon_calculator.schemas.base import WireModel


class AggregateType(IntEnum):
    DAILY = 0
    WEEKLY = 1
    MONTHLY = 2
    YEARLY = 3


class AggregateSearchCriteria(WireModel):
    """Request body for POST /aggregate-transaction-footprints."""
    payment_card_ids: set[str] = Field(min_length=1)
    aggregate_type: AggregateType = AggregateType.DAILY


class AggregateCarbonScore(WireModel):
    """Footprint of one time bucket ("2020-09-21", "2020-09", "2020", ...)."""
    aggregate_date: str
    carbon_emission_in_grams: float
    transaction_count: int


class AggregateTransactionFootprint(WireModel):
    payment_card_id: str
    aggregate_carbon_score: list[AggregateCarbonScore] = []


class TransactionFootprint(WireModel):
    transaction_id: str
    payment_card_id: str
    transaction_date: str
    mcc: str
    amount_cents: int
    currency_code: str
    carbon_emission_in_grams: float


class HistoricalTransactionFootprints(WireModel):
    """One page of a card's transaction footprints, newest first."""
    count: int
    offset: int
    limit: int
    total: int
    transaction_footprints: list[TransactionFootprint] = []
