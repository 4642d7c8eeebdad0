"""
Transaction footprint: one card transaction and its computed carbon impact.

Amounts are integer cents. carbon_emission_in_grams is fixed when the
transaction is recorded, from the merchant category's emission factor.
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Float, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from carbon_calculator.sandbox.database import Base


class TransactionFootprint(Base):
    __tablename__ = "transaction_footprints"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    payment_card_id: Mapped[str] = mapped_column(
        ForeignKey("payment_cards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    transaction_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )

    # Merchant category code, 4 digits
    mcc: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    currency_code: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    carbon_emission_in_grams: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
