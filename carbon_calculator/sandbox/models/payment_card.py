"""
Enrolled payment card.

The FPAN is Fernet-encrypted at rest. Two plaintext derivatives are kept:
  - last4fpan: returned to clients for display
  - fpan_fingerprint: SHA-256 hex of the FPAN, unique, for duplicate checks
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from carbon_calculator.sandbox.database import Base


class PaymentCard(Base):
    __tablename__ = "payment_cards"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    fpan_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    fpan_fingerprint: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )

    last4fpan: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    card_base_currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
