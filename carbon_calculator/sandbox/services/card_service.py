"""
Sandbox card service: enrolment and deletion.

Enrolment checks each card the way the remote API does:
  1. The FPAN is 12-19 digits and passes the Luhn check
  2. The base currency is a three-letter upper-case code
  3. The FPAN is not already enrolled (matched by fingerprint)

The full FPAN is encrypted before storage; only the last four digits and
a fingerprint stay in plaintext.

Bulk enrolment validates every card before writing any of them. One bad
card rejects the batch, with one error detail per failing position.
"""

import re

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_calculator.pan_generator import is_luhn_valid
from carbon_calculator.sandbox.exceptions import (
    DuplicatePaymentCardError,
    InvalidRequestError,
    PaymentCardNotFoundError,
)
from carbon_calculator.sandbox.models.payment_card import PaymentCard
from carbon_calculator.sandbox.models.transaction_footprint import TransactionFootprint
from carbon_calculator.schemas.payment_card import PaymentCard as PaymentCardRequest
from carbon_calculator.security import encrypt_value, fingerprint

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def _card_problem(card: PaymentCardRequest) -> str | None:
    """Describe why a card would be rejected, or None if it is acceptable."""
    if not card.fpan.isdigit() or not 12 <= len(card.fpan) <= 19:
        return "fpan must be 12 to 19 digits"
    if not is_luhn_valid(card.fpan):
        return "fpan fails the Luhn check"
    if not _CURRENCY_PATTERN.match(card.card_base_currency):
        return "cardBaseCurrency must be a three-letter ISO 4217 code"
    return None


async def _enrolled_fingerprints(db: AsyncSession, fingerprints: list[str]) -> set[str]:
    result = await db.execute(
        select(PaymentCard.fpan_fingerprint).where(PaymentCard.fpan_fingerprint.in_(fingerprints))
    )
    return set(result.scalars().all())


def _new_card(card: PaymentCardRequest, card_fingerprint: str) -> PaymentCard:
    return PaymentCard(
        fpan_encrypted=encrypt_value(card.fpan),
        fpan_fingerprint=card_fingerprint,
        last4fpan=card.fpan[-4:],
        card_base_currency=card.card_base_currency,
    )


async def register_card(db: AsyncSession, card: PaymentCardRequest) -> PaymentCard:
    """
    Enrol one payment card.

    Raises:
        InvalidRequestError: If the FPAN or currency is malformed.
        DuplicatePaymentCardError: If the FPAN is already enrolled.
    """
    problem = _card_problem(card)
    if problem is not None:
        raise InvalidRequestError("INVALID_PAYMENT_CARD", "Payment card rejected", [problem])

    card_fingerprint = fingerprint(card.fpan)
    if await _enrolled_fingerprints(db, [card_fingerprint]):
        raise DuplicatePaymentCardError(card.fpan[-4:])

    payment_card = _new_card(card, card_fingerprint)
    db.add(payment_card)
    await db.flush()
    return payment_card


async def register_cards(db: AsyncSession, cards: list[PaymentCardRequest]) -> list[PaymentCard]:
    """
    Enrol several payment cards, all or none.

    Returns:
        The enrolled cards in request order.

    Raises:
        InvalidRequestError: If the batch is empty or any card is rejected.
    """
    if not cards:
        raise InvalidRequestError("INVALID_PAYMENT_CARDS", "At least one payment card is required")

    fingerprints = [fingerprint(card.fpan) for card in cards]
    already_enrolled = await _enrolled_fingerprints(db, fingerprints)

    problems = []
    seen = set()
    for index, (card, card_fingerprint) in enumerate(zip(cards, fingerprints)):
        problem = _card_problem(card)
        if problem is None and (card_fingerprint in already_enrolled or card_fingerprint in seen):
            problem = f"card ending in {card.fpan[-4:]} is already enrolled"
        if problem is not None:
            problems.append(f"paymentCards[{index}]: {problem}")
        seen.add(card_fingerprint)

    if problems:
        raise InvalidRequestError("INVALID_PAYMENT_CARDS", "Payment card enrolment rejected", problems)

    payment_cards = [_new_card(card, card_fingerprint) for card, card_fingerprint in zip(cards, fingerprints)]
    db.add_all(payment_cards)
    await db.flush()
    return payment_cards


async def ensure_cards_exist(db: AsyncSession, payment_card_ids: list[str]) -> None:
    """
    Raises:
        PaymentCardNotFoundError: Listing every id that is not enrolled.
    """
    result = await db.execute(select(PaymentCard.id).where(PaymentCard.id.in_(payment_card_ids)))
    known = set(result.scalars().all())
    missing = sorted(set(payment_card_ids) - known)
    if missing:
        raise PaymentCardNotFoundError(missing)


async def delete_cards(db: AsyncSession, payment_card_ids: list[str]) -> int:
    """
    Delete cards and their transaction footprints. Unknown ids are ignored.

    Returns:
        The number of cards actually deleted.
    """
    if not payment_card_ids:
        raise InvalidRequestError("INVALID_REQUEST", "At least one payment card id is required")

    # SQLite doesn't enforce ON DELETE CASCADE without a pragma, so remove children explicitly
    await db.execute(
        delete(TransactionFootprint).where(TransactionFootprint.payment_card_id.in_(payment_card_ids))
    )
    result = await db.execute(delete(PaymentCard).where(PaymentCard.id.in_(payment_card_ids)))
    return result.rowcount
