"""Pydantic schemas for sandbox-only endpoints."""

from datetime import date

from pydantic import Field

from carbon_calculator.schemas.base import WireModel


class TransactionCreateRequest(WireModel):
    """Request body for POST /sandbox/payment-cards/{id}/transactions."""
    transaction_date: date
    mcc: str = Field(pattern=r"^\d{4}$")
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    currency_code: str = Field(pattern=r"^[A-Z]{3}$")
