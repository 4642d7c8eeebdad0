"""
Sandbox ORM models.

All models are imported here so Base.metadata knows every table before
create_all() runs.
"""

from carbon_calculator.sandbox.models.payment_card import PaymentCard  # noqa: F401
from carbon_calculator.sandbox.models.transaction_footprint import TransactionFootprint  # noqa: F401
