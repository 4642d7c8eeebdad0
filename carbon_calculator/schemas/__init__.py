"""Wire schemas shared by the API client and the sandbox."""

from carbon_calculator.schemas.error import ErrorResponse, ServiceErrorEntry  # noqa: F401
from carbon_calculator.schemas.footprint import (  # noqa: F401
    AggregateCarbonScore,
    AggregateSearchCriteria,
    AggregateTransactionFootprint,
    AggregateType,
    HistoricalTransactionFootprints,
    TransactionFootprint,
)
from carbon_calculator.schemas.payment_card import (  # noqa: F401
    PaymentCard,
    PaymentCardEnrolment,
    PaymentCardReference,
)
