"""
Sandbox domain exceptions and FastAPI exception handlers.

Services raise these without knowing about HTTP; the handlers registered
here turn them into the remote API's error envelope:

    {"Errors": {"Error": [{"Source": "CARBON_CALCULATOR", "ReasonCode": ...}]}}

Exception hierarchy:
    SandboxError (base)
    ├── InvalidRequestError         : 400, malformed input
    ├── PaymentCardNotFoundError    : 404, unknown paymentCardId
    ├── DuplicatePaymentCardError   : 409, FPAN already enrolled
    └── UnauthorizedRequestError    : 401, bad or missing request token
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from carbon_calculator.schemas.error import ErrorResponse, ServiceErrorEntry

SANDBOX_SOURCE = "CARBON_CALCULATOR"


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class SandboxError(Exception):
    """Base exception for sandbox domain errors; carries one or more entries."""

    status_code = 400

    def __init__(self, reason_code: str, description: str, details: list[str] | None = None):
        self.reason_code = reason_code
        self.description = description
        self.details = details or []
        super().__init__(description)

    def entries(self) -> list[ServiceErrorEntry]:
        if not self.details:
            return [self._entry(self.description, None)]
        return [self._entry(self.description, detail) for detail in self.details]

    def _entry(self, description: str, detail: str | None) -> ServiceErrorEntry:
        return ServiceErrorEntry(
            source=SANDBOX_SOURCE,
            reason_code=self.reason_code,
            description=description,
            recoverable=False,
            details=detail,
        )


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class InvalidRequestError(SandboxError):
    status_code = 400


class PaymentCardNotFoundError(SandboxError):
    """Raised when one or more payment card ids are not enrolled."""

    status_code = 404

    def __init__(self, payment_card_ids: list[str]):
        self.payment_card_ids = payment_card_ids
        super().__init__(
            "PAYMENT_CARD_NOT_FOUND",
            "Payment card not found",
            [f"paymentCardId {card_id}" for card_id in payment_card_ids],
        )


class DuplicatePaymentCardError(SandboxError):
    status_code = 409

    def __init__(self, last4fpan: str):
        super().__init__(
            "DUPLICATE_PAYMENT_CARD",
            f"Payment card ending in {last4fpan} is already enrolled",
        )


class UnauthorizedRequestError(SandboxError):
    status_code = 401

    def __init__(self, detail: str):
        super().__init__("UNAUTHORIZED", "Request could not be authenticated", [detail])


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """Map sandbox errors and request validation failures to the error envelope."""

    @app.exception_handler(SandboxError)
    async def sandbox_error_handler(request: Request, exc: SandboxError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse.of(exc.entries()).to_wire(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        entries = [
            ServiceErrorEntry(
                source=SANDBOX_SOURCE,
                reason_code="INVALID_REQUEST",
                description=error["msg"],
                details=".".join(str(part) for part in error["loc"]),
            )
            for error in exc.errors()
        ]
        return JSONResponse(status_code=400, content=ErrorResponse.of(entries).to_wire())
