"""
Client-side exception type.

Every façade operation reports failure the same way: a ServiceError
carrying a message and the structured error entries behind it. The
entries come from three places:

    - the remote API's error envelope (business-rule or validation rejection)
    - the transport (timeouts, refused connections), reason TRANSPORT_ERROR
    - local shape checks before a call is made, source "carbon_calculator"

There is no retryable/fatal split: callers treat every ServiceError as fatal.
"""

from carbon_calculator.schemas.error import ServiceErrorEntry

LOCAL_SOURCE = "carbon_calculator"


class ServiceError(Exception):
    """
    Raised when a call to the Carbon Calculator API fails.

    Attributes:
        message: Human-readable summary.
        service_errors: Structured error entries; never empty.
        status_code: HTTP status of the failed response, if there was one.
    """

    def __init__(
        self,
        message: str,
        service_errors: list[ServiceErrorEntry] | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.service_errors = list(service_errors or []) or [
            ServiceErrorEntry(
                source=LOCAL_SOURCE,
                reason_code="UNKNOWN_ERROR",
                description=message,
            )
        ]
        super().__init__(message)

    @classmethod
    def local(cls, reason_code: str, description: str) -> "ServiceError":
        """Build an error for a request rejected before it reached the remote API."""
        return cls(
            description,
            [ServiceErrorEntry(source=LOCAL_SOURCE, reason_code=reason_code, description=description)],
        )

    @property
    def reason_codes(self) -> list[str]:
        return [entry.reason_code for entry in self.service_errors]

    def __str__(self) -> str:
        return f"{self.message} {self.reason_codes}"
