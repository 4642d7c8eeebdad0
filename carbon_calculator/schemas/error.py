"""
Pydantic schemas for the remote API's error envelope.

Every non-2xx response carries the same body:

    {"Errors": {"Error": [{"Source": "...", "ReasonCode": "...",
                           "Description": "...", "Recoverable": false,
                           "Details": null}]}}
"""

from pydantic import BaseModel, ConfigDict, Field


class ServiceErrorEntry(BaseModel):
    """A single structured error reported by the remote service."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str = Field(alias="Source")
    reason_code: str = Field(alias="ReasonCode")
    description: str = Field(alias="Description")
    recoverable: bool = Field(False, alias="Recoverable")
    details: str | None = Field(None, alias="Details")


class ErrorList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: list[ServiceErrorEntry] = Field(alias="Error")


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    errors: ErrorList = Field(alias="Errors")

    @classmethod
    def of(cls, entries: list[ServiceErrorEntry]) -> "ErrorResponse":
        return cls(errors=ErrorList(error=entries))

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
