"""
Base class for wire schemas.

The remote API speaks camelCase JSON; Python code uses snake_case
attributes. Models accept either form on input and serialize with aliases.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict:
        """JSON-compatible dict using the remote API's field names."""
        return self.model_dump(mode="json", by_alias=True)
