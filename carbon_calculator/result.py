"""
Explicit success/failure values for façade calls.

``capture()`` awaits a façade call and turns a ServiceError into an Err,
so callers branch on the returned value instead of wrapping every step
in try/except:

    result = await capture(registrar.register_payment_card(card))
    if isinstance(result, Err):
        ...
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from carbon_calculator.exceptions import ServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: ServiceError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        """Re-raise the captured ServiceError."""
        raise self.error


Result = Union[Ok[T], Err]


async def capture(call: Awaitable[T]) -> Result[T]:
    """Await ``call``; only ServiceError is captured, anything else propagates."""
    try:
        return Ok(await call)
    except ServiceError as exc:
        return Err(exc)
