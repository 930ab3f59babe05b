"""
Result types distinguishing live store data from fallback data.

The data store works with these internally and unwraps them at its public
boundary, reporting the fallback reason out-of-band.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Live(Generic[T]):
    """Data served by the backing store."""
    data: T

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    """Locally synthesized data, with the reason the store was not used."""
    data: T
    reason: str

    @property
    def is_fallback(self) -> bool:
        return True


StoreResult = Union[Live[T], Fallback[T]]
