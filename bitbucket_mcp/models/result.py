"""Per-item outcome of a batch of independent sub-fetches."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failed:
    """Sub-fetch failed; description is embedded in the affected item."""

    description: str


ItemResult = Ok[T] | Failed
