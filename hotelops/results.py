"""Discriminated store results.

Store calls never raise for store-reported failures; they return ``Err``.
Callers check the variant explicitly (``RetryExecutor`` does so for every
mutating call).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import StoreError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    # Total size of the filtered set, when the select asked for a count.
    count: int | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: StoreError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
