"""Three-state result of a remote read operation.

Screens render a distinct state for each value of ``QueryState``:

* ``NOT_REQUESTED``: the caller skipped the query on purpose, typically because
  a required argument such as the active home id is not known yet.
* ``PENDING``: the query was issued and no data has arrived.
* ``RESOLVED``: data is present (possibly an empty list).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class QueryState(str, Enum):
    NOT_REQUESTED = "not_requested"
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    state: QueryState = QueryState.PENDING
    value: Optional[T] = None

    @classmethod
    def skipped(cls) -> "QueryResult[T]":
        return cls(state=QueryState.NOT_REQUESTED)

    @classmethod
    def pending(cls) -> "QueryResult[T]":
        return cls(state=QueryState.PENDING)

    @classmethod
    def resolved(cls, value: T) -> "QueryResult[T]":
        return cls(state=QueryState.RESOLVED, value=value)

    @property
    def is_skipped(self) -> bool:
        return self.state == QueryState.NOT_REQUESTED

    @property
    def is_loading(self) -> bool:
        return self.state == QueryState.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.state == QueryState.RESOLVED

    def data_or(self, default: T) -> T:
        if self.is_resolved and self.value is not None:
            return self.value
        return default

    def map(self, fn: Callable[[T], U]) -> "QueryResult[U]":
        if not self.is_resolved or self.value is None:
            return QueryResult(state=self.state, value=None)
        return QueryResult.resolved(fn(self.value))


__all__ = ["QueryResult", "QueryState"]
