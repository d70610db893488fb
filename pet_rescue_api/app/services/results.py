"""
Result object returned by service writes.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..core.db import WriteStatus

T = TypeVar("T")


@dataclass
class WriteResult(Generic[T]):
    """Outcome of a create or edit.

    ``record`` holds the stored record on ``OK``; ``reason`` carries the
    human readable message on ``REJECTED``.
    """

    status: WriteStatus
    record: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == WriteStatus.OK

    @classmethod
    def success(cls, record: T) -> "WriteResult[T]":
        return cls(WriteStatus.OK, record=record)

    @classmethod
    def not_found(cls) -> "WriteResult[T]":
        return cls(WriteStatus.NOT_FOUND)

    @classmethod
    def rejected(cls, reason: str) -> "WriteResult[T]":
        return cls(WriteStatus.REJECTED, reason=reason)
