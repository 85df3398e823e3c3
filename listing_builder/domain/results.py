"""
Outcome of a single pipeline step.

Steps that can either produce a value, skip their input, or stop the build
return an ``Outcome`` and let the caller decide what to do with it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, Optional, TypeVar

from listing_builder.domain.errors import ListingBuildError

T = TypeVar("T")

OutcomeStatus = Literal["success", "skip", "fatal"]


@dataclass(frozen=True)
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: Optional[T] = None
    reason: Optional[str] = None
    error: Optional[ListingBuildError] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(status="success", value=value)

    @classmethod
    def skip(cls, reason: str) -> "Outcome[T]":
        return cls(status="skip", reason=reason)

    @classmethod
    def fatal(cls, error: ListingBuildError) -> "Outcome[T]":
        return cls(status="fatal", reason=str(error), error=error)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_skip(self) -> bool:
        return self.status == "skip"

    @property
    def is_fatal(self) -> bool:
        return self.status == "fatal"

    def unwrap(self) -> Optional[T]:
        """
        Return the value of a successful outcome, ``None`` for a skip,
        and raise the carried error for a fatal one.
        """
        if self.is_fatal:
            raise self.error
        return self.value
