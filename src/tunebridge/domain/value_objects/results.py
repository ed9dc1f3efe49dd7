"""Explicit outcome type for sub-steps that may degrade instead of failing.

Hey future me - this replaces "wrap everything in try/except and log". Steps like account
lookup, hydration, token refresh, search and per-item writes return a StepResult, and the
CALLER decides per kind whether to continue, degrade or abort. Nothing gets silently eaten.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class OutcomeKind(str, Enum):
    """What happened in a sub-step."""

    OK = "ok"
    SKIPPED = "skipped"  # nothing to do (e.g. token not near expiry)
    NOT_FOUND = "not_found"  # call succeeded but yielded nothing
    FAILED = "failed"  # call raised; error holds the reason


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Outcome of one sub-step, optionally carrying a value or an error message."""

    kind: OutcomeKind
    value: T | None = None
    error: str | None = None
    step: str | None = None

    @classmethod
    def ok(cls, value: T | None = None, step: str | None = None) -> "StepResult[T]":
        return cls(OutcomeKind.OK, value=value, step=step)

    @classmethod
    def skipped(cls, step: str | None = None) -> "StepResult[T]":
        return cls(OutcomeKind.SKIPPED, step=step)

    @classmethod
    def not_found(cls, step: str | None = None) -> "StepResult[T]":
        return cls(OutcomeKind.NOT_FOUND, step=step)

    @classmethod
    def failed(cls, error: str, step: str | None = None) -> "StepResult[T]":
        return cls(OutcomeKind.FAILED, error=error, step=step)

    @property
    def is_ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def is_failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED
