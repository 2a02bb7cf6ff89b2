"""Discriminated success/failure values returned by engine commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from .enums import FailureReason

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Command accepted; ``value`` carries what was created or computed."""

    value: T
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failure:
    """Command rejected without touching engine state."""

    reason: FailureReason
    detail: str
    ok: Literal[False] = False


def fail(reason: FailureReason, detail: str) -> Failure:
    return Failure(reason=reason, detail=detail)
