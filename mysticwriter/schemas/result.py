"""
Explicit success/failure values for calls that cross the process boundary.

Backend calls never raise for transport or payload problems; they return a
``Result`` and the caller decides which default to fall back to::

    result = await backend.select("writing_analytics", filters={"user_id": uid})
    if not result.ok:
        logger.warning("ledger_fetch_failed | error=%s", result.error)
        return AnalyticsSummary.zero()
    rows = result.value
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Any) -> "Result[T]":
        return cls(ok=False, error=str(error))
