"""
Base Contracts and Shared Types

Foundational types used across every layer of the toolkit.
Everything here is pure data: no behavior beyond small helpers,
no side effects, no imports from other trilens modules.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Expected failures are modelled as data (Error / Result), not exceptions
- Timestamps are always UTC and travel as ISO-8601 strings
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Generic, Optional, Tuple, TypeVar


T = TypeVar("T")


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every condition a caller is expected to check for is enumerated here.
    """
    # Classification / synthesis
    MISSING_PERSPECTIVE = auto()
    INVALID_EVENT = auto()

    # Ledger
    UNKNOWN_ENTITY = auto()

    # Persistence integration
    MALFORMED_PERSISTED_STATE = auto()
    STORE_UNAVAILABLE = auto()
    STATE_NOT_FOUND = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and inspected.
    """
    code: ErrorCode
    message: str
    timestamp: str = field(default_factory=lambda: utc_now_iso())
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[T] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the value, raising if this is a failure."""
        if self.error is not None:
            raise ValueError(f"{self.error.code.name}: {self.error.message}")
        return self.value

    @staticmethod
    def success(value: T) -> Result[T]:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result[T]:
        return Result(value=None, error=error)


# =============================================================================
# TEMPORAL HELPERS
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the wire format for timestamps)."""
    return utc_now().isoformat()


# =============================================================================
# NUMERIC HELPERS
# =============================================================================

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)
