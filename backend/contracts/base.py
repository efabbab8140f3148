"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- Errors exist both as exceptions (raised at the offending call)
  and as data (stored in audit logs and tagged results)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every error state is enumerated.
    """
    # Configuration errors (fatal at startup)
    INVALID_BOUNDS = auto()
    INVALID_ERA_RULE = auto()
    INVALID_CONFIG_VALUE = auto()

    # Range errors (recoverable, call rejected)
    YEAR_OUT_OF_RANGE = auto()
    SPEED_OUT_OF_RANGE = auto()
    INVALID_ELAPSED_TIME = auto()

    # Validation errors (recoverable, dataset unchanged)
    UNSUPPORTED_FORMAT = auto()
    MALFORMED_PAYLOAD = auto()
    SCHEMA_VIOLATION = auto()
    DUPLICATE_YEAR = auto()
    EMPTY_DATASET = auto()

    # Lookup errors (recoverable, caller falls back)
    RECORD_NOT_FOUND = auto()
    DATASET_NOT_LOADED = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str) -> Error:
        return Error(code=code, message=message, timestamp=utc_now())


# =============================================================================
# EXCEPTION TAXONOMY
# =============================================================================

class DashboardError(Exception):
    """Base class for every error raised by the dashboard engine."""

    default_code: ErrorCode = ErrorCode.INVALID_CONFIG_VALUE

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_error(self) -> Error:
        """Convert to the data representation used by the audit log."""
        return Error.create(self.code, self.message)


class ConfigurationError(DashboardError):
    """
    Invalid generator bounds, era rules or configuration values.

    FATAL: surfaced at startup, never during playback.
    """
    default_code = ErrorCode.INVALID_BOUNDS


class RangeError(DashboardError, ValueError):
    """
    Out-of-bounds year, speed or elapsed-time input.

    RECOVERABLE: the specific call is rejected and state is left unchanged.
    """
    default_code = ErrorCode.YEAR_OUT_OF_RANGE


class ValidationError(DashboardError):
    """
    Malformed import.

    RECOVERABLE: the active dataset is left unchanged.
    Carries every reason found, not only the first.
    """
    default_code = ErrorCode.SCHEMA_VIOLATION

    def __init__(
        self,
        message: str,
        reasons: Tuple[str, ...] = (),
        code: Optional[ErrorCode] = None
    ):
        super().__init__(message, code)
        self.reasons = tuple(reasons) or (message,)


class RecordNotFound(DashboardError, LookupError):
    """
    Lookup miss for a year outside the active series (or inside a gap).

    RECOVERABLE: callers MUST supply a fallback display value.
    """
    default_code = ErrorCode.RECORD_NOT_FOUND

    def __init__(self, year: object, message: Optional[str] = None, code: Optional[ErrorCode] = None):
        super().__init__(message or f"No record for year {year}", code)
        self.year = year


# =============================================================================
# TEMPORAL HELPERS
# =============================================================================

def utc_now() -> datetime:
    """All timestamps are UTC, never local time."""
    return datetime.now(timezone.utc)
