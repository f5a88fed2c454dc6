"""
Base Contracts and Shared Types

Foundational types shared by every layer of the screen-time engine.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- Errors are data first; exceptions only wrap them where a
  construction or invariant contract is broken
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every failure state of the engine is enumerated here.
    """
    # Tree construction errors
    DUPLICATE_NODE_ID = auto()
    DUPLICATE_CHILD_ID = auto()
    MULTIPLE_PARENTS = auto()
    CYCLE_DETECTED = auto()
    PAYLOAD_KIND_MISMATCH = auto()
    MALFORMED_RECORD = auto()

    # Layout errors
    LAYOUT_MISALIGNED = auto()

    # Lookup errors (recorded, never raised)
    UNKNOWN_NODE = auto()
    UNKNOWN_ENTITY = auto()
    UNKNOWN_PANE = auto()

    # Configuration errors
    INVALID_CONFIG = auto()


@dataclass(frozen=True)
class Timestamp:
    """
    Immutable timestamp with explicit semantics.
    All timestamps are UTC, never local time.
    """
    value: datetime

    def __post_init__(self):
        if self.value.tzinfo is None:
            object.__setattr__(self, 'value', self.value.replace(tzinfo=timezone.utc))

    @staticmethod
    def now() -> Timestamp:
        return Timestamp(value=datetime.now(timezone.utc))

    def to_iso(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: Timestamp = field(default_factory=Timestamp.now)
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


# =============================================================================
# EXCEPTIONS (thin wrappers around Error records)
# =============================================================================

class ScreenTimeError(Exception):
    """Base exception carrying an explicit Error record."""

    def __init__(self, error: Error):
        super().__init__(f"{error.code.name}: {error.message}")
        self.error = error

    @property
    def code(self) -> ErrorCode:
        return self.error.code


class TreeValidationError(ScreenTimeError):
    """Raised when a narrative tree violates a construction precondition."""


class LayoutInvariantError(ScreenTimeError):
    """Raised when header layout and final columns disagree."""


class ConfigError(ScreenTimeError):
    """Raised for invalid configuration values."""
