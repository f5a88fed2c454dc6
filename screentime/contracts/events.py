"""
Event Contracts

Immutable records consumed by the observability layer.
Layers emit copies of these; nobody mutates them after creation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .base import Timestamp


class AuditEventType(Enum):
    """Explicit audit event types."""
    EXPANSION = "expansion"
    LAYOUT = "layout"
    PRESENCE = "presence"
    NAVIGATION = "navigation"
    FILTER = "filter"
    NO_OP = "no_op"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: Timestamp
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    sequence: int = 0  # Emission order across all layers


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: Timestamp
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
