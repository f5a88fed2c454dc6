"""
Contract Types

Read-only, immutable types shared by every screen-time layer.
"""

from .base import (
    ErrorCode, Error, Timestamp,
    ScreenTimeError, TreeValidationError, LayoutInvariantError, ConfigError,
)
from .narrative import (
    NodeKind, EntityKind,
    OutlinePayload, ActPayload, ChapterPayload, ScenePayload, NodePayload,
    NarrativeNode, Entity, PresenceResult, PresenceCell,
)
from .layout import LayoutEntry, LayeredColumnLayout, FinalNodeList
from .events import AuditEventType, AuditLogEntry, MetricPoint

__all__ = [
    # Errors
    'ErrorCode', 'Error', 'Timestamp',
    'ScreenTimeError', 'TreeValidationError', 'LayoutInvariantError', 'ConfigError',
    # Narrative
    'NodeKind', 'EntityKind',
    'OutlinePayload', 'ActPayload', 'ChapterPayload', 'ScenePayload', 'NodePayload',
    'NarrativeNode', 'Entity', 'PresenceResult', 'PresenceCell',
    # Layout
    'LayoutEntry', 'LayeredColumnLayout', 'FinalNodeList',
    # Events
    'AuditEventType', 'AuditLogEntry', 'MetricPoint',
]
