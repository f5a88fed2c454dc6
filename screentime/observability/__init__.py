"""
Observability & Audit Layer

RESPONSIBILITY: Audit log and metrics for one visualization instance
ALLOWED INPUTS: Copies of events from every other layer
OUTPUTS: AuditLogEntry lists, MetricPoint series, audit report

WHAT THIS LAYER MUST NOT DO:
============================
- Modify visualization behavior
- Filter or interpret events (only record them)
- Make decisions based on logged data

No-ops the engine tolerates silently (toggle on an unknown node, an
unknown pane) are still recorded here, so nothing vanishes untraced.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple
import hashlib
import itertools

import numpy as np

from ..contracts.base import Timestamp
from ..contracts.events import AuditEventType, AuditLogEntry, MetricPoint


LAYERS: Tuple[str, ...] = ("expansion", "layout", "presence", "carousel", "filter", "api")

DEFAULT_MAX_ENTRIES = 10_000


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only audit collector for one layer.

    Keeps the newest `max_entries` entries; older ones are dropped.
    """

    def __init__(self, layer_name: str, max_entries: Optional[int] = DEFAULT_MAX_ENTRIES):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        entries = self._entries
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        return list(entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Append-only metric series.

    Each series keeps its newest `max_points` points.
    """

    def __init__(self, max_points: Optional[int] = DEFAULT_MAX_ENTRIES):
        self._max_points = max_points
        self._metrics: Dict[str, Deque[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        defaults = [
            MetricDefinition(
                name="layout_recompute_ms",
                metric_type=MetricType.TIMING,
                description="Wall time of one full layout + column recomputation",
            ),
            MetricDefinition(
                name="final_column_count",
                metric_type=MetricType.GAUGE,
                description="Number of grid columns after a recomputation",
            ),
            MetricDefinition(
                name="presence_cells_total",
                metric_type=MetricType.COUNTER,
                description="Presence strategy invocations",
            ),
            MetricDefinition(
                name="carousel_clamps_total",
                metric_type=MetricType.COUNTER,
                description="Offsets clamped after the content shrank",
            ),
            MetricDefinition(
                name="carousel_page_commands_total",
                metric_type=MetricType.COUNTER,
                description="Paged navigation commands",
                labels=("direction",),
            ),
        ]
        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = deque(maxlen=self._max_points)

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        if metric_name not in self._metrics:
            self._metrics[metric_name] = deque(maxlen=self._max_points)

        label_tuple = tuple(sorted(labels.items())) if labels else ()
        self._metrics[metric_name].append(MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=Timestamp.now(),
            labels=label_tuple,
        ))

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, []))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        points = self._metrics.get(metric_name, [])
        return points[-1] if points else None

    def definitions(self) -> Dict[str, MetricDefinition]:
        return dict(self._definitions)

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """Aggregate statistics for a metric."""
        points = self._metrics.get(metric_name, [])
        if not points:
            return {}

        values = np.array([p.value for p in points], dtype=float)
        return {
            'count': int(values.size),
            'sum': float(values.sum()),
            'min': float(values.min()),
            'max': float(values.max()),
            'avg': float(values.mean()),
        }


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for observability engine."""
    enable_metrics: bool = True
    enable_audit: bool = True
    max_entries: Optional[int] = DEFAULT_MAX_ENTRIES  # per layer and per metric; None = unbounded


class ObservabilityEngine:
    """
    Central observability for one visualization instance.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Provides read-only access to collected data
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, LogCollector] = {
            layer: LogCollector(layer, self._config.max_entries) for layer in LAYERS
        }
        self._metrics = (
            MetricsCollector(self._config.max_entries) if self._config.enable_metrics else None
        )
        self._sequence = itertools.count(1)

    def log_audit(
        self,
        layer: str,
        action: str,
        event_type: AuditEventType = AuditEventType.SYSTEM,
        entity_id: Optional[str] = None,
        **metadata: str
    ) -> Optional[AuditLogEntry]:
        """Record an audit entry for a layer."""
        if not self._config.enable_audit:
            return None

        sequence = next(self._sequence)
        entry_hash = hashlib.sha256(
            f"{layer}_{action}|{entity_id}|{sequence}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_hash}",
            event_type=event_type,
            timestamp=Timestamp.now(),
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=tuple(sorted((k, str(v)) for k, v in metadata.items())),
            sequence=sequence,
        )
        collector = self._collectors.get(layer)
        if collector is None:
            collector = self._collectors[layer] = LogCollector(layer, self._config.max_entries)
        collector.collect(entry)
        return entry

    def collect_metric(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        if self._metrics:
            self._metrics.record(metric_name, value, labels)

    def get_unified_log(self, layers: Optional[List[str]] = None) -> List[AuditLogEntry]:
        target_layers = layers or list(self._collectors.keys())
        entries: List[AuditLogEntry] = []
        for layer_name in target_layers:
            collector = self._collectors.get(layer_name)
            if collector:
                entries.extend(collector.get_entries())
        entries.sort(key=lambda e: e.sequence)
        return entries

    def get_layer_log(self, layer_name: str) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        if not collector:
            return []
        return collector.get_entries()

    def get_metrics(self) -> Optional[MetricsCollector]:
        return self._metrics

    def generate_audit_report(self) -> Dict:
        """Counts per layer and event type plus metric aggregates."""
        entries = self.get_unified_log()

        by_layer: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1

        metrics = {}
        if self._metrics:
            for name in self._metrics.definitions():
                aggregates = self._metrics.compute_aggregates(name)
                if aggregates:
                    metrics[name] = aggregates

        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_event_type': by_type,
            'metrics': metrics,
            'generated_at': Timestamp.now().to_iso(),
        }
