"""
Visualization Configuration

Pixel geometry and timing contract of one screen-time visualization.
Values can be overridden from the environment (SCREENTIME_* variables).
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Mapping, Optional, Tuple
import os

from .carousel import DEFAULT_PANES
from .contracts.base import ConfigError, Error, ErrorCode
from .observability import ObservabilityConfig


ENV_PREFIX = "SCREENTIME_"


@dataclass(frozen=True)
class VisualizationConfig:
    """Geometry and carousel timing."""
    column_width: float = 128
    page_columns: int = 3
    animation_duration_ms: float = 1200
    snap_threshold_px: float = 5
    viewport_width: float = 0
    label_column_width: float = 320
    header_row_height: float = 64
    panes: Tuple[str, ...] = DEFAULT_PANES
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def __post_init__(self):
        if self.column_width <= 0:
            raise _invalid("column_width", self.column_width, "must be positive")
        if self.page_columns < 1:
            raise _invalid("page_columns", self.page_columns, "must be at least 1")
        if self.animation_duration_ms < 0:
            raise _invalid("animation_duration_ms", self.animation_duration_ms, "must not be negative")
        if self.snap_threshold_px < 0:
            raise _invalid("snap_threshold_px", self.snap_threshold_px, "must not be negative")
        if self.viewport_width < 0:
            raise _invalid("viewport_width", self.viewport_width, "must not be negative")
        if not self.panes or len(set(self.panes)) != len(self.panes):
            raise _invalid("panes", self.panes, "must be non-empty and unique")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> VisualizationConfig:
        """
        Build a config from SCREENTIME_<FIELD> variables.

        SCREENTIME_PANES is a comma separated list.
        SCREENTIME_METRICS=0 disables metric collection.
        SCREENTIME_AUDIT_MAX_ENTRIES caps each audit layer and metric series
        (0 keeps everything).
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            if f.name in ("panes", "observability"):
                continue
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            caster = int if f.name == "page_columns" else float
            try:
                values[f.name] = caster(raw)
            except ValueError:
                raise _invalid(f.name, raw, "is not a number") from None

        panes = environ.get(ENV_PREFIX + "PANES")
        if panes:
            values["panes"] = tuple(p.strip() for p in panes.split(",") if p.strip())

        observability = {}
        metrics = environ.get(ENV_PREFIX + "METRICS")
        if metrics is not None:
            observability["enable_metrics"] = metrics.strip().lower() not in ("0", "false", "no", "off")

        max_entries = environ.get(ENV_PREFIX + "AUDIT_MAX_ENTRIES")
        if max_entries is not None:
            try:
                limit = int(max_entries)
            except ValueError:
                raise _invalid("audit_max_entries", max_entries, "is not a number") from None
            if limit < 0:
                raise _invalid("audit_max_entries", max_entries, "must not be negative")
            observability["max_entries"] = limit or None

        if observability:
            values["observability"] = ObservabilityConfig(**observability)

        return cls(**values)


def _invalid(name: str, value: object, reason: str) -> ConfigError:
    return ConfigError(Error(
        code=ErrorCode.INVALID_CONFIG,
        message=f"{name} {reason}",
        context=((name, str(value)),),
    ))
