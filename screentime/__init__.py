"""
Screen-Time Visualization Engine
================================

Expandable narrative-tree column layout, entity presence matrix and a
synchronized scroll carousel for story-planning tools.

Usage:
    from screentime import ScreenTimeVisualization, MembershipPresenceStrategy
    from screentime.sample import sample_tree, sample_registry

    tree, registry = sample_tree(), sample_registry()
    viz = ScreenTimeVisualization(
        tree, registry, MembershipPresenceStrategy(tree, registry)
    )
    viz.toggle("act-1")
    view = viz.view()
"""

from .contracts import (
    ErrorCode, Error, ScreenTimeError, TreeValidationError, LayoutInvariantError, ConfigError,
    NodeKind, EntityKind, NarrativeNode, Entity, PresenceResult, PresenceCell,
    LayoutEntry, LayeredColumnLayout, FinalNodeList,
)
from .tree import TreeModel, load_tree, load_tree_file
from .expansion import ExpansionState
from .layout import ColumnLayoutEngine, FinalColumnResolver, check_alignment
from .presence import (
    PresenceStrategy, PresenceMatrix, PresenceGrid,
    MembershipPresenceStrategy, ClampedPresenceStrategy,
)
from .entities import EntityRegistry, EntityFilter
from .carousel import ScrollCarousel, ScrollState, ManualClock, MonotonicClock
from .config import VisualizationConfig
from .views import ScreenTimeView, header_label
from .engine import ScreenTimeVisualization

__version__ = "0.1.0"

__all__ = [
    'ErrorCode', 'Error', 'ScreenTimeError', 'TreeValidationError',
    'LayoutInvariantError', 'ConfigError',
    'NodeKind', 'EntityKind', 'NarrativeNode', 'Entity', 'PresenceResult', 'PresenceCell',
    'LayoutEntry', 'LayeredColumnLayout', 'FinalNodeList',
    'TreeModel', 'load_tree', 'load_tree_file',
    'ExpansionState',
    'ColumnLayoutEngine', 'FinalColumnResolver', 'check_alignment',
    'PresenceStrategy', 'PresenceMatrix', 'PresenceGrid',
    'MembershipPresenceStrategy', 'ClampedPresenceStrategy',
    'EntityRegistry', 'EntityFilter',
    'ScrollCarousel', 'ScrollState', 'ManualClock', 'MonotonicClock',
    'VisualizationConfig',
    'ScreenTimeView', 'header_label',
    'ScreenTimeVisualization',
]
