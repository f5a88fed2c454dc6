"""
Presence Layer

Entity x final-node cells from an injected strategy.
"""

from .matrix import (
    PresenceStrategy, PresenceFunction, PresenceMatrix, PresenceGrid, PresenceRow,
)
from .strategies import (
    ABSENT, PresenceWeights, MembershipPresenceStrategy, ClampedPresenceStrategy,
    classify_arc_tier,
)

__all__ = [
    'PresenceStrategy', 'PresenceFunction', 'PresenceMatrix', 'PresenceGrid', 'PresenceRow',
    'ABSENT', 'PresenceWeights', 'MembershipPresenceStrategy', 'ClampedPresenceStrategy',
    'classify_arc_tier',
]
