"""
Carousel Layer

Synchronized multi-pane scrolling with animated paging.
"""

from .clock import Clock, MonotonicClock, ManualClock
from .easing import ease_in_out_cubic
from .state_machine import (
    DEFAULT_PANES, CarouselPhase, ScrollState, ScrollAnimation, ScrollCarousel,
)

__all__ = [
    'Clock', 'MonotonicClock', 'ManualClock', 'ease_in_out_cubic',
    'DEFAULT_PANES', 'CarouselPhase', 'ScrollState', 'ScrollAnimation', 'ScrollCarousel',
]
