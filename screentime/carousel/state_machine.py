"""
Scroll Carousel
===============

Keeps N scrollable panes (frozen labels, multi-level header, data
matrix) at one horizontal offset and animates paged navigation.

STATES:
=======
IDLE      -> IDLE       raw user scroll: applied and mirrored to every
                        pane in the same update
IDLE      -> ANIMATING  page command moving >= snap threshold
ANIMATING -> ANIMATING  page command: supersedes, restarting from the
                        current interpolated offset
ANIMATING -> IDLE       elapsed >= duration, user scroll, or a geometry
                        change that leaves the offset out of bounds

BOUNDS:
=======
max_offset = max(0, total_columns * column_width - viewport_width)
Every offset ever applied lies in [0, max_offset]. Nothing here raises
for out-of-range input; values are clamped. A NaN offset is ignored.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import asyncio
import math

from .clock import Clock, MonotonicClock
from .easing import ease_in_out_cubic


DEFAULT_PANES: Tuple[str, ...] = ("labels", "header", "content")

PaneListener = Callable[[Mapping[str, float]], None]


class CarouselPhase(Enum):
    IDLE = "idle"
    ANIMATING = "animating"


@dataclass(frozen=True)
class ScrollState:
    """Snapshot emitted at the rendering boundary."""
    offset: float
    max_offset: float
    column_width: float
    animating: bool
    viewport_width: float
    total_columns: int
    target_offset: Optional[float] = None

    @property
    def phase(self) -> CarouselPhase:
        return CarouselPhase.ANIMATING if self.animating else CarouselPhase.IDLE


@dataclass(frozen=True)
class ScrollAnimation:
    """One in-flight tween between two offsets."""
    start_offset: float
    target_offset: float
    started_at_ms: float
    duration_ms: float

    def progress(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(max((now_ms - self.started_at_ms) / self.duration_ms, 0.0), 1.0)

    def offset_at(self, now_ms: float) -> float:
        distance = self.target_offset - self.start_offset
        return self.start_offset + distance * ease_in_out_cubic(self.progress(now_ms))

    def finished(self, now_ms: float) -> bool:
        return now_ms - self.started_at_ms >= self.duration_ms


class ScrollCarousel:
    """
    Synchronized multi-pane horizontal scroller.

    Single-writer: every call must come from the same logical thread
    (the UI/event loop). Cancellation only happens by supersession,
    user scroll, or clamping.
    """

    def __init__(
        self,
        column_width: float = 128,
        viewport_width: float = 0,
        total_columns: int = 0,
        page_columns: int = 3,
        duration_ms: float = 1200,
        snap_threshold_px: float = 5,
        panes: Sequence[str] = DEFAULT_PANES,
        clock: Optional[Clock] = None
    ):
        if column_width <= 0:
            raise ValueError("column_width must be positive")
        self._column_width = float(column_width)
        self._viewport_width = max(0.0, float(viewport_width))
        self._total_columns = max(0, int(total_columns))
        self._page_columns = page_columns
        self._duration_ms = duration_ms
        self._snap_threshold = snap_threshold_px
        self._clock = clock or MonotonicClock()

        self._offset = 0.0
        self._animation: Optional[ScrollAnimation] = None
        self._pane_offsets: Dict[str, float] = {pane: 0.0 for pane in panes}
        self._listeners: List[PaneListener] = []

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    @property
    def max_offset(self) -> float:
        content = self._total_columns * self._column_width
        return max(0.0, content - self._viewport_width)

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def animating(self) -> bool:
        return self._animation is not None

    @property
    def phase(self) -> CarouselPhase:
        return CarouselPhase.ANIMATING if self.animating else CarouselPhase.IDLE

    @property
    def panes(self) -> Tuple[str, ...]:
        return tuple(self._pane_offsets)

    @property
    def state(self) -> ScrollState:
        return ScrollState(
            offset=self._offset,
            max_offset=self.max_offset,
            column_width=self._column_width,
            animating=self.animating,
            viewport_width=self._viewport_width,
            total_columns=self._total_columns,
            target_offset=self._animation.target_offset if self._animation else None,
        )

    def has_pane(self, pane: str) -> bool:
        return pane in self._pane_offsets

    def pane_offsets(self) -> Dict[str, float]:
        return dict(self._pane_offsets)

    def visible_columns(self) -> Tuple[int, int]:
        """Half-open range of column indexes intersecting the viewport."""
        if self._total_columns == 0:
            return (0, 0)
        first = min(int(self._offset // self._column_width), self._total_columns)
        last = math.ceil((self._offset + self._viewport_width) / self._column_width)
        return (first, min(max(last, first), self._total_columns))

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _clamp(self, offset: float) -> float:
        """Clamp into [0, max_offset]. NaN keeps the current offset; +/-inf hit the bounds."""
        offset = float(offset)
        if math.isnan(offset):
            return self._offset
        return min(max(offset, 0.0), self.max_offset)

    def _now(self, now_ms: Optional[float]) -> float:
        return self._clock.now_ms() if now_ms is None else now_ms

    def _apply(self, offset: float):
        """Set the shared offset and mirror it onto every pane."""
        self._offset = offset
        for pane in self._pane_offsets:
            self._pane_offsets[pane] = offset
        snapshot = dict(self._pane_offsets)
        for listener in list(self._listeners):
            listener(snapshot)

    def _advance(self, now_ms: float) -> float:
        """Move an in-flight animation to `now_ms`; returns the offset."""
        animation = self._animation
        if animation is None:
            return self._offset
        if animation.finished(now_ms):
            self._animation = None
            self._apply(animation.target_offset)
        else:
            self._apply(animation.offset_at(now_ms))
        return self._offset

    def _navigate(self, target: float, now_ms: float):
        current = self._offset
        if abs(target - current) < self._snap_threshold:
            self._animation = None
            self._apply(target)
            return
        self._animation = ScrollAnimation(
            start_offset=current,
            target_offset=target,
            started_at_ms=now_ms,
            duration_ms=self._duration_ms,
        )

    # =========================================================================
    # INPUT
    # =========================================================================

    def user_scroll(self, pane: str, offset: float) -> ScrollState:
        """
        Raw scroll/touch on one pane.

        Applied immediately and mirrored to all panes. Cancels any
        running animation. Unknown panes are ignored.
        """
        if pane not in self._pane_offsets:
            return self.state
        self._animation = None
        self._apply(self._clamp(offset))
        return self.state

    def scroll_left(self, now_ms: Optional[float] = None) -> ScrollState:
        return self._page(-1, now_ms)

    def scroll_right(self, now_ms: Optional[float] = None) -> ScrollState:
        return self._page(1, now_ms)

    def _page(self, direction: int, now_ms: Optional[float]) -> ScrollState:
        now = self._now(now_ms)
        pending = self._animation.target_offset if self._animation else None
        self._advance(now)
        base = pending if pending is not None and self._animation is not None else self._offset
        step = direction * self._page_columns * self._column_width
        self._navigate(self._clamp(base + step), now)
        return self.state

    def scroll_to(self, offset: float, now_ms: Optional[float] = None) -> ScrollState:
        """Animated move to an arbitrary (clamped) offset."""
        now = self._now(now_ms)
        self._advance(now)
        self._navigate(self._clamp(offset), now)
        return self.state

    def set_geometry(
        self,
        total_columns: Optional[int] = None,
        viewport_width: Optional[float] = None,
        now_ms: Optional[float] = None
    ) -> bool:
        """
        Update column count and/or viewport width.

        Returns True when the offset had to be clamped (the carousel is
        then Idle at the new bound).
        """
        now = self._now(now_ms)
        self._advance(now)
        if total_columns is not None:
            self._total_columns = max(0, int(total_columns))
        if viewport_width is not None:
            self._viewport_width = max(0.0, float(viewport_width))

        bound = self.max_offset
        if self._offset > bound:
            self._animation = None
            self._apply(bound)
            return True

        if self._animation is not None and self._animation.target_offset > bound:
            self._navigate(bound, now)
        return False

    # =========================================================================
    # FRAMES
    # =========================================================================

    def tick(self, now_ms: Optional[float] = None) -> ScrollState:
        """Advance one frame."""
        self._advance(self._now(now_ms))
        return self.state

    def frames(self, start_ms: float, step_ms: float) -> Iterator[ScrollState]:
        """Deterministic frame sequence until the carousel is Idle."""
        if step_ms <= 0:
            raise ValueError("step_ms must be positive")
        now = start_ms
        while self.animating:
            now += step_ms
            yield self.tick(now)

    async def animate(self, frame_interval: float = 1 / 60) -> ScrollState:
        """
        Drive the running animation with the carousel's clock.

        Yields to the event loop between frames; returns once Idle.
        """
        while self.animating:
            await asyncio.sleep(frame_interval)
            self.tick()
        return self.state

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def subscribe(self, listener: PaneListener) -> Callable[[], None]:
        """Register for pane offset updates. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
