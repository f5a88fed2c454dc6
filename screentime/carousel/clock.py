"""
Frame Clocks
============

Injectable millisecond clocks for the scroll carousel.

MODES:
======
1. MonotonicClock: real time, for hosts driving frames live
2. ManualClock: time moves only when told to (hosts with their own
   frame timestamps, and tests)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import time


class Clock(ABC):
    """Source of frame timestamps in milliseconds."""

    @abstractmethod
    def now_ms(self) -> float:
        ...


class MonotonicClock(Clock):
    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


@dataclass
class ManualClock(Clock):
    """Clock that never reads system time."""
    _now: float = 0.0

    def now_ms(self) -> float:
        return self._now

    def advance(self, milliseconds: float) -> float:
        if milliseconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += milliseconds
        return self._now

    def set(self, milliseconds: float) -> float:
        if milliseconds < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = milliseconds
        return self._now
