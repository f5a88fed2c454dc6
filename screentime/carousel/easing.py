"""Easing curves for paged navigation."""

from __future__ import annotations


def ease_in_out_cubic(progress: float) -> float:
    """Cubic ease-in-out over [0, 1]; input is clamped."""
    t = min(max(progress, 0.0), 1.0)
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2
