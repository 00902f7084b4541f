#!/usr/bin/env python3
# ascii_image/ui/cursor.py
"""Pointer tracking with optional spring smoothing."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

__all__ = ["map_range", "Spring", "CursorTracker"]

DAMPING = 100.0
MAX_STEP_S = 0.004
REST_DELTA = 1e-4


def map_range(value: float, from_low: float, from_high: float, to_low: float, to_high: float) -> float:
    if from_low == from_high:
        return to_low
    pct = (value - from_low) / (from_high - from_low)
    return to_low + pct * (to_high - to_low)


@dataclass
class Spring:
    """
    Damped harmonic oscillator pulled towards `target`.
    Semi-implicit Euler; long frames are split into sub-steps.
    """
    stiffness: float
    damping: float = DAMPING
    mass: float = 1.0
    value: float = 0.0
    velocity: float = 0.0
    target: float = 0.0

    def set_target(self, target: float) -> None:
        self.target = target

    def jump(self, value: float) -> None:
        self.value = value
        self.target = value
        self.velocity = 0.0

    @property
    def settled(self) -> bool:
        return abs(self.velocity) < REST_DELTA and abs(self.target - self.value) < REST_DELTA

    def step(self, dt: float) -> float:
        if dt <= 0 or self.settled:
            if self.settled:
                self.value = self.target
                self.velocity = 0.0
            return self.value
        remaining = dt
        while remaining > 0:
            h = min(MAX_STEP_S, remaining)
            accel = (-self.stiffness * (self.value - self.target) - self.damping * self.velocity) / self.mass
            self.velocity += accel * h
            self.value += self.velocity * h
            remaining -= h
        return self.value


@dataclass
class CursorTracker:
    """
    Pointer position as fractions (0..1) of the surface.

    smoothing 0 follows the pointer exactly; 1..100 runs it through a spring
    whose stiffness drops from 2000 to 50. The first pointer event jumps
    straight to the pointer instead of sweeping in from the origin.
    """
    smoothing: float = 0.0
    initialized: bool = False
    _raw: Tuple[float, float] = field(default=(0.0, 0.0), init=False)
    _scroll: Optional[Tuple[float, float]] = field(default=None, init=False)
    _springs: Tuple[Spring, Spring] = field(init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        k = map_range(self.smoothing, 0, 100, 2000, 50)
        self._springs = (Spring(k), Spring(k))

    @property
    def smoothed(self) -> bool:
        return self.smoothing != 0

    def on_pointer(self, x_px: float, y_px: float, surface_w: float, surface_h: float) -> None:
        fx = 0.0 if surface_w == 0 else x_px / surface_w
        fy = 0.0 if surface_h == 0 else y_px / surface_h
        with self._lock:
            self._raw = (fx, fy)
            sx, sy = self._springs
            sx.set_target(fx)
            sy.set_target(fy)
            if not self.initialized:
                sx.jump(fx)
                sy.jump(fy)
                self.initialized = True

    def on_scroll(self, scroll_x: float, scroll_y: float, surface_w: float, surface_h: float) -> None:
        """
        Fold a scroll offset change into the target so the cursor stays put
        relative to the content. Offsets are absolute; deltas are taken
        against the previous call.
        """
        with self._lock:
            prev = self._scroll or (scroll_x, scroll_y)
            self._scroll = (scroll_x, scroll_y)
            if not self.initialized:
                return
            dx = 0.0 if surface_w == 0 else (scroll_x - prev[0]) / surface_w
            dy = 0.0 if surface_h == 0 else (scroll_y - prev[1]) / surface_h
            fx, fy = self._raw[0] + dx, self._raw[1] + dy
            self._raw = (fx, fy)
            self._springs[0].set_target(fx)
            self._springs[1].set_target(fy)

    def tick(self, dt: float) -> None:
        with self._lock:
            if self.smoothed:
                self._springs[0].step(dt)
                self._springs[1].step(dt)

    def position(self) -> Optional[Tuple[float, float]]:
        """Effective cursor position, or None before the first pointer event."""
        with self._lock:
            if not self.initialized:
                return None
            if self.smoothed:
                return self._springs[0].value, self._springs[1].value
            return self._raw
