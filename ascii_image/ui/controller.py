#!/usr/bin/env python3
# ascii_image/ui/controller.py
"""
Re-run scheduling for the interactive surface.

Two timers feed one re-run routine:
- poll timer (~24 ms): advances the cursor spring, samples the tracked
  state and re-runs only when it changed since the last sample
- static timer (>= 50 ms, optional): draws a fresh RNG seed and re-runs
  unconditionally, producing the "static" noise animation
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Callable, Hashable, List, Optional

from ascii_image.ui.cursor import CursorTracker

logger = logging.getLogger(__name__)

__all__ = ["InteractionController", "MIN_STATIC_INTERVAL_S"]

MIN_STATIC_INTERVAL_S = 0.05
_SEED_MAX = 2147483646


class InteractionController:
    def __init__(
        self,
        rerun: Callable[[int], None],
        snapshot: Callable[[], Hashable],
        tracker: Optional[CursorTracker] = None,
        poll_interval: float = 0.024,
        static_interval: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.rerun = rerun
        self.snapshot = snapshot
        self.tracker = tracker
        self.poll_interval = max(0.001, float(poll_interval))
        if static_interval is not None and static_interval > 0:
            self.static_interval: Optional[float] = max(MIN_STATIC_INTERVAL_S, float(static_interval))
        else:
            self.static_interval = None
        self._rng = rng or random.Random()
        self.seed = self._rng.randint(1, _SEED_MAX)

        self._last: Any = None
        self._fire_lock = threading.Lock()
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []
        self._last_tick = time.monotonic()

    @property
    def static_active(self) -> bool:
        return self.static_interval is not None

    @property
    def running(self) -> bool:
        return bool(self._threads) and not self._stop.is_set()

    def _current(self) -> Any:
        pos = self.tracker.position() if self.tracker else None
        initialized = self.tracker.initialized if self.tracker else False
        return (pos, initialized, self.snapshot())

    def _fire(self) -> None:
        with self._fire_lock:
            try:
                self.rerun(self.seed)
            except Exception:
                logger.exception("re-run failed")

    # -------- triggers --------

    def poll_once(self, dt: Optional[float] = None) -> bool:
        """One poll tick. Returns True when the pipeline was re-run."""
        now = time.monotonic()
        if dt is None:
            dt = now - self._last_tick
        self._last_tick = now
        if self.tracker is not None:
            self.tracker.tick(dt)
        current = self._current()
        if current == self._last:
            return False
        self._last = current
        self._fire()
        return True

    def static_tick(self) -> int:
        """Re-seed and re-run. Returns the new seed."""
        self.seed = self._rng.randint(1, _SEED_MAX)
        self._fire()
        return self.seed

    # -------- lifecycle --------

    def start(self) -> None:
        """Start the timers. The first render runs on the poll thread."""
        if self._threads:
            return
        # Each start gets its own event, so a thread left over from an
        # earlier start can never resume.
        stop = threading.Event()
        self._stop = stop
        self._last_tick = time.monotonic()
        self._threads.append(threading.Thread(target=self._poll_loop, args=(stop,), name="ascii-poll", daemon=True))
        if self.static_interval is not None:
            self._threads.append(threading.Thread(target=self._static_loop, args=(stop,), name="ascii-static", daemon=True))
        for t in self._threads:
            t.start()

    def _poll_loop(self, stop: threading.Event) -> None:
        if not stop.is_set():
            self.poll_once(0.0)  # initial render
        while not stop.wait(self.poll_interval):
            self.poll_once()

    def _static_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.static_interval):
            self.static_tick()

    def set_static_interval(self, interval: Optional[float]) -> None:
        """Enable, change or disable (None/0) the static timer."""
        was_running = self.running
        if was_running:
            self.stop()
        if interval is not None and interval > 0:
            self.static_interval = max(MIN_STATIC_INTERVAL_S, float(interval))
        else:
            self.static_interval = None
        if was_running:
            self.start()

    def stop(self) -> None:
        self._stop.set()
        for t in self._threads:
            if t is not threading.current_thread():
                t.join(timeout=1.0)
        self._threads = []
        self._last = None
