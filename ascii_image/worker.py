#!/usr/bin/env python3
# ascii_image/worker.py
"""
Off-thread transform stage.

The caller samples the image itself and hands the buffer over with
submit(). Every request gets a monotonically increasing id; only the
result for the most recently issued id is ever returned by poll(), older
results are dropped. Nothing is delivered after shutdown().
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ascii_image.models import CharacterGrid, RenderConfig
from ascii_image.pipeline import AsciiPipeline

logger = logging.getLogger(__name__)

__all__ = ["AsciiWorker", "WorkerResult", "WorkerClosedError"]


class WorkerClosedError(RuntimeError):
    """submit() called after shutdown()."""


@dataclass
class _Request:
    request_id: int
    buffer: np.ndarray
    config: RenderConfig
    seed: int


@dataclass(frozen=True)
class WorkerResult:
    request_id: int
    grid: Optional[CharacterGrid] = None
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and self.grid is not None


class AsciiWorker:
    def __init__(
        self,
        pipeline: Optional[AsciiPipeline] = None,
        on_result: Optional[Callable[[WorkerResult], None]] = None,
    ):
        self.pipeline = pipeline or AsciiPipeline()
        self.on_result = on_result
        self._req_q: queue.Queue = queue.Queue(maxsize=2)
        self._res_q: queue.Queue = queue.Queue()
        self._stop = threading.Event()
        self._id_lock = threading.Lock()
        self._latest_id = 0
        self._thread = threading.Thread(target=self._run, name="ascii-worker", daemon=True)
        self._thread.start()

    @property
    def latest_id(self) -> int:
        return self._latest_id

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def submit(self, buffer: np.ndarray, config: RenderConfig, seed: int = 1) -> int:
        """
        Queue a transform. Ownership of `buffer` moves to the worker; the
        caller must not read or write it afterwards.
        """
        if self._stop.is_set():
            raise WorkerClosedError("worker has been shut down")
        with self._id_lock:
            self._latest_id += 1
            request_id = self._latest_id
        # Requests still waiting are already stale.
        with self._req_q.mutex:
            self._req_q.queue.clear()
        try:
            self._req_q.put_nowait(_Request(request_id, buffer, config, seed))
        except queue.Full:
            logger.debug("request %d dropped, queue full", request_id)
        return request_id

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                job = self._req_q.get(timeout=0.2)
            except queue.Empty:
                continue
            if job is None or self._stop.is_set():
                break

            t0 = time.perf_counter()
            try:
                grid = self.pipeline.transform(job.buffer, job.config, job.seed)
                result = WorkerResult(job.request_id, grid=grid,
                                      elapsed_ms=(time.perf_counter() - t0) * 1000.0)
            except Exception as exc:
                logger.exception("transform %d failed", job.request_id)
                result = WorkerResult(job.request_id, error=f"{type(exc).__name__}: {exc}",
                                      elapsed_ms=(time.perf_counter() - t0) * 1000.0)
            finally:
                job.buffer = None

            if self._stop.is_set():
                break
            self._res_q.put(result)
            # shutdown() may have landed while the result was being queued.
            if self.on_result is not None and not self._stop.is_set():
                try:
                    self.on_result(result)
                except Exception:
                    logger.exception("result callback failed")

    def poll(self) -> Optional[WorkerResult]:
        """Return the result of the latest request if it has arrived, else None."""
        latest: Optional[WorkerResult] = None
        while True:
            try:
                result = self._res_q.get_nowait()
            except queue.Empty:
                break
            if result.request_id == self._latest_id:
                latest = result
            else:
                logger.debug("discarding stale result %d (latest %d)", result.request_id, self._latest_id)
        if self._stop.is_set():
            return None
        return latest

    def wait(self, request_id: int, timeout: float = 5.0) -> Optional[WorkerResult]:
        """Block until `request_id` is answered; None if superseded, closed or timed out."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if request_id != self._latest_id or self._stop.is_set():
                return None
            result = self.poll()
            if result is not None:
                return result
            time.sleep(0.005)
        return None

    def shutdown(self) -> None:
        self._stop.set()
        with self._req_q.mutex:
            self._req_q.queue.clear()
        try:
            self._req_q.put_nowait(None)
        except queue.Full:
            pass
        self._thread.join(timeout=0.5)
