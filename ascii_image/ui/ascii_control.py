#!/usr/bin/env python3
# ascii_image/ui/ascii_control.py
"""prompt_toolkit UIControl that shows the live ASCII rendering."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image
from prompt_toolkit.application import get_app_or_none
from prompt_toolkit.data_structures import Point
from prompt_toolkit.layout.controls import UIContent, UIControl
from prompt_toolkit.mouse_events import MouseEvent, MouseEventType

from ascii_image.models import CharacterGrid, Status
from ascii_image.pipeline import AsciiPipeline
from ascii_image.rendering.layout import compute_scale
from ascii_image.rendering.rasterizer import grid_size
from ascii_image.rendering.renderer import FrameFrag, Renderer, RenderOptions
from ascii_image.ui.controller import InteractionController
from ascii_image.ui.cursor import CursorTracker
from ascii_image.ui.state import ViewerState
from ascii_image.worker import AsciiWorker, WorkerResult

logger = logging.getLogger(__name__)

# Width / height of one terminal cell; most terminal fonts are about 1:2.
TERMINAL_CELL_ASPECT = 0.5


@dataclass
class Frame:
    width: int
    height: int
    lines_frag: FrameFrag


class AsciiControl(UIControl):
    """
    Renders the current CharacterGrid centered in the window and feeds mouse
    movement into the cursor tracker.

    Rasterization runs on the controller's timer threads; normalization and
    quantization run on the worker.
    """

    def __init__(self, state: ViewerState, renderer: Renderer, font_aspect_ratio: Optional[float] = None):
        self.state = state
        self.cfg = state.cfg
        self.renderer = renderer
        self.font_aspect_ratio = font_aspect_ratio or self.cfg["font"].get("aspect_ratio") or TERMINAL_CELL_ASPECT
        self.pipeline = AsciiPipeline()
        self.tracker = CursorTracker(smoothing=float(self.cfg["cursor"]["smoothing"]))
        self.worker = AsciiWorker(self.pipeline, on_result=self._on_result)

        static = self.cfg["static"]["interval_s"]
        self.controller = InteractionController(
            self._rerun,
            self._snapshot,
            tracker=self.tracker,
            poll_interval=self.cfg["interaction"]["poll_ms"] / 1000.0,
            static_interval=static if static > 0 else None,
        )

        self._image: Optional[Image.Image] = None
        self._cursor_image: Optional[Image.Image] = None
        self._image_lock = threading.Lock()
        self._last_width = 1
        self._last_height = 1
        self._block: Tuple[int, int, int, int] = (0, 0, 1, 1)   # x, y, w, h of the text block
        self._scroll_rows = 0
        self._last_frame: Optional[Frame] = None
        self._submitted_at = 0.0

    # -------- image --------

    def set_image(self, img: Optional[Image.Image]) -> None:
        with self._image_lock:
            self._image = img
        with self.state._lock:
            self.state.version += 1
        if not self.controller.running:
            self.controller.start()

    def set_cursor_image(self, img: Optional[Image.Image]) -> None:
        with self._image_lock:
            self._cursor_image = img

    # -------- UIControl interface --------

    def is_focusable(self) -> bool:
        return True

    def preferred_width(self, max_available_width: int) -> int:
        return max_available_width

    def preferred_height(self, width, max_available_height, wrap_lines, get_line_prefix) -> int:
        return max_available_height

    def create_content(self, width: int, height: int) -> UIContent:
        width = max(1, int(width))
        height = max(1, int(height))
        self._last_width = width
        self._last_height = height

        result = self.worker.poll()
        if result is not None:
            self._apply(result)

        frame = self._last_frame
        if frame is None:
            return self._message_content(width, height, self._placeholder())

        lines_frag = self._center(frame, width, height)
        return UIContent(
            get_line=lambda i: lines_frag[i] if 0 <= i < height else [("", " " * width)],
            line_count=height,
            cursor_position=Point(x=0, y=0),
        )

    def mouse_handler(self, mouse_event: MouseEvent):
        bx, by, bw, bh = self._block
        pos = mouse_event.position
        if mouse_event.event_type in (MouseEventType.MOUSE_MOVE, MouseEventType.MOUSE_DOWN):
            self.tracker.on_pointer(pos.x - bx + 0.5, pos.y - by + 0.5, bw, bh)
            return None
        if mouse_event.event_type == MouseEventType.SCROLL_DOWN:
            self._scroll_rows += 1
        elif mouse_event.event_type == MouseEventType.SCROLL_UP:
            self._scroll_rows -= 1
        else:
            return NotImplemented
        self.tracker.on_scroll(0, self._scroll_rows, bw, bh)
        return None

    # -------- pipeline --------

    def _columns_for(self, img: Image.Image, width: int, height: int) -> int:
        """Scale the configured grid so it fits (or fills) the window."""
        cols, rows = grid_size(img.width, img.height, int(self.cfg["render"]["output_width"]), self.font_aspect_ratio)
        scale = compute_scale((width, height), (cols, rows), self.cfg["layout"]["sizing"])
        return max(1, int(cols * scale))

    def _snapshot(self):
        return (self.state.snapshot(), self._last_width, self._last_height)

    def _rerun(self, seed: int) -> None:
        with self._image_lock:
            img, cursor_img = self._image, self._cursor_image
        if img is None:
            return
        columns = self._columns_for(img, self._last_width, self._last_height)
        config = self.state.render_config(self.font_aspect_ratio, output_width=columns)
        buffer = self.pipeline.sample(img, config, self.tracker.position(), cursor_img)
        self._submitted_at = time.perf_counter()
        if not self.worker.closed:
            self.worker.submit(buffer, config, seed)

    def _on_result(self, result: WorkerResult) -> None:
        app = get_app_or_none()
        if app:
            app.invalidate()

    def _apply(self, result: WorkerResult) -> None:
        if not result.ok:
            # Keep showing the previous frame unless configured to show the error.
            if self.cfg["ui"]["clear_on_error"]:
                self._last_frame = None
            self.state.set_status(Status.ERROR, result.error)
            return
        grid: CharacterGrid = result.grid
        options = RenderOptions(background=self.cfg["layout"]["background"])
        lines = self.renderer.render(grid, "text", options)
        self._last_frame = Frame(grid.width, grid.height, lines)
        self.state.last_render_ms = (time.perf_counter() - self._submitted_at) * 1000.0
        self.state.set_status(Status.READY)

    # -------- helpers --------

    def _placeholder(self) -> str:
        if self.state.status == Status.ERROR:
            return f"Error: {self.state.error}"
        return "Loading..."

    @staticmethod
    def _message_content(width: int, height: int, text: str) -> UIContent:
        text = text[:width]
        pad = (width - len(text)) // 2
        line = [("", " " * pad + text)]
        empty = [("", "")]
        mid = height // 2
        return UIContent(get_line=lambda i: line if i == mid else empty, line_count=height)

    def _center(self, frame: Frame, width: int, height: int) -> List[FrameFrag]:
        """Center the frame (translate -50%, -50%), cropping what does not fit."""
        off_x = (width - frame.width) // 2
        off_y = (height - frame.height) // 2
        self._block = (off_x, off_y, frame.width, frame.height)

        out: List = []
        for y in range(height):
            sy = y - off_y
            if not 0 <= sy < len(frame.lines_frag):
                out.append([("", " " * width)])
                continue
            out.append(self._crop_line(frame.lines_frag[sy], off_x, width))
        return out

    @staticmethod
    def _crop_line(runs, off_x: int, width: int):
        line = []
        if off_x > 0:
            line.append(("", " " * off_x))
        skip = max(0, -off_x)
        room = width - max(0, off_x)
        for style, text in runs:
            if skip:
                cut = min(skip, len(text))
                text = text[cut:]
                skip -= cut
            if not text or room <= 0:
                continue
            text = text[:room]
            room -= len(text)
            line.append((style, text))
        return line or [("", "")]

    # -------- lifecycle --------

    def shutdown(self) -> None:
        self.controller.stop()
        self.worker.shutdown()
