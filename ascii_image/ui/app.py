#!/usr/bin/env python3
# ascii_image/ui/app.py
"""Compose the prompt_toolkit application for the live ASCII image viewer."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window

from ascii_image.config import Config
from ascii_image.loader import ImageLoader, ImageLoadError
from ascii_image.logging_conf import setup_logging
from ascii_image.models import Status
from ascii_image.rendering.colors import extract_main_colors
from ascii_image.rendering.rasterizer import rasterize
from ascii_image.rendering.renderer import Renderer
from ascii_image.styles import make_style
from ascii_image.ui.ascii_control import AsciiControl
from ascii_image.ui.helppane import HelpPane
from ascii_image.ui.state import ViewerState
from ascii_image.ui.statusbar import StatusBar

logger = logging.getLogger(__name__)

STATIC_DEFAULT_S = 0.1
BLUR_STEP = 2.0
CONTRAST_STEP = 10.0
BRIGHTNESS_STEP = 10.0


class AsciiViewerApp:
    def __init__(self, source: str, cfg: Optional[Config] = None):
        self.cfg = cfg or Config.load()
        setup_logging(self.cfg, console=False)
        self.source = source
        self.state = ViewerState(self.cfg)
        self.loader = ImageLoader.from_config(self.cfg)
        self.renderer = Renderer()
        self.control = AsciiControl(self.state, self.renderer)
        self.status = StatusBar(self.state, self.cfg)
        self.help_pane = HelpPane()

        self.window = Window(
            content=self.control,
            dont_extend_width=False,
            wrap_lines=False,
            style="class:canvas",
        )
        self.root = HSplit([
            self.window,
            self.status,
            self.help_pane,     # height 0 when hidden
        ])

        self._load_gen = 0
        self._load_lock = threading.Lock()

        self.kb = self._build_key_bindings()
        self.app = Application(
            layout=Layout(self.root, focused_element=self.window),
            key_bindings=self.kb,
            full_screen=True,
            style=make_style(self.cfg),
            mouse_support=True,
        )

    # -------- loading --------

    def load(self, source: str) -> None:
        """Start loading `source` in the background; older loads are discarded."""
        with self._load_lock:
            self._load_gen += 1
            gen = self._load_gen
        self.state.set_status(Status.LOADING)
        t = threading.Thread(target=self._load_worker, args=(source, gen), name="ascii-load", daemon=True)
        t.start()

    def _load_worker(self, source: str, gen: int) -> None:
        try:
            img = self.loader.load(source)
            cursor_img = None
            cursor_src = self.cfg["cursor"].get("image")
            if self.cfg["cursor"]["enabled"] and self.cfg["cursor"]["style"] == "image" and cursor_src:
                cursor_img = self.loader.load(cursor_src)
        except ImageLoadError as exc:
            logger.error("%s", exc)
            if gen == self._load_gen:
                self.state.set_status(Status.ERROR, str(exc))
                self._invalidate()
            return
        if gen != self._load_gen:
            logger.debug("discarding superseded load of %s", source)
            return

        if self.cfg["color"]["extract"]:
            sample = rasterize(img, 64, self.control.font_aspect_ratio)
            accent, second = extract_main_colors(sample)
            self.state.update({"color": {"color1": accent, "color2": second}}, f"Colors {accent}")

        self.control.set_cursor_image(cursor_img)
        self.control.set_image(img)
        self._invalidate()

    def _invalidate(self) -> None:
        if self.app.is_running:
            self.app.invalidate()

    # -------- keys --------

    def _toggle_static(self) -> None:
        interval = 0.0 if self.cfg["static"]["interval_s"] > 0 else STATIC_DEFAULT_S
        self.state.update({"static": {"interval_s": interval}}, f"Static {'on' if interval else 'off'}")
        self.control.controller.set_static_interval(interval or None)

    def _build_key_bindings(self):
        kb = KeyBindings()
        s = self.state

        @kb.add("q")
        def _(event):
            event.app.exit()

        @kb.add("d")
        def _(event):
            s.cycle_dither()

        @kb.add("c")
        def _(event):
            s.cycle_charset()

        @kb.add("m")
        def _(event):
            s.cycle_color_mode()

        @kb.add("i")
        def _(event):
            s.toggle("render", "invert_colors")

        @kb.add("w")
        def _(event):
            s.toggle_white_mode()

        @kb.add("j")
        def _(event):
            s.toggle("render", "jitter")

        @kb.add("k")
        def _(event):
            s.toggle("cursor", "enabled")

        @kb.add("+")
        @kb.add("=")
        def _(event):
            s.adjust("contrast", CONTRAST_STEP, -100.0, 100.0)

        @kb.add("-")
        def _(event):
            s.adjust("contrast", -CONTRAST_STEP, -100.0, 100.0)

        @kb.add("]")
        def _(event):
            s.adjust("brightness", BRIGHTNESS_STEP, -255.0, 255.0)

        @kb.add("[")
        def _(event):
            s.adjust("brightness", -BRIGHTNESS_STEP, -255.0, 255.0)

        @kb.add("b")
        def _(event):
            blur = 0.0 if self.cfg["render"]["blur"] > 0 else BLUR_STEP
            s.update({"render": {"blur": blur}}, f"Blur {blur:g}")

        @kb.add("s")
        def _(event):
            self._toggle_static()

        @kb.add("f")
        def _(event):
            s.toggle_sizing()

        @kb.add("h")
        def _(event):
            self.help_pane.toggle()
            event.app.invalidate()

        return kb

    def run(self):
        self.load(self.source)
        try:
            self.app.run()
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        with self._load_lock:
            self._load_gen += 1
        self.control.shutdown()
        self.loader.close()
