#!/usr/bin/env python3
# ascii_image/ui/state.py
"""Mutable runtime state for the interactive viewer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ascii_image.config import DITHER_MODES, COLOR_MODES, Config
from ascii_image.models import RenderConfig, Status
from ascii_image.rendering.palettes import default_palettes


def _cycle(value: str, options: Tuple[str, ...], step: int = 1) -> str:
    try:
        i = options.index(value)
    except ValueError:
        return options[0]
    return options[(i + step) % len(options)]


@dataclass
class ViewerState:
    cfg: Config

    status: Status = Status.LOADING
    error: Optional[str] = None
    last_render_ms: float = 0.0
    info_msg: str = ""
    # Bumped on every settings change; the poll timer compares it.
    version: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    # ------------- status -------------

    def set_status(self, status: Status, error: Optional[str] = None) -> None:
        with self._lock:
            self.status = status
            self.error = error

    def set_info(self, msg: str) -> None:
        with self._lock:
            self.info_msg = msg

    def pop_info(self) -> str:
        with self._lock:
            msg, self.info_msg = self.info_msg, ""
            return msg

    # ------------- setters -------------

    def _changed(self, msg: str) -> None:
        self.version += 1
        self.info_msg = msg

    def update(self, partial: dict, msg: str = "") -> None:
        with self._lock:
            self.cfg.update(partial)
            self._changed(msg)

    def cycle_dither(self) -> str:
        with self._lock:
            r = self.cfg["render"]
            r["dither"] = _cycle(r["dither"], DITHER_MODES)
            self._changed(f"Dither {r['dither']}")
            return r["dither"]

    def cycle_charset(self) -> str:
        with self._lock:
            names = tuple(default_palettes()) + tuple(
                k for k in self.cfg["character_sets"] if k not in default_palettes()
            ) + ("custom",)
            r = self.cfg["render"]
            r["character_set"] = _cycle(r["character_set"], names)
            self._changed(f"Charset {r['character_set']}")
            return r["character_set"]

    def cycle_color_mode(self) -> str:
        with self._lock:
            c = self.cfg["color"]
            c["mode"] = _cycle(c["mode"], COLOR_MODES)
            self._changed(f"Color {c['mode']}")
            return c["mode"]

    def toggle(self, section: str, key: str) -> bool:
        with self._lock:
            s = self.cfg[section]
            s[key] = not bool(s.get(key))
            self._changed(f"{key} {'on' if s[key] else 'off'}")
            return s[key]

    def toggle_white_mode(self) -> str:
        with self._lock:
            r = self.cfg["render"]
            r["white_mode"] = "keep" if r["white_mode"] == "ignore" else "ignore"
            self._changed(f"White {r['white_mode']}")
            return r["white_mode"]

    def toggle_sizing(self) -> str:
        with self._lock:
            lay = self.cfg["layout"]
            lay["sizing"] = "fill" if lay["sizing"] == "fit" else "fit"
            self._changed(f"Sizing {lay['sizing']}")
            return lay["sizing"]

    def adjust(self, key: str, delta: float, lo: float, hi: float) -> float:
        with self._lock:
            r = self.cfg["render"]
            r[key] = min(hi, max(lo, float(r[key]) + delta))
            self._changed(f"{key.capitalize()} {r[key]:+.0f}")
            return r[key]

    # ------------- export -------------

    def snapshot(self) -> int:
        with self._lock:
            return self.version

    def render_config(self, font_aspect_ratio: float, output_width: Optional[int] = None) -> RenderConfig:
        with self._lock:
            rc = RenderConfig.from_config(self.cfg, font_aspect_ratio)
            static = self.cfg["static"]["interval_s"] > 0
        changes = {}
        if output_width is not None:
            changes["output_width"] = max(1, int(output_width))
        if static:
            changes["dither"] = "noise"
        return rc.with_changes(**changes) if changes else rc
