#!/usr/bin/env python3
# ascii_image/models.py
"""Immutable per-run value objects shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ascii_image.config import Config


class Status(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class CursorConfig:
    style: str = "gradient"
    width: float = 20.0
    invert: bool = False
    smoothing: float = 0.0
    image: Optional[str] = None


@dataclass(frozen=True)
class ColorConfig:
    mode: str = "color"
    color: str = "#ffffff"
    color1: str = "#ffffff"
    color2: str = "#000000"
    color1_point: float = 0.0
    color2_point: float = 100.0
    threshold: float = 50.0


@dataclass(frozen=True)
class RenderConfig:
    output_width: int = 100
    font_aspect_ratio: float = 0.6
    dither: str = "none"
    character_set: str = "detailed"
    custom_character_set: str = ""
    white_mode: str = "keep"
    invert_colors: bool = False
    blur: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0
    jitter: bool = False
    cursor: Optional[CursorConfig] = None
    color: ColorConfig = field(default_factory=ColorConfig)
    character_sets: Optional[Dict[str, str]] = field(default=None, compare=False, hash=False)

    @classmethod
    def from_config(cls, cfg: Config, font_aspect_ratio: float = 0.6) -> "RenderConfig":
        r = cfg["render"]
        cur = cfg["cursor"]
        col = cfg["color"]
        cursor = None
        if cur.get("enabled"):
            cursor = CursorConfig(
                style=cur["style"],
                width=float(cur["width"]),
                invert=bool(cur["invert"]),
                smoothing=float(cur["smoothing"]),
                image=cur.get("image"),
            )
        return cls(
            output_width=int(r["output_width"]),
            font_aspect_ratio=float(font_aspect_ratio),
            dither=r["dither"],
            character_set=r["character_set"],
            custom_character_set=r["custom_character_set"],
            white_mode=r["white_mode"],
            invert_colors=bool(r["invert_colors"]),
            blur=float(r["blur"]),
            brightness=float(r["brightness"]),
            contrast=float(r["contrast"]),
            jitter=bool(r["jitter"]),
            cursor=cursor,
            color=ColorConfig(
                mode=col["mode"],
                color=col["color"],
                color1=col["color1"],
                color2=col["color2"],
                color1_point=float(col["color1_point"]),
                color2_point=float(col["color2_point"]),
                threshold=float(col["threshold"]),
            ),
            character_sets=dict(cfg.get("character_sets") or {}) or None,
        )

    def with_changes(self, **changes: Any) -> "RenderConfig":
        return replace(self, **changes)


@dataclass
class LuminanceBuffer:
    """Pre-dither values in `original`; error diffusion only mutates `working`."""
    original: np.ndarray
    working: np.ndarray

    @property
    def width(self) -> int:
        return int(self.original.shape[1])

    @property
    def height(self) -> int:
        return int(self.original.shape[0])


@dataclass(frozen=True)
class CharacterGrid:
    width: int
    height: int
    rows: Tuple[str, ...]
    colors: Optional[np.ndarray] = field(default=None, compare=False)   # (H, W, 4) RGBA
    solid_color: str = "#ffffff"
    gray: Optional[np.ndarray] = field(default=None, compare=False)     # post-dither luminance

    def cell(self, x: int, y: int) -> str:
        return self.rows[y][x]

    def text(self) -> str:
        return "\n".join(self.rows)
