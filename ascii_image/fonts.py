#!/usr/bin/env python3
# ascii_image/fonts.py
"""
Font metrics provider.

The glyph aspect ratio (advance width / line height) of the display font
decides how many text rows an image needs. Measured with Pillow's
ImageFont on the glyph "W".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import ImageFont

from ascii_image.config import Config

logger = logging.getLogger(__name__)

__all__ = ["FontSpec", "FontMetrics", "DEFAULT_ASPECT_RATIO"]

DEFAULT_ASPECT_RATIO = 0.6

_CANDIDATES = (
    "DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/System/Library/Fonts/Menlo.ttc",
    "C:\\Windows\\Fonts\\consola.ttf",
)


@dataclass(frozen=True)
class FontSpec:
    path: Optional[str] = None
    size: int = 12
    line_height: float = 1.0
    letter_spacing: float = 0.0          # em
    aspect_ratio: Optional[float] = None  # fixed override

    @classmethod
    def from_config(cls, cfg: Config) -> "FontSpec":
        f = cfg["font"]
        return cls(
            path=f.get("path"),
            size=int(f["size"]),
            line_height=float(f["line_height"]),
            letter_spacing=float(f["letter_spacing"]),
            aspect_ratio=f.get("aspect_ratio"),
        )


class FontMetrics:
    """Loads fonts once per FontSpec and answers synchronous metric queries."""

    def __init__(self):
        self._fonts = {}

    def load(self, spec: FontSpec):
        key = (spec.path, spec.size)
        font = self._fonts.get(key)
        if font is not None:
            return font
        paths = (spec.path,) if spec.path else _CANDIDATES
        for path in paths:
            try:
                font = ImageFont.truetype(path, spec.size)
                break
            except OSError:
                continue
        if font is None:
            logger.info("No TrueType font found for %s, using Pillow default", spec.path or "monospace")
            font = ImageFont.load_default()
        self._fonts[key] = font
        return font

    def cell_size(self, spec: FontSpec) -> Tuple[int, int]:
        """(width, height) in pixels of one character cell."""
        font = self.load(spec)
        try:
            advance = float(font.getlength("W"))
        except AttributeError:
            bbox = font.getbbox("W")
            advance = float(bbox[2] - bbox[0])
        advance += spec.letter_spacing * spec.size
        height = spec.size * spec.line_height
        return max(1, int(round(advance))), max(1, int(round(height)))

    def aspect_ratio(self, spec: FontSpec) -> float:
        if spec.aspect_ratio:
            return float(spec.aspect_ratio)
        try:
            font = self.load(spec)
            advance = float(font.getlength("W")) + spec.letter_spacing * spec.size
        except (OSError, AttributeError) as exc:
            logger.warning("Font measurement failed (%s), using %.2f", exc, DEFAULT_ASPECT_RATIO)
            return DEFAULT_ASPECT_RATIO
        height = spec.size * spec.line_height
        if advance <= 0 or height <= 0:
            return DEFAULT_ASPECT_RATIO
        return advance / height
