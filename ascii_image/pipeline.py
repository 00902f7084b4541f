#!/usr/bin/env python3
# ascii_image/pipeline.py
"""
Image -> CharacterGrid.

sample()     rasterize (resize, blur, cursor overlay); needs the decoded image
transform()  normalize, optional jitter, resolve palette, quantize, resolve
             colors; only needs the sample buffer, so it can run on a
             worker thread
run()        both, synchronously
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from ascii_image.models import CharacterGrid, RenderConfig
from ascii_image.rendering.colors import resolve_colors
from ascii_image.rendering.dither import Ditherer, apply_jitter, render_rows
from ascii_image.rendering.palettes import resolve_palette
from ascii_image.rendering.photometric import normalize, source_colors
from ascii_image.rendering.rasterizer import rasterize

logger = logging.getLogger(__name__)

__all__ = ["AsciiPipeline"]


class AsciiPipeline:
    def __init__(self, ditherer: Optional[Ditherer] = None):
        self.ditherer = ditherer or Ditherer()

    def sample(
        self,
        img: Image.Image,
        config: RenderConfig,
        cursor_pos: Optional[Tuple[float, float]] = None,
        cursor_image: Optional[Image.Image] = None,
    ) -> np.ndarray:
        """Fresh (rows, cols, 4) uint8 buffer; the caller may hand it off."""
        return rasterize(
            img,
            config.output_width,
            config.font_aspect_ratio,
            blur=config.blur,
            cursor=config.cursor,
            cursor_pos=cursor_pos,
            cursor_image=cursor_image,
        )

    def transform(self, rgba: np.ndarray, config: RenderConfig, seed: int = 1) -> CharacterGrid:
        buf = normalize(rgba, config.invert_colors, config.contrast, config.brightness)
        if config.jitter:
            apply_jitter(buf, seed)
        palette = resolve_palette(config.character_set, config.custom_character_set, config.character_sets)
        indices = self.ditherer.quantize(buf, palette, config.dither, config.white_mode, seed)
        rows = render_rows(indices, palette)
        rgb = None
        if config.color.mode == "source":
            rgb = source_colors(rgba, config.invert_colors, config.contrast, config.brightness)
        colors = resolve_colors(buf.working, config.color, rgb)
        logger.debug(
            "grid %dx%d dither=%s jitter=%s palette=%d glyphs",
            buf.width, buf.height, config.dither, config.jitter, len(palette),
        )
        return CharacterGrid(
            width=buf.width,
            height=buf.height,
            rows=rows,
            colors=colors,
            solid_color=config.color.color,
            gray=buf.working,
        )

    def run(
        self,
        img: Image.Image,
        config: RenderConfig,
        cursor_pos: Optional[Tuple[float, float]] = None,
        cursor_image: Optional[Image.Image] = None,
        seed: int = 1,
    ) -> CharacterGrid:
        return self.transform(self.sample(img, config, cursor_pos, cursor_image), config, seed)
