#!/usr/bin/env python3
# ascii_image/rendering/rasterizer.py
"""
Source image -> RGBA sample buffer sized to the character grid.

Steps:
- grid size from the image aspect and the glyph aspect ratio
- LANCZOS downsample, transparent areas composited over black
- Gaussian blur
- optional cursor overlay (gradient / circle / image stamp)

Cursor coordinates are fractions of the surface. The overlay space is scaled
by (1, font_aspect_ratio), so a shape of radius r spans r pixels
horizontally and r * font_aspect_ratio pixels vertically in the buffer.
Once each buffer row becomes one (taller than wide) text row, the shape
looks round again.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageOps

from ascii_image.models import CursorConfig
from ascii_image.rendering.photometric import round_half_up

__all__ = ["grid_size", "rasterize", "composite_cursor"]


def grid_size(image_w: int, image_h: int, output_width: int, font_aspect_ratio: float) -> Tuple[int, int]:
    """Return (columns, rows); both are at least 1. Half rows round up."""
    iw = max(1, int(image_w))
    ih = max(1, int(image_h))
    w = max(1, int(output_width))
    ratio = font_aspect_ratio if font_aspect_ratio and font_aspect_ratio > 0 else 1.0
    h = round_half_up(ih / iw * w * ratio)
    return w, max(1, h)


def _flatten_on_black(img: Image.Image) -> Image.Image:
    """Composite over opaque black; fully transparent pixels sample as black."""
    black = Image.new("RGBA", img.size, (0, 0, 0, 255))
    return Image.alpha_composite(black, img)


def rasterize(
    img: Image.Image,
    output_width: int,
    font_aspect_ratio: float,
    blur: float = 0.0,
    cursor: Optional[CursorConfig] = None,
    cursor_pos: Optional[Tuple[float, float]] = None,
    cursor_image: Optional[Image.Image] = None,
) -> np.ndarray:
    """
    Draw `img` into a (rows, cols, 4) uint8 buffer.

    cursor_pos is None until the pointer has produced its first event; no
    overlay is drawn before that.
    """
    w, h = grid_size(img.width, img.height, output_width, font_aspect_ratio)
    src = img.convert("RGBA")
    small = src.resize((w, h), Image.LANCZOS) if src.size != (w, h) else src.copy()
    small = _flatten_on_black(small)

    if blur and blur > 0:
        small = small.filter(ImageFilter.GaussianBlur(radius=float(blur)))

    if cursor is not None and cursor.width > 0 and cursor_pos is not None:
        small = composite_cursor(small, cursor, cursor_pos, font_aspect_ratio, cursor_image)

    return np.array(small, dtype=np.uint8)


def composite_cursor(
    base: Image.Image,
    cursor: CursorConfig,
    cursor_pos: Tuple[float, float],
    font_aspect_ratio: float,
    cursor_image: Optional[Image.Image] = None,
) -> Image.Image:
    w, h = base.size
    ratio = font_aspect_ratio if font_aspect_ratio > 0 else 1.0
    cx = cursor_pos[0] * w
    cy = cursor_pos[1] * h
    radius = cursor.width / 2.0
    rgb = (255, 255, 255) if cursor.invert else (0, 0, 0)

    if cursor.style == "gradient":
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
        # Pixel centers, vertical distance measured in overlay space.
        dx = xs + 0.5 - cx
        dy = (ys + 0.5 - cy) / ratio
        dist = np.sqrt(dx * dx + dy * dy)
        alpha = np.clip(1.0 - dist / radius, 0.0, 1.0) if radius > 0 else np.zeros_like(dist)
        mask = Image.fromarray(np.floor(alpha * 255 + 0.5).astype(np.uint8), "L")
        layer = Image.new("RGBA", (w, h), rgb + (255,))
        return Image.composite(layer, base, mask)

    if cursor.style == "circle":
        mask = Image.new("L", (w, h), 0)
        ImageDraw.Draw(mask).ellipse(
            (cx - radius, cy - radius * ratio, cx + radius, cy + radius * ratio),
            fill=255,
        )
        layer = Image.new("RGBA", (w, h), rgb + (255,))
        return Image.composite(layer, base, mask)

    if cursor.style == "image" and cursor_image is not None:
        stamp = cursor_image.convert("RGBA")
        sw = max(1, round_half_up(cursor.width))
        sh = max(1, round_half_up(stamp.height / max(1, stamp.width) * cursor.width * ratio))
        stamp = stamp.resize((sw, sh), Image.LANCZOS)
        if cursor.invert:
            r, g, b, a = stamp.split()
            inverted = ImageOps.invert(Image.merge("RGB", (r, g, b)))
            stamp = Image.merge("RGBA", (*inverted.split(), a))
        out = base.copy()
        # paste() accepts negative offsets, so stamps can hang off the edges.
        out.paste(stamp, (round_half_up(cx - sw / 2.0), round_half_up(cy - sh / 2.0)), stamp)
        return out

    return base
