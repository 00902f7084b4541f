#!/usr/bin/env python3
# ascii_image/rendering/renderer.py
"""
Rendering dispatcher and output backends for a CharacterGrid.

- Common API: Renderer.render(grid, mode, options)
- Backends may register via Renderer.register(mode, backend)
- "text":   prompt_toolkit formatted text, list[list[(style, text)]] with
            "fg:#RRGGBB" style strings, one list per row
- "canvas": Pillow image with per-glyph colors, scaled without smoothing
            and centered on a surface of the container size
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter

from ascii_image.fonts import FontMetrics, FontSpec
from ascii_image.models import CharacterGrid
from ascii_image.rendering.colors import blend_over, parse_color, to_hex
from ascii_image.rendering.layout import Dim, compute_transform
from ascii_image.rendering.photometric import round_half_up

StyleRun = Tuple[str, str]                # (style, text)
LineFrag = List[StyleRun]                 # one terminal row as runs
FrameFrag = List[LineFrag]                # full terminal frame as rows

__all__ = [
    "Renderer",
    "RenderBackend",
    "RenderOptions",
    "StyleRun",
    "LineFrag",
    "FrameFrag",
]


@dataclass(frozen=True)
class RenderOptions:
    container: Tuple[Dim, Dim] = (None, None)
    sizing: str = "fit"
    background: str = "#000000"
    font: FontSpec = field(default_factory=FontSpec)
    glow_blur: float = 0.0
    glow_opacity: float = 1.0


# -------------------------
# Backends
# -------------------------

class RenderBackend:
    """Interface for all renderers."""
    name: str = "base"

    def render(self, grid: CharacterGrid, options: RenderOptions) -> Any:
        raise NotImplementedError


class TextBackend(RenderBackend):
    """
    Styled text runs. Neighbouring cells with the same style are merged,
    so a solid color grid is one run per row.
    """

    name = "text"

    def render(self, grid: CharacterGrid, options: RenderOptions) -> FrameFrag:
        if grid.colors is None:
            style = "fg:" + to_hex(*parse_color(grid.solid_color)[:3])
            return [[(style, row)] for row in grid.rows]

        bg = parse_color(options.background)[:3]
        frame: FrameFrag = []
        for y, row in enumerate(grid.rows):
            line: LineFrag = []
            run_style = None
            run_text: List[str] = []
            for x, ch in enumerate(row):
                r, g, b, a = grid.colors[y, x].tolist()
                style = "fg:" + to_hex(*blend_over((r, g, b, a), bg))
                if style != run_style and run_text:
                    line.append((run_style, "".join(run_text)))
                    run_text = []
                run_style = style
                run_text.append(ch)
            if run_text:
                line.append((run_style, "".join(run_text)))
            frame.append(line if line else [("", "")])
        return frame


class CanvasBackend(RenderBackend):
    """Draw glyphs into a Pillow image, one cell per character."""

    name = "canvas"

    def __init__(self, metrics: Optional[FontMetrics] = None):
        self.metrics = metrics or FontMetrics()

    def _draw_glyphs(self, grid: CharacterGrid, options: RenderOptions) -> Image.Image:
        cw, ch = self.metrics.cell_size(options.font)
        font = self.metrics.load(options.font)
        layer = Image.new("RGBA", (grid.width * cw, grid.height * ch), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        if grid.colors is None:
            fill = parse_color(grid.solid_color)
            for y, row in enumerate(grid.rows):
                for x, glyph in enumerate(row):
                    if glyph != " ":
                        draw.text((x * cw, y * ch), glyph, font=font, fill=fill)
            return layer
        for y, row in enumerate(grid.rows):
            for x, glyph in enumerate(row):
                if glyph == " ":
                    continue
                draw.text((x * cw, y * ch), glyph, font=font, fill=tuple(grid.colors[y, x].tolist()))
        return layer

    def render(self, grid: CharacterGrid, options: RenderOptions) -> Image.Image:
        layer = self._draw_glyphs(grid, options)

        if options.glow_blur > 0 and options.glow_opacity > 0:
            glow = layer.filter(ImageFilter.GaussianBlur(radius=options.glow_blur))
            alpha = glow.getchannel("A").point(lambda v: int(v * options.glow_opacity))
            glow.putalpha(alpha)
            layer = Image.alpha_composite(glow, layer)

        t = compute_transform(options.container, layer.size, options.sizing)
        sw = max(1, round_half_up(layer.width * t.scale))
        sh = max(1, round_half_up(layer.height * t.scale))
        # NEAREST keeps glyph pixels crisp.
        scaled = layer.resize((sw, sh), Image.NEAREST) if (sw, sh) != layer.size else layer

        surface_w = max(1, round_half_up(t.width))
        surface_h = max(1, round_half_up(t.height))
        surface = Image.new("RGBA", (surface_w, surface_h), parse_color(options.background))
        surface.alpha_composite(scaled, dest=(max(0, (surface_w - sw) // 2), max(0, (surface_h - sh) // 2)),
                                source=(max(0, (sw - surface_w) // 2), max(0, (sh - surface_h) // 2)))
        return surface.convert("RGB")


# -------------------------
# Dispatcher
# -------------------------

@dataclass
class Renderer:
    """
    Rendering strategy holder.
    Use register() to add output modes.
    """
    metrics: FontMetrics = field(default_factory=FontMetrics)
    default_mode: str = "text"

    def __post_init__(self):
        self._backends: Dict[str, RenderBackend] = {}
        self.register("text", TextBackend())
        self.register("canvas", CanvasBackend(self.metrics))

    def register(self, mode: str, backend: RenderBackend) -> None:
        self._backends[mode] = backend

    def render(
        self,
        grid: CharacterGrid,
        mode: Optional[str] = None,
        options: Optional[RenderOptions] = None,
    ) -> Any:
        backend = self._backends.get(mode or self.default_mode)
        if backend is None:
            backend = self._backends[self.default_mode]
        return backend.render(grid, options or RenderOptions())
