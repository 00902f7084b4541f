#!/usr/bin/env python3
# ascii_image/rendering/colors.py
"""
Per-cell color resolution and palette extraction.

Modes:
- color:     one flat color for every glyph (no per-cell array)
- gradient:  color1 below point1, color2 above point2, linear in between
- glow:      color2 fading to fully transparent color2 above `threshold`
- source:    each glyph keeps its own sampled pixel color, after the same
             invert/contrast/brightness correction as the luminance
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np

from ascii_image.models import ColorConfig
from ascii_image.rendering.photometric import round_half_up

RGBA = Tuple[int, int, int, int]

__all__ = [
    "parse_color",
    "to_hex",
    "resolve_colors",
    "blend_over",
    "extract_main_colors",
]


def parse_color(value: str) -> RGBA:
    """Parse #RGB, #RRGGBB or #RRGGBBAA. Anything else is opaque black."""
    s = (value or "").strip().lstrip("#")
    try:
        if len(s) == 3:
            r, g, b = (int(ch * 2, 16) for ch in s)
            return r, g, b, 255
        if len(s) in (6, 8):
            r, g, b = int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)
            a = int(s[6:8], 16) if len(s) == 8 else 255
            return r, g, b, a
    except ValueError:
        pass
    return 0, 0, 0, 255


def to_hex(r: int, g: int, b: int) -> str:
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def _stops(cfg: ColorConfig) -> Tuple[RGBA, RGBA, float, float]:
    if cfg.mode == "glow":
        c2 = parse_color(cfg.color2)
        return c2, (c2[0], c2[1], c2[2], 0), cfg.threshold / 100.0, 1.0
    p1, p2 = cfg.color1_point / 100.0, cfg.color2_point / 100.0
    c1, c2 = parse_color(cfg.color1), parse_color(cfg.color2)
    if p1 > p2:
        p1, p2, c1, c2 = p2, p1, c2, c1
    return c1, c2, p1, p2


def resolve_colors(gray: np.ndarray, cfg: ColorConfig, rgb: Optional[np.ndarray] = None) -> Optional[np.ndarray]:
    """
    Map an (H, W) luminance array in [0, 255] to (H, W, 4) uint8 RGBA.
    Returns None for solid color mode.

    Source mode uses `rgb`, the corrected (H, W, 3) samples; without it the
    luminance is used as a gray.
    """
    if cfg.mode == "source":
        src = rgb if rgb is not None else np.repeat(np.asarray(gray, dtype=np.float64)[..., None], 3, axis=-1)
        out = np.full(src.shape[:2] + (4,), 255, dtype=np.uint8)
        out[..., :3] = np.clip(np.floor(np.nan_to_num(src, nan=0.0) + 0.5), 0, 255).astype(np.uint8)
        return out
    if cfg.mode not in ("gradient", "glow"):
        return None
    start, end, p1, p2 = _stops(cfg)
    g = np.clip(np.nan_to_num(gray.astype(np.float64), nan=0.0), 0.0, 255.0) / 255.0
    if p1 == p2:
        t = (g >= p1).astype(np.float64)
    else:
        t = np.clip((g - p1) / (p2 - p1), 0.0, 1.0)
    a = np.asarray(start, dtype=np.float64)
    b = np.asarray(end, dtype=np.float64)
    out = a + (b - a) * t[..., None]
    return np.clip(np.floor(out + 0.5), 0, 255).astype(np.uint8)


def blend_over(rgba: RGBA, background: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Alpha-blend one RGBA color over an opaque background."""
    r, g, b, a = rgba
    k = a / 255.0
    return (
        round_half_up(r * k + background[0] * (1 - k)),
        round_half_up(g * k + background[1] * (1 - k)),
        round_half_up(b * k + background[2] * (1 - k)),
    )


def extract_main_colors(rgba: np.ndarray) -> Tuple[str, str]:
    """
    Pick an accent color from an RGBA sample buffer.

    Pixels with alpha < 128 are skipped; the rest are bucketed to steps of
    10. The accent is the first of the ten most frequent buckets whose blue
    clearly dominates; default is pure blue. Second color is always white.
    """
    flat = rgba.reshape(-1, rgba.shape[-1])
    counts: Dict[Tuple[int, int, int], int] = {}
    for px in flat.tolist():
        if len(px) > 3 and px[3] < 128:
            continue
        key = (round_half_up(px[0] / 10.0) * 10, round_half_up(px[1] / 10.0) * 10, round_half_up(px[2] / 10.0) * 10)
        counts[key] = counts.get(key, 0) + 1

    top: List[Tuple[int, int, int]] = [k for k, _ in sorted(counts.items(), key=lambda kv: -kv[1])[:10]]
    accent = (0, 0, 255)
    for r, g, b in top:
        if b > max(r, g) * 1.2 and b > 100:
            accent = (min(255, r), min(255, g), min(255, b))
            break
    return to_hex(*accent), "#ffffff"
