#!/usr/bin/env python3
# ascii_image/rendering/photometric.py
"""
RGB samples to normalized luminance.

L = 0.299R + 0.587G + 0.114B (Rec. 601), optional inversion, then the
classic contrast/brightness correction around mid-gray:

    F = 259 * (c + 255) / (255 * (259 - c))
    L' = clamp(F * (L - 128) + 128 + brightness, 0, 255)

source_colors() runs the same correction per channel for the "source"
color mode.
"""

from __future__ import annotations

import math

import numpy as np

from ascii_image.models import LuminanceBuffer

__all__ = ["luminance", "contrast_factor", "normalize", "source_colors", "round_half_up"]

# Keeps 259 - c away from zero.
CONTRAST_LIMIT = 258.0


def round_half_up(v: float) -> int:
    """Halves round towards +inf (2.5 -> 3, -2.5 -> -2), unlike round()."""
    return int(math.floor(v + 0.5))


def luminance(rgba: np.ndarray) -> np.ndarray:
    # Integer weights keep pure grays exact (255 stays 255.0).
    arr = rgba.astype(np.int64)
    return (299 * arr[..., 0] + 587 * arr[..., 1] + 114 * arr[..., 2]) / 1000.0


def contrast_factor(contrast: float) -> float:
    c = min(CONTRAST_LIMIT, max(-CONTRAST_LIMIT, float(contrast)))
    return 259.0 * (c + 255.0) / (255.0 * (259.0 - c))


def normalize(
    rgba: np.ndarray,
    invert: bool = False,
    contrast: float = 0.0,
    brightness: float = 0.0,
) -> LuminanceBuffer:
    """Return the luminance buffer; `original` and `working` start identical."""
    lum = luminance(rgba)
    if invert:
        lum = 255.0 - lum

    brightness = min(255.0, max(-255.0, float(brightness)))
    if contrast != 0 or brightness != 0:
        lum = contrast_factor(contrast) * (lum - 128.0) + 128.0 + brightness
    lum = np.clip(np.nan_to_num(lum, nan=0.0), 0.0, 255.0)

    return LuminanceBuffer(original=lum, working=lum.copy())


def source_colors(
    rgba: np.ndarray,
    invert: bool = False,
    contrast: float = 0.0,
    brightness: float = 0.0,
) -> np.ndarray:
    """
    Same correction as normalize(), applied to each RGB channel instead of
    the luminance. Returns an (H, W, 3) float array in [0, 255].
    """
    rgb = rgba[..., :3].astype(np.float64)
    if invert:
        rgb = 255.0 - rgb
    brightness = min(255.0, max(-255.0, float(brightness)))
    if contrast != 0 or brightness != 0:
        rgb = contrast_factor(contrast) * (rgb - 128.0) + 128.0 + brightness
    return np.clip(np.nan_to_num(rgb, nan=0.0), 0.0, 255.0)
