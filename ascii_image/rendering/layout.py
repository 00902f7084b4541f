#!/usr/bin/env python3
# ascii_image/rendering/layout.py
"""
Scale-to-fit / scale-to-fill for a rendered text block.

A container dimension of None (or "auto") is unconstrained and follows
the content. The block is centered (translate -50%, -50%) and uniformly
scaled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

Dim = Optional[Union[int, float, str]]

__all__ = ["Transform", "size_mode", "compute_scale", "compute_transform"]


@dataclass(frozen=True)
class Transform:
    scale: float = 1.0
    translate: Tuple[float, float] = (0.0, 0.0)   # fraction of the content size
    width: float = 0.0                            # resolved container size
    height: float = 0.0


def _constrained(dim: Dim) -> bool:
    if dim is None or dim == "auto":
        return False
    try:
        return float(dim) > 0
    except (TypeError, ValueError):
        return False


def size_mode(width: Dim, height: Dim) -> str:
    w, h = _constrained(width), _constrained(height)
    if w and h:
        return "both"
    if w:
        return "width"
    if h:
        return "height"
    return "none"


def compute_scale(
    container: Tuple[Dim, Dim],
    natural: Tuple[float, float],
    sizing: str = "fit",
) -> float:
    """Uniform scale for content of natural (width, height) in the container."""
    cw, ch = container
    nw = max(1.0, float(natural[0]))
    nh = max(1.0, float(natural[1]))
    mode = size_mode(cw, ch)
    if mode == "width":
        return float(cw) / nw
    if mode == "height":
        return float(ch) / nh
    if mode == "both":
        sx, sy = float(cw) / nw, float(ch) / nh
        return max(sx, sy) if sizing == "fill" else min(sx, sy)
    return 1.0


def compute_transform(
    container: Tuple[Dim, Dim],
    natural: Tuple[float, float],
    sizing: str = "fit",
) -> Transform:
    """
    Scale plus the container's resolved size; an auto dimension takes the
    scaled content size.
    """
    scale = compute_scale(container, natural, sizing)
    mode = size_mode(*container)
    nw = max(1.0, float(natural[0]))
    nh = max(1.0, float(natural[1]))
    width = float(container[0]) if _constrained(container[0]) else nw * scale
    height = float(container[1]) if _constrained(container[1]) else nh * scale
    translate = (0.0, 0.0) if mode == "none" else (-0.5, -0.5)
    return Transform(scale=scale, translate=translate, width=width, height=height)
