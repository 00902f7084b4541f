#!/usr/bin/env python3
# ascii_image/rendering/dither.py
"""
Luminance quantization into palette indices.

Backends:
- none:      direct rounding to the nearest level
- floyd:     Floyd-Steinberg error diffusion (7/16, 3/16, 5/16, 1/16)
- atkinson:  Atkinson-style diffusion, six taps of e/8 (6/8 of the error is carried)
- ordered:   4x4 Bayer threshold matrix, stateless
- noise:     per-cell seeded noise, reproducible for a given seed

All backends scan row-major. Error is only written ahead into cells not yet
visited, every write is bounds-checked and clamped to [0, 255]. Cells whose
pre-dither value is exactly 255 are emitted blank (index -1) when white mode
is "ignore" and contribute no error.

apply_jitter() is the optional seeded brightness jitter run before any
backend.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ascii_image.models import LuminanceBuffer
from ascii_image.rendering.photometric import round_half_up

logger = logging.getLogger(__name__)

__all__ = [
    "SeededRandom",
    "apply_jitter",
    "DitherBackend",
    "Ditherer",
    "quantize",
    "render_rows",
    "BAYER_4X4",
    "BLANK",
]

BLANK = -1

BAYER_4X4 = (
    (0, 8, 2, 10),
    (12, 4, 14, 6),
    (3, 11, 1, 9),
    (15, 7, 13, 5),
)

_MODULUS = 2147483647
# Brightness jitter span as a fraction of full scale (+/- 0.05).
JITTER_SPAN = 0.1


class SeededRandom:
    """Park-Miller minimal standard LCG. One integer of state, advanced per draw."""

    def __init__(self, seed: int):
        s = int(seed) % _MODULUS
        if s <= 0:
            s += _MODULUS - 1
        self.seed = s

    def next(self) -> float:
        self.seed = (self.seed * 16807) % _MODULUS
        return (self.seed - 1) / (_MODULUS - 1)


def apply_jitter(buf: LuminanceBuffer, seed: int) -> None:
    """
    Nudge every working value by up to +/- 0.05 of full scale, one draw per
    cell in row-major order. `original` is left alone so the white test still
    sees the sampled luminance.
    """
    rng = SeededRandom(seed)
    span = JITTER_SPAN * 255.0
    gray = buf.working.ravel().tolist()
    for i, v in enumerate(gray):
        v += (rng.next() - 0.5) * span
        gray[i] = 0.0 if v < 0.0 else (255.0 if v > 255.0 else v)
    buf.working[...] = np.asarray(gray, dtype=np.float64).reshape(buf.height, buf.width)


def _level(v: float, n: int) -> int:
    idx = round_half_up(v / 255.0 * (n - 1))
    if idx < 0:
        return 0
    if idx > n - 1:
        return n - 1
    return idx


# -------------------------
# Backends
# -------------------------

class DitherBackend:
    """Interface for all quantizers."""
    name: str = "base"

    def quantize(
        self,
        buf: LuminanceBuffer,
        n: int,
        ignore_white: bool,
        seed: int,
    ) -> List[int]:
        raise NotImplementedError


class DirectQuantizer(DitherBackend):
    name = "none"

    def quantize(self, buf, n, ignore_white, seed):
        original = buf.original.ravel().tolist()
        working = buf.working.ravel().tolist()
        out = []
        for orig, v in zip(original, working):
            if ignore_white and orig == 255:
                out.append(BLANK)
            else:
                out.append(_level(v, n))
        return out


class ErrorDiffusion(DitherBackend):
    """
    Generic error diffusion over a flat working array.
    taps: (dx, dy, weight) relative to the current cell.
    """

    taps: Tuple[Tuple[int, int, float], ...] = ()

    def quantize(self, buf, n, ignore_white, seed):
        w, h = buf.width, buf.height
        original = buf.original.ravel().tolist()
        gray = buf.working.ravel().tolist()
        out = [BLANK] * (w * h)
        taps = self.taps
        for y in range(h):
            row = y * w
            for x in range(w):
                idx = row + x
                if ignore_white and original[idx] == 255:
                    continue
                level = _level(gray[idx], n)
                out[idx] = level
                if n < 2:
                    continue
                error = gray[idx] - level / (n - 1) * 255.0
                if error == 0:
                    continue
                for dx, dy, weight in taps:
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < w and ny < h:
                        j = ny * w + nx
                        v = gray[j] + error * weight
                        gray[j] = 0.0 if v < 0.0 else (255.0 if v > 255.0 else v)
        buf.working[...] = np.asarray(gray, dtype=np.float64).reshape(h, w)
        return out


class FloydSteinberg(ErrorDiffusion):
    name = "floyd"
    taps = (
        (1, 0, 7 / 16),
        (-1, 1, 3 / 16),
        (0, 1, 5 / 16),
        (1, 1, 1 / 16),
    )


class Atkinson(ErrorDiffusion):
    # Six taps of 1/8; the remaining 2/8 of the error is dropped.
    name = "atkinson"
    taps = (
        (1, 0, 1 / 8),
        (2, 0, 1 / 8),
        (-1, 1, 1 / 8),
        (0, 1, 1 / 8),
        (1, 1, 1 / 8),
        (0, 2, 1 / 8),
    )


class OrderedBayer(DitherBackend):
    name = "ordered"

    def quantize(self, buf, n, ignore_white, seed):
        w, h = buf.width, buf.height
        original = buf.original.ravel().tolist()
        gray = buf.working.ravel().tolist()
        out = []
        for y in range(h):
            bayer_row = BAYER_4X4[y % 4]
            for x in range(w):
                idx = y * w + x
                if ignore_white and original[idx] == 255:
                    out.append(BLANK)
                    continue
                t = (bayer_row[x % 4] + 0.5) / 16.0
                v = min(1.0, max(0.0, gray[idx] / 255.0 + t - 0.5))
                out.append(min(n - 1, int(math.floor(v * n))))
        return out


class NoiseDither(DitherBackend):
    """One RNG draw per cell, taken before the white test so positions stay aligned."""

    name = "noise"

    def quantize(self, buf, n, ignore_white, seed):
        rng = SeededRandom(seed)
        original = buf.original.ravel().tolist()
        gray = buf.working.ravel().tolist()
        amplitude = 255.0 / n
        out = []
        for orig, v in zip(original, gray):
            r = rng.next()
            if ignore_white and orig == 255:
                out.append(BLANK)
                continue
            noisy = min(255.0, max(0.0, v + (r - 0.4) * amplitude))
            out.append(_level(noisy, n))
        return out


# -------------------------
# Dispatcher
# -------------------------

class Ditherer:
    """Holds quantizer backends by name. Unknown names fall back to 'none'."""

    def __init__(self):
        self._backends: Dict[str, DitherBackend] = {}
        for backend in (DirectQuantizer(), FloydSteinberg(), Atkinson(), OrderedBayer(), NoiseDither()):
            self.register(backend.name, backend)

    def register(self, name: str, backend: DitherBackend) -> None:
        self._backends[name] = backend

    def get(self, name: str) -> DitherBackend:
        backend = self._backends.get(name)
        if backend is None:
            logger.warning("Unknown dither algorithm %r, using 'none'", name)
            backend = self._backends["none"]
        return backend

    def quantize(
        self,
        buf: LuminanceBuffer,
        palette: str,
        algorithm: str = "none",
        white_mode: str = "keep",
        seed: int = 1,
    ) -> np.ndarray:
        n = max(1, len(palette))
        flat = self.get(algorithm).quantize(buf, n, white_mode == "ignore", seed)
        return np.asarray(flat, dtype=np.int32).reshape(buf.height, buf.width)


_default = Ditherer()


def quantize(
    buf: LuminanceBuffer,
    palette: str,
    algorithm: str = "none",
    white_mode: str = "keep",
    seed: int = 1,
) -> np.ndarray:
    """Return an (H, W) int32 array of palette indices, BLANK for skipped white cells."""
    return _default.quantize(buf, palette, algorithm, white_mode, seed)


def render_rows(indices: np.ndarray, palette: Sequence[str]) -> Tuple[str, ...]:
    glyphs = list(palette)
    rows = []
    for line in indices.tolist():
        rows.append("".join(" " if i == BLANK else glyphs[i] for i in line))
    return tuple(rows)
