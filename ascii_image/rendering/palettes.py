#!/usr/bin/env python3
# ascii_image/rendering/palettes.py
"""
Character palettes and palette resolution.

A palette is an ordered glyph ramp: index 0 is used for the darkest
luminance, the last index for the lightest.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "default_palettes",
    "resolve_palette",
    "FALLBACK_PALETTE",
]

# Last-resort ramp when every lookup produced nothing usable.
FALLBACK_PALETTE = ".#"


def default_palettes() -> Dict[str, str]:
    return {
        "detailed": "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,\"^`'.",
        "standard": "@%#*+=-:.",
        "blocks": "█▓▒░ ",
        "binary": "01",
        "hex": "0123456789ABCDEF",
    }


def _lookup(sets: Any, name: str) -> Optional[str]:
    if not isinstance(sets, dict) or not sets:
        return None
    value = sets.get(name)
    if isinstance(value, str) and value:
        return value
    return None


def resolve_palette(
    character_set: str,
    custom_character_set: Any = "",
    character_sets: Optional[Dict[str, str]] = None,
) -> str:
    """
    Resolve the active glyph ramp. Always returns a non-empty string.

    "custom" uses the literal custom string (a single space when empty).
    Other names are looked up in the external mapping first, then the
    built-ins, then fall back to "detailed".
    """
    builtins = default_palettes()
    if character_set == "custom":
        if isinstance(custom_character_set, str) and custom_character_set:
            palette: Any = custom_character_set
        else:
            palette = " "
    else:
        palette = _lookup(character_sets, character_set) or builtins.get(character_set)
        if palette is None:
            logger.warning("Character set %r not found, using 'detailed'", character_set)
            palette = builtins["detailed"]

    if not isinstance(palette, str) or not palette:
        logger.error("Empty character set resolved, using fallback %r", FALLBACK_PALETTE)
        palette = FALLBACK_PALETTE
    return palette
