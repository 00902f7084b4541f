#!/usr/bin/env python3
# ascii_image/config.py
"""
Config loader/saver and defaults for the ASCII image renderer.

- One JSON file per user, deep-merged over DEFAULT_CONFIG.
- Atomic writes.
- Every value coerced and clamped so the pipeline never sees out-of-range input.

Usage:
    from ascii_image.config import Config
    cfg = Config.load()                 # ~/.config/ascii_image/ascii_image.json
    cfg["render"]["dither"] = "floyd"
    cfg.save()
"""

from __future__ import annotations

import copy
import json
import logging
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DITHER_MODES = ("none", "floyd", "atkinson", "noise", "ordered")
CURSOR_STYLES = ("gradient", "circle", "image")
COLOR_MODES = ("color", "gradient", "glow", "source")

# ----------------------------
# Defaults
# ----------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    "render": {
        "output_width": 100,              # character columns
        "dither": "none",                 # none | floyd | atkinson | noise | ordered
        "character_set": "detailed",      # built-in name, external name, or "custom"
        "custom_character_set": "@%#*+=-:.",
        "white_mode": "ignore",           # keep | ignore
        "invert_colors": False,
        "blur": 0,                        # pixels
        "brightness": 0,                  # signed offset
        "contrast": 0,                    # signed, UI range -100..100
        "jitter": False,                  # seeded +/-5% brightness noise before dithering
    },
    "cursor": {
        "enabled": False,
        "style": "gradient",              # gradient | circle | image
        "width": 20,                      # buffer pixels
        "invert": False,
        "smoothing": 0,                   # 0..100, 0 = no spring
        "image": None,                    # path/URL for the "image" style
    },
    "color": {
        "mode": "color",                  # color | gradient | glow | source
        "color": "#ffffff",
        "color1": "#ffffff",
        "color2": "#000000",
        "color1_point": 0,                # percent
        "color2_point": 100,
        "threshold": 50,                  # glow split, percent
        "extract": False,                 # seed gradient colors from the image
    },
    "glow": {
        "blur": 0,                        # 0 disables the glow layer
        "opacity": 1.0,
    },
    "static": {
        "interval_s": 0.0,                # 0 = off, else >= 0.05
    },
    "font": {
        "path": None,                     # TrueType font; None tries common monospace fonts
        "size": 12,
        "line_height": 1.0,
        "letter_spacing": 0.0,            # em
        "aspect_ratio": None,             # fixed glyph width/height override
    },
    "layout": {
        "width": None,                    # None = auto (fit-content)
        "height": None,
        "sizing": "fit",                  # fit | fill
        "background": "#000000",
    },
    "interaction": {
        "poll_ms": 24,
    },
    "ui": {
        "theme": "auto",                 # auto | dark | light
        "clear_on_error": False,         # drop the last frame and show the error instead
    },
    "network": {
        "user_agent": "ascii-image/1.0 (+https://example.invalid)",
        "connect_timeout_s": 5.0,
        "read_timeout_s": 15.0,
        "retries": 3,
        "cache_dir": None,                # auto if None: OS cache dir
    },
    "logging": {
        "level": "INFO",
        "http_debug": False,
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
    },
    "character_sets": {},                 # external name -> glyph ramp
}

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "AsciiImage")
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "AsciiImage")
    return os.path.join(os.path.expanduser("~/.config"), "ascii_image")

def _os_cache_home() -> str:
    """Return per-OS cache base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("LOCALAPPDATA") or os.path.expanduser("~\\AppData\\Local")
        return os.path.join(base, "AsciiImage", "Cache")
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Caches"), "AsciiImage")
    return os.path.join(os.path.expanduser("~/.cache"), "ascii_image")

def _default_config_path() -> str:
    """Resolve default config path, honoring ASCII_IMAGE_CONFIG env override."""
    env = os.environ.get("ASCII_IMAGE_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "ascii_image.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cfg_", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except Exception:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise

def _coerce_num(v: Any, default: float, minmax: Optional[Tuple[float, float]] = None) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        return float(default)
    if x != x:  # NaN
        return float(default)
    if minmax:
        lo, hi = minmax
        x = min(hi, max(lo, x))
    return x

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError, OverflowError):
        return int(default)
    if minmax:
        lo, hi = minmax
        x = min(hi, max(lo, x))
    return x

def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"): return True
        if s in ("0", "false", "no", "off"): return False
    return default

def _coerce_choice(v: Any, choices: Tuple[str, ...], default: str) -> str:
    return v if v in choices else default

def _coerce_color(v: Any, default: str) -> str:
    if isinstance(v, str) and v.startswith("#") and len(v) in (4, 7, 9):
        try:
            int(v[1:], 16)
            return v.lower()
        except ValueError:
            pass
    return default

def _coerce_dim(v: Any) -> Optional[float]:
    """Layout dimension: None/'auto' stays unconstrained, numbers must be positive."""
    if v is None or v == "auto":
        return None
    x = _coerce_num(v, 0.0)
    return x if x > 0 else None

# ----------------------------
# Validation
# ----------------------------

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    d = DEFAULT_CONFIG
    c = _deep_merge(copy.deepcopy(d), cfg or {})

    r = c["render"]
    r["output_width"] = _coerce_int(r.get("output_width"), d["render"]["output_width"], (1, 1000))
    r["dither"] = _coerce_choice(r.get("dither"), DITHER_MODES, d["render"]["dither"])
    cs = r.get("character_set")
    r["character_set"] = cs if isinstance(cs, str) and cs else d["render"]["character_set"]
    ccs = r.get("custom_character_set")
    r["custom_character_set"] = ccs if isinstance(ccs, str) else ""
    r["white_mode"] = _coerce_choice(r.get("white_mode"), ("keep", "ignore"), d["render"]["white_mode"])
    r["invert_colors"] = _coerce_bool(r.get("invert_colors"), d["render"]["invert_colors"])
    r["blur"] = _coerce_num(r.get("blur"), 0, (0.0, 50.0))
    r["brightness"] = _coerce_num(r.get("brightness"), 0, (-255.0, 255.0))
    r["contrast"] = _coerce_num(r.get("contrast"), 0, (-258.0, 258.0))
    r["jitter"] = _coerce_bool(r.get("jitter"), d["render"]["jitter"])

    cur = c["cursor"]
    cur["enabled"] = _coerce_bool(cur.get("enabled"), d["cursor"]["enabled"])
    cur["style"] = _coerce_choice(cur.get("style"), CURSOR_STYLES, d["cursor"]["style"])
    cur["width"] = _coerce_num(cur.get("width"), d["cursor"]["width"], (0.0, 1000.0))
    cur["invert"] = _coerce_bool(cur.get("invert"), d["cursor"]["invert"])
    cur["smoothing"] = _coerce_num(cur.get("smoothing"), 0, (0.0, 100.0))
    cur["image"] = str(cur["image"]) if cur.get("image") else None

    col = c["color"]
    col["mode"] = _coerce_choice(col.get("mode"), COLOR_MODES, d["color"]["mode"])
    for key in ("color", "color1", "color2"):
        col[key] = _coerce_color(col.get(key), d["color"][key])
    for key in ("color1_point", "color2_point", "threshold"):
        col[key] = _coerce_num(col.get(key), d["color"][key], (0.0, 100.0))
    col["extract"] = _coerce_bool(col.get("extract"), d["color"]["extract"])

    g = c["glow"]
    g["blur"] = _coerce_num(g.get("blur"), 0, (0.0, 30.0))
    g["opacity"] = _coerce_num(g.get("opacity"), 1.0, (0.0, 1.0))

    st = c["static"]
    interval = _coerce_num(st.get("interval_s"), 0.0, (0.0, 60.0))
    st["interval_s"] = 0.0 if interval <= 0 else max(0.05, interval)

    f = c["font"]
    f["path"] = str(f["path"]) if f.get("path") else None
    f["size"] = _coerce_int(f.get("size"), d["font"]["size"], (4, 256))
    f["line_height"] = _coerce_num(f.get("line_height"), 1.0, (0.5, 4.0))
    f["letter_spacing"] = _coerce_num(f.get("letter_spacing"), 0.0, (-0.5, 2.0))
    ar = f.get("aspect_ratio")
    f["aspect_ratio"] = None if ar is None else _coerce_num(ar, 0.6, (0.05, 5.0))

    lay = c["layout"]
    lay["width"] = _coerce_dim(lay.get("width"))
    lay["height"] = _coerce_dim(lay.get("height"))
    lay["sizing"] = _coerce_choice(lay.get("sizing"), ("fit", "fill"), d["layout"]["sizing"])
    lay["background"] = _coerce_color(lay.get("background"), d["layout"]["background"])

    c["interaction"]["poll_ms"] = _coerce_int(c["interaction"].get("poll_ms"), 24, (5, 1000))
    c["ui"]["theme"] = _coerce_choice(c["ui"].get("theme"), ("auto", "dark", "light"), d["ui"]["theme"])
    c["ui"]["clear_on_error"] = _coerce_bool(c["ui"].get("clear_on_error"), d["ui"]["clear_on_error"])

    n = c["network"]
    n["user_agent"] = str(n.get("user_agent") or d["network"]["user_agent"])
    n["connect_timeout_s"] = _coerce_num(n.get("connect_timeout_s"), 5.0, (0.2, 60.0))
    n["read_timeout_s"] = _coerce_num(n.get("read_timeout_s"), 15.0, (0.5, 120.0))
    n["retries"] = _coerce_int(n.get("retries"), 3, (0, 10))
    n["cache_dir"] = n.get("cache_dir") or os.path.join(_os_cache_home(), "images")

    lg = c["logging"]
    if lg.get("level") not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"):
        lg["level"] = d["logging"]["level"]
    lg["http_debug"] = _coerce_bool(lg.get("http_debug"), d["logging"]["http_debug"])
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), d["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"] = _coerce_int(lg.get("rotate_keep"), d["logging"]["rotate_keep"], (0, 50))

    sets = c.get("character_sets")
    if not isinstance(sets, dict):
        logger.warning("character_sets must be an object, ignoring %r", type(sets).__name__)
        sets = {}
    c["character_sets"] = {str(k): v for k, v in sets.items() if isinstance(v, str) and v}

    return c

# ----------------------------
# Public API
# ----------------------------

@dataclass
class Config:
    """Thin wrapper around a nested dict with load/save/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate({}))
    path: str = field(default_factory=_default_config_path)

    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    @classmethod
    def load(cls, path: Optional[str] = None, create_if_missing: bool = True) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            cfg = _validate({})
            if create_if_missing:
                _atomic_write_json(cfg_path, cfg)
            return cls(cfg, cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
            if not isinstance(user_cfg, dict):
                raise ValueError("top-level config must be an object")
        except (OSError, ValueError) as exc:
            # Corrupt file. Backup and regenerate.
            logger.warning("Config %s unreadable (%s); regenerating", cfg_path, exc)
            try:
                shutil.copyfile(cfg_path, cfg_path + ".corrupt.bak")
            except OSError:
                pass
            user_cfg = {}

        return cls(_validate(user_cfg), cfg_path)

    def save(self) -> None:
        """Persist validated data to JSON atomically."""
        full = _validate(self.data)
        _atomic_write_json(self.path, full)
        self.data = full

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        self.data = _validate(_deep_merge(self.data, partial))

    @property
    def cache_dir(self) -> str:
        return self.data["network"]["cache_dir"]


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "DITHER_MODES",
    "CURSOR_STYLES",
    "COLOR_MODES",
]
