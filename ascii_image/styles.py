#!/usr/bin/env python3
# ascii_image/styles.py
"""
Style definitions for the ASCII image viewer.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style
from ascii_image.config import Config


def make_style(cfg: Config) -> Style:
    theme = cfg["ui"].get("theme", "auto")
    background = cfg["layout"].get("background", "#000000")

    base_dark = {
        "canvas": f"bg:{background}",
        "status": "bg:#303030 #cccccc",
        "status.error": "bg:#303030 #ff6060 bold",
        "help": "bg:#202020 #dddddd",
    }
    base_light = {
        "canvas": f"bg:{background}",
        "status": "bg:#cccccc #000000",
        "status.error": "bg:#cccccc #aa0000 bold",
        "help": "bg:#eeeeee #000000",
    }

    if theme == "light":
        return Style.from_dict(base_light)
    if theme == "dark":
        return Style.from_dict(base_dark)

    if os.getenv("TERM_THEME", "").lower() == "light":
        return Style.from_dict(base_light)
    return Style.from_dict(base_dark)
