#!/usr/bin/env python3
# ascii_image/ui/statusbar.py

from __future__ import annotations
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.widgets import Label

from ascii_image.config import Config
from ascii_image.models import Status
from ascii_image.ui.state import ViewerState


class StatusBar:
    def __init__(self, state: ViewerState, cfg: Config):
        self.state = state
        self.cfg = cfg
        self.label = Label(self.text, style="class:status")

    def __pt_container__(self):
        return self.label

    def text(self):
        r = self.cfg["render"]
        static = self.cfg["static"]["interval_s"]
        if self.state.status == Status.ERROR:
            head = f"<b>error</b> {_escape(self.state.error or '')}"
        else:
            head = f"{self.state.status.value} {self.state.last_render_ms:.1f}ms"
        msg = (
            f" {head} | dither={r['dither'] if not static else 'noise'} "
            f"set={_escape(r['character_set'])} color={self.cfg['color']['mode']} "
            f"c={r['contrast']:+.0f} b={r['brightness']:+.0f}"
            f"{' inv' if r['invert_colors'] else ''}"
            f"{' jitter' if r['jitter'] else ''}"
            f"{' static' if static else ''}  {_escape(self.state.info_msg)}"
        )
        return HTML(msg)


def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
