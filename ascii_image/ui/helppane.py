#!/usr/bin/env python3
# ascii_image/ui/helppane.py

from __future__ import annotations

from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import ConditionalContainer, HSplit
from prompt_toolkit.widgets import Frame, TextArea

_HELP_TEXT = (
    "Key Bindings:\n"
    "  d         Cycle dithering (none, floyd, atkinson, noise, ordered)\n"
    "  c         Cycle character set\n"
    "  m         Cycle color mode (color, gradient, glow, source)\n"
    "  i         Invert colors\n"
    "  w         Keep / ignore white pixels\n"
    "  j         Brightness jitter on/off\n"
    "  + / -     Contrast up/down\n"
    "  ] / [     Brightness up/down\n"
    "  b         Blur on/off\n"
    "  k         Cursor effect on/off\n"
    "  s         Static noise animation on/off\n"
    "  f         Fit / fill the window\n"
    "  h         Toggle this help\n"
    "  q         Quit\n"
    "\n"
    "Mouse:\n"
    "  Move over the image to drive the cursor effect\n"
)


class HelpPane:
    def __init__(self):
        self._visible = False
        self.text_area = TextArea(
            text=_HELP_TEXT,
            style="class:help",
            read_only=True,
            focusable=False,
        )
        self.frame = Frame(self.text_area, title="Help", style="class:help")
        self.container = ConditionalContainer(
            HSplit([self.frame]),
            filter=Condition(lambda: self._visible),
        )

    def __pt_container__(self):
        return self.container

    @property
    def visible(self) -> bool:
        return self._visible

    def toggle(self) -> None:
        self._visible = not self._visible
