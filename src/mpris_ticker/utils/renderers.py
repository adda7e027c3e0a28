"""
Output renderers for the different status bars.

A renderer turns the fragments of one tick into the line the bar expects.
Clickable fragments are wrapped so that a click runs
``<executable> <command>``, which forwards the command to the running ticker.
"""

import json
import shlex
import sys
from typing import Iterable, Optional

from mpris_ticker.core.interfaces import Fragment
from mpris_ticker.utils.constants import POLYBAR_PADDING_GUARD


class Renderer:
    def render(self, fragments: Iterable[Fragment]) -> str:
        raise NotImplementedError


class PlainRenderer(Renderer):
    """Text only, actions are dropped"""

    def render(self, fragments: Iterable[Fragment]) -> str:
        return "".join(fragment.text for fragment in fragments)


class PolybarRenderer(Renderer):
    """
    Polybar/lemonbar action tags: ``%{A1:cmd:}text%{A}``.

    Scroll windows are followed by a non-whitespace guard character so the
    bar keeps their padding.
    """

    def __init__(self, executable: str):
        self.executable = executable

    def action(self, text: str, command: str) -> str:
        # ':' terminates the command inside the tag and must be escaped
        cmd = f"{shlex.quote(self.executable)} {command}".replace(":", "\\:")
        return f"%{{A1:{cmd}:}}{text}%{{A}}"

    def render(self, fragments: Iterable[Fragment]) -> str:
        parts = []
        for fragment in fragments:
            text = fragment.text
            if fragment.scrolled:
                text += POLYBAR_PADDING_GUARD
            if fragment.action is None:
                parts.append(text)
            else:
                parts.append(self.action(text, fragment.action.value))
        return "".join(parts)


class WaybarRenderer(Renderer):
    """
    Waybar custom module JSON. Waybar has no inline actions, so the text is
    plain and the click commands are listed in the tooltip.
    """

    def __init__(self, css_class: str = "mpris-ticker"):
        self.css_class = css_class

    def render(self, fragments: Iterable[Fragment]) -> str:
        fragments = list(fragments)
        text = "".join(fragment.text for fragment in fragments)
        actions = [f"{f.text.strip()} {f.action.value}" for f in fragments if f.action is not None]
        return json.dumps(
            {"text": text, "tooltip": "\n".join(actions), "class": self.css_class},
            ensure_ascii=False,
        )


def get_renderer(name: str, executable: Optional[str] = None) -> Renderer:
    if name == "plain":
        return PlainRenderer()
    if name == "waybar":
        return WaybarRenderer()
    if name == "polybar":
        return PolybarRenderer(executable or sys.argv[0])
    raise ValueError(f"Unknown renderer: {name}")


class StdoutSink:
    """Writes one line per update and flushes so the bar sees it at once"""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def write(self, line: str):
        self.stream.write(line + "\n")
        self.stream.flush()
