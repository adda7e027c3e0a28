import io
import json

import pytest

from mpris_ticker.core.interfaces import Command, Fragment
from mpris_ticker.utils.renderers import (
    PlainRenderer, PolybarRenderer, StdoutSink, WaybarRenderer, get_renderer,
)

FRAGMENTS = [Fragment("<", Command.PREV), Fragment(" Song "), Fragment(">", Command.NEXT)]


def test_plain_renderer_drops_actions():
    assert PlainRenderer().render(FRAGMENTS) == "< Song >"


def test_polybar_renderer_wraps_actions():
    out = PolybarRenderer("/usr/bin/mpris-ticker").render(FRAGMENTS)
    assert out == (
        "%{A1:/usr/bin/mpris-ticker prev:}<%{A}"
        " Song "
        "%{A1:/usr/bin/mpris-ticker next:}>%{A}"
    )


def test_polybar_renderer_escapes_colons():
    out = PolybarRenderer("/opt/a:b/ticker").render([Fragment("x", Command.PLAY)])
    assert out == "%{A1:/opt/a\\:b/ticker play:}x%{A}"


def test_waybar_renderer_emits_json():
    data = json.loads(WaybarRenderer().render(FRAGMENTS))
    assert data["text"] == "< Song >"
    assert data["tooltip"] == "< prev\n> next"
    assert data["class"] == "mpris-ticker"


def test_get_renderer():
    assert isinstance(get_renderer("plain"), PlainRenderer)
    assert isinstance(get_renderer("waybar"), WaybarRenderer)
    assert get_renderer("polybar", "tick").executable == "tick"
    with pytest.raises(ValueError):
        get_renderer("conky")


def test_stdout_sink_writes_lines():
    stream = io.StringIO()
    sink = StdoutSink(stream)
    sink.write("one")
    sink.write("two")
    assert stream.getvalue() == "one\ntwo\n"


def test_polybar_guards_scroll_padding():
    fragments = [Fragment("<", Command.PREV), Fragment(" "), Fragment("Song    ", scrolled=True)]
    out = PolybarRenderer("tick").render(fragments)
    assert out == "%{A1:tick prev:}<%{A} Song    \uffff"
    assert out == out.rstrip()


def test_other_renderers_leave_scroll_windows_alone():
    fragments = [Fragment("Song    ", scrolled=True)]
    assert PlainRenderer().render(fragments) == "Song    "
    assert json.loads(WaybarRenderer().render(fragments))["text"] == "Song    "
