"""
Tests for track metadata formatting and optional-section suppression.
"""

import pytest

from mpris_ticker.core.interfaces import PlayerSnapshot
from mpris_ticker.core.metadata_formatter import MetadataFormatter


def player(**fields):
    return PlayerSnapshot(player_id="mpv", name="mpv", **fields)


def fmt(source, **fields):
    return MetadataFormatter.from_format(source).format(player(**fields))


def test_optional_artist_prefix():
    assert fmt("<[artist] - >[title]", title="Song") == "Song"
    assert fmt("<[artist] - >[title]", artists=("A",), title="Song") == "A - Song"


@pytest.mark.parametrize("fields, expected", [
    ({"title": "Song"}, " - Song"),
    ({"artists": ("A",)}, "A"),
    ({}, ""),
    ({"artists": ("A",), "title": "Song"}, "A - Song"),
])
def test_section_keeps_text_around_resolved_blocks(fields, expected):
    assert fmt("<[artist] - [title]>", **fields) == expected


def test_unset_fields_print_placeholder_outside_sections():
    assert fmt("[artist] - [title]") == "N/A - N/A"
    assert fmt("[track]. [album]") == "N/A. N/A"


def test_field_values():
    out = fmt(
        "[artist]|[artists]|[album]|[album-artist]|[title]|[track]",
        artists=("One", "Two"), album="LP", album_artists=("Band", "Guest"),
        title="Song", track_number=7,
    )
    assert out == "One|One, Two|LP|Band|Song|7"


def test_empty_values_count_as_unset():
    assert fmt("<[artist] - >[title]", artists=("",), title="") == "N/A"
    assert fmt("<[album]>x", album="   ") == "x"


def test_nested_sections():
    source = "<[album]< #[track]>>"
    assert fmt(source, album="LP") == "LP"
    assert fmt(source, album="LP", track_number=3) == "LP #3"
    assert fmt(source, track_number=3) == " #3"
    assert fmt(source) == ""


def test_section_without_blocks_is_suppressed():
    assert fmt("a<b>c") == "ac"


def test_no_player_formats_to_nothing():
    assert MetadataFormatter.from_format("[title]").format(None) == ""


def test_resolve_reports_whether_any_field_was_set():
    formatter = MetadataFormatter.from_format("[artist] - [title]")
    assert formatter.resolve(player()).empty
    assert not formatter.resolve(player(title="Song")).empty
    assert formatter.resolve(None).empty
