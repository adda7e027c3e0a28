"""
Tests for the format string compiler.
"""

import pytest

from mpris_ticker.core.format_parser import parse, parse_display_format, parse_metadata_format
from mpris_ticker.core.format_tree import Block, BlockKind, FormatMode, Literal, Section
from mpris_ticker.utils.constants import DEFAULT_DISPLAY_FORMAT, DEFAULT_METADATA_FORMAT
from mpris_ticker.utils.exceptions import (
    ArgumentCountError, DuplicateMetadataBlock, FormatError,
    MissingMandatoryMetadataBlock, TickerException,
    UnexpectedCharacter, UnknownBlockKind, UnterminatedBlock, UnterminatedOptional,
)


def metadata_args(source):
    tree = parse_display_format(source)
    block = next(b for b in tree.blocks() if b.kind is BlockKind.METADATA)
    return block.arg("buffer_size"), block.arg("wait_ticks")


def test_default_display_format():
    tree = parse_display_format(DEFAULT_DISPLAY_FORMAT)
    kinds = [node.kind if isinstance(node, Block) else node.text for node in tree.nodes]
    assert kinds == [
        BlockKind.PREV, " ", BlockKind.PLAY_PAUSE, " ", BlockKind.NEXT, " ",
        BlockKind.INFO, " ┃ ", BlockKind.METADATA,
    ]
    info = tree.nodes[6]
    assert info.args == {"show_total": True, "show_name": True}
    assert tree.nodes[8].args == {"buffer_size": 32, "wait_ticks": 10}
    assert tree.block_count == 5


def test_default_metadata_format():
    tree = parse_metadata_format(DEFAULT_METADATA_FORMAT)
    section, title = tree.nodes
    assert isinstance(section, Section)
    assert section.children == (Block(BlockKind.ARTIST, {}, 0), Literal(" - "))
    assert title == Block(BlockKind.TITLE, {}, 1)


@pytest.mark.parametrize("source, expected", [
    ("[metadata]", (32, 10)),
    ("[metadata:]", (32, 10)),
    ("[metadata:,]", (32, 10)),
    ("[metadata:,11]", (32, 11)),
    ("[metadata:20]", (20, 10)),
    ("[ metadata : 12 , 3 ]", (12, 3)),
])
def test_metadata_arguments_and_defaults(source, expected):
    assert metadata_args(source) == expected


def test_too_many_arguments():
    with pytest.raises(ArgumentCountError):
        parse_display_format("[metadata:,,]")
    with pytest.raises(ArgumentCountError):
        parse_display_format("[prev:1][metadata]")


def test_malformed_arguments_fall_back_to_defaults():
    assert metadata_args("[metadata:abc,5]") == (32, 5)
    assert metadata_args("[metadata:-4,x]") == (32, 10)
    # buffer_size must be at least one character wide
    assert metadata_args("[metadata:0,0]") == (32, 0)


def test_boolean_arguments():
    tree = parse_display_format("[info:false][time:TRUE,true][metadata]")
    info, time, _ = tree.nodes
    assert info.args == {"show_total": False, "show_name": True}
    assert time.args == {"show_length": True, "use_remaining": True}

    tree = parse_display_format("[time:yes,1][metadata]")
    assert tree.nodes[0].args == {"show_length": True, "use_remaining": False}


def test_nested_sections():
    tree = parse_display_format("<a<[time]b>c>[metadata]")
    outer = tree.nodes[0]
    assert outer.children[0] == Literal("a")
    inner = outer.children[1]
    assert inner.children == (Block(BlockKind.TIME, {"show_length": True, "use_remaining": False}, 0), Literal("b"))
    assert outer.children[2] == Literal("c")


def test_metadata_block_may_be_nested():
    tree = parse_display_format("<<< [metadata:8] >>>")
    assert tree.has_block(BlockKind.METADATA)


@pytest.mark.parametrize("source", [
    "",
    "plain text",
    "[prev] [play-pause] [next]",
    "<[time]<[info]>>",
])
def test_missing_metadata_block(source):
    with pytest.raises(MissingMandatoryMetadataBlock):
        parse_display_format(source)


def test_metadata_mode_does_not_require_metadata_block():
    tree = parse_metadata_format("[title]")
    assert tree.mode is FormatMode.METADATA


@pytest.mark.parametrize("source", ["[metadata", "[[]", "[metadata][info", "<[metadata:[>]"])
def test_unterminated_block(source):
    with pytest.raises(UnterminatedBlock):
        parse_display_format(source)


def test_unterminated_optional():
    with pytest.raises(UnterminatedOptional) as exc:
        parse_display_format("ab<[metadata]<x>")
    assert exc.value.position == 2


@pytest.mark.parametrize("source, char", [("[metadata]>", ">"), ("a]b[metadata]", "]")])
def test_unexpected_closing_character(source, char):
    with pytest.raises(UnexpectedCharacter) as exc:
        parse_display_format(source)
    assert exc.value.char == char


def test_unknown_block_kinds_per_mode():
    with pytest.raises(UnknownBlockKind) as exc:
        parse_display_format("[foo][metadata]")
    assert exc.value.name == "foo"

    with pytest.raises(UnknownBlockKind):
        parse_display_format("[title][metadata]")

    with pytest.raises(UnknownBlockKind):
        parse_metadata_format("[metadata]")


def test_metadata_blocks_take_no_arguments():
    with pytest.raises(ArgumentCountError):
        parse_metadata_format("[title:1]")


def test_slots_follow_depth_first_order():
    tree = parse_display_format("<[time]<[status]>>[metadata][info]")
    assert [(b.kind, b.slot) for b in tree.blocks()] == [
        (BlockKind.TIME, 0), (BlockKind.STATUS, 1),
        (BlockKind.METADATA, 2), (BlockKind.INFO, 3),
    ]
    assert tree.block_count == 4


def test_errors_share_base_classes():
    with pytest.raises(FormatError) as exc:
        parse("[nope]", FormatMode.METADATA)
    assert isinstance(exc.value, TickerException)
    assert "unknown block 'nope'" in str(exc.value)


@pytest.mark.parametrize("source, position", [
    ("[metadata][metadata]", 10),
    ("<[metadata:8]> [info] [metadata]", 22),
])
def test_second_metadata_block_is_rejected(source, position):
    with pytest.raises(DuplicateMetadataBlock) as exc:
        parse_display_format(source)
    assert exc.value.position == position
