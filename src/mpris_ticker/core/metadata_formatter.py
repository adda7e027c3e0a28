"""
Track metadata formatting.

Uses the same grammar and optional-section rule as the display format,
restricted to the metadata blocks, which take no arguments.
"""

from typing import Optional, Sequence

from mpris_ticker.core.format_parser import parse_metadata_format
from mpris_ticker.core.format_tree import (
    Block, BlockKind, FormatTree, Literal, Node, Resolved, Section,
    collapse_section, fragments_text, join_sequence,
)
from mpris_ticker.core.interfaces import PlayerSnapshot

PLACEHOLDER = "N/A"
LIST_SEPARATOR = ", "


def _field_value(kind: BlockKind, player: PlayerSnapshot) -> Optional[str]:
    if kind is BlockKind.ARTIST:
        return player.artist
    if kind is BlockKind.ARTISTS:
        return LIST_SEPARATOR.join(player.artists) if player.artists else None
    if kind is BlockKind.ALBUM:
        return player.album
    if kind is BlockKind.ALBUM_ARTIST:
        return player.album_artist
    if kind is BlockKind.TITLE:
        return player.title
    if kind is BlockKind.TRACK:
        return str(player.track_number) if player.track_number is not None else None
    raise ValueError(f"'{kind.value}' is not a metadata block")


class MetadataFormatter:
    """
    Formats a player's track metadata into a single line.

    An unset field prints ``N/A`` at the top level. Inside an optional
    section it is only reported as empty, so the section can drop it along
    with the text that belongs to it.
    """

    def __init__(self, tree: FormatTree):
        self.tree = tree

    @classmethod
    def from_format(cls, source: str) -> "MetadataFormatter":
        return cls(parse_metadata_format(source))

    def resolve(self, player: Optional[PlayerSnapshot]) -> Resolved:
        """
        Format the track info, keeping track of whether any field was set.

        The result is empty when no block resolved, even if placeholders
        were printed, so a section around [metadata] can drop it.
        """
        if player is None:
            return Resolved.nothing()
        return join_sequence(self._resolve(node, player) for node in self.tree.nodes)

    def format(self, player: Optional[PlayerSnapshot]) -> str:
        return fragments_text(self.resolve(player).fragments)

    def _resolve(self, node: Node, player: PlayerSnapshot) -> Resolved:
        if isinstance(node, Literal):
            return Resolved.from_literal(node.text)
        if isinstance(node, Section):
            return collapse_section(self._resolve(child, player) for child in node.children)
        return self._resolve_block(node, player)

    @staticmethod
    def _resolve_block(block: Block, player: PlayerSnapshot) -> Resolved:
        value = _field_value(block.kind, player)
        if value is None:
            return Resolved.text(PLACEHOLDER, empty=True)
        return Resolved.text(value)


def describe(players: Sequence[PlayerSnapshot]) -> str:
    """Short description of a list of players, for log lines"""
    return ", ".join(f"{p.name} ({p.status.value})" for p in players) or "no players"
