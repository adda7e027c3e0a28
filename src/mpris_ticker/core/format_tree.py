"""
Format Tree Model
=================

Node types produced by the format parser, the static argument schema of
every block kind, and the rule used to collapse an optional section once
its children have been resolved.

A compiled format is a flat sequence of three node types:

- ``Literal``: plain text, emitted unchanged
- ``Block``: a ``[name:args]`` directive resolved against player state
- ``Section``: a ``<...>`` optional section holding its own sequence

Each ``Block`` carries a ``slot``, its index in a depth-first traversal of
the whole tree. Slots are stable for the lifetime of the tree and key any
per-block animation state (see ``scroller.ScrollEngine``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

from mpris_ticker.core.interfaces import Fragment


class FormatMode(Enum):
    DISPLAY = "display"
    METADATA = "metadata"


class BlockKind(Enum):
    # Display blocks
    PREV = "prev"
    NEXT = "next"
    PLAY_PAUSE = "play-pause"
    STATUS = "status"
    PREV_PLAYER = "prev-player"
    NEXT_PLAYER = "next-player"
    INFO = "info"
    METADATA = "metadata"
    TIME = "time"

    # Metadata blocks
    ARTIST = "artist"
    ARTISTS = "artists"
    ALBUM = "album"
    ALBUM_ARTIST = "album-artist"
    TITLE = "title"
    TRACK = "track"


DISPLAY_KINDS = frozenset({
    BlockKind.PREV, BlockKind.NEXT, BlockKind.PLAY_PAUSE, BlockKind.STATUS,
    BlockKind.PREV_PLAYER, BlockKind.NEXT_PLAYER, BlockKind.INFO,
    BlockKind.METADATA, BlockKind.TIME,
})

METADATA_KINDS = frozenset({
    BlockKind.ARTIST, BlockKind.ARTISTS, BlockKind.ALBUM,
    BlockKind.ALBUM_ARTIST, BlockKind.TITLE, BlockKind.TRACK,
})

MODE_KINDS = {
    FormatMode.DISPLAY: DISPLAY_KINDS,
    FormatMode.METADATA: METADATA_KINDS,
}


@dataclass(frozen=True)
class ArgSpec:
    """One positional block argument: its name, type and default"""
    name: str
    type: type
    default: Any
    minimum: int = 0

    def convert(self, token: str):
        """
        Convert a raw token to this argument's type.

        Raises:
            ValueError: If the token is not a valid value for this position
        """
        if self.type is bool:
            lowered = token.lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            raise ValueError(f"expected true/false for '{self.name}', got '{token}'")

        if not token.isdigit():
            raise ValueError(f"expected a decimal number for '{self.name}', got '{token}'")
        value = int(token)
        if value < self.minimum:
            raise ValueError(f"'{self.name}' must be at least {self.minimum}, got {value}")
        return value


INFO_ARGS = (
    ArgSpec("show_total", bool, True),
    ArgSpec("show_name", bool, True),
)

METADATA_ARGS = (
    ArgSpec("buffer_size", int, 32, minimum=1),
    ArgSpec("wait_ticks", int, 10),
)

TIME_ARGS = (
    ArgSpec("show_length", bool, True),
    ArgSpec("use_remaining", bool, False),
)

ARG_SCHEMAS: Dict[BlockKind, Tuple[ArgSpec, ...]] = {
    BlockKind.INFO: INFO_ARGS,
    BlockKind.METADATA: METADATA_ARGS,
    BlockKind.TIME: TIME_ARGS,
}

# Width of the scroll window used for the player name in [info]
INFO_NAME_WIDTH = 10
DEFAULT_WAIT_TICKS = METADATA_ARGS[1].default


def schema_for(kind: BlockKind) -> Tuple[ArgSpec, ...]:
    return ARG_SCHEMAS.get(kind, ())


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    args: Dict[str, Any] = field(default_factory=dict)
    slot: int = 0

    def arg(self, name: str):
        return self.args[name]


@dataclass(frozen=True)
class Section:
    children: Tuple["Node", ...]


Node = Union[Literal, Block, Section]


@dataclass(frozen=True)
class FormatTree:
    nodes: Tuple[Node, ...]
    mode: FormatMode
    block_count: int
    source: str = ""

    def blocks(self) -> Iterator[Block]:
        """Yield every block in depth-first (slot) order"""
        return iter_blocks(self.nodes)

    def has_block(self, kind: BlockKind) -> bool:
        return any(block.kind is kind for block in self.blocks())


def iter_blocks(nodes: Iterable[Node]) -> Iterator[Block]:
    for node in nodes:
        if isinstance(node, Block):
            yield node
        elif isinstance(node, Section):
            yield from iter_blocks(node.children)


@dataclass
class Resolved:
    """
    Result of evaluating one node.

    ``empty`` tells an enclosing section whether the node's player-derived
    value was absent, independently of any placeholder text it produced.
    Literals are never consulted for emptiness.
    """
    fragments: List[Fragment]
    empty: bool = False
    literal: bool = False

    @classmethod
    def text(cls, text: str, empty: bool = False) -> "Resolved":
        return cls([Fragment(text)] if text else [], empty)

    @classmethod
    def from_literal(cls, text: str) -> "Resolved":
        return cls([Fragment(text)] if text else [], False, literal=True)

    @classmethod
    def nothing(cls) -> "Resolved":
        return cls([], True)


def collapse_section(children: Iterable[Resolved]) -> Resolved:
    """
    Collapse the resolved children of an optional section.

    The section is suppressed when no block (or nested section) inside it
    resolved. Otherwise literal text is kept next to the blocks that did:
    text preceding a block survives only if that block resolved, and text
    after the last block survives only if the last block resolved.
    """
    output: List[Fragment] = []
    pending: List[Fragment] = []
    any_resolved = False
    last_resolved = False

    for child in children:
        if child.literal:
            pending.extend(child.fragments)
            continue
        if child.empty:
            pending = []
            last_resolved = False
            continue
        output.extend(pending)
        output.extend(child.fragments)
        pending = []
        any_resolved = True
        last_resolved = True

    if not any_resolved:
        return Resolved.nothing()
    if last_resolved:
        output.extend(pending)
    return Resolved(output, False)


def join_sequence(children: Iterable[Resolved]) -> Resolved:
    """Concatenate a top-level sequence, keeping placeholders of empty blocks"""
    output: List[Fragment] = []
    empty = True
    for child in children:
        output.extend(child.fragments)
        if not child.literal and not child.empty:
            empty = False
    return Resolved(output, empty)


def fragments_text(fragments: Iterable[Fragment]) -> str:
    return "".join(fragment.text for fragment in fragments)
