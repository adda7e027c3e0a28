"""
Format string compiler.

Turns a display format such as ``"[prev] [play-pause] [next] <[time] >[metadata]"``
or a metadata format such as ``"<[artist] - >[title]"`` into a ``FormatTree``.
Compilation happens once at startup; the tree is never mutated afterwards.
"""

import logging
from typing import Any, Dict, List

from mpris_ticker.core.format_tree import (
    Block, BlockKind, FormatMode, FormatTree, Literal, MODE_KINDS, Node,
    Section, schema_for,
)
from mpris_ticker.utils.exceptions import (
    ArgumentCountError, DuplicateMetadataBlock, MissingMandatoryMetadataBlock,
    UnexpectedCharacter, UnknownBlockKind, UnterminatedBlock, UnterminatedOptional,
)

logger = logging.getLogger(__name__)

BLOCK_OPEN, BLOCK_CLOSE = "[", "]"
SECTION_OPEN, SECTION_CLOSE = "<", ">"
ARGS_SEPARATOR = ":"
ARG_SEPARATOR = ","


class FormatParser:
    """
    Recursive descent parser for the format grammar.

    Grammar::

        sequence := (text | block | section)*
        block    := '[' name (':' arg (',' arg)*)? ']'
        section  := '<' sequence '>'

    Brackets cannot be escaped, so they never appear in literal text. A
    display format holds exactly one [metadata] block, at any depth.
    """

    def __init__(self, source: str, mode: FormatMode):
        self.source = source
        self.mode = mode
        self.pos = 0
        self._next_slot = 0
        self._metadata_at = None

    def parse(self) -> FormatTree:
        nodes = self._parse_sequence(opened_at=None)
        tree = FormatTree(tuple(nodes), self.mode, self._next_slot, self.source)

        if self.mode is FormatMode.DISPLAY and not tree.has_block(BlockKind.METADATA):
            raise MissingMandatoryMetadataBlock(self.source)

        logger.debug(f"Compiled {self.mode.value} format {self.source!r} with {tree.block_count} blocks")
        return tree

    def _parse_sequence(self, opened_at) -> List[Node]:
        nodes: List[Node] = []
        text: List[str] = []

        def flush_text():
            if text:
                nodes.append(Literal("".join(text)))
                text.clear()

        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char == BLOCK_OPEN:
                flush_text()
                nodes.append(self._parse_block())
            elif char == SECTION_OPEN:
                flush_text()
                start = self.pos
                self.pos += 1
                children = self._parse_sequence(opened_at=start)
                nodes.append(Section(tuple(children)))
            elif char == SECTION_CLOSE:
                if opened_at is None:
                    raise UnexpectedCharacter(char, self.pos, self.source)
                flush_text()
                self.pos += 1
                return nodes
            elif char == BLOCK_CLOSE:
                raise UnexpectedCharacter(char, self.pos, self.source)
            else:
                text.append(char)
                self.pos += 1

        if opened_at is not None:
            raise UnterminatedOptional(opened_at, self.source)

        flush_text()
        return nodes

    def _parse_block(self) -> Block:
        start = self.pos
        end = self.source.find(BLOCK_CLOSE, start + 1)
        reopened = self.source.find(BLOCK_OPEN, start + 1)
        if end == -1 or (reopened != -1 and reopened < end):
            raise UnterminatedBlock(start, self.source)

        body = self.source[start + 1:end]
        self.pos = end + 1

        name, has_args, raw_args = body.partition(ARGS_SEPARATOR)
        name = name.strip()
        kind = self._lookup_kind(name, start)
        if kind is BlockKind.METADATA:
            if self._metadata_at is not None:
                raise DuplicateMetadataBlock(start, self.source)
            self._metadata_at = start

        tokens = raw_args.split(ARG_SEPARATOR) if has_args and raw_args.strip() else []
        args = self._parse_args(kind, tokens, start)

        block = Block(kind, args, self._next_slot)
        self._next_slot += 1
        return block

    def _lookup_kind(self, name: str, position: int) -> BlockKind:
        try:
            kind = BlockKind(name)
        except ValueError:
            raise UnknownBlockKind(name, position, self.source) from None

        if kind not in MODE_KINDS[self.mode]:
            raise UnknownBlockKind(name, position, self.source)
        return kind

    def _parse_args(self, kind: BlockKind, tokens: List[str], position: int) -> Dict[str, Any]:
        schema = schema_for(kind)
        if len(tokens) > len(schema):
            raise ArgumentCountError(kind.value, len(schema), len(tokens), position, self.source)

        args = {}
        for index, spec in enumerate(schema):
            token = tokens[index].strip() if index < len(tokens) else ""
            if not token:
                args[spec.name] = spec.default
                continue
            try:
                args[spec.name] = spec.convert(token)
            except ValueError as e:
                logger.warning(f"Block '{kind.value}' at {position}: {e}; using default {spec.default!r}")
                args[spec.name] = spec.default
        return args


def parse(source: str, mode: FormatMode) -> FormatTree:
    """
    Compile a format string.

    Args:
        source: The format string
        mode: DISPLAY for the status line layout, METADATA for track info

    Returns:
        FormatTree: The compiled tree

    Raises:
        FormatError: On any grammar error, or a display format without [metadata]
    """
    return FormatParser(source, mode).parse()


def parse_display_format(source: str) -> FormatTree:
    return parse(source, FormatMode.DISPLAY)


def parse_metadata_format(source: str) -> FormatTree:
    return parse(source, FormatMode.METADATA)
