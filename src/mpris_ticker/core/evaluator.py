"""
Block evaluation.

Walks a compiled display tree once per tick and produces the fragments of
the status line for the focused player. Action blocks carry the command a
click on them should send; the renderer decides how to express that.
"""

import logging
from typing import Dict, List, Optional

from mpris_ticker.core.format_tree import (
    Block, BlockKind, DEFAULT_WAIT_TICKS, FormatTree, INFO_NAME_WIDTH,
    Literal, Node, Resolved, Section, collapse_section, fragments_text,
    join_sequence,
)
from mpris_ticker.core.interfaces import Command, Fragment, PlaybackStatus, PlayerSnapshot
from mpris_ticker.core.metadata_formatter import MetadataFormatter, PLACEHOLDER
from mpris_ticker.core.registry import PlayerRegistry
from mpris_ticker.core.scroller import ScrollEngine
from mpris_ticker.utils.constants import DEFAULT_ICONS

logger = logging.getLogger(__name__)


def format_time(seconds: Optional[float]) -> str:
    """Format seconds as MM:SS, or N/A when unknown"""
    if seconds is None:
        return PLACEHOLDER
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class BlockEvaluator:
    """
    Evaluates a display ``FormatTree`` against the registry and scroll engine.

    Evaluation has no side effects besides stepping scroll states, which step
    at most once per tick, so evaluating twice within a tick is stable.
    """

    def __init__(self, tree: FormatTree, metadata_formatter: MetadataFormatter,
                 icons: Optional[Dict[str, str]] = None):
        self.tree = tree
        self.metadata_formatter = metadata_formatter
        self.icons = {**DEFAULT_ICONS, **(icons or {})}

    def evaluate(self, registry: PlayerRegistry, scroll: ScrollEngine) -> List[Fragment]:
        resolved = join_sequence(
            self._resolve(node, registry, scroll) for node in self.tree.nodes
        )
        return resolved.fragments

    def render_text(self, registry: PlayerRegistry, scroll: ScrollEngine) -> str:
        return fragments_text(self.evaluate(registry, scroll))

    def _resolve(self, node: Node, registry: PlayerRegistry, scroll: ScrollEngine) -> Resolved:
        if isinstance(node, Literal):
            return Resolved.from_literal(node.text)
        if isinstance(node, Section):
            return collapse_section(
                self._resolve(child, registry, scroll) for child in node.children
            )
        return self._resolve_block(node, registry, scroll)

    def _resolve_block(self, block: Block, registry: PlayerRegistry, scroll: ScrollEngine) -> Resolved:
        player = registry.focused
        kind = block.kind

        if kind is BlockKind.METADATA:
            return self._metadata(block, player, scroll)
        if player is None:
            return Resolved.nothing()

        if kind is BlockKind.PREV:
            return self._action(self.icons["prev"], Command.PREV)
        if kind is BlockKind.NEXT:
            return self._action(self.icons["next"], Command.NEXT)
        if kind is BlockKind.PLAY_PAUSE:
            if player.status is PlaybackStatus.PLAYING:
                return self._action(self.icons["pause"], Command.PAUSE)
            return self._action(self.icons["play"], Command.PLAY)
        if kind is BlockKind.STATUS:
            return Resolved.text(self.icons[player.status.value])
        if kind in (BlockKind.PREV_PLAYER, BlockKind.NEXT_PLAYER):
            if len(registry) < 2:
                return Resolved.nothing()
            if kind is BlockKind.PREV_PLAYER:
                return self._action(self.icons["prev-player"], Command.PREV_PLAYER)
            return self._action(self.icons["next-player"], Command.NEXT_PLAYER)
        if kind is BlockKind.INFO:
            return self._info(block, registry, player, scroll)
        if kind is BlockKind.TIME:
            return self._time(block, player)

        raise ValueError(f"Block '{kind.value}' cannot be used in a display format")

    @staticmethod
    def _action(icon: str, command: Command) -> Resolved:
        return Resolved([Fragment(icon, command)])

    @staticmethod
    def _info(block: Block, registry: PlayerRegistry, player: PlayerSnapshot,
              scroll: ScrollEngine) -> Resolved:
        text = f"{registry.focused_index + 1}"
        if block.arg("show_total"):
            text += f"/{len(registry)}"
        if block.arg("show_name"):
            name = scroll.window(block.slot, player.name, INFO_NAME_WIDTH, DEFAULT_WAIT_TICKS)
            return Resolved([Fragment(text + ": "), Fragment(name, scrolled=True)])
        return Resolved.text(text)

    def _metadata(self, block: Block, player: Optional[PlayerSnapshot], scroll: ScrollEngine) -> Resolved:
        resolved = self.metadata_formatter.resolve(player)
        content = fragments_text(resolved.fragments)
        window = scroll.window(
            block.slot, content, block.arg("buffer_size"), block.arg("wait_ticks")
        )
        return Resolved([Fragment(window, scrolled=True)], empty=resolved.empty or not content)

    @staticmethod
    def _time(block: Block, player: PlayerSnapshot) -> Resolved:
        if player.position is None:
            return Resolved.text(PLACEHOLDER, empty=True)

        show_length = block.arg("show_length")
        use_remaining = block.arg("use_remaining")
        other = player.remaining if use_remaining else player.length

        if show_length:
            text = f"{format_time(player.position)}/{format_time(other)}"
        elif use_remaining:
            text = format_time(player.remaining)
        else:
            text = format_time(player.position)
        return Resolved.text(text)
