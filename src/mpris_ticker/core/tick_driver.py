"""
The render loop.

Every tick: apply the commands received since the previous tick, refresh
the player list when due, advance the scroll buffers, evaluate the display
format and write the line if it changed.
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from mpris_ticker.core.evaluator import BlockEvaluator
from mpris_ticker.core.format_parser import parse_display_format
from mpris_ticker.core.interfaces import Command, Fragment
from mpris_ticker.core.metadata_formatter import MetadataFormatter, describe
from mpris_ticker.core.registry import PlayerRegistry
from mpris_ticker.core.scroller import ScrollEngine
from mpris_ticker.utils.constants import (
    DEFAULT_EMPTY_MSG, DEFAULT_REFRESH_TICKS, DEFAULT_TICK_INTERVAL,
)
from mpris_ticker.utils.exceptions import BackendError

logger = logging.getLogger(__name__)


class TickDriver:
    """
    Owns the registry and scroll engine and drives them from a single task.

    Args:
        evaluator: Compiled display format
        registry: Player registry; its controller receives playback commands
        backend: Object with a ``fetch()`` returning player snapshots
        renderer: Turns fragments into the output line
        sink: Object with ``write(line)``; None to only return the line
        refresh_ticks: Refresh the player list every this many ticks
        tick_interval: Seconds between ticks
        empty_msg: Line shown verbatim while no player is running
    """

    def __init__(self, evaluator: BlockEvaluator, registry: PlayerRegistry, backend, renderer,
                 sink=None, refresh_ticks: int = DEFAULT_REFRESH_TICKS,
                 tick_interval: float = DEFAULT_TICK_INTERVAL,
                 empty_msg: str = DEFAULT_EMPTY_MSG, scroll: Optional[ScrollEngine] = None):
        self.evaluator = evaluator
        self.registry = registry
        self.backend = backend
        self.renderer = renderer
        self.sink = sink
        self.refresh_ticks = max(1, refresh_ticks)
        self.tick_interval = tick_interval
        self.empty_msg = empty_msg
        self.scroll = scroll or ScrollEngine()
        self.ticks = 0
        self.last_line: Optional[str] = None
        self.running = False
        self._refresh_pending = True

    @classmethod
    def from_config(cls, config: dict, backend, renderer, sink=None) -> "TickDriver":
        """
        Compile the formats from the configuration and build a driver.

        Raises:
            FormatError: If either format string is invalid
        """
        evaluator = BlockEvaluator(
            parse_display_format(config['display_format']),
            MetadataFormatter.from_format(config['metadata_format']),
            config.get('icons'),
        )
        return cls(
            evaluator,
            PlayerRegistry(controller=backend),
            backend,
            renderer,
            sink=sink,
            refresh_ticks=config['refresh_ticks'],
            tick_interval=config['tick_interval'],
            empty_msg=config['empty_msg'],
        )

    @staticmethod
    def parse_commands(tokens: Iterable[str]) -> List[Command]:
        commands = []
        for token in tokens:
            command = Command.parse(token)
            if command is None:
                logger.debug(f"Ignoring unknown command {token!r}")
                continue
            commands.append(command)
        return commands

    def refresh(self):
        """Reload the player list; a failing backend leaves it empty"""
        try:
            snapshots = self.backend.fetch()
        except BackendError as e:
            logger.warning(f"Player backend unavailable: {e}")
            snapshots = []
        self.registry.refresh(snapshots)
        logger.debug(f"Refreshed players: {describe(self.registry.players)}")

    def tick(self, tokens: Iterable[str] = ()) -> str:
        """
        Run one tick.

        Args:
            tokens: Command tokens received since the previous tick, oldest first

        Returns:
            str: The rendered line
        """
        commands = self.parse_commands(tokens)
        self.registry.apply_commands(commands)

        # Playback commands change what the player reports, so look again
        if any(not command.is_player_cycle for command in commands):
            self._refresh_pending = True
        if self._refresh_pending or self.ticks % self.refresh_ticks == 0:
            self.refresh()
            self._refresh_pending = False

        self.ticks += 1
        self.scroll.advance()

        if self.registry.is_empty:
            fragments = [Fragment(self.empty_msg)]
        else:
            fragments = self.evaluator.evaluate(self.registry, self.scroll)

        line = self.renderer.render(fragments)
        if line != self.last_line:
            if self.sink is not None:
                self.sink.write(line)
            self.last_line = line
        return line

    async def run(self, channel):
        """
        Tick until ``stop()`` is called.

        Args:
            channel: Object with an async ``drain()`` returning pending tokens
        """
        self.running = True
        logger.info(f"Starting render loop ({self.tick_interval}s ticks, refresh every {self.refresh_ticks})")
        while self.running:
            tokens = await channel.drain()
            self.tick(tokens)
            await asyncio.sleep(self.tick_interval)
        logger.info("Render loop stopped")

    def stop(self):
        self.running = False
