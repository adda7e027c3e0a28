"""
Player registry: the ordered list of known players and which one is focused.

All mutation happens on the tick loop; commands from the outside reach the
registry only through ``apply_command`` / ``apply_commands``.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from mpris_ticker.core.interfaces import Command, CycleDirection, PlayerSnapshot

logger = logging.getLogger(__name__)


class PlayerController:
    """Anything able to forward playback commands to a player"""

    def send(self, player_id: str, command: Command) -> None:
        raise NotImplementedError


class PlayerRegistry:
    """
    Ordered player snapshots plus a focused index.

    The focused index is ``None`` exactly when the registry is empty and is
    otherwise always a valid index into ``players``.
    """

    def __init__(self, controller: Optional[PlayerController] = None):
        self.controller = controller
        self._players: List[PlayerSnapshot] = []
        self._focused: Optional[int] = None

    @property
    def players(self) -> Sequence[PlayerSnapshot]:
        return tuple(self._players)

    @property
    def focused_index(self) -> Optional[int]:
        return self._focused

    @property
    def focused(self) -> Optional[PlayerSnapshot]:
        if self._focused is None:
            return None
        return self._players[self._focused]

    @property
    def is_empty(self) -> bool:
        return not self._players

    def __len__(self):
        return len(self._players)

    def refresh(self, snapshots: Iterable[PlayerSnapshot]):
        """
        Replace the snapshot list, keeping focus on the same player if it is
        still present and falling back to the first player otherwise.
        """
        previous = self.focused
        self._players = list(snapshots)

        if not self._players:
            self._focused = None
            return

        if previous is not None:
            for index, player in enumerate(self._players):
                if player.player_id == previous.player_id:
                    self._focused = index
                    return
            logger.info(f"Focused player {previous.player_id} disappeared, focusing {self._players[0].player_id}")

        self._focused = 0

    def cycle(self, direction: CycleDirection):
        if self._focused is None:
            return
        step = 1 if direction is CycleDirection.NEXT else -1
        self._focused = (self._focused + step) % len(self._players)

    def apply_command(self, command: Command):
        """
        Apply a single command.

        Player cycling changes focus; everything else is forwarded to the
        focused player through the controller and leaves the registry as is.
        """
        if command is Command.NEXT_PLAYER:
            self.cycle(CycleDirection.NEXT)
            return
        if command is Command.PREV_PLAYER:
            self.cycle(CycleDirection.PREV)
            return

        player = self.focused
        if player is None:
            logger.debug(f"Ignoring '{command.value}': no player")
            return
        if self.controller is None:
            logger.debug(f"Ignoring '{command.value}': no controller")
            return

        try:
            self.controller.send(player.player_id, command)
        except Exception as e:
            logger.warning(f"Failed to send '{command.value}' to {player.player_id}: {e}")

    def apply_commands(self, commands: Iterable[Command]):
        for command in commands:
            self.apply_command(command)
