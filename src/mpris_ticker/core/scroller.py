"""
Scroll buffers for text wider than its slot in the status line.

Each scrollable block owns a ``ScrollState`` keyed by its slot. Content that
fits is padded to the window width; longer content bounces back and forth
one character per tick, pausing ``wait`` ticks at each end.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class ScrollDirection(Enum):
    FORWARD = 1
    BACKWARD = -1


@dataclass
class ScrollState:
    signature: Tuple[str, int, int]
    width: int
    wait: int
    offset: int = 0
    direction: ScrollDirection = ScrollDirection.FORWARD
    wait_remaining: int = 0
    last_tick: Optional[int] = None

    @classmethod
    def fresh(cls, content: str, width: int, wait: int) -> "ScrollState":
        return cls(
            signature=(content, width, wait),
            width=width,
            wait=wait,
            wait_remaining=wait,
        )

    @property
    def content(self) -> str:
        return self.signature[0]

    def step(self):
        """Advance one tick"""
        length = len(self.content)
        if length <= self.width:
            self.offset = 0
            self.direction = ScrollDirection.FORWARD
            self.wait_remaining = self.wait
            return

        if self.wait_remaining > 0:
            self.wait_remaining -= 1
            return

        last = length - self.width
        self.offset = max(0, min(last, self.offset + self.direction.value))
        if self.offset == last and self.direction is ScrollDirection.FORWARD:
            self.direction = ScrollDirection.BACKWARD
            self.wait_remaining = self.wait
        elif self.offset == 0 and self.direction is ScrollDirection.BACKWARD:
            self.direction = ScrollDirection.FORWARD
            self.wait_remaining = self.wait

    def render(self) -> str:
        window = self.content[self.offset:self.offset + self.width]
        return window.ljust(self.width)


class ScrollEngine:
    """
    Owns every scroll state and the tick counter they step against.

    ``advance()`` is called once per tick by the driver. A state steps lazily
    the first time its block is rendered during a tick, so rendering the
    same block twice in one tick gives the same window.
    """

    def __init__(self):
        self.tick = 0
        self._states: Dict[int, ScrollState] = {}

    def advance(self) -> int:
        self.tick += 1
        return self.tick

    def window(self, slot: int, content: str, width: int, wait: int) -> str:
        """
        Return the visible part of ``content`` for this tick.

        Args:
            slot: Key of the owning block
            content: Full text to scroll
            width: Window width in characters
            wait: Ticks to pause at each end

        Returns:
            str: Exactly ``width`` characters
        """
        state = self._states.get(slot)
        if state is None or state.signature != (content, width, wait):
            if state is not None:
                logger.debug(f"Scroll slot {slot} content changed, resetting")
            state = ScrollState.fresh(content, width, wait)
            self._states[slot] = state

        if state.last_tick != self.tick:
            state.step()
            state.last_tick = self.tick

        return state.render()

    def state(self, slot: int) -> Optional[ScrollState]:
        return self._states.get(slot)

    def __len__(self):
        return len(self._states)
