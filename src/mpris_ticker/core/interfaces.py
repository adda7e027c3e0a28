"""
Interfaces and data structures shared by the engine components
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class PlaybackStatus(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"

    @classmethod
    def parse(cls, value: str) -> "PlaybackStatus":
        """Map a backend status string, treating anything unknown as stopped"""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.STOPPED


class Command(Enum):
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    PREV = "prev"
    NEXT = "next"
    PREV_PLAYER = "prev-player"
    NEXT_PLAYER = "next-player"
    PLAY_PAUSE = "play-pause"

    @classmethod
    def parse(cls, token: str) -> Optional["Command"]:
        """Return the command for an exact token, or None if unknown"""
        if not isinstance(token, str):
            return None
        try:
            return cls(token.strip())
        except ValueError:
            return None

    @property
    def is_player_cycle(self) -> bool:
        return self in (Command.PREV_PLAYER, Command.NEXT_PLAYER)


class CycleDirection(Enum):
    NEXT = "next"
    PREV = "prev"


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value if value.strip() else None


def _clean_list(values) -> Tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    cleaned = tuple(v for v in values if v and v.strip())
    return cleaned


@dataclass(frozen=True)
class PlayerSnapshot:
    """
    Immutable view of one media player at refresh time.

    Metadata fields are independently optional. Empty strings and empty
    lists are normalised to "absent" so blocks report them as unset.
    Positions and lengths are in seconds.
    """
    player_id: str
    name: str
    status: PlaybackStatus = PlaybackStatus.STOPPED
    artists: Tuple[str, ...] = ()
    album: Optional[str] = None
    album_artists: Tuple[str, ...] = ()
    title: Optional[str] = None
    track_number: Optional[int] = None
    position: Optional[float] = None
    length: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "artists", _clean_list(self.artists))
        object.__setattr__(self, "album_artists", _clean_list(self.album_artists))
        object.__setattr__(self, "album", _clean_text(self.album))
        object.__setattr__(self, "title", _clean_text(self.title))

    @property
    def artist(self) -> Optional[str]:
        return self.artists[0] if self.artists else None

    @property
    def album_artist(self) -> Optional[str]:
        return self.album_artists[0] if self.album_artists else None

    @property
    def remaining(self) -> Optional[float]:
        if self.position is None or self.length is None:
            return None
        return max(0.0, self.length - self.position)


@dataclass(frozen=True)
class Fragment:
    """
    A piece of rendered text, optionally bound to a clickable command.

    ``scrolled`` marks the fixed-width window of a scroll buffer, whose
    trailing padding has to survive the status bar.
    """
    text: str
    action: Optional[Command] = None
    scrolled: bool = False
