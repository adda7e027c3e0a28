"""
MPRIS player backend built on the ``playerctl`` command line tool.

Each refresh lists the running players and reads one formatted metadata
line per player. Players that fail to answer are skipped for that refresh.
"""

import logging
import subprocess
from typing import Callable, Dict, List, Optional, Tuple

from mpris_ticker.core.interfaces import Command, PlaybackStatus, PlayerSnapshot
from mpris_ticker.core.registry import PlayerController
from mpris_ticker.utils.constants import PLAYERCTL_BINARY, PLAYERCTL_TIMEOUT
from mpris_ticker.utils.exceptions import BackendError

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"
LIST_SEPARATOR = ", "

METADATA_FIELDS = (
    "playerName",
    "status",
    "xesam:artist",
    "xesam:album",
    "xesam:albumArtist",
    "xesam:title",
    "xesam:trackNumber",
    "position",
    "mpris:length",
)
METADATA_FORMAT = FIELD_SEPARATOR.join("{{%s}}" % name for name in METADATA_FIELDS)

# List fields that playerctl joins with LIST_SEPARATOR in formatted output
LIST_FIELDS = ("xesam:artist", "xesam:albumArtist")

PLAYERCTL_VERBS = {
    Command.PLAY: "play",
    Command.PAUSE: "pause",
    Command.STOP: "stop",
    Command.PREV: "previous",
    Command.NEXT: "next",
    Command.PLAY_PAUSE: "play-pause",
}


def _split_list(value: str):
    return tuple(part.strip() for part in value.split(LIST_SEPARATOR) if part.strip())


def _to_int(value: str) -> Optional[int]:
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        return None


def _micros_to_seconds(value: str) -> Optional[float]:
    micros = _to_int(value)
    if micros is None or micros < 0:
        return None
    return micros / 1_000_000


def display_name(player_id: str) -> str:
    """``spotify.instance1234`` -> ``spotify``"""
    return player_id.split(".", 1)[0]


def parse_metadata_table(output: str) -> Dict[str, Tuple[str, ...]]:
    """
    Collect the list fields from plain ``playerctl metadata`` output, which
    prints one ``<player> <key> <value>`` row per list element.
    """
    lists: Dict[str, List[str]] = {}
    for row in output.splitlines():
        parts = row.split(None, 2)
        if len(parts) == 3 and parts[1] in LIST_FIELDS and parts[2].strip():
            lists.setdefault(parts[1], []).append(parts[2].strip())
    return {key: tuple(values) for key, values in lists.items()}


def parse_metadata_line(player_id: str, line: str,
                        lists: Optional[Dict[str, Tuple[str, ...]]] = None) -> PlayerSnapshot:
    """
    Build a snapshot from one line printed with ``METADATA_FORMAT``.

    playerctl joins list fields with ", ", so a name that contains the
    separator cannot be told apart from two names. ``lists`` holds the
    elements of such fields read separately (see ``parse_metadata_table``)
    and takes precedence over splitting.

    Raises:
        ValueError: If the line does not have the expected number of fields
    """
    fields = line.rstrip("\n").split(FIELD_SEPARATOR)
    if len(fields) != len(METADATA_FIELDS):
        raise ValueError(f"expected {len(METADATA_FIELDS)} fields, got {len(fields)}")

    name, status, artists, album, album_artists, title, track, position, length = fields
    lists = lists or {}
    length_seconds = _micros_to_seconds(length)
    return PlayerSnapshot(
        player_id=player_id,
        name=name.strip() or display_name(player_id),
        status=PlaybackStatus.parse(status),
        artists=lists.get("xesam:artist") or _split_list(artists),
        album=album,
        album_artists=lists.get("xesam:albumArtist") or _split_list(album_artists),
        title=title,
        track_number=_to_int(track),
        position=_micros_to_seconds(position),
        # MPRIS reports 0 for unknown lengths
        length=length_seconds if length_seconds else None,
    )


class PlayerctlBackend(PlayerController):
    """
    Fetches player snapshots and forwards playback commands via playerctl.

    Args:
        binary: playerctl executable
        timeout: Seconds to wait for each playerctl call
        runner: Replacement for ``subprocess.run`` (tests)
    """

    def __init__(self, binary: str = PLAYERCTL_BINARY, timeout: float = PLAYERCTL_TIMEOUT,
                 runner: Callable = subprocess.run):
        self.binary = binary
        self.timeout = timeout
        self.runner = runner

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return self.runner(
                [self.binary, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise BackendError(f"{self.binary} not found, is playerctl installed?")
        except (subprocess.TimeoutExpired, OSError) as e:
            raise BackendError(f"{self.binary} {' '.join(args)} failed: {e}")

    def list_players(self) -> List[str]:
        result = self._run("--list-all")
        if result.returncode != 0:
            # playerctl exits non-zero when no player is running
            if not result.stdout.strip():
                return []
            raise BackendError(f"Listing players failed: {result.stderr.strip()}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def fetch_lists(self, player_id: str) -> Dict[str, Tuple[str, ...]]:
        """
        Read the list fields element by element. Only needed when the
        formatted line is ambiguous; on failure the joined values are split.
        """
        try:
            result = self._run(f"--player={player_id}", "metadata")
        except BackendError as e:
            logger.debug(f"Could not read list fields of {player_id}: {e}")
            return {}
        if result.returncode != 0:
            return {}
        return parse_metadata_table(result.stdout)

    def fetch_player(self, player_id: str) -> Optional[PlayerSnapshot]:
        """Query one player, returning None if it does not answer"""
        try:
            result = self._run(f"--player={player_id}", "metadata", "--format", METADATA_FORMAT)
            if result.returncode == 0:
                lists = self.fetch_lists(player_id) if LIST_SEPARATOR in result.stdout else None
                return parse_metadata_line(player_id, result.stdout, lists)

            # Players without a loaded track refuse the metadata call
            status = self._run(f"--player={player_id}", "status")
            if status.returncode == 0:
                return PlayerSnapshot(
                    player_id=player_id,
                    name=display_name(player_id),
                    status=PlaybackStatus.parse(status.stdout),
                )
        except (BackendError, ValueError) as e:
            logger.warning(f"Dropping player {player_id}: {e}")
            return None

        logger.debug(f"Dropping player {player_id}: {result.stderr.strip()}")
        return None

    def fetch(self) -> List[PlayerSnapshot]:
        """
        Snapshot every running player, in discovery order.

        Raises:
            BackendError: If the players cannot be listed at all
        """
        snapshots = []
        for player_id in self.list_players():
            snapshot = self.fetch_player(player_id)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def send(self, player_id: str, command: Command) -> None:
        verb = PLAYERCTL_VERBS.get(command)
        if verb is None:
            raise ValueError(f"'{command.value}' is not a playback command")

        result = self._run(f"--player={player_id}", verb)
        if result.returncode != 0:
            raise BackendError(f"playerctl {verb} failed for {player_id}: {result.stderr.strip()}")
        logger.debug(f"Sent {verb} to {player_id}")
