"""
Tests for the player registry: focus tracking, cycling and command routing.
"""

import pytest

from mpris_ticker.core.interfaces import Command, CycleDirection, PlayerSnapshot
from mpris_ticker.core.registry import PlayerController, PlayerRegistry


def snap(player_id):
    return PlayerSnapshot(player_id=player_id, name=player_id)


class FakeController(PlayerController):
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, player_id, command):
        if self.fail:
            raise RuntimeError("dbus went away")
        self.sent.append((player_id, command))


@pytest.fixture
def registry():
    reg = PlayerRegistry(controller=FakeController())
    reg.refresh([snap("a"), snap("b"), snap("c")])
    return reg


def test_empty_registry():
    reg = PlayerRegistry()
    assert reg.is_empty
    assert reg.focused is None
    assert reg.focused_index is None
    reg.cycle(CycleDirection.NEXT)
    reg.cycle(CycleDirection.PREV)
    assert reg.focused_index is None


def test_refresh_focuses_first_player(registry):
    assert registry.focused_index == 0
    assert registry.focused.player_id == "a"
    assert len(registry) == 3


def test_cycle_wraps_around(registry):
    registry.cycle(CycleDirection.NEXT)
    registry.cycle(CycleDirection.NEXT)
    assert registry.focused_index == 2
    registry.cycle(CycleDirection.NEXT)
    assert registry.focused_index == 0
    registry.cycle(CycleDirection.PREV)
    assert registry.focused_index == 2


def test_refresh_tracks_focused_player_id(registry):
    registry.cycle(CycleDirection.NEXT)
    assert registry.focused.player_id == "b"

    registry.refresh([snap("b"), snap("c")])
    assert registry.focused_index == 0
    assert registry.focused.player_id == "b"

    registry.refresh([snap("x"), snap("c"), snap("b")])
    assert registry.focused_index == 2


def test_refresh_without_focused_player_falls_back(registry):
    registry.cycle(CycleDirection.PREV)
    registry.refresh([snap("x"), snap("y")])
    assert registry.focused_index == 0
    assert registry.focused.player_id == "x"


def test_refresh_to_empty_clears_focus(registry):
    registry.refresh([])
    assert registry.focused_index is None
    assert registry.is_empty
    registry.refresh([snap("z")])
    assert registry.focused.player_id == "z"


def test_player_commands_cycle_focus(registry):
    registry.apply_commands([Command.NEXT_PLAYER, Command.NEXT_PLAYER])
    assert registry.focused_index == 2
    registry.apply_command(Command.PREV_PLAYER)
    assert registry.focused_index == 1
    assert registry.controller.sent == []


def test_playback_commands_go_to_focused_player(registry):
    registry.apply_command(Command.NEXT_PLAYER)
    registry.apply_commands([Command.PLAY_PAUSE, Command.NEXT, Command.STOP])
    assert registry.controller.sent == [
        ("b", Command.PLAY_PAUSE), ("b", Command.NEXT), ("b", Command.STOP),
    ]
    assert len(registry) == 3


def test_controller_failures_are_contained():
    reg = PlayerRegistry(controller=FakeController(fail=True))
    reg.refresh([snap("a")])
    reg.apply_command(Command.PAUSE)
    assert reg.focused.player_id == "a"


def test_commands_without_player_or_controller_are_ignored():
    controller = FakeController()
    reg = PlayerRegistry(controller=controller)
    reg.apply_command(Command.PLAY)
    assert controller.sent == []

    reg = PlayerRegistry()
    reg.refresh([snap("a")])
    reg.apply_command(Command.PLAY)
