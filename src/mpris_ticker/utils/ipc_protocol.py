"""
Inter-Process Communication Protocol for the ticker
===================================================

This module defines the messages a short-lived ``mpris-ticker <command>``
invocation sends to the running ticker. The transport is a ZeroMQ
PUSH/PULL pair; see ``ipc_channel``.

Message Format:
All messages are JSON-encoded with the following structure:
{
    "type": "command",
    "action": "next-player",
    "timestamp": float
}

Actions are the exact command tokens: play, pause, stop, prev, next,
prev-player, next-player, play-pause. The receiving side decides what to do
with unknown actions (they are ignored).
"""

import json
import time
from enum import Enum
from dataclasses import dataclass, asdict


class MessageType(Enum):
    COMMAND = "command"


@dataclass
class IPCMessage:
    """Base IPC message structure"""
    type: str
    action: str
    timestamp: float = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time()

    def to_json(self) -> str:
        """Convert message to JSON string"""
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, json_str: str) -> 'IPCMessage':
        """
        Create message from JSON string

        Raises:
            ValueError: If the payload is not a valid message
        """
        data = json.loads(json_str)
        if not isinstance(data, dict):
            raise ValueError("message must be a JSON object")
        try:
            return cls(type=data["type"], action=data["action"], timestamp=data.get("timestamp"))
        except KeyError as e:
            raise ValueError(f"message is missing {e}") from None


class CommandMessage(IPCMessage):
    """Command message from a client invocation to the running ticker"""

    def __init__(self, action: str):
        super().__init__(type=MessageType.COMMAND.value, action=action)


def create_command(token: str) -> CommandMessage:
    """Create a command message for a raw command token"""
    return CommandMessage(token)
