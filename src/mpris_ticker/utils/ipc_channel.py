"""
Command channel between ``mpris-ticker <command>`` invocations and the
running ticker, over ZeroMQ PUSH/PULL.

The running ticker binds the PULL socket; binding doubles as the singleton
check, since only one process can own the address.
"""

import logging
from typing import List, Optional

import zmq
import zmq.asyncio

from mpris_ticker.utils.constants import COMMAND_SEND_TIMEOUT, DEFAULT_COMMAND_ADDRESS
from mpris_ticker.utils.exceptions import InstanceAlreadyRunning
from mpris_ticker.utils.ipc_protocol import IPCMessage, MessageType, create_command


class CommandChannel:
    """
    Receiving end of the command channel.

    Commands pile up in the socket between ticks; ``drain`` collects all of
    them at once, in arrival order, without waiting.
    """

    def __init__(self, address: str = DEFAULT_COMMAND_ADDRESS, logger: Optional[logging.Logger] = None):
        self.address = address
        self.logger = logger or logging.getLogger(__name__)
        self.context = None
        self.socket = None

    def bind(self):
        """
        Acquire the command address.

        Raises:
            InstanceAlreadyRunning: If another process already bound it
        """
        self.context = zmq.asyncio.Context()
        self.socket = self.context.socket(zmq.PULL)
        self.socket.setsockopt(zmq.LINGER, 0)
        try:
            self.socket.bind(self.address)
        except zmq.ZMQError as e:
            self.close()
            raise InstanceAlreadyRunning(f"Cannot bind {self.address}, is another ticker running? ({e})")
        self.logger.info(f"Command socket bound to {self.address}")

    async def drain(self) -> List[str]:
        """Return every command token received since the last call"""
        if not self.socket:
            return []

        tokens = []
        while True:
            try:
                raw = await self.socket.recv_string(zmq.NOBLOCK)
            except zmq.Again:
                break
            token = self.decode(raw)
            if token is not None:
                tokens.append(token)
        return tokens

    def decode(self, raw: str) -> Optional[str]:
        try:
            message = IPCMessage.from_json(raw)
        except ValueError as e:
            self.logger.warning(f"Dropping malformed command message: {e}")
            return None
        if message.type != MessageType.COMMAND.value:
            self.logger.warning(f"Dropping message of type {message.type!r}")
            return None
        return message.action

    def close(self):
        if self.socket:
            self.socket.close()
            self.socket = None
        if self.context:
            self.context.term()
            self.context = None


def send_command(token: str, address: str = DEFAULT_COMMAND_ADDRESS,
                 timeout: int = COMMAND_SEND_TIMEOUT) -> bool:
    """
    Send one command token to the running ticker.

    Returns:
        bool: False if no ticker accepted the message within ``timeout`` ms
    """
    logger = logging.getLogger(__name__)
    context = zmq.Context()
    socket = context.socket(zmq.PUSH)
    try:
        # Only queue on a completed connection so a missing ticker times out
        socket.setsockopt(zmq.IMMEDIATE, 1)
        socket.setsockopt(zmq.SNDTIMEO, timeout)
        socket.setsockopt(zmq.LINGER, timeout)
        socket.connect(address)
        socket.send_string(create_command(token).to_json())
        logger.debug(f"Sent '{token}' to {address}")
        return True
    except zmq.Again:
        logger.error(f"No ticker listening on {address}")
        return False
    finally:
        socket.close()
        context.term()
