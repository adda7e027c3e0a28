"""
Ticker Application Entry Point
==============================

Runs the status line ticker for polybar, lemonbar or waybar, or, when given
a command token, forwards that command to the ticker that is already running.

Usage:
    mpris-ticker [-f FORMAT] [-m FORMAT] [-r TICKS]     run the ticker
    mpris-ticker next-player                           send a command
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from mpris_ticker.core.interfaces import Command
from mpris_ticker.core.tick_driver import TickDriver
from mpris_ticker.utils.config import load_config
from mpris_ticker.utils.constants import RENDERERS
from mpris_ticker.utils.exceptions import ConfigError, FormatError, InstanceAlreadyRunning
from mpris_ticker.utils.ipc_channel import CommandChannel, send_command
from mpris_ticker.utils.logging_config import setup_logging
from mpris_ticker.utils.playerctl_backend import PlayerctlBackend
from mpris_ticker.utils.renderers import StdoutSink, get_renderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mpris-ticker",
        description="MPRIS controller applet for status bars",
    )
    parser.add_argument("command", nargs="?", choices=[c.value for c in Command],
                        help="Command to send to the running instance")
    parser.add_argument("-f", "--display-format", help="How the player presents itself")
    parser.add_argument("-m", "--metadata-format", help="What information about the song is shown")
    parser.add_argument("-r", "--refresh-ticks", type=int, help="Ticks between player list refreshes")
    parser.add_argument("-c", "--config", help="Path to the YAML config file")
    parser.add_argument("--renderer", choices=RENDERERS, help="Output format for the status bar")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser


class TickerApp:
    """Main ticker application"""

    def __init__(self, config: dict):
        self.config = config
        self.logger = logging.getLogger("ticker")
        self.channel = None
        self.driver = None

    def initialize(self):
        """
        Compile the formats and acquire the command channel.

        Raises:
            FormatError: If a format string is invalid
            InstanceAlreadyRunning: If another ticker owns the channel
        """
        backend = PlayerctlBackend()
        renderer = get_renderer(self.config['renderer'], sys.argv[0])
        self.driver = TickDriver.from_config(self.config, backend, renderer, StdoutSink())

        self.channel = CommandChannel(self.config['command_address'], self.logger)
        self.channel.bind()
        self.logger.info("Ticker initialized successfully")

    async def start(self):
        self.initialize()
        await self.driver.run(self.channel)

    def stop(self):
        if self.driver:
            self.driver.stop()

    def shutdown(self):
        self.logger.info("Shutting down ticker...")
        if self.channel:
            self.channel.close()
            self.channel = None


async def run_ticker(config: dict) -> int:
    app = TickerApp(config)

    # Setup signal handlers for shutdown
    loop = asyncio.get_running_loop()
    for sig in [signal.SIGINT, signal.SIGTERM]:
        loop.add_signal_handler(sig, app.stop)

    try:
        await app.start()
    except (FormatError, InstanceAlreadyRunning) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        app.shutdown()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, {
            'display_format': args.display_format,
            'metadata_format': args.metadata_format,
            'refresh_ticks': args.refresh_ticks,
            'renderer': args.renderer,
            'log_level': args.log_level,
        })
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    setup_logging(config['log_level'], config['log_file'])

    if args.command:
        return 0 if send_command(args.command, config['command_address']) else 1

    return asyncio.run(run_ticker(config))


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
