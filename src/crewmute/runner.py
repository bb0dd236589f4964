"""
crewmute.runner — Bot Runner
============================

Wires configuration, logging and the Discord bot together and blocks
until the bot is stopped (Ctrl+C or the `~stop` command).
"""

from __future__ import annotations
import logging
from typing import Optional

from ._config import BotConfig
from ._core.session import GameSession
from ._discord.bot import CrewMuteBot
from ._shared import setup_logging, enable_quiet_mode

logger = logging.getLogger("crewmute")


class BotRunner:
    """
    Runs one CrewMuteBot for one configuration.

    Usage:
        runner = BotRunner(load_config("Config.toml"))
        runner.run()
    """

    def __init__(self, config: BotConfig, quiet: bool = False, session: Optional[GameSession] = None):
        self.config = config

        setup_logging(log_file_path=config.log_file, level=config.log_level_number)
        if quiet:
            enable_quiet_mode()

        self.bot = CrewMuteBot(config, session=session)

    def run(self) -> None:
        """Connect to Discord. Blocks until the connection is closed."""
        self._log_startup()
        # log_handler=None: discord.py logs through our handlers instead of its own
        self.bot.run(self.config.token, log_handler=None)
        logger.info("CrewMute stopped.")

    def _log_startup(self) -> None:
        logger.info("=" * 60)
        logger.info("  CrewMute — Starting")
        logger.info(f"  Living channel: {self.config.living_channel}")
        logger.info(f"  Dead channel:   {self.config.dead_channel}")
        logger.info(f"  Spectator role: {self.config.spectator_role or 'none'}")
        logger.info(f"  Prefix:         {self.config.command_prefix}")
        logger.info("=" * 60)
