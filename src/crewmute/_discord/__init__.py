# Area: Discord
"""
Discord integration - gateway events in, voice state calls out.

This package contains:
- The PlatformClient implementation over discord.py
- Command parsing for `~` commands
- The discord.Client subclass that ties them to the core
"""

from .client import DiscordPlatformClient, classify_http_error
from .commands import Command, parse_command, parse_delay, parse_user_id
from .bot import CrewMuteBot, build_intents

__all__ = [
    "DiscordPlatformClient",
    "classify_http_error",
    "Command",
    "parse_command",
    "parse_delay",
    "parse_user_id",
    "CrewMuteBot",
    "build_intents",
]
