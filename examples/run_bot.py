"""
run_bot.py — Run CrewMute
=========================

Reads Config.toml next to this script (see Config.example.toml) and
connects to Discord.

    python run_bot.py

In Discord:
  ~new        start a game (everyone in the living channel is muted)
  🚨          react on the game message to call / end a meeting
  💀          react to be muted and moved to the dead channel
  ~end        end the game and unmute everyone

Press Ctrl+C to stop.
"""

import sys
from pathlib import Path

from crewmute import BotRunner, ConfigError, load_config

config_path = Path(__file__).with_name("Config.toml")

try:
    config = load_config(str(config_path))
except ConfigError as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)

BotRunner(config).run()
