# Area: Shared
"""
crewmute.cli — Command-line interface
=====================================

Provides CLI entry point for running the bot.

Usage:
    python -m crewmute                          # Config.toml in current dir
    python -m crewmute --config bot.json        # JSON config
    python -m crewmute --quiet                  # log to file only

The token can also come from the DISCORD_TOKEN environment variable
or a .env file.
"""

import argparse
import sys

from pydantic import ValidationError

from ._config import DEFAULT_CONFIG_PATH, BotConfig, load_config
from .errors import ConfigError
from .runner import BotRunner


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CrewMute - voice moderation for social deduction games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m crewmute
  python -m crewmute --config Config.toml
  DISCORD_TOKEN=... python -m crewmute --config bot.json --quiet
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to TOML or JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the configured log level (DEBUG, INFO, WARNING, ...)",
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not log to the terminal (file log only)",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        if args.log_level:
            config = BotConfig.model_validate({**config.model_dump(), "log_level": args.log_level})
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: invalid --log-level: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    BotRunner(config, quiet=args.quiet).run()
    return 0
