# Area: Discord
"""
crewmute._discord.commands — Command Parser
===========================================

Recognises `~name arg arg ...` messages. Arguments may be quoted so
in-game names with spaces survive (`~ident "Light Blue" Red`).
"""

from __future__ import annotations
import math
import re
import shlex
from dataclasses import dataclass
from typing import List, Optional, Tuple

COMMANDS = frozenset({"new", "end", "dead", "stop", "alias", "check", "ident"})

_MENTION = re.compile(r"^<@!?(\d+)>$")


@dataclass(frozen=True)
class Command:
    name: str
    args: Tuple[str, ...] = ()


def split_args(text: str) -> List[str]:
    """shlex split, falling back to whitespace on unbalanced quotes."""
    try:
        return shlex.split(text)
    except ValueError:
        return text.split()


def parse_command(content: str, prefix: str = "~") -> Optional[Command]:
    """Return the command in a message, or None if it is not one of ours."""
    if not content.startswith(prefix):
        return None
    body = content[len(prefix):].strip()
    if not body:
        return None
    name, *rest = body.split(maxsplit=1)
    name = name.lower()
    if name not in COMMANDS:
        return None
    return Command(name=name, args=tuple(split_args(rest[0] if rest else "")))


def parse_user_id(text: str) -> Optional[int]:
    """Accept a mention (`<@123>` / `<@!123>`) or a bare numeric id."""
    match = _MENTION.match(text.strip())
    if match:
        return int(match.group(1))
    if text.strip().isdigit():
        return int(text.strip())
    return None


def parse_delay(args: Tuple[str, ...], default: float) -> float:
    """Delay argument of `~new`; anything unparsable, negative or infinite keeps the default."""
    if not args:
        return default
    try:
        value = float(args[0])
    except ValueError:
        return default
    return value if math.isfinite(value) and value >= 0 else default
