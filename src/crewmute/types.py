"""
crewmute.types — TypedDict schemas for outward-facing reports
=============================================================

Structures handed to whatever reports on the game (the `~check`
command, logs, embedding applications).

    >>> StatusEntry.__annotations__
    {'display_name': str, 'alias': Optional[str], 'alive': bool, ...}
"""

from typing import Optional, TypedDict


class StatusEntry(TypedDict):
    """One participant in EventRouter.status_report().

    Fields
    ------
    display_name : str
        Current platform-visible name.
    alias : Optional[str]
        Player-chosen in-game name, or None if never set.
    alive : bool
        False once marked dead.
    room : Optional[str]
        "LIVING", "DEAD", or None if not observed yet.
    spectator : bool
        Spectators are listed but never moderated.
    """
    display_name: str
    alias: Optional[str]
    alive: bool
    room: Optional[str]
    spectator: bool
