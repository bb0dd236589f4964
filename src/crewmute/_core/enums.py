# Area: Core
"""
crewmute._core.enums — Phase, Room and Call Enums
=================================================

Defines the game phases, the events that move between them, the
voice rooms a participant can be assigned to, and the outcome
classes of a platform call.
"""

from enum import Enum


class GamePhase(Enum):
    """
    Phases of the single moderated game session.

    State transitions:
    IDLE -> LOBBY (on START)
    LOBBY -> MEETING (on MEETING_BEGIN)
    MEETING -> LOBBY (on MEETING_END)
    LOBBY -> ENDED (on END_GAME)
    MEETING -> ENDED (on END_GAME)
    ENDED -> IDLE (on RESET, after the restoring dispatch)
    """
    IDLE = "IDLE"
    LOBBY = "LOBBY"
    MEETING = "MEETING"
    ENDED = "ENDED"


class PhaseEvent(Enum):
    """
    Events that trigger phase transitions.

    Events are triggered by:
    - START: `~new` command
    - MEETING_BEGIN: emergency reaction added, or a log-detected meeting
    - MEETING_END: emergency reaction removed, or a log-detected meeting end
    - END_GAME: `~end` / `~stop` command
    - RESET: internal, once everyone has been restored
    """
    START = "START"
    MEETING_BEGIN = "MEETING_BEGIN"
    MEETING_END = "MEETING_END"
    END_GAME = "END_GAME"
    RESET = "RESET"


class Room(Enum):
    """Voice rooms. UNCHANGED is only ever planned, never observed."""
    LIVING = "LIVING"
    DEAD = "DEAD"
    UNCHANGED = "UNCHANGED"


class CallStatus(Enum):
    """Classified outcome of one platform call."""
    OK = "OK"
    TRANSIENT = "TRANSIENT"     # rate limited / timeout, worth retrying
    PERMANENT = "PERMANENT"     # not found / forbidden, never retried
