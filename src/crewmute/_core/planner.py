# Area: Core
"""
crewmute._core.planner — Action Planner
=======================================

Pure function from (phase, registry snapshot) to the voice state every
participant should be in.

    Phase        alive   muted   room
    LOBBY        yes     yes     LIVING
    LOBBY        no      yes     DEAD
    MEETING      yes     no      LIVING
    MEETING      no      yes     DEAD
    ENDED/IDLE   -       no      LIVING

Dead players are only ever unmuted when the game is over. A target
room the participant already occupies is planned as UNCHANGED so the
dispatcher can skip the move.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from .enums import GamePhase, Room
from .registry import Participant
from ..errors import InvariantViolation


@dataclass(frozen=True)
class DesiredVoiceState:
    muted: bool
    room: Room


# (phase, alive) -> (muted, room); None stands for "any"
_RULES: Dict[Tuple[GamePhase, object], Tuple[bool, Room]] = {
    (GamePhase.LOBBY, True): (True, Room.LIVING),
    (GamePhase.LOBBY, False): (True, Room.DEAD),
    (GamePhase.MEETING, True): (False, Room.LIVING),
    (GamePhase.MEETING, False): (True, Room.DEAD),
    (GamePhase.ENDED, None): (False, Room.LIVING),
    (GamePhase.IDLE, None): (False, Room.LIVING),
}


def desired_for(phase: GamePhase, participant: Participant) -> DesiredVoiceState:
    """Target voice state for one participant."""
    rule = _RULES.get((phase, participant.alive)) or _RULES.get((phase, None))
    if rule is None:
        raise InvariantViolation(f"No planning rule for phase {phase!r}")
    muted, room = rule
    if participant.room == room:
        room = Room.UNCHANGED
    return DesiredVoiceState(muted=muted, room=room)


def plan(phase: GamePhase, snapshot: Mapping[int, Participant]) -> Dict[int, DesiredVoiceState]:
    """
    Compute the desired voice state of every moderated participant.

    Spectators get no entry at all. Raises InvariantViolation for a
    phase with no rule; that is a programming error, not a game event.
    """
    if not isinstance(phase, GamePhase):
        raise InvariantViolation(f"Cannot plan for unknown phase {phase!r}")
    return {
        pid: desired_for(phase, participant)
        for pid, participant in snapshot.items()
        if not participant.is_spectator
    }
