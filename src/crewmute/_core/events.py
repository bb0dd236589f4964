# Area: Core
"""
crewmute._core.events — Inbound Events
======================================

Closed set of events the router understands. Gateway callbacks,
commands, reactions and meeting detectors all translate their input
into one of these before calling EventRouter.handle_event().
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .enums import Room


@dataclass(frozen=True)
class Member:
    """A voice member as seen when a game starts."""
    participant_id: int
    display_name: str
    muted: Optional[bool] = None
    is_spectator: bool = False


@dataclass(frozen=True)
class ControlInfo:
    """Where the game is controlled from and who controls it."""
    channel_id: int
    message_id: int
    controller_id: int


@dataclass(frozen=True)
class VoiceJoined:
    participant_id: int
    display_name: str
    room: Room
    muted: Optional[bool] = None
    is_spectator: bool = False


@dataclass(frozen=True)
class VoiceLeft:
    participant_id: int


@dataclass(frozen=True)
class AliasSet:
    participant_id: int
    alias: str


@dataclass(frozen=True)
class MarkedDead:
    participant_id: int


@dataclass(frozen=True)
class MeetingStarted:
    source: str = "reaction"


@dataclass(frozen=True)
class MeetingEnded:
    source: str = "reaction"


@dataclass(frozen=True)
class GameStarted:
    members: Tuple[Member, ...] = ()
    control: Optional[ControlInfo] = None


@dataclass(frozen=True)
class GameEnded:
    reason: str = "command"


Event = Union[
    VoiceJoined,
    VoiceLeft,
    AliasSet,
    MarkedDead,
    MeetingStarted,
    MeetingEnded,
    GameStarted,
    GameEnded,
]
