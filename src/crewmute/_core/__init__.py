# Area: Core
"""
Core - game phase state machine and voice-action orchestration.

This package handles:
- Participant tracking and identity matching
- Game phase transitions
- Planning the voice state of every participant
- Applying plans to the platform with retries and ordering
- Routing inbound events to all of the above
"""

from .enums import GamePhase, PhaseEvent, Room, CallStatus
from .registry import Participant, PlayerRegistry, RegistrySnapshot, VoiceState
from .matcher import Ambiguous, MatchResult, NoMatch, Unique, resolve
from .state_machine import GamePhaseMachine, TRANSITIONS
from .planner import DesiredVoiceState, plan
from .dispatcher import (
    ActionDispatcher,
    CallResult,
    DispatchReport,
    PlatformCall,
    PlatformClient,
    RetryPolicy,
)
from .events import (
    AliasSet,
    ControlInfo,
    Event,
    GameEnded,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    Member,
    VoiceJoined,
    VoiceLeft,
)
from .session import GameSession
from .router import EventOutcome, EventRouter

__all__ = [
    "GamePhase",
    "PhaseEvent",
    "Room",
    "CallStatus",
    "Participant",
    "PlayerRegistry",
    "RegistrySnapshot",
    "VoiceState",
    "Ambiguous",
    "MatchResult",
    "NoMatch",
    "Unique",
    "resolve",
    "GamePhaseMachine",
    "TRANSITIONS",
    "DesiredVoiceState",
    "plan",
    "ActionDispatcher",
    "CallResult",
    "DispatchReport",
    "PlatformCall",
    "PlatformClient",
    "RetryPolicy",
    "AliasSet",
    "ControlInfo",
    "Event",
    "GameEnded",
    "GameStarted",
    "MarkedDead",
    "MeetingEnded",
    "MeetingStarted",
    "Member",
    "VoiceJoined",
    "VoiceLeft",
    "GameSession",
    "EventOutcome",
    "EventRouter",
]
