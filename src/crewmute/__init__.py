"""
crewmute — Voice moderation for social deduction games
======================================================

Mutes the living players of a game while they play, unmutes them for
meetings, and keeps dead players in a separate voice channel where they
can talk freely without being heard by the living.

Quick Start:
    from crewmute import load_config, BotRunner
    runner = BotRunner(load_config("Config.toml"))
    runner.run()

Embedding the core without Discord:
    from crewmute import ActionDispatcher, EventRouter, GameSession
    session = GameSession()
    router = EventRouter(session, ActionDispatcher(my_client, session.registry))
    await router.handle_event(GameStarted(members=...))

`my_client` is anything with async `mute()` and `move_to_room()`
methods returning a CallResult (see PlatformClient).
"""

# _core first: errors imports _core.enums
from ._core import (
    ActionDispatcher,
    AliasSet,
    CallResult,
    CallStatus,
    DispatchReport,
    EventOutcome,
    EventRouter,
    GameEnded,
    GamePhase,
    GameSession,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    Member,
    Participant,
    PlatformClient,
    PlayerRegistry,
    RetryPolicy,
    Room,
    VoiceJoined,
    VoiceLeft,
)
from .errors import (
    CrewMuteError,
    ParticipantNotFoundError,
    InvalidTransitionError,
    AlreadyActiveError,
    NoGameRunningError,
    IdentityResolutionError,
    PlatformError,
    ConfigError,
    InvariantViolation,
)
from .types import StatusEntry
from ._config import BotConfig, DispatchSettings, load_config
from .runner import BotRunner

__all__ = [
    # Main classes
    "BotRunner",
    "BotConfig",
    "DispatchSettings",
    "load_config",
    # Core
    "ActionDispatcher",
    "CallResult",
    "CallStatus",
    "DispatchReport",
    "EventOutcome",
    "EventRouter",
    "GamePhase",
    "GameSession",
    "Participant",
    "PlatformClient",
    "PlayerRegistry",
    "RetryPolicy",
    "Room",
    # Events
    "AliasSet",
    "GameEnded",
    "GameStarted",
    "MarkedDead",
    "MeetingEnded",
    "MeetingStarted",
    "Member",
    "VoiceJoined",
    "VoiceLeft",
    # Errors
    "CrewMuteError",
    "ParticipantNotFoundError",
    "InvalidTransitionError",
    "AlreadyActiveError",
    "NoGameRunningError",
    "IdentityResolutionError",
    "PlatformError",
    "ConfigError",
    "InvariantViolation",
    # Types
    "StatusEntry",
]
__version__ = "1.0.0"
