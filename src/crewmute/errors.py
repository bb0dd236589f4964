"""
crewmute.errors — Custom exception classes
==========================================

Defines the exception hierarchy for the game session.
Each exception stores its full context so it can be logged and
reported back to whoever issued the offending command.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, List, Optional

from ._core.enums import CallStatus, GamePhase, PhaseEvent

if TYPE_CHECKING:
    from ._core.matcher import MatchResult


class CrewMuteError(Exception):
    """Base exception for all recoverable crewmute errors."""

    def format_report(self) -> str:
        return str(self)


class ParticipantNotFoundError(CrewMuteError, KeyError):
    """Raised when an operation references a participant that is not tracked."""

    def __init__(self, participant_id: Any):
        self.participant_id = participant_id
        super().__init__(f"Participant {participant_id} is not tracked")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]

    def format_report(self) -> str:
        return f"<@{self.participant_id}> is not in a moderated voice channel"


class InvalidTransitionError(CrewMuteError, ValueError):
    """Raised when a phase event arrives out of order."""

    def __init__(self, phase: GamePhase, event: PhaseEvent):
        self.phase = phase
        self.event = event
        super().__init__(f"Invalid transition: {event.value} from {phase.value}")

    def format_report(self) -> str:
        return f"Cannot {self.event.value.lower().replace('_', ' ')} while {self.phase.value.lower()}"


class AlreadyActiveError(InvalidTransitionError):
    """Raised when a game is started while another one is active."""

    def __init__(self, phase: GamePhase):
        super().__init__(phase, PhaseEvent.START)

    def format_report(self) -> str:
        return "A game is already in progress"


class NoGameRunningError(InvalidTransitionError):
    """Raised when a per-game change arrives while no game is active."""

    def __init__(self, phase: GamePhase, action: str):
        self.phase = phase
        self.event = None
        self.action = action
        CrewMuteError.__init__(self, f"Cannot {action} from {phase.value}: no game running")

    def format_report(self) -> str:
        return "There is no game running"


class IdentityResolutionError(CrewMuteError):
    """Raised when a name cannot be resolved to exactly one participant."""

    def __init__(self, query: str, result: "MatchResult"):
        self.query = query
        self.result = result
        super().__init__(f"Could not resolve '{query}': {result.describe()}")

    def format_report(self) -> str:
        return f"'{self.query}' is {self.result.describe()}"


class PlatformError(CrewMuteError):
    """
    A platform call that did not succeed.

    The dispatcher never raises this; it collects instances in its
    DispatchReport so the caller can surface them.
    """

    def __init__(
        self,
        participant_id: Any,
        action: str,
        kind: CallStatus,
        detail: str = "",
        attempts: int = 1,
    ):
        self.participant_id = participant_id
        self.action = action
        self.kind = kind
        self.detail = detail
        self.attempts = attempts
        super().__init__(
            f"{action} for {participant_id} failed ({kind.value}, "
            f"{attempts} attempt(s)): {detail or 'no detail'}"
        )

    @property
    def is_transient(self) -> bool:
        return self.kind == CallStatus.TRANSIENT


class ConfigError(CrewMuteError):
    """Raised when the bot configuration is missing or invalid."""

    def __init__(self, problems: List[str], source: Optional[str] = None):
        self.problems = problems
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid configuration{where}: " + "; ".join(problems))


class InvariantViolation(RuntimeError):
    """
    Raised when an internal invariant is broken.

    Deliberately not a CrewMuteError: nothing should catch and
    continue past one of these.
    """
    pass
