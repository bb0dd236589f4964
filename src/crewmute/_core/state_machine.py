# Area: Core
"""
crewmute._core.state_machine — Game Phase Machine
=================================================

Holds the phase of the single game session and validates every
transition against a fixed table. Out-of-order events are rejected,
never forced: a duplicate meeting signal must surface as an error so
a desynchronised phase is noticed rather than papered over.
"""

import logging

from .enums import GamePhase, PhaseEvent
from ..errors import AlreadyActiveError, InvalidTransitionError

logger = logging.getLogger("crewmute.core.state_machine")


# Valid phase transitions: {current_phase: {event: next_phase}}
TRANSITIONS = {
    GamePhase.IDLE: {
        PhaseEvent.START: GamePhase.LOBBY,
    },
    GamePhase.LOBBY: {
        PhaseEvent.MEETING_BEGIN: GamePhase.MEETING,
        PhaseEvent.END_GAME: GamePhase.ENDED,
    },
    GamePhase.MEETING: {
        PhaseEvent.MEETING_END: GamePhase.LOBBY,
        PhaseEvent.END_GAME: GamePhase.ENDED,
    },
    GamePhase.ENDED: {
        PhaseEvent.RESET: GamePhase.IDLE,
    },
}

ACTIVE_PHASES = frozenset({GamePhase.LOBBY, GamePhase.MEETING})


class GamePhaseMachine:
    """
    State machine for the game phase.

    Attributes:
        current_phase: The current phase (starts at IDLE)
    """

    def __init__(self):
        """Initialize in IDLE."""
        self.current_phase = GamePhase.IDLE

    @property
    def is_active(self) -> bool:
        """True while a game is in LOBBY or MEETING."""
        return self.current_phase in ACTIVE_PHASES

    def can_transition(self, event: PhaseEvent) -> bool:
        """
        Check if a transition is valid from the current phase.

        Args:
            event: The event to check

        Returns:
            True if the transition is valid, False otherwise
        """
        return event in TRANSITIONS.get(self.current_phase, {})

    def transition(self, event: PhaseEvent) -> GamePhase:
        """
        Execute a phase transition.

        Args:
            event: The event triggering the transition

        Returns:
            The new phase after transition

        Raises:
            AlreadyActiveError: START while not IDLE
            InvalidTransitionError: Any other event not valid from the current phase
        """
        if not self.can_transition(event):
            if event == PhaseEvent.START:
                raise AlreadyActiveError(self.current_phase)
            raise InvalidTransitionError(self.current_phase, event)

        previous = self.current_phase
        self.current_phase = TRANSITIONS[previous][event]
        logger.info(f"Phase {previous.value} -> {self.current_phase.value} ({event.value})")
        return self.current_phase

    def start(self) -> GamePhase:
        return self.transition(PhaseEvent.START)

    def meeting_begin(self) -> GamePhase:
        return self.transition(PhaseEvent.MEETING_BEGIN)

    def meeting_end(self) -> GamePhase:
        return self.transition(PhaseEvent.MEETING_END)

    def end_game(self) -> GamePhase:
        return self.transition(PhaseEvent.END_GAME)

    def reset(self) -> GamePhase:
        """Return from ENDED to IDLE."""
        return self.transition(PhaseEvent.RESET)
