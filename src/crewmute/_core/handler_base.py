# Area: Core
"""
crewmute._core.handler_base — Base Event Handler
================================================

Abstract base class for the per-event handlers the router dispatches
to. A handler mutates the session and says whether a replan is due;
it raises a CrewMuteError to reject the event.
"""

import logging
from abc import ABC, abstractmethod

from .events import Event
from .session import GameSession
from ..errors import NoGameRunningError

logger = logging.getLogger("crewmute.core.handler")


class BaseEventHandler(ABC):
    """
    Abstract base class for event handlers.

    Handlers run inside the session lock and must not await anything.
    """

    def __init__(self, session: GameSession):
        self.session = session

    @abstractmethod
    def handle(self, event: Event) -> bool:
        """
        Apply an event to the session.

        Args:
            event: The event to apply

        Returns:
            True if the session changed in a way that needs a replan,
            False if the event was ignored

        Raises:
            CrewMuteError: If the event is rejected
        """
        pass

    def log_handling(self, event: Event) -> None:
        logger.info(f"Handling {event!r} in {self.session.phase.value}")

    def log_ignored(self, event: Event, reason: str) -> None:
        logger.debug(f"Ignoring {type(event).__name__}: {reason}")

    def require_game(self, action: str) -> None:
        """Raise NoGameRunningError unless the session is in Lobby or Meeting."""
        if not self.session.is_active:
            raise NoGameRunningError(self.session.phase, action)
