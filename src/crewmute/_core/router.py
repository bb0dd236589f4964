# Area: Core
"""
crewmute._core.router — Event Router
====================================

Single entry point for inbound events. Each event is applied to the
session by its handler and the session is replanned, all under the
session lock; the resulting plan is dispatched after the lock is
released so slow platform calls never block new events from being
recorded.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Type

from .dispatcher import ActionDispatcher, DispatchReport
from .enums import GamePhase
from .events import (
    AliasSet,
    Event,
    GameEnded,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    VoiceJoined,
    VoiceLeft,
)
from .handler_base import BaseEventHandler
from .handlers import (
    AliasSetHandler,
    GameEndedHandler,
    GameStartedHandler,
    MarkedDeadHandler,
    MeetingEndedHandler,
    MeetingStartedHandler,
    VoiceJoinedHandler,
    VoiceLeftHandler,
)
from .matcher import MatchResult, Unique, resolve
from .planner import plan
from .session import GameSession
from ..errors import CrewMuteError, IdentityResolutionError
from ..types import StatusEntry

logger = logging.getLogger("crewmute.core.router")


@dataclass
class EventOutcome:
    """Result of handling one event."""
    event: Event
    accepted: bool
    error: Optional[CrewMuteError] = None
    report: Optional[DispatchReport] = None


class EventRouter:
    """
    Routes events to handlers, then replans and dispatches.

    Usage:
        router = EventRouter(session, dispatcher)
        outcome = await router.handle_event(MeetingStarted())
    """

    def __init__(self, session: GameSession, dispatcher: ActionDispatcher):
        self.session = session
        self.dispatcher = dispatcher
        self._handlers: Dict[Type, BaseEventHandler] = {}
        self._register_handlers()

    def _register_handlers(self) -> None:
        reg = self.register_handler
        reg(VoiceJoined, VoiceJoinedHandler(self.session))
        reg(VoiceLeft, VoiceLeftHandler(self.session))
        reg(AliasSet, AliasSetHandler(self.session))
        reg(MarkedDead, MarkedDeadHandler(self.session))
        reg(MeetingStarted, MeetingStartedHandler(self.session))
        reg(MeetingEnded, MeetingEndedHandler(self.session))
        reg(GameStarted, GameStartedHandler(self.session))
        reg(GameEnded, GameEndedHandler(self.session))

    def register_handler(self, event_type: Type, handler: BaseEventHandler) -> None:
        self._handlers[event_type] = handler
        logger.debug(f"Registered handler for {event_type.__name__}")

    def get_handler(self, event_type: Type) -> Optional[BaseEventHandler]:
        return self._handlers.get(event_type)

    async def handle_event(self, event: Event) -> EventOutcome:
        """
        Apply one event and reconcile voice state.

        Rejected events (untracked participant, out-of-order phase) are
        logged and returned with their error; nothing is planned for
        them and they are never retried.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler for event type: {type(event).__name__}")
            return EventOutcome(event, accepted=False)

        async with self.session.lock:
            try:
                changed = handler.handle(event)
            except CrewMuteError as e:
                logger.warning(f"Rejected {type(event).__name__}: {e}")
                return EventOutcome(event, accepted=False, error=e)
            if not changed:
                return EventOutcome(event, accepted=True)

            phase = self.session.phase
            desired = plan(phase, self.session.snapshot())
            generation = self.dispatcher.new_generation()

        report = await self.dispatcher.dispatch(desired, generation)

        if phase == GamePhase.ENDED:
            report = await self._finish_game(report)

        return EventOutcome(event, accepted=True, report=report)

    async def _finish_game(self, report: DispatchReport) -> DispatchReport:
        """Reset the session once the Ended plan has actually been dispatched."""
        while report.superseded:
            logger.warning("End-of-game restore was superseded; replanning")
            async with self.session.lock:
                desired = plan(self.session.phase, self.session.snapshot())
                generation = self.dispatcher.new_generation()
            report = await self.dispatcher.dispatch(desired, generation)

        async with self.session.lock:
            self.session.reset()
        logger.info("Game over; session reset")
        return report

    def status_report(self) -> Dict[int, StatusEntry]:
        """Alias, life status and room of every tracked participant."""
        return {
            pid: StatusEntry(
                display_name=p.display_name,
                alias=p.alias,
                alive=p.alive,
                room=p.room.value if p.room else None,
                spectator=p.is_spectator,
            )
            for pid, p in self.session.snapshot().items()
        }

    def resolve_name(self, query: str) -> MatchResult:
        return resolve(query, self.session.snapshot())

    def require_participant(self, query: str) -> int:
        """Resolve a name to one participant id or raise IdentityResolutionError."""
        result = self.resolve_name(query)
        if isinstance(result, Unique):
            return result.participant_id
        raise IdentityResolutionError(query, result)
