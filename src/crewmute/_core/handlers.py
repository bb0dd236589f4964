# Area: Core
"""
crewmute._core.handlers — Event Handlers
========================================

One handler per event type. Presence changes are only tracked while a
game is running. Alias and death changes are rejected outside a game,
so nothing replans over the end-of-game restore. Everything else goes
through the registry or the phase machine, which raise on untracked
participants and on out-of-order phase events.
"""

import logging

from .enums import Room
from .events import (
    AliasSet,
    GameEnded,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    VoiceJoined,
    VoiceLeft,
)
from .handler_base import BaseEventHandler

logger = logging.getLogger("crewmute.core.handlers")


class VoiceJoinedHandler(BaseEventHandler):
    """Participant entered (or moved between) the moderated channels."""

    def handle(self, event: VoiceJoined) -> bool:
        if not self.session.is_active:
            self.log_ignored(event, "no game running")
            return False
        self.log_handling(event)
        self.session.registry.upsert_presence(
            event.participant_id,
            event.display_name,
            room=event.room,
            muted=event.muted,
            is_spectator=event.is_spectator,
        )
        return True


class VoiceLeftHandler(BaseEventHandler):
    """Participant left both moderated channels."""

    def handle(self, event: VoiceLeft) -> bool:
        if not self.session.is_active:
            self.log_ignored(event, "no game running")
            return False
        self.log_handling(event)
        self.session.registry.remove(event.participant_id)
        return True


class AliasSetHandler(BaseEventHandler):

    def handle(self, event: AliasSet) -> bool:
        self.require_game("set an alias")
        self.log_handling(event)
        self.session.registry.set_alias(event.participant_id, event.alias)
        return True


class MarkedDeadHandler(BaseEventHandler):
    """Command or reaction marking a participant dead. Repeats are harmless."""

    def handle(self, event: MarkedDead) -> bool:
        self.require_game("mark a participant dead")
        self.log_handling(event)
        self.session.registry.mark_alive(event.participant_id, False)
        return True


class MeetingStartedHandler(BaseEventHandler):

    def handle(self, event: MeetingStarted) -> bool:
        self.log_handling(event)
        self.session.phase_machine.meeting_begin()
        return True


class MeetingEndedHandler(BaseEventHandler):

    def handle(self, event: MeetingEnded) -> bool:
        self.log_handling(event)
        self.session.phase_machine.meeting_end()
        return True


class GameStartedHandler(BaseEventHandler):
    """
    Start a game and seed the registry from the living room.

    The transition is attempted first so a rejected start leaves the
    running game's registry untouched.
    """

    def handle(self, event: GameStarted) -> bool:
        self.log_handling(event)
        self.session.phase_machine.start()
        registry = self.session.registry
        registry.clear()
        for member in event.members:
            registry.upsert_presence(
                member.participant_id,
                member.display_name,
                room=Room.LIVING,
                muted=member.muted,
                is_spectator=member.is_spectator,
            )
        self.session.control = event.control
        logger.info(f"Game started with {len(event.members)} member(s)")
        return True


class GameEndedHandler(BaseEventHandler):
    """End the game; the router restores everyone, then resets the session."""

    def handle(self, event: GameEnded) -> bool:
        self.log_handling(event)
        self.session.phase_machine.end_game()
        return True
