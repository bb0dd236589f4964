# Area: Core Tests
"""Tests for the EventRouter: event handling, replanning, reporting."""

import asyncio

import pytest

from crewmute._core.dispatcher import CallResult
from crewmute._core.enums import CallStatus, GamePhase, Room
from crewmute._core.events import (
    AliasSet,
    ControlInfo,
    GameEnded,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    Member,
    VoiceJoined,
    VoiceLeft,
)
from crewmute._core.handlers import AliasSetHandler
from crewmute._core.matcher import Unique
from crewmute._core.registry import VoiceState
from crewmute.errors import (
    AlreadyActiveError,
    IdentityResolutionError,
    InvalidTransitionError,
    NoGameRunningError,
    ParticipantNotFoundError,
)

CONTROL = ControlInfo(channel_id=500, message_id=600, controller_id=7)


def start_game(router, *names):
    members = tuple(Member(pid, name) for pid, name in enumerate(names, start=1))
    return asyncio.run(router.handle_event(GameStarted(members=members, control=CONTROL)))


class TestGameStart:
    """Tests for GameStarted."""

    def test_seeds_registry_and_mutes_everyone(self, router, session, platform):
        """Test the living room is tracked and muted on start."""
        outcome = start_game(router, "Alice", "Bob")

        assert outcome.accepted and outcome.report.ok
        assert session.phase == GamePhase.LOBBY
        assert session.control == CONTROL
        assert set(session.snapshot()) == {1, 2}
        assert sorted(platform.calls) == [("mute", 1), ("mute", 2)]

    def test_start_while_meeting_rejected_without_reset(self, router, session, platform):
        """Test start during a meeting raises AlreadyActive and changes nothing."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(MeetingStarted()))
        before = dict(session.snapshot())
        platform.calls.clear()

        outcome = asyncio.run(router.handle_event(GameStarted(members=(Member(9, "Zed"),))))

        assert not outcome.accepted
        assert isinstance(outcome.error, AlreadyActiveError)
        assert outcome.report is None
        assert dict(session.snapshot()) == before
        assert session.control == CONTROL
        assert platform.calls == []


class TestMeetings:
    """Tests for meeting start and end."""

    def test_meeting_cycle(self, router, session, platform):
        """Test unmute on meeting start and mute on meeting end."""
        start_game(router, "Alice", "Bob")
        platform.calls.clear()

        asyncio.run(router.handle_event(MeetingStarted()))
        assert sorted(platform.calls) == [("unmute", 1), ("unmute", 2)]

        platform.calls.clear()
        asyncio.run(router.handle_event(MeetingEnded()))
        assert sorted(platform.calls) == [("mute", 1), ("mute", 2)]
        assert session.phase == GamePhase.LOBBY

    def test_duplicate_meeting_signal_dropped(self, router, session, platform):
        """Test a second MeetingStarted is rejected and issues no calls."""
        start_game(router, "Alice")
        asyncio.run(router.handle_event(MeetingStarted()))
        platform.calls.clear()

        outcome = asyncio.run(router.handle_event(MeetingStarted()))

        assert isinstance(outcome.error, InvalidTransitionError)
        assert platform.calls == []
        assert session.phase == GamePhase.MEETING

    def test_dead_player_moved_and_stays_muted_in_meeting(self, router, session, platform):
        """Test a death during a meeting mutes and moves at once."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(MeetingStarted()))
        platform.calls.clear()

        asyncio.run(router.handle_event(MarkedDead(2)))

        assert platform.calls == [("mute", 2), ("move", 2, Room.DEAD)]
        assert session.registry.get(2).last_applied == VoiceState(muted=True, room=Room.DEAD)


class TestRegistryEvents:
    """Tests for presence, alias and death events."""

    def test_presence_ignored_without_game(self, router, session, platform):
        """Test voice updates while idle are not tracked."""
        outcome = asyncio.run(router.handle_event(VoiceJoined(5, "Eve", Room.LIVING)))

        assert outcome.accepted and outcome.report is None
        assert len(session.registry) == 0
        assert platform.calls == []

    def test_late_joiner_tracked_and_muted(self, router, session, platform):
        """Test someone joining mid-game is muted."""
        start_game(router, "Alice")
        platform.calls.clear()

        asyncio.run(router.handle_event(VoiceJoined(5, "Eve", Room.LIVING, muted=False)))

        assert 5 in session.registry
        assert platform.calls == [("mute", 5)]

    def test_spectator_joiner_untouched(self, router, session, platform):
        """Test spectators are tracked but never moderated."""
        start_game(router, "Alice")
        platform.calls.clear()

        asyncio.run(router.handle_event(VoiceJoined(5, "Eve", Room.LIVING, is_spectator=True)))

        assert session.registry.get(5).is_spectator
        assert platform.calls == []

    def test_leaver_removed(self, router, session):
        """Test VoiceLeft forgets the participant; repeats are harmless."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(VoiceLeft(2)))
        outcome = asyncio.run(router.handle_event(VoiceLeft(2)))

        assert outcome.accepted
        assert 2 not in session.registry

    def test_alias_for_unknown_id_reports_not_found(self, router, session, platform):
        """Test set_alias on an untracked id: NotFound, registry unchanged."""
        start_game(router, "Alice")
        before = dict(session.snapshot())
        platform.calls.clear()

        outcome = asyncio.run(router.handle_event(AliasSet(99, "Red")))

        assert isinstance(outcome.error, ParticipantNotFoundError)
        assert dict(session.snapshot()) == before
        assert platform.calls == []

    def test_mark_dead_twice_is_harmless(self, router, session, platform):
        """Test a reaction and a command marking the same player dead."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(MarkedDead(2)))
        calls = list(platform.calls)

        outcome = asyncio.run(router.handle_event(MarkedDead(2)))

        assert outcome.accepted
        assert platform.calls == calls
        assert session.registry.get(2).alive is False


    def test_alias_and_death_rejected_without_game(self, router, session, platform):
        """Test alias and death changes while idle raise NoGameRunning."""
        alias = asyncio.run(router.handle_event(AliasSet(1, "Red")))
        death = asyncio.run(router.handle_event(MarkedDead(1)))

        assert isinstance(alias.error, NoGameRunningError)
        assert isinstance(death.error, NoGameRunningError)
        assert death.error.format_report() == "There is no game running"
        assert platform.calls == []

    def test_refused_move_keeps_observed_room(self, router, session, platform):
        """Test a permanently refused move is not reported as the player's room."""
        start_game(router, "Alice", "Bob")
        platform.script("move", 2, CallResult.permanent("forbidden"))

        outcome = asyncio.run(router.handle_event(MarkedDead(2)))

        assert outcome.report.failures[0].kind == CallStatus.PERMANENT
        assert router.status_report()[2]["room"] == "LIVING"
        assert session.registry.get(2).last_applied == VoiceState(muted=True, room=Room.DEAD)

        platform.calls.clear()
        asyncio.run(router.handle_event(AliasSet(1, "Red")))
        assert platform.calls == []

class TestGameEnd:
    """Tests for GameEnded."""

    def test_restores_everyone_then_resets(self, router, session, platform):
        """Test the end unmutes everyone, reunites the dead, then clears state."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(MarkedDead(2)))
        platform.calls.clear()

        outcome = asyncio.run(router.handle_event(GameEnded()))

        assert outcome.report.ok
        assert platform.calls_for(2) == [("move", 2, Room.LIVING), ("unmute", 2)]
        assert platform.calls_for(1) == [("unmute", 1)]
        assert session.phase == GamePhase.IDLE
        assert len(session.registry) == 0
        assert session.control is None

    def test_end_without_game_rejected(self, router):
        """Test ending while idle is an invalid transition."""
        outcome = asyncio.run(router.handle_event(GameEnded()))
        assert isinstance(outcome.error, InvalidTransitionError)

    def test_new_game_after_end(self, router, session):
        """Test a fresh game can start once the previous one is reset."""
        start_game(router, "Alice")
        asyncio.run(router.handle_event(GameEnded()))
        outcome = start_game(router, "Bob", "Carol")

        assert outcome.accepted
        assert session.phase == GamePhase.LOBBY


    def test_death_after_end_cannot_cancel_restore(self, router, session, platform):
        """Test a death reported while the game is ending is rejected and everyone is restored."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(MeetingStarted()))
        platform.calls.clear()

        async def scenario():
            platform.gate = asyncio.Event()
            meeting_end = asyncio.create_task(router.handle_event(MeetingEnded()))
            await asyncio.sleep(0.01)
            end = asyncio.create_task(router.handle_event(GameEnded()))
            await asyncio.sleep(0.01)
            death = await router.handle_event(MarkedDead(2))
            platform.gate.set()
            return await meeting_end, await end, death

        meeting_end, end, death = asyncio.run(scenario())

        assert isinstance(death.error, NoGameRunningError)
        assert end.report.superseded is False
        assert platform.calls_for(1) == [("mute", 1), ("unmute", 1)]
        assert platform.calls_for(2) == [("mute", 2), ("unmute", 2)]
        assert session.phase == GamePhase.IDLE
        assert len(session.registry) == 0

    def test_superseded_restore_is_dispatched_again(self, router, session, platform):
        """Test the session only resets after the Ended plan actually ran."""
        start_game(router, "Alice")
        asyncio.run(router.handle_event(MeetingStarted()))
        platform.calls.clear()

        async def scenario():
            platform.gate = asyncio.Event()
            meeting_end = asyncio.create_task(router.handle_event(MeetingEnded()))
            await asyncio.sleep(0.01)
            end = asyncio.create_task(router.handle_event(GameEnded()))
            await asyncio.sleep(0.01)
            # a newer plan generation lands while the restore is queued
            router.dispatcher.new_generation()
            platform.gate.set()
            return await meeting_end, await end

        meeting_end, end = asyncio.run(scenario())

        assert end.report.superseded is False and end.report.ok
        assert platform.calls == [("mute", 1), ("unmute", 1)]
        assert session.phase == GamePhase.IDLE

class TestConcurrency:
    """Tests for events arriving while a dispatch is in flight."""

    def test_event_during_dispatch_is_applied_in_order(self, router, session, platform):
        """Test a death recorded mid-dispatch ends in the right final state."""
        start_game(router, "Alice", "Bob", "Carol")
        platform.calls.clear()

        async def scenario():
            platform.gate = asyncio.Event()
            meeting = asyncio.create_task(router.handle_event(MeetingStarted()))
            death = asyncio.create_task(router.handle_event(MarkedDead(2)))
            await asyncio.sleep(0.01)
            # the death was recorded while the meeting's calls were in flight
            assert session.registry.get(2).alive is False
            platform.gate.set()
            return await asyncio.gather(meeting, death)

        meeting, death = asyncio.run(scenario())

        assert meeting.accepted and death.accepted
        registry = session.registry
        assert registry.get(1).last_applied == VoiceState(muted=False, room=Room.LIVING)
        assert registry.get(2).last_applied == VoiceState(muted=True, room=Room.DEAD)
        assert platform.calls.index(("move", 2, Room.DEAD)) > platform.calls.index(("mute", 2))


class TestQueries:
    """Tests for status_report and name resolution."""

    def test_status_report(self, router):
        """Test alias, life status and room are reported per participant."""
        start_game(router, "Alice", "Bob")
        asyncio.run(router.handle_event(AliasSet(1, "Red")))
        asyncio.run(router.handle_event(MarkedDead(2)))

        status = router.status_report()

        assert status[1] == {
            "display_name": "Alice", "alias": "Red", "alive": True,
            "room": "LIVING", "spectator": False,
        }
        assert status[2]["alive"] is False
        assert status[2]["room"] == "DEAD"

    def test_resolve_and_require(self, router):
        """Test name lookups through the router."""
        start_game(router, "Alice", "Bob")

        assert router.resolve_name("bob") == Unique(2)
        assert router.require_participant("ALICE") == 1
        with pytest.raises(IdentityResolutionError) as exc_info:
            router.require_participant("Zed")
        assert exc_info.value.query == "Zed"

    def test_handler_registry(self, router, session):
        """Test handlers can be looked up and replaced."""
        assert isinstance(router.get_handler(AliasSet), AliasSetHandler)

        replacement = AliasSetHandler(session)
        router.register_handler(AliasSet, replacement)
        assert router.get_handler(AliasSet) is replacement

    def test_unknown_event_type_not_accepted(self, router):
        """Test an event with no handler is refused."""
        outcome = asyncio.run(router.handle_event(object()))
        assert outcome.accepted is False
        assert outcome.error is None
