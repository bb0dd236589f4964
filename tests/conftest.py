# Area: Test Support
"""Shared fixtures: an in-memory platform client and a ready session."""

import asyncio
from collections import defaultdict, deque

import pytest

from crewmute._core.dispatcher import ActionDispatcher, CallResult, RetryPolicy
from crewmute._core.enums import Room
from crewmute._core.router import EventRouter
from crewmute._core.session import GameSession


class FakePlatform:
    """
    PlatformClient that records every call.

    Results can be scripted per (action, participant_id); unscripted
    calls succeed. Setting `gate` makes every call wait for it.
    """

    def __init__(self):
        self.calls = []
        self.scripts = defaultdict(deque)
        self.gate = None

    def script(self, action, participant_id, *results):
        self.scripts[(action, participant_id)].extend(results)

    async def mute(self, participant_id, muted):
        return await self._record(("mute" if muted else "unmute", participant_id))

    async def move_to_room(self, participant_id, room):
        return await self._record(("move", participant_id, room))

    async def _record(self, call):
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        pending = self.scripts.get(call[:2])
        if pending:
            return pending.popleft()
        return CallResult.ok()

    def calls_for(self, participant_id):
        return [c for c in self.calls if c[1] == participant_id]


async def no_sleep(delay):
    await asyncio.sleep(0)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def session():
    return GameSession(owners={1})


@pytest.fixture
def dispatcher(platform, session):
    return ActionDispatcher(platform, session.registry, RetryPolicy(), sleep=no_sleep)


@pytest.fixture
def router(session, dispatcher):
    return EventRouter(session, dispatcher)


def seed(registry, pid, name, alive=True, room=Room.LIVING, muted=True, spectator=False):
    """Track a participant whose applied state is already (muted, room)."""
    registry.upsert_presence(pid, name, room=room, muted=muted, is_spectator=spectator)
    if not alive:
        registry.mark_alive(pid, False)
    return registry.get(pid)
