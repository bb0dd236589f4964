"""
simulate_game.py — Play a game WITHOUT Discord
==============================================

Drives the core with a printing platform client so you can watch which
mute/move calls each event produces, and in what order.

Run with:  python simulate_game.py
"""

import asyncio
import random

from crewmute import (
    ActionDispatcher,
    CallResult,
    EventRouter,
    GameEnded,
    GameSession,
    GameStarted,
    MarkedDead,
    MeetingEnded,
    MeetingStarted,
    Member,
    RetryPolicy,
)


# ── A platform that prints and sometimes rate-limits ──────────

class PrintingPlatform:

    def __init__(self, names, flakiness=0.2):
        self.names = names
        self.flakiness = flakiness

    async def mute(self, participant_id, muted):
        return self._answer(f"{'mute' if muted else 'unmute':<7} {self.names[participant_id]}")

    async def move_to_room(self, participant_id, room):
        return self._answer(f"move    {self.names[participant_id]} -> {room.value}")

    def _answer(self, text):
        if random.random() < self.flakiness:
            print(f"    {text}  (429, will retry)")
            return CallResult.transient("429", retry_after=0.05)
        print(f"    {text}")
        return CallResult.ok()


async def main():
    names = {1: "Red", 2: "Blue", 3: "Green", 4: "Pink", 5: "Lime"}
    session = GameSession()
    dispatcher = ActionDispatcher(
        PrintingPlatform(names), session.registry, RetryPolicy(base_delay_seconds=0.05),
    )
    router = EventRouter(session, dispatcher)

    steps = [
        ("~new", GameStarted(members=tuple(Member(pid, name) for pid, name in names.items()))),
        ("Blue reacts 💀", MarkedDead(2)),
        ("🚨 meeting", MeetingStarted()),
        ("Pink voted out", MarkedDead(4)),
        ("meeting over", MeetingEnded()),
        ("🚨 meeting", MeetingStarted()),
        ("🚨 again (duplicate)", MeetingStarted()),
        ("~end", GameEnded()),
    ]
    for label, event in steps:
        print(f"\n{label}")
        outcome = await router.handle_event(event)
        if outcome.error is not None:
            print(f"    rejected: {outcome.error.format_report()}")
        print(f"    phase={session.phase.value}")


if __name__ == "__main__":
    asyncio.run(main())
