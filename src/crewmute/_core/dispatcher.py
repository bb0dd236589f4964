# Area: Core
"""
crewmute._core.dispatcher — Action Dispatcher
=============================================

Reconciles the planned voice state with what was last applied on the
platform and issues the smallest ordered set of mute/move calls.

Ordering
--------
Calls are grouped into three waves that run one after another; calls
inside a wave run concurrently.

    wave 1  every mute, and every unmute that needs no move
    wave 2  every move
    wave 3  unmutes that had to wait for their move

So a participant going silent is muted before being moved (a dead
player is never heard unmuted in the living room), a participant
going loud is moved before being unmuted, and on a meeting start the
plain unmutes are not held up behind slow moves.

Failures
--------
TRANSIENT results are retried with exponential backoff, bounded both
per call (max_attempts) and per cycle (max_total_retry_seconds).
PERMANENT results are not retried; the registry records the planned
value as applied so the next cycle does not repeat a futile call, but
a refused move leaves the observed room alone.
The registry is only ever written after the platform answered.

Only one cycle runs at a time. A cycle whose plan was superseded by a
newer one while it waited is dropped; the newer cycle diffs against
the state the previous cycle just recorded, so nothing is sent twice.
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Protocol

from .enums import CallStatus, Room
from .planner import DesiredVoiceState
from .registry import Participant, PlayerRegistry, VoiceState
from ..errors import PlatformError

logger = logging.getLogger("crewmute.core.dispatcher")

MUTE = "mute"
UNMUTE = "unmute"
MOVE = "move"


@dataclass(frozen=True)
class CallResult:
    """Outcome of one platform call, classified by the platform client."""
    status: CallStatus
    detail: str = ""
    retry_after: Optional[float] = None

    @classmethod
    def ok(cls) -> "CallResult":
        return cls(CallStatus.OK)

    @classmethod
    def transient(cls, detail: str = "", retry_after: Optional[float] = None) -> "CallResult":
        return cls(CallStatus.TRANSIENT, detail, retry_after)

    @classmethod
    def permanent(cls, detail: str = "") -> "CallResult":
        return cls(CallStatus.PERMANENT, detail)


class PlatformClient(Protocol):
    """The two voice operations the dispatcher needs from the platform."""

    async def mute(self, participant_id: int, muted: bool) -> CallResult:
        ...

    async def move_to_room(self, participant_id: int, room: Room) -> CallResult:
        ...


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    max_total_retry_seconds: float = 20.0
    call_timeout_seconds: float = 10.0

    def delay_for(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Backoff before retry number `attempt` (1-based)."""
        if retry_after is not None:
            return max(0.0, retry_after)
        return min(self.base_delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)


@dataclass(frozen=True)
class PlatformCall:
    participant_id: int
    action: str
    wave: int
    room: Optional[Room] = None
    gated: bool = False     # only runs if this participant's previous call succeeded

    def __str__(self) -> str:
        target = f" -> {self.room.value}" if self.room else ""
        return f"{self.action}{target} for {self.participant_id}"


@dataclass
class DispatchReport:
    """What one dispatch cycle did."""
    calls: List[PlatformCall] = field(default_factory=list)
    failures: List[PlatformError] = field(default_factory=list)
    skipped: List[PlatformCall] = field(default_factory=list)
    attempts: int = 0
    superseded: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped


def diff_calls(
    desired: Mapping[int, DesiredVoiceState],
    participants: Mapping[int, Participant],
) -> List[PlatformCall]:
    """
    Turn a plan into the ordered list of calls still needed.

    Participants whose last applied state already matches the plan get
    no calls; participants no longer tracked are dropped.
    """
    calls: List[PlatformCall] = []
    for pid, want in desired.items():
        participant = participants.get(pid)
        if participant is None:
            continue
        applied = participant.last_applied or VoiceState()
        needs_mute = applied.muted != want.muted
        needs_move = want.room != Room.UNCHANGED and applied.room != want.room

        if want.muted:
            # going silent: mute first, then move
            if needs_mute:
                calls.append(PlatformCall(pid, MUTE, wave=1))
            if needs_move:
                calls.append(PlatformCall(pid, MOVE, wave=2, room=want.room, gated=needs_mute))
        else:
            # going loud: move first, then unmute
            if needs_move:
                calls.append(PlatformCall(pid, MOVE, wave=2, room=want.room))
            if needs_mute:
                calls.append(PlatformCall(
                    pid, UNMUTE, wave=3 if needs_move else 1, gated=needs_move,
                ))
    calls.sort(key=lambda c: c.wave)
    return calls


class ActionDispatcher:
    """
    Applies plans to the platform through a PlatformClient.

    Usage:
        dispatcher = ActionDispatcher(client, registry)
        generation = dispatcher.new_generation()
        report = await dispatcher.dispatch(plan(phase, snapshot), generation)
    """

    def __init__(
        self,
        client: PlatformClient,
        registry: PlayerRegistry,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.registry = registry
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()
        self._latest_generation = 0

    def new_generation(self) -> int:
        """Stamp a freshly computed plan; older pending plans become stale."""
        self._latest_generation += 1
        return self._latest_generation

    async def dispatch(
        self,
        desired: Mapping[int, DesiredVoiceState],
        generation: Optional[int] = None,
    ) -> DispatchReport:
        """
        Run one reconcile cycle.

        Args:
            desired: Output of plan()
            generation: Value from new_generation() when the plan was made

        Returns:
            DispatchReport describing calls, failures and skips
        """
        async with self._lock:
            if generation is not None and generation < self._latest_generation:
                logger.debug(f"Plan {generation} superseded by {self._latest_generation}")
                return DispatchReport(superseded=True)

            report = DispatchReport()
            calls = diff_calls(desired, self.registry.snapshot())
            if not calls:
                logger.debug("Nothing to dispatch")
                return report

            logger.info(f"Dispatching {len(calls)} call(s)")
            deadline = self._clock() + self.policy.max_total_retry_seconds
            failed: set = set()

            for wave in sorted({c.wave for c in calls}):
                runnable = []
                for call in (c for c in calls if c.wave == wave):
                    if call.gated and call.participant_id in failed:
                        logger.warning(f"Skipping {call}: previous call failed")
                        report.skipped.append(call)
                    else:
                        runnable.append(call)

                outcomes = await asyncio.gather(
                    *(self._execute(call, deadline) for call in runnable)
                )
                for call, (attempts, error) in zip(runnable, outcomes):
                    report.calls.append(call)
                    report.attempts += attempts
                    if error is not None:
                        failed.add(call.participant_id)
                        report.failures.append(error)

            if report.failures:
                logger.error(
                    f"Dispatch finished with {len(report.failures)} failure(s): "
                    + "; ".join(str(f) for f in report.failures)
                )
            return report

    async def _execute(self, call: PlatformCall, deadline: float):
        """Run one call with bounded retries. Returns (attempts, error or None)."""
        attempt = 0
        while True:
            attempt += 1
            result = await self._send(call)

            if result.status == CallStatus.OK:
                self._record(call)
                logger.debug(f"Applied {call}")
                return attempt, None

            if result.status == CallStatus.PERMANENT:
                self._record(call, observed=False)
                logger.warning(f"{call} refused permanently: {result.detail}")
                return attempt, PlatformError(
                    call.participant_id, call.action, CallStatus.PERMANENT, result.detail, attempt,
                )

            if attempt >= self.policy.max_attempts:
                return attempt, PlatformError(
                    call.participant_id, call.action, CallStatus.TRANSIENT,
                    f"gave up after {attempt} attempts: {result.detail}", attempt,
                )

            delay = self.policy.delay_for(attempt, result.retry_after)
            if self._clock() + delay > deadline:
                return attempt, PlatformError(
                    call.participant_id, call.action, CallStatus.TRANSIENT,
                    f"retry budget exhausted: {result.detail}", attempt,
                )

            logger.warning(f"{call} failed transiently ({result.detail}); retry in {delay:.2f}s")
            await self._sleep(delay)

    async def _send(self, call: PlatformCall) -> CallResult:
        if call.action == MOVE:
            op = self.client.move_to_room(call.participant_id, call.room)
        else:
            op = self.client.mute(call.participant_id, call.action == MUTE)
        try:
            return await asyncio.wait_for(op, timeout=self.policy.call_timeout_seconds)
        except asyncio.TimeoutError:
            return CallResult.transient("timed out")

    def _record(self, call: PlatformCall, observed: bool = True) -> None:
        if call.action == MOVE:
            self.registry.record_applied(call.participant_id, room=call.room, observed=observed)
        else:
            self.registry.record_applied(call.participant_id, muted=call.action == MUTE)
