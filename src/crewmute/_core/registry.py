# Area: Core
"""
crewmute._core.registry — Player Registry
=========================================

Tracks every participant of the running game by platform id:
their names, whether they are alive, whether they are a spectator,
where they currently are, and what voice state was last pushed to
the platform for them.

The registry is only ever mutated from the event router's critical
section; planners and reports work from an immutable snapshot.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Iterator, Mapping, Optional
from types import MappingProxyType
import logging

from .enums import Room
from ..errors import ParticipantNotFoundError

logger = logging.getLogger("crewmute.core.registry")


@dataclass(frozen=True)
class VoiceState:
    """A (muted, room) pair as known to the platform. None means unknown."""
    muted: Optional[bool] = None
    room: Optional[Room] = None


@dataclass(frozen=True)
class Participant:
    """One tracked platform account."""
    id: int
    display_name: str
    alias: Optional[str] = None
    alive: bool = True
    is_spectator: bool = False
    room: Optional[Room] = None                  # observed current room
    last_applied: Optional[VoiceState] = None    # None = unknown, always diffs

    @property
    def known_as(self) -> str:
        """Name used in reports: the alias if set, else the display name."""
        return self.alias or self.display_name


class RegistrySnapshot(Mapping[int, Participant]):
    """Read-only, point-in-time view of the registry."""

    def __init__(self, participants: Dict[int, Participant]):
        self._participants = MappingProxyType(dict(participants))

    def __getitem__(self, participant_id: int) -> Participant:
        return self._participants[participant_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._participants)

    def __len__(self) -> int:
        return len(self._participants)

    def __repr__(self) -> str:
        return f"RegistrySnapshot({len(self)} participants)"


class PlayerRegistry:
    """
    Participant store keyed by platform id.

    Participants are immutable records; every mutation swaps in a new
    record, so a snapshot taken earlier never changes underneath
    whoever holds it.
    """

    def __init__(self):
        self._participants: Dict[int, Participant] = {}

    def __contains__(self, participant_id: int) -> bool:
        return participant_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)

    def get(self, participant_id: int) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def upsert_presence(
        self,
        participant_id: int,
        display_name: str,
        room: Optional[Room] = None,
        muted: Optional[bool] = None,
        is_spectator: Optional[bool] = None,
    ) -> Participant:
        """
        Insert a participant, or refresh one that is already tracked.

        An observed room/mute flag is what the platform reports right
        now, so it also becomes the best-known applied state.

        Args:
            participant_id: Platform id
            display_name: Current platform-visible name
            room: Room the participant was observed in, if known
            muted: Server-mute flag observed on the platform, if known
            is_spectator: Spectator flag, if known

        Returns:
            The stored participant record
        """
        current = self._participants.get(participant_id)
        if current is None:
            current = Participant(id=participant_id, display_name=display_name)
            logger.debug(f"Tracking participant {participant_id} ({display_name})")

        changes = {"display_name": display_name}
        if is_spectator is not None:
            changes["is_spectator"] = is_spectator
        if room is not None:
            changes["room"] = room
        if room is not None or muted is not None:
            previous = current.last_applied or VoiceState()
            changes["last_applied"] = VoiceState(
                muted=muted if muted is not None else previous.muted,
                room=room if room is not None else previous.room,
            )

        updated = replace(current, **changes)
        self._participants[participant_id] = updated
        return updated

    def set_alias(self, participant_id: int, alias: str) -> Participant:
        """Set the player-chosen name. Raises ParticipantNotFoundError if unseen."""
        current = self._require(participant_id)
        updated = replace(current, alias=alias.strip() or None)
        self._participants[participant_id] = updated
        return updated

    def mark_alive(self, participant_id: int, alive: bool) -> Participant:
        """
        Set life status. Last writer wins; repeating a mark is a no-op.

        Raises:
            ParticipantNotFoundError: If the participant is not tracked
        """
        current = self._require(participant_id)
        if current.alive == alive:
            return current
        updated = replace(current, alive=alive)
        self._participants[participant_id] = updated
        logger.info(f"{current.known_as} is now {'alive' if alive else 'dead'}")
        return updated

    def remove(self, participant_id: int) -> None:
        """Forget a departed participant. Unknown ids are ignored."""
        removed = self._participants.pop(participant_id, None)
        if removed is not None:
            logger.debug(f"Stopped tracking {removed.known_as}")

    def record_applied(
        self,
        participant_id: int,
        muted: Optional[bool] = None,
        room: Optional[Room] = None,
        observed: bool = True,
    ) -> None:
        """
        Record a voice change confirmed (or permanently refused) by the platform.

        Participants that left while the call was in flight are ignored.
        A refusal passes observed=False: the change counts as applied so
        it is not retried, but the participant's room is left as it was.
        """
        current = self._participants.get(participant_id)
        if current is None:
            return
        previous = current.last_applied or VoiceState()
        applied = VoiceState(
            muted=muted if muted is not None else previous.muted,
            room=room if room is not None else previous.room,
        )
        changes = {"last_applied": applied}
        if room is not None and observed:
            changes["room"] = room
        self._participants[participant_id] = replace(current, **changes)

    def clear(self) -> None:
        """Forget every participant."""
        self._participants.clear()

    def snapshot(self) -> RegistrySnapshot:
        """Return an immutable copy for planning and reporting."""
        return RegistrySnapshot(self._participants)

    def _require(self, participant_id: int) -> Participant:
        participant = self._participants.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(participant_id)
        return participant
