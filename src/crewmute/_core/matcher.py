# Area: Core
"""
crewmute._core.matcher — Identity Matcher
=========================================

Resolves a typed or spoken player name to a tracked participant.
Aliases win over display names; a name shared by two participants
is ambiguous rather than guessed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Mapping, Union

from .registry import Participant


@dataclass(frozen=True)
class Unique:
    participant_id: int

    def describe(self) -> str:
        return f"<@{self.participant_id}>"


@dataclass(frozen=True)
class Ambiguous:
    participant_ids: FrozenSet[int]

    def describe(self) -> str:
        mentions = ", ".join(f"<@{pid}>" for pid in sorted(self.participant_ids))
        return f"ambiguous between {mentions}"


@dataclass(frozen=True)
class NoMatch:

    def describe(self) -> str:
        return "not matched to anyone"


MatchResult = Union[Unique, Ambiguous, NoMatch]


def _normalise(name: str) -> str:
    return name.strip().casefold()


def _pick(candidates: List[int]) -> MatchResult:
    if len(candidates) == 1:
        return Unique(candidates[0])
    return Ambiguous(frozenset(candidates))


def resolve(query: str, participants: Mapping[int, Participant]) -> MatchResult:
    """
    Resolve a name against a registry snapshot.

    Exact, case-insensitive match on alias first, then on display
    name. Spectators are never matched.

    Args:
        query: The name to look up
        participants: Registry snapshot (or any id -> Participant mapping)

    Returns:
        Unique, Ambiguous or NoMatch
    """
    wanted = _normalise(query)
    if not wanted:
        return NoMatch()

    players = [p for p in participants.values() if not p.is_spectator]

    by_alias = [p.id for p in players if p.alias and _normalise(p.alias) == wanted]
    if by_alias:
        return _pick(by_alias)

    by_name = [p.id for p in players if _normalise(p.display_name) == wanted]
    if by_name:
        return _pick(by_name)

    return NoMatch()


def resolve_all(queries: Iterable[str], participants: Mapping[int, Participant]) -> dict:
    """Resolve several names at once, keyed by the query as given."""
    return {query: resolve(query, participants) for query in queries}
