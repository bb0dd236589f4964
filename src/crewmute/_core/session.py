# Area: Core
"""
crewmute._core.session — Game Session
=====================================

The one mutable aggregate of the process: the player registry, the
phase machine, the control message of the running game and the bot
owners. The router holds `lock` across every mutate-then-plan step.
"""

from __future__ import annotations
import asyncio
from typing import Iterable, Optional, Set

from .events import ControlInfo
from .registry import PlayerRegistry, RegistrySnapshot
from .state_machine import GamePhaseMachine
from .enums import GamePhase


class GameSession:
    """Registry + phase + control info for the single game of the process."""

    def __init__(self, owners: Iterable[int] = ()):
        self.registry = PlayerRegistry()
        self.phase_machine = GamePhaseMachine()
        self.control: Optional[ControlInfo] = None
        self.owners: Set[int] = set(owners)
        self.lock = asyncio.Lock()

    @property
    def phase(self) -> GamePhase:
        return self.phase_machine.current_phase

    @property
    def is_active(self) -> bool:
        return self.phase_machine.is_active

    def snapshot(self) -> RegistrySnapshot:
        return self.registry.snapshot()

    def is_in_control(self, user_id: int) -> bool:
        """Owners always; otherwise only the user who started the running game."""
        if user_id in self.owners:
            return True
        return self.control is not None and self.control.controller_id == user_id

    def is_control_message(self, message_id: int) -> bool:
        return self.control is not None and self.control.message_id == message_id

    def reset(self) -> None:
        """Forget the finished game and return to IDLE."""
        self.registry.clear()
        self.control = None
        if self.phase == GamePhase.ENDED:
            self.phase_machine.reset()
