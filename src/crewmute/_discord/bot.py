# Area: Discord
"""
crewmute._discord.bot — Discord Gateway Integration
===================================================

Translates gateway traffic into core events:

    ~new / ~end / ~stop         GameStarted / GameEnded
    ~dead <who>, 💀 reaction    MarkedDead
    🚨 reaction added/removed   MeetingStarted / MeetingEnded
    voice state updates         VoiceJoined / VoiceLeft
    ~alias, ~check, ~ident      alias setting and reporting

discord.py runs every gateway event in its own task; the router keeps
them in arrival order.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from .client import DiscordPlatformClient
from .commands import parse_command, parse_delay, parse_user_id
from .._config import BotConfig
from .._core.dispatcher import ActionDispatcher
from .._core.enums import Room
from .._core.events import (
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
from .._core.matcher import resolve_all
from .._core.router import EventOutcome, EventRouter
from .._core.session import GameSession
from .._shared.reporting import (
    DISPATCH_FAILED,
    NO_GAME,
    format_dispatch_failures,
    format_error,
    format_matches,
    format_status,
)
from ..errors import IdentityResolutionError

logger = logging.getLogger("crewmute.discord.bot")

CONFIRMATION_SECONDS = 5

CommandHandler = Callable[[discord.Message, Tuple[str, ...]], Awaitable[None]]


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.members = True
    intents.message_content = True
    intents.voice_states = True
    intents.guild_reactions = True
    return intents


class CrewMuteBot(discord.Client):
    """Discord client that drives the game session."""

    def __init__(self, config: BotConfig, session: Optional[GameSession] = None, **options):
        super().__init__(intents=build_intents(), **options)
        self.config = config
        self.session = session or GameSession()
        self.platform = DiscordPlatformClient(self, config.living_channel, config.dead_channel)
        self.dispatcher = ActionDispatcher(
            self.platform, self.session.registry, config.dispatch.to_retry_policy(),
        )
        self.router = EventRouter(self.session, self.dispatcher)
        self._commands: Dict[str, CommandHandler] = {
            "new": self._cmd_new,
            "end": self._cmd_end,
            "dead": self._cmd_dead,
            "stop": self._cmd_stop,
            "alias": self._cmd_alias,
            "check": self._cmd_check,
            "ident": self._cmd_ident,
        }

    # ── Lifecycle ─────────────────────────────────────────────

    async def setup_hook(self) -> None:
        await self.fetch_owners()

    async def fetch_owners(self) -> None:
        """Owners are the application's team members, or its single owner."""
        info = await self.application_info()
        if info.team is not None:
            owners = {member.id for member in info.team.members}
        else:
            owners = {info.owner.id}
        self.session.owners = owners
        logger.info(f"Bot owners: {sorted(owners)}")

    async def on_ready(self) -> None:
        logger.info(f"Connected as {self.user} (id={self.user.id})")

    # ── Gateway events ───────────────────────────────────────

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        command = parse_command(message.content, self.config.command_prefix)
        if command is None:
            return
        logger.info(f"Command ~{command.name} from {message.author} {list(command.args)}")
        await self._delete(message)
        await self._commands[command.name](message, command.args)

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        if self._ignore_reaction(payload):
            return
        emoji = str(payload.emoji)
        if emoji == self.config.emergency_emoji:
            if self.session.is_in_control(payload.user_id):
                await self._handle(MeetingStarted(source="reaction"))
        elif emoji == self.config.dead_emoji:
            await self._handle(MarkedDead(payload.user_id))

    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        if self._ignore_reaction(payload):
            return
        if str(payload.emoji) == self.config.emergency_emoji and self.session.is_in_control(payload.user_id):
            await self._handle(MeetingEnded(source="reaction"))

    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        if member.bot:
            return
        room_after = self.platform.room_for(after.channel)
        if room_after is not None:
            await self._handle(VoiceJoined(
                participant_id=member.id,
                display_name=member.display_name,
                room=room_after,
                muted=after.mute,
                is_spectator=self.is_spectator(member),
            ))
        elif self.platform.room_for(before.channel) is not None:
            await self._handle(VoiceLeft(member.id))

    # ── Commands ─────────────────────────────────────────────

    async def _cmd_new(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if self.session.is_active:
            await message.channel.send("A game is already in progress")
            return
        delay = parse_delay(args, self.config.start_delay_seconds)
        control = await message.channel.send(
            f"A game is in progress, {message.author.mention} can react to this message with "
            f"{self.config.emergency_emoji} to call a meeting.\n"
            f"Anyone can react to this message with {self.config.dead_emoji} to move to dead chat"
        )
        # Adding reactions takes about a second each; don't hold up the start
        reactions = asyncio.create_task(self._add_control_reactions(control))
        if delay:
            await asyncio.sleep(delay)

        outcome = await self._handle(GameStarted(
            members=tuple(self.living_members()),
            control=ControlInfo(
                channel_id=control.channel.id,
                message_id=control.id,
                controller_id=message.author.id,
            ),
        ))
        await reactions
        if outcome.error is not None:
            await self._delete(control)
            await message.channel.send(format_error(outcome.error))

    async def _cmd_end(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if not self.session.is_active:
            await message.channel.send(NO_GAME)
            return
        if self.session.is_in_control(message.author.id):
            await self.end_game("command")

    async def _cmd_dead(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if not self.session.is_active:
            await message.channel.send(NO_GAME)
            return
        channel = self.control_channel() or message.channel
        if not self.session.is_in_control(message.author.id):
            await channel.send(
                "You must have started the game or be an owner of the bot to make others dead\n"
                "To make yourself dead, please use the reactions"
            )
            return
        if not args:
            await channel.send("You must mention the user you wish to die")
            return

        target = parse_user_id(args[0])
        if target is None:
            try:
                target = self.router.require_participant(" ".join(args))
            except IdentityResolutionError as e:
                await channel.send(format_error(e))
                return

        outcome = await self._handle(MarkedDead(target))
        if outcome.error is not None:
            await channel.send(format_error(outcome.error))
        else:
            await channel.send(f"deadifying <@{target}>", delete_after=CONFIRMATION_SECONDS)

    async def _cmd_stop(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if not self.session.is_in_control(message.author.id):
            return
        if self.session.is_active:
            await self.end_game("stop")
        logger.info("Stop requested; closing connection")
        await self.close()

    async def _cmd_alias(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        alias = " ".join(args).strip()
        if not alias:
            await message.channel.send(f"Usage: {self.config.command_prefix}alias <in-game name>")
            return
        outcome = await self._handle(AliasSet(message.author.id, alias))
        if outcome.error is not None:
            await message.channel.send(format_error(outcome.error))
        else:
            await message.channel.send(f"{message.author.mention} is now known as {alias}")

    async def _cmd_check(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if not self.session.is_active:
            await message.channel.send(NO_GAME)
            return
        await message.channel.send(format_status(self.router.status_report()))

    async def _cmd_ident(self, message: discord.Message, args: Tuple[str, ...]) -> None:
        if not self.session.is_active:
            await message.channel.send(NO_GAME)
            return
        if not args:
            await message.channel.send(f"Usage: {self.config.command_prefix}ident <name> [<name> ...]")
            return
        results = resolve_all(args, self.session.snapshot())
        await message.channel.send(format_matches(results))

    # ── Helpers ──────────────────────────────────────────────

    async def end_game(self, reason: str) -> None:
        """Restore everyone, then remove the control message."""
        control = self.session.control
        await self._handle(GameEnded(reason=reason))
        if control is not None:
            channel = self.get_channel(control.channel_id)
            if channel is not None:
                await self._delete(channel.get_partial_message(control.message_id))

    def living_members(self) -> List[Member]:
        """Non-bot members currently in the living channel."""
        channel = self.platform.channel_for(Room.LIVING)
        if channel is None:
            logger.warning(f"Living channel {self.config.living_channel} not in cache")
            return []
        return [
            Member(
                participant_id=m.id,
                display_name=m.display_name,
                muted=m.voice.mute if m.voice else None,
                is_spectator=self.is_spectator(m),
            )
            for m in channel.members
            if not m.bot
        ]

    def is_spectator(self, member: discord.Member) -> bool:
        role_id = self.config.spectator_role
        return role_id is not None and any(role.id == role_id for role in member.roles)

    def control_channel(self) -> Optional[discord.abc.Messageable]:
        control = self.session.control
        return self.get_channel(control.channel_id) if control else None

    def _ignore_reaction(self, payload: discord.RawReactionActionEvent) -> bool:
        if self.user is not None and payload.user_id == self.user.id:
            return True
        return not self.session.is_control_message(payload.message_id)

    async def _handle(self, event) -> EventOutcome:
        control = self.control_channel()
        outcome = await self.router.handle_event(event)
        report = outcome.report
        if report is not None and not report.ok:
            for line in format_dispatch_failures(report):
                logger.error(line)
            channel = self.control_channel() or control
            if channel is not None:
                await channel.send(DISPATCH_FAILED)
        return outcome

    async def _add_control_reactions(self, control: discord.Message) -> None:
        for emoji in (self.config.emergency_emoji, self.config.dead_emoji):
            await control.add_reaction(emoji)

    async def _delete(self, message) -> None:
        try:
            await message.delete()
        except discord.HTTPException as e:
            logger.warning(f"Could not delete message {message.id}: {e}")
