# Area: Discord
"""
crewmute._discord.client — Discord Platform Client
==================================================

PlatformClient implementation over discord.py. Every discord error is
classified here, so the dispatcher only ever sees a CallResult:

    NotFound, Forbidden, other 4xx, uncached member   -> PERMANENT
    429, 5xx, RateLimited, timeouts, connection errors -> TRANSIENT
"""

from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Optional

import discord

from .._core.dispatcher import CallResult
from .._core.enums import Room

logger = logging.getLogger("crewmute.discord.client")


def classify_http_error(error: discord.HTTPException) -> CallResult:
    """Map an HTTP error from discord.py to a CallResult."""
    detail = f"HTTP {error.status}: {error.text or 'no message'}"
    if error.status == 429 or error.status >= 500:
        return CallResult.transient(detail, retry_after=getattr(error, "retry_after", None))
    return CallResult.permanent(detail)


class DiscordPlatformClient:
    """
    Server-mutes and moves guild members between the two voice channels.

    The guild is taken from the living channel, so the client works as
    soon as the gateway cache is populated.
    """

    def __init__(self, client: discord.Client, living_channel_id: int, dead_channel_id: int):
        self.client = client
        self.living_channel_id = living_channel_id
        self.dead_channel_id = dead_channel_id

    def channel_for(self, room: Room) -> Optional[discord.abc.GuildChannel]:
        if room == Room.LIVING:
            return self.client.get_channel(self.living_channel_id)
        if room == Room.DEAD:
            return self.client.get_channel(self.dead_channel_id)
        return None

    def room_for(self, channel: Optional[discord.abc.Snowflake]) -> Optional[Room]:
        """Which moderated room a voice channel is, if any."""
        if channel is None:
            return None
        if channel.id == self.living_channel_id:
            return Room.LIVING
        if channel.id == self.dead_channel_id:
            return Room.DEAD
        return None

    def get_member(self, participant_id: int) -> Optional[discord.Member]:
        channel = self.channel_for(Room.LIVING)
        if channel is None:
            return None
        return channel.guild.get_member(participant_id)

    async def mute(self, participant_id: int, muted: bool) -> CallResult:
        member = self.get_member(participant_id)
        if member is None:
            return CallResult.permanent(f"member {participant_id} not found")
        logger.debug(f"{'Muting' if muted else 'Unmuting'} {member.display_name}")
        return await self._call(member.edit(mute=muted))

    async def move_to_room(self, participant_id: int, room: Room) -> CallResult:
        member = self.get_member(participant_id)
        if member is None:
            return CallResult.permanent(f"member {participant_id} not found")
        channel = self.channel_for(room)
        if channel is None:
            return CallResult.permanent(f"no channel for room {room.value}")
        logger.debug(f"Moving {member.display_name} to {channel.name}")
        return await self._call(member.move_to(channel))

    async def _call(self, request: Awaitable) -> CallResult:
        try:
            await request
        except discord.NotFound as e:
            return CallResult.permanent(f"not found: {e.text or e}")
        except discord.Forbidden as e:
            return CallResult.permanent(f"forbidden: {e.text or e}")
        except discord.HTTPException as e:
            return classify_http_error(e)
        except discord.RateLimited as e:
            return CallResult.transient("rate limited", retry_after=e.retry_after)
        except asyncio.TimeoutError:
            return CallResult.transient("timed out")
        except OSError as e:
            return CallResult.transient(f"connection error: {e}")
        return CallResult.ok()
