"""discord.py implementation of :class:`~scrim_bot.gateway.GuildGateway`."""

from __future__ import annotations

import logging

import discord

from .errors import InternalError
from .models import LobbyGroup, Scrim, announcement_channel_for
from .views import (
    PANEL_TEXT,
    CheckInButton,
    RegistrationPanelView,
    TransferButton,
    single_item_view,
)

log = logging.getLogger(__name__)

SCRIMS_CATEGORY = "Scrims"
LOBBIES_CATEGORY = "Lobbies"
REGISTER_CHANNEL = "scrim-register"
LOG_CHANNEL = "scrim-log"
ADMIN_CHANNEL = "scrim-admin"
CHECKED_IN_ROLE = "IDP"
PANEL_HISTORY_LIMIT = 50


def checkin_announcement(scrim: Scrim, role: discord.Role | None) -> str:
    mention = role.mention if role is not None else ""
    return (
        f"{mention} Registration is now OPEN for **{scrim.name}**. "
        "Click Register and complete CAPTCHA to check-in."
    ).strip()


class DiscordGuildGateway:
    def __init__(self, client: discord.Client, guild_id: int) -> None:
        self._client = client
        self._guild_id = guild_id

    async def guild(self) -> discord.Guild:
        guild = self._client.get_guild(self._guild_id)
        if guild is not None:
            return guild
        try:
            return await self._client.fetch_guild(self._guild_id)
        except discord.HTTPException as exc:
            raise InternalError(
                f"Guild {self._guild_id} is unavailable: {exc}"
            ) from exc

    # ----- Lookups -----
    @staticmethod
    def _category(guild: discord.Guild, name: str) -> discord.CategoryChannel | None:
        return discord.utils.get(guild.categories, name=name)

    @staticmethod
    def _text_channel(
        guild: discord.Guild,
        name: str,
        category: discord.CategoryChannel | None = None,
    ) -> discord.TextChannel | None:
        for channel in guild.text_channels:
            if channel.name != name:
                continue
            if category is None or channel.category_id == category.id:
                return channel
        return None

    async def _ensure_category(
        self, guild: discord.Guild, name: str
    ) -> discord.CategoryChannel:
        category = self._category(guild, name)
        if category is None:
            category = await guild.create_category(name, reason="Scrim bot layout")
            log.info("Created category %s", name)
        return category

    async def _ensure_text_channel(
        self,
        guild: discord.Guild,
        name: str,
        category: discord.CategoryChannel,
        overwrites: dict | None = None,
    ) -> discord.TextChannel:
        channel = self._text_channel(guild, name, category)
        if channel is None:
            channel = await guild.create_text_channel(
                name,
                category=category,
                overwrites=overwrites or {},
                reason="Scrim bot layout",
            )
            log.info("Created channel #%s", name)
        return channel

    async def _checked_in_role(self, guild: discord.Guild) -> discord.Role:
        role = discord.utils.get(guild.roles, name=CHECKED_IN_ROLE)
        if role is None:
            role = await guild.create_role(
                name=CHECKED_IN_ROLE, reason="Grant to checked-in players"
            )
            log.info("Created role %s", CHECKED_IN_ROLE)
        return role

    async def _member(
        self, guild: discord.Guild, user_id: str
    ) -> discord.Member | None:
        try:
            member_id = int(user_id)
        except ValueError:
            return None
        member = guild.get_member(member_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(member_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as exc:
            log.warning("Cannot fetch member %s: %s", user_id, exc)
            return None

    @staticmethod
    def _mention_role(guild: discord.Guild, scrim: Scrim) -> discord.Role | None:
        if not scrim.mention_role_id.isdigit():
            return None
        return guild.get_role(int(scrim.mention_role_id))

    def _private_overwrites(self, guild: discord.Guild) -> dict:
        overwrites: dict = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
        }
        if guild.me is not None:
            overwrites[guild.me] = discord.PermissionOverwrite(
                view_channel=True, send_messages=True
            )
        return overwrites

    # ----- Layout -----
    async def ensure_layout(self) -> None:
        guild = await self.guild()
        category = await self._ensure_category(guild, SCRIMS_CATEGORY)
        register = await self._ensure_text_channel(guild, REGISTER_CHANNEL, category)
        await self._ensure_text_channel(guild, LOG_CHANNEL, category)
        await self._ensure_text_channel(
            guild, ADMIN_CHANNEL, category, self._private_overwrites(guild)
        )
        await self._ensure_category(guild, LOBBIES_CATEGORY)
        await self._checked_in_role(guild)
        await self._ensure_panel(register)

    async def _ensure_panel(self, channel: discord.TextChannel) -> None:
        bot_user = self._client.user
        try:
            async for message in channel.history(limit=PANEL_HISTORY_LIMIT):
                if (
                    bot_user is not None
                    and message.author.id == bot_user.id
                    and PANEL_TEXT in message.content
                ):
                    await message.edit(content=PANEL_TEXT, view=RegistrationPanelView())
                    return
        except discord.HTTPException as exc:
            log.warning("Could not scan #%s for the panel: %s", channel.name, exc)
        await channel.send(PANEL_TEXT, view=RegistrationPanelView())
        log.info("Posted registration panel in #%s", channel.name)

    async def ensure_announcement_channel(self, scrim: Scrim) -> None:
        await self._announcement_channel(scrim)

    async def _announcement_channel(self, scrim: Scrim) -> discord.TextChannel:
        guild = await self.guild()
        existing = self._text_channel(guild, scrim.announcement_channel_name)
        if existing is not None:
            return existing
        category = await self._ensure_category(guild, SCRIMS_CATEGORY)
        overwrites = self._private_overwrites(guild)
        role = self._mention_role(guild, scrim)
        if role is not None:
            overwrites[role] = discord.PermissionOverwrite(
                view_channel=True, send_messages=False
            )
        channel = await guild.create_text_channel(
            scrim.announcement_channel_name,
            category=category,
            overwrites=overwrites,
            reason=f"Announcements for scrim {scrim.name}",
        )
        log.info("Created announcement channel #%s", channel.name)
        return channel

    # ----- Scrim lifecycle -----
    async def announce_checkin(self, scrim: Scrim) -> None:
        guild = await self.guild()
        channel = await self._announcement_channel(scrim)
        role = self._mention_role(guild, scrim)
        await channel.send(
            checkin_announcement(scrim, role),
            view=single_item_view(CheckInButton(scrim.name)),
            allowed_mentions=discord.AllowedMentions(roles=True),
        )

    async def post_notice(self, scrim_name: str, text: str) -> None:
        guild = await self.guild()
        channel = self._text_channel(guild, announcement_channel_for(scrim_name))
        if channel is None:
            log.warning(
                "No announcement channel for %s; notice dropped: %s", scrim_name, text
            )
            return
        await channel.send(text)

    async def open_lobby(self, group: LobbyGroup) -> None:
        guild = await self.guild()
        category = await self._ensure_category(guild, LOBBIES_CATEGORY)
        overwrites = self._private_overwrites(guild)
        for member_id in group.member_ids:
            member = await self._member(guild, member_id)
            if member is None:
                log.info("Lobby member %s is not on the server", member_id)
                continue
            overwrites[member] = discord.PermissionOverwrite(
                view_channel=True, send_messages=True
            )
        channel = self._text_channel(guild, group.channel_name, category)
        try:
            if channel is None:
                channel = await guild.create_text_channel(
                    group.channel_name,
                    category=category,
                    overwrites=overwrites,
                    reason=f"Lobby {group.index} for {group.scrim_name}",
                )
            else:
                await channel.edit(overwrites=overwrites)
        except discord.Forbidden:
            log.warning("Missing permissions to manage lobby #%s", group.channel_name)
            raise
        await channel.send(group.slot_list())
        log.info(
            "Lobby %s for %s opened with %d team(s)",
            group.index,
            group.scrim_name,
            len(group.team_names),
        )

    # ----- IDP role -----
    async def grant_checked_in_role(self, user_id: str) -> None:
        guild = await self.guild()
        member = await self._member(guild, user_id)
        if member is None:
            log.warning(
                "Cannot grant %s: member %s not found", CHECKED_IN_ROLE, user_id
            )
            return
        role = await self._checked_in_role(guild)
        await member.add_roles(role, reason="Checked in for scrim")

    async def holds_checked_in_role(self, user_id: str) -> bool:
        guild = await self.guild()
        member = await self._member(guild, user_id)
        if member is None:
            return False
        return any(role.name == CHECKED_IN_ROLE for role in member.roles)

    async def transfer_checked_in_role(self, from_id: str, to_id: str) -> None:
        guild = await self.guild()
        role = await self._checked_in_role(guild)
        source = await self._member(guild, from_id)
        target = await self._member(guild, to_id)
        if target is None:
            raise InternalError(f"Member {to_id} disappeared during transfer")
        if source is not None:
            await source.remove_roles(role, reason="IDP transferred")
        await target.add_roles(role, reason="IDP transferred")

    async def member_exists(self, user_id: str) -> bool:
        guild = await self.guild()
        return await self._member(guild, user_id) is not None

    async def send_transfer_prompt(self, user_id: str, team_name: str) -> None:
        guild = await self.guild()
        member = await self._member(guild, user_id)
        if member is None:
            return
        try:
            await member.send(
                f"You are IDP for team **{team_name}**. Transfer if needed:",
                view=single_item_view(TransferButton(team_name)),
            )
        except discord.Forbidden:
            log.info("Member %s does not accept DMs; transfer prompt skipped", user_id)
        except discord.HTTPException as exc:
            log.warning("Failed to DM transfer prompt to %s: %s", user_id, exc)

    # ----- Audit log -----
    async def log_event(self, text: str) -> None:
        try:
            guild = await self.guild()
            category = self._category(guild, SCRIMS_CATEGORY)
            channel = self._text_channel(guild, LOG_CHANNEL, category)
            if channel is None:
                log.warning("#%s missing; audit line dropped: %s", LOG_CHANNEL, text)
                return
            await channel.send(text)
        except discord.Forbidden:
            log.warning("No access to #%s – check bot permissions", LOG_CHANNEL)
        except discord.HTTPException as exc:
            log.warning("Cannot write to #%s – HTTP error: %s", LOG_CHANNEL, exc)


__all__ = ["DiscordGuildGateway", "checkin_announcement"]
