"""Guild operations the scrim components need from the chat platform."""

from __future__ import annotations

from typing import Protocol

from .models import LobbyGroup, Scrim


class GuildGateway(Protocol):
    async def ensure_layout(self) -> None:
        """Create the Scrims category, base channels, IDP role and panel."""

    async def ensure_announcement_channel(self, scrim: Scrim) -> None:
        """Create the scrim's private ``<name>-register-here`` channel."""

    async def announce_checkin(self, scrim: Scrim) -> None:
        """Post the check-in call to action for an opening window."""

    async def post_notice(self, scrim_name: str, text: str) -> None:
        """Post plain text into the scrim's announcement channel."""

    async def open_lobby(self, group: LobbyGroup) -> None:
        """Create or update the lobby channel and publish its slot list."""

    async def grant_checked_in_role(self, user_id: str) -> None: ...

    async def holds_checked_in_role(self, user_id: str) -> bool: ...

    async def transfer_checked_in_role(self, from_id: str, to_id: str) -> None: ...

    async def member_exists(self, user_id: str) -> bool: ...

    async def send_transfer_prompt(self, user_id: str, team_name: str) -> None:
        """DM the checked-in player a button for handing the IDP role over."""

    async def log_event(self, text: str) -> None:
        """Write an audit line to the scrim-log channel."""


__all__ = ["GuildGateway"]
