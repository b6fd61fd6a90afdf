from __future__ import annotations

import logging
from collections.abc import Sequence

from .checkin import CheckinLedger
from .gateway import GuildGateway
from .models import LobbyGroup
from .teams import TeamRegistry

log = logging.getLogger(__name__)

DEFAULT_LOBBY_SIZE = 20
NO_CHECKINS_NOTICE = "No teams checked in for this scrim."


def partition(items: Sequence[str], size: int) -> list[list[str]]:
    if size < 1:
        raise ValueError("Group size must be positive")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


class LobbyAllocator:
    def __init__(
        self,
        registry: TeamRegistry,
        ledger: CheckinLedger,
        gateway: GuildGateway,
        *,
        max_group_size: int = DEFAULT_LOBBY_SIZE,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._gateway = gateway
        self.max_group_size = max_group_size

    def plan(
        self, scrim_name: str, max_group_size: int | None = None
    ) -> list[LobbyGroup]:
        size = self.max_group_size if max_group_size is None else max_group_size
        teams = self._ledger.checked_in_teams(scrim_name)
        groups: list[LobbyGroup] = []
        for index, chunk in enumerate(partition(teams, size), start=1):
            members: list[str] = []
            for team_name in chunk:
                team = self._registry.get(team_name)
                if team is None:
                    log.warning(
                        "Checked-in team %s for %s no longer exists",
                        team_name,
                        scrim_name,
                    )
                    continue
                for member_id in team.member_ids():
                    if member_id not in members:
                        members.append(member_id)
            groups.append(
                LobbyGroup(
                    index=index,
                    scrim_name=scrim_name,
                    team_names=chunk,
                    member_ids=members,
                )
            )
        return groups

    async def allocate(
        self, scrim_name: str, max_group_size: int | None = None
    ) -> list[LobbyGroup]:
        groups = self.plan(scrim_name, max_group_size)
        if not groups:
            await self._gateway.post_notice(scrim_name, NO_CHECKINS_NOTICE)
            log.info("No check-ins for %s; no lobbies created", scrim_name)
            return []
        for group in groups:
            await self._gateway.open_lobby(group)
        log.info(
            "Created %d lobby(ies) for %s with %d team(s)",
            len(groups),
            scrim_name,
            sum(len(group.team_names) for group in groups),
        )
        return groups


__all__ = ["DEFAULT_LOBBY_SIZE", "LobbyAllocator", "NO_CHECKINS_NOTICE", "partition"]
