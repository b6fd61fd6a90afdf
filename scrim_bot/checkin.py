from __future__ import annotations

import logging

from .errors import NotFoundError, PermissionDeniedError
from .gateway import GuildGateway
from .models import CheckinRecord, Team
from .schedule import ScrimScheduleStore
from .storage import ScrimStorage
from .teams import TeamRegistry

log = logging.getLogger(__name__)


class CheckinLedger:
    """Attendance records per (scrim, team); repeat check-ins overwrite."""

    def __init__(
        self,
        storage: ScrimStorage,
        registry: TeamRegistry,
        schedules: ScrimScheduleStore,
    ) -> None:
        self._storage = storage
        self._registry = registry
        self._schedules = schedules

    def check_in(self, scrim_name: str, team_name: str) -> CheckinRecord:
        if self._schedules.get(scrim_name) is None:
            raise NotFoundError(f"Scrim {scrim_name} does not exist.")
        record = CheckinRecord(scrim_name=scrim_name, team_name=team_name)
        self._storage.upsert_checkin(record)
        return record

    def check_in_member(self, scrim_name: str, user_id: str) -> Team:
        team = self._registry.find_by_member(user_id)
        if team is None:
            raise NotFoundError("You are not part of a registered team.")
        self.check_in(scrim_name, team.name)
        log.info("Team %s checked in for %s by %s", team.name, scrim_name, user_id)
        return team

    def checked_in_teams(self, scrim_name: str) -> list[str]:
        """Team names in the order they first checked in."""
        return [record.team_name for record in self._storage.list_checkins(scrim_name)]

    def clear(self, scrim_name: str) -> int:
        removed = self._storage.delete_checkins(scrim_name)
        log.info("Cleared %d check-in(s) for %s", removed, scrim_name)
        return removed


async def transfer_checked_in_role(
    registry: TeamRegistry,
    gateway: GuildGateway,
    actor_id: str,
    team_name: str,
) -> str:
    """Hand the IDP role from ``actor_id`` to the first teammate still in the guild."""
    if not await gateway.holds_checked_in_role(actor_id):
        raise PermissionDeniedError("You do not hold the IDP role.")
    team = registry.get(team_name)
    if team is None:
        raise NotFoundError("Team not found.")
    candidates = [member for member in team.member_ids() if member != actor_id]
    if not candidates:
        raise NotFoundError("No teammate to transfer to.")
    for candidate in candidates:
        if await gateway.member_exists(candidate):
            await gateway.transfer_checked_in_role(actor_id, candidate)
            log.info("IDP for %s moved from %s to %s", team.name, actor_id, candidate)
            return candidate
    raise NotFoundError("Teammate not on server.")


__all__ = ["CheckinLedger", "transfer_checked_in_role"]
