from __future__ import annotations

import logging
from collections.abc import Sequence

from .errors import NotFoundError, PermissionDeniedError
from .models import Team
from .storage import ScrimStorage
from .validation import (
    teammate_ids,
    validate_team_name,
    validate_team_tag,
)

log = logging.getLogger(__name__)


def build_team(
    name: str,
    tag: str,
    captain_id: str,
    captain_display: str,
    member_displays: Sequence[str],
    mentions_text: str,
) -> Team:
    """Validate form input and lay it out over the four member slots."""
    team_name = validate_team_name(name)
    team_tag = validate_team_tag(tag)
    teammates = teammate_ids(captain_id, mentions_text)
    displays = [display.strip() for display in member_displays]

    def slot(index: int, values: Sequence[str]) -> str:
        return values[index] if index < len(values) else ""

    return Team(
        name=team_name,
        tag=team_tag,
        captain_id=captain_id,
        captain_name=captain_display.strip(),
        player2_id=slot(0, teammates),
        player2_name=slot(0, displays),
        player3_id=slot(1, teammates),
        player3_name=slot(1, displays),
        substitute_id=slot(2, teammates),
        substitute_name=slot(2, displays),
    )


class TeamRegistry:
    def __init__(self, storage: ScrimStorage) -> None:
        self._storage = storage

    def register(
        self,
        name: str,
        tag: str,
        captain_id: str,
        captain_display: str,
        member_displays: Sequence[str],
        mentions_text: str,
    ) -> Team:
        team = build_team(
            name, tag, captain_id, captain_display, member_displays, mentions_text
        )
        self._storage.insert_team(team)
        log.info("Registered team %s (captain %s)", team.name, captain_id)
        return team

    def get(self, name: str) -> Team | None:
        return self._storage.get_team(name)

    def find_by_member(self, user_id: str) -> Team | None:
        return self._storage.find_team_by_member(user_id)

    def find_by_captain(self, user_id: str) -> Team | None:
        return self._storage.find_team_by_captain(user_id)

    def edit(
        self,
        actor_id: str,
        new_name: str,
        new_tag: str,
        captain_display: str,
        member_displays: Sequence[str],
        mentions_text: str,
    ) -> Team:
        current = self.find_by_captain(actor_id)
        if current is None:
            raise NotFoundError("No team to edit found.")
        team = build_team(
            new_name, new_tag, actor_id, captain_display, member_displays, mentions_text
        )
        self._storage.replace_team(current.name, team)
        if team.name != current.name:
            log.info("Team %s renamed to %s", current.name, team.name)
        return team

    def delete(
        self, actor_id: str, name: str | None = None, *, is_privileged: bool = False
    ) -> Team:
        team = self.find_by_member(actor_id) if name is None else self.get(name)
        if team is None:
            raise NotFoundError("No team found to delete.")
        if not team.is_captain(actor_id) and not is_privileged:
            raise PermissionDeniedError("Only captain or admin can delete team.")
        self._storage.delete_team(team.name)
        log.info("Team %s deleted by %s", team.name, actor_id)
        return team

    def delete_by_name(self, name: str) -> bool:
        removed = self._storage.delete_team(name)
        if removed:
            log.info("Team %s removed by admin", name)
        return removed


__all__ = ["TeamRegistry", "build_team"]
