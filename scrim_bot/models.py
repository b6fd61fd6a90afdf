from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Final, Literal

ScrimState = Literal["WAITING_FOR_OPEN", "OPEN", "FORMING_LOBBIES"]

WAITING_FOR_OPEN: Final = "WAITING_FOR_OPEN"
OPEN: Final = "OPEN"
FORMING_LOBBIES: Final = "FORMING_LOBBIES"


def channel_slug(name: str) -> str:
    """Approximate the lowercase, dash separated form Discord gives text channels."""
    return re.sub(r"\s+", "-", name.strip().lower())


def announcement_channel_for(scrim_name: str) -> str:
    return channel_slug(f"{scrim_name}-register-here")


def _text(value: object) -> str:
    return "" if value is None else str(value)


def parse_instant(raw: object) -> datetime | None:
    if raw in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


@dataclass(slots=True)
class Team:
    name: str
    tag: str
    captain_id: str
    captain_name: str
    player2_id: str = ""
    player2_name: str = ""
    player3_id: str = ""
    player3_name: str = ""
    substitute_id: str = ""
    substitute_name: str = ""

    COLUMNS: ClassVar[tuple[str, ...]] = (
        "team_name",
        "team_tag",
        "captain_id",
        "captain_name",
        "player2_id",
        "player2_name",
        "player3_id",
        "player3_name",
        "substitute_id",
        "substitute_name",
    )

    def to_row(self) -> tuple[str, ...]:
        return (
            self.name,
            self.tag,
            self.captain_id,
            self.captain_name,
            self.player2_id,
            self.player2_name,
            self.player3_id,
            self.player3_name,
            self.substitute_id,
            self.substitute_name,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Team:
        return cls(
            name=_text(row["team_name"]),
            tag=_text(row["team_tag"]),
            captain_id=_text(row["captain_id"]),
            captain_name=_text(row["captain_name"]),
            player2_id=_text(row["player2_id"]),
            player2_name=_text(row["player2_name"]),
            player3_id=_text(row["player3_id"]),
            player3_name=_text(row["player3_name"]),
            substitute_id=_text(row["substitute_id"]),
            substitute_name=_text(row["substitute_name"]),
        )

    def member_ids(self) -> list[str]:
        """Return the filled member identities in slot order."""
        slots = (self.captain_id, self.player2_id, self.player3_id, self.substitute_id)
        return [slot for slot in slots if slot]

    def is_captain(self, user_id: str) -> bool:
        return bool(user_id) and self.captain_id == user_id


@dataclass(slots=True)
class Scrim:
    name: str
    day_of_week: str
    start_time: str
    end_time: str
    mention_role_id: str
    state: ScrimState = WAITING_FOR_OPEN
    opens_at: datetime | None = None
    closes_at: datetime | None = None

    def to_row(self) -> tuple[str, ...]:
        return (
            self.name,
            self.start_time,
            self.end_time,
            self.mention_role_id,
            self.day_of_week,
            self.state,
            self.opens_at.isoformat() if self.opens_at else "",
            self.closes_at.isoformat() if self.closes_at else "",
        )

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Scrim:
        state = _text(row["state"]) or WAITING_FOR_OPEN
        if state not in (WAITING_FOR_OPEN, OPEN, FORMING_LOBBIES):
            state = WAITING_FOR_OPEN
        return cls(
            name=_text(row["scrim_name"]),
            day_of_week=_text(row["day_of_week"]),
            start_time=_text(row["start_time"]),
            end_time=_text(row["end_time"]),
            mention_role_id=_text(row["mention_role_id"]),
            state=state,  # type: ignore[arg-type]
            opens_at=parse_instant(row["opens_at"]),
            closes_at=parse_instant(row["closes_at"]),
        )

    @property
    def announcement_channel_name(self) -> str:
        return announcement_channel_for(self.name)


@dataclass(slots=True)
class CheckinRecord:
    scrim_name: str
    team_name: str
    checked_in: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> CheckinRecord:
        return cls(
            scrim_name=_text(row["scrim_name"]),
            team_name=_text(row["team_name"]),
            checked_in=bool(row["checked_in"]),
        )


@dataclass(slots=True)
class LobbyGroup:
    index: int
    scrim_name: str
    team_names: list[str]
    member_ids: list[str] = field(default_factory=list)

    @property
    def channel_name(self) -> str:
        return channel_slug(f"{self.scrim_name}-lobby-{self.index}")

    def slot_list(self) -> str:
        lines = [f"📋 **Slot List ({self.scrim_name})**"]
        lines.extend(
            f"{position}. {team_name}"
            for position, team_name in enumerate(self.team_names, start=1)
        )
        return "\n".join(lines)


__all__ = [
    "CheckinRecord",
    "FORMING_LOBBIES",
    "LobbyGroup",
    "OPEN",
    "Scrim",
    "ScrimState",
    "Team",
    "WAITING_FOR_OPEN",
    "announcement_channel_for",
    "channel_slug",
    "parse_instant",
]
