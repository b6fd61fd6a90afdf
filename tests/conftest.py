from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from scrim_bot.checkin import CheckinLedger
from scrim_bot.models import LobbyGroup, Scrim
from scrim_bot.schedule import ScrimScheduleStore
from scrim_bot.storage import ScrimStorage
from scrim_bot.teams import TeamRegistry

CAPTAIN = "100000000000000001"
PLAYER2 = "100000000000000002"
PLAYER3 = "100000000000000003"
SUBSTITUTE = "100000000000000004"
OUTSIDER = "100000000000000009"

KOLKATA = ZoneInfo("Asia/Kolkata")


def mentions(*user_ids: str) -> str:
    return " ".join(f"<@{user_id}>" for user_id in user_ids)


class FakeGateway:
    """Records every platform call the components make."""

    def __init__(self, members: set[str] | None = None) -> None:
        self.members: set[str] = set(members or ())
        self.role_holders: set[str] = set()
        self.layouts = 0
        self.announcement_channels: list[str] = []
        self.announcements: list[str] = []
        self.notices: list[tuple[str, str]] = []
        self.lobbies: list[LobbyGroup] = []
        self.transfers: list[tuple[str, str]] = []
        self.prompts: list[tuple[str, str]] = []
        self.events: list[str] = []

    async def ensure_layout(self) -> None:
        self.layouts += 1

    async def ensure_announcement_channel(self, scrim: Scrim) -> None:
        self.announcement_channels.append(scrim.announcement_channel_name)

    async def announce_checkin(self, scrim: Scrim) -> None:
        self.announcements.append(scrim.name)

    async def post_notice(self, scrim_name: str, text: str) -> None:
        self.notices.append((scrim_name, text))

    async def open_lobby(self, group: LobbyGroup) -> None:
        self.lobbies.append(group)

    async def grant_checked_in_role(self, user_id: str) -> None:
        self.role_holders.add(user_id)

    async def holds_checked_in_role(self, user_id: str) -> bool:
        return user_id in self.role_holders

    async def transfer_checked_in_role(self, from_id: str, to_id: str) -> None:
        self.role_holders.discard(from_id)
        self.role_holders.add(to_id)
        self.transfers.append((from_id, to_id))

    async def member_exists(self, user_id: str) -> bool:
        return user_id in self.members

    async def send_transfer_prompt(self, user_id: str, team_name: str) -> None:
        self.prompts.append((user_id, team_name))

    async def log_event(self, text: str) -> None:
        self.events.append(text)


@pytest.fixture
def storage():
    store = ScrimStorage.open(":memory:")
    yield store
    store.close()


@pytest.fixture
def registry(storage):
    return TeamRegistry(storage)


@pytest.fixture
def schedules(storage):
    return ScrimScheduleStore(storage)


@pytest.fixture
def ledger(storage, registry, schedules):
    return CheckinLedger(storage, registry, schedules)


@pytest.fixture
def gateway():
    return FakeGateway(members={CAPTAIN, PLAYER2, PLAYER3, SUBSTITUTE})


def register_sample_team(
    registry: TeamRegistry,
    name: str = "Alpha",
    captain_id: str = CAPTAIN,
    teammates: tuple[str, ...] = (PLAYER2, PLAYER3),
):
    return registry.register(
        name,
        "ALP",
        captain_id,
        "Captain#1",
        ["Second#2", "Third#3"],
        mentions(captain_id, *teammates),
    )
