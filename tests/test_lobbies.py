import pytest

from conftest import CAPTAIN, PLAYER2, PLAYER3, register_sample_team
from scrim_bot.lobbies import NO_CHECKINS_NOTICE, LobbyAllocator, partition
from scrim_bot.models import LobbyGroup


def test_partition_sizes():
    names = [f"T{i}" for i in range(45)]

    groups = partition(names, 20)

    assert [len(group) for group in groups] == [20, 20, 5]
    assert [name for group in groups for name in group] == names


def test_partition_exact_multiple_and_empty():
    assert [len(g) for g in partition([f"T{i}" for i in range(40)], 20)] == [20, 20]
    assert partition([], 20) == []


def test_partition_rejects_non_positive_size():
    with pytest.raises(ValueError):
        partition(["A"], 0)


def test_slot_list_text():
    group = LobbyGroup(index=1, scrim_name="Evening", team_names=["A", "B"])

    assert group.slot_list() == "📋 **Slot List (Evening)**\n1. A\n2. B"
    assert group.channel_name == "evening-lobby-1"


@pytest.fixture
def evening(schedules):
    return schedules.upsert("Evening", "Friday", "18:00", "19:00", "42")


def test_plan_resolves_unique_members(registry, ledger, gateway, evening):
    register_sample_team(registry, "Alpha")
    # Beta shares two players with Alpha
    register_sample_team(registry, "Beta", captain_id="100000000000000077")
    ledger.check_in("Evening", "Alpha")
    ledger.check_in("Evening", "Beta")
    allocator = LobbyAllocator(registry, ledger, gateway)

    groups = allocator.plan("Evening")

    assert len(groups) == 1
    assert groups[0].team_names == ["Alpha", "Beta"]
    assert groups[0].member_ids == [CAPTAIN, PLAYER2, PLAYER3, "100000000000000077"]


def test_plan_skips_deleted_team_members(registry, ledger, gateway, evening):
    register_sample_team(registry, "Alpha")
    ledger.check_in("Evening", "Alpha")
    ledger.check_in("Evening", "Ghost")
    allocator = LobbyAllocator(registry, ledger, gateway)

    groups = allocator.plan("Evening")

    assert groups[0].team_names == ["Alpha", "Ghost"]
    assert groups[0].member_ids == [CAPTAIN, PLAYER2, PLAYER3]


def test_plan_rejects_zero_group_size(registry, ledger, gateway, evening):
    ledger.check_in("Evening", "Alpha")
    allocator = LobbyAllocator(registry, ledger, gateway)

    with pytest.raises(ValueError):
        allocator.plan("Evening", max_group_size=0)


def test_plan_is_repeatable(ledger, registry, gateway, evening):
    for index in range(25):
        ledger.check_in("Evening", f"Team {index}")
    allocator = LobbyAllocator(registry, ledger, gateway, max_group_size=10)

    first = allocator.plan("Evening")
    second = allocator.plan("Evening")

    assert [g.team_names for g in first] == [g.team_names for g in second]
    assert [len(g.team_names) for g in first] == [10, 10, 5]
    assert [g.index for g in first] == [1, 2, 3]


@pytest.mark.asyncio
async def test_allocate_opens_one_lobby_per_group(ledger, registry, gateway, evening):
    for index in range(45):
        ledger.check_in("Evening", f"Team {index}")
    allocator = LobbyAllocator(registry, ledger, gateway)

    groups = await allocator.allocate("Evening")

    assert len(groups) == 3
    assert [len(g.team_names) for g in gateway.lobbies] == [20, 20, 5]
    assert gateway.lobbies[2].team_names[0] == "Team 40"
    assert gateway.notices == []


@pytest.mark.asyncio
async def test_allocate_without_checkins_posts_notice(
    ledger, registry, gateway, evening
):
    allocator = LobbyAllocator(registry, ledger, gateway)

    groups = await allocator.allocate("Evening")

    assert groups == []
    assert gateway.lobbies == []
    assert gateway.notices == [("Evening", NO_CHECKINS_NOTICE)]
