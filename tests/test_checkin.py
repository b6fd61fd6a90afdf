import pytest

from conftest import (
    CAPTAIN,
    OUTSIDER,
    PLAYER2,
    PLAYER3,
    FakeGateway,
    register_sample_team,
)
from scrim_bot.checkin import transfer_checked_in_role
from scrim_bot.errors import NotFoundError, PermissionDeniedError


@pytest.fixture
def evening(schedules):
    return schedules.upsert("Evening", "Friday", "18:00", "19:00", "42")


def test_member_check_in_records_team(registry, ledger, evening):
    register_sample_team(registry)

    team = ledger.check_in_member("Evening", PLAYER3)

    assert team.name == "Alpha"
    assert ledger.checked_in_teams("Evening") == ["Alpha"]


def test_repeat_check_in_is_single_record(registry, ledger, evening):
    register_sample_team(registry)

    ledger.check_in_member("Evening", CAPTAIN)
    ledger.check_in_member("Evening", PLAYER2)

    assert ledger.checked_in_teams("Evening") == ["Alpha"]


def test_check_in_order_is_preserved(registry, ledger, evening):
    register_sample_team(registry, "Alpha")
    register_sample_team(registry, "Beta", captain_id=OUTSIDER)

    ledger.check_in_member("Evening", OUTSIDER)
    ledger.check_in_member("Evening", CAPTAIN)

    assert ledger.checked_in_teams("Evening") == ["Beta", "Alpha"]


def test_non_member_cannot_check_in(ledger, evening):
    with pytest.raises(NotFoundError, match="not part of a registered team"):
        ledger.check_in_member("Evening", OUTSIDER)


def test_unknown_scrim(registry, ledger):
    register_sample_team(registry)

    with pytest.raises(NotFoundError):
        ledger.check_in_member("Nope", CAPTAIN)


def test_clear_removes_records(registry, ledger, evening):
    register_sample_team(registry)
    ledger.check_in("Evening", "Alpha")

    assert ledger.clear("Evening") == 1
    assert ledger.checked_in_teams("Evening") == []


@pytest.mark.asyncio
async def test_transfer_moves_role_to_first_present_teammate(registry, gateway):
    register_sample_team(registry)
    gateway.role_holders.add(CAPTAIN)

    new_holder = await transfer_checked_in_role(registry, gateway, CAPTAIN, "Alpha")

    assert new_holder == PLAYER2
    assert gateway.role_holders == {PLAYER2}
    assert gateway.transfers == [(CAPTAIN, PLAYER2)]


@pytest.mark.asyncio
async def test_transfer_skips_departed_teammates(registry):
    register_sample_team(registry)
    gateway = FakeGateway(members={CAPTAIN, PLAYER3})
    gateway.role_holders.add(CAPTAIN)

    new_holder = await transfer_checked_in_role(registry, gateway, CAPTAIN, "Alpha")

    assert new_holder == PLAYER3


@pytest.mark.asyncio
async def test_transfer_from_teammate_goes_to_captain(registry, gateway):
    register_sample_team(registry)
    gateway.role_holders.add(PLAYER2)

    assert (
        await transfer_checked_in_role(registry, gateway, PLAYER2, "Alpha") == CAPTAIN
    )


@pytest.mark.asyncio
async def test_transfer_requires_role(registry, gateway):
    register_sample_team(registry)

    with pytest.raises(PermissionDeniedError):
        await transfer_checked_in_role(registry, gateway, CAPTAIN, "Alpha")

    assert gateway.transfers == []


@pytest.mark.asyncio
async def test_transfer_unknown_team(registry, gateway):
    gateway.role_holders.add(CAPTAIN)

    with pytest.raises(NotFoundError, match="Team not found"):
        await transfer_checked_in_role(registry, gateway, CAPTAIN, "Ghost")


@pytest.mark.asyncio
async def test_transfer_when_no_teammate_on_server(registry):
    register_sample_team(registry)
    gateway = FakeGateway(members={CAPTAIN})
    gateway.role_holders.add(CAPTAIN)

    with pytest.raises(NotFoundError, match="not on server"):
        await transfer_checked_in_role(registry, gateway, CAPTAIN, "Alpha")

    assert gateway.role_holders == {CAPTAIN}
