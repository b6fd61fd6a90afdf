import sqlite3
from datetime import UTC, datetime

import pytest

from conftest import CAPTAIN, PLAYER2, PLAYER3, SUBSTITUTE
from scrim_bot.errors import ConflictError
from scrim_bot.models import OPEN, CheckinRecord, Scrim, Team
from scrim_bot.storage import ScrimStorage


def sample_team(name: str = "Alpha", captain_id: str = CAPTAIN) -> Team:
    return Team(
        name=name,
        tag="ALP",
        captain_id=captain_id,
        captain_name="Captain#1",
        player2_id=PLAYER2,
        player2_name="Second#2",
        player3_id=PLAYER3,
        player3_name="Third#3",
    )


def test_insert_and_get_team(storage):
    storage.insert_team(sample_team())

    team = storage.get_team("Alpha")

    assert team == sample_team()
    assert team.member_ids() == [CAPTAIN, PLAYER2, PLAYER3]


def test_insert_duplicate_name_conflicts(storage):
    storage.insert_team(sample_team())

    with pytest.raises(ConflictError):
        storage.insert_team(sample_team(captain_id=SUBSTITUTE))

    assert storage.get_team("Alpha") == sample_team()
    assert storage.find_team_by_captain(SUBSTITUTE) is None


def test_find_team_by_member_and_captain(storage):
    storage.insert_team(sample_team())

    assert storage.find_team_by_member(PLAYER3).name == "Alpha"
    assert storage.find_team_by_captain(PLAYER3) is None
    assert storage.find_team_by_captain(CAPTAIN).name == "Alpha"
    assert storage.find_team_by_member("") is None


def test_replace_team_rename_moves_checkins(storage):
    storage.insert_team(sample_team())
    storage.upsert_scrim(Scrim("Evening", "Friday", "18:00", "19:00", "1"))
    storage.upsert_checkin(CheckinRecord("Evening", "Alpha"))

    storage.replace_team("Alpha", sample_team("Omega"))

    assert storage.get_team("Alpha") is None
    assert storage.get_team("Omega") is not None
    assert [r.team_name for r in storage.list_checkins("Evening")] == ["Omega"]


def test_replace_team_onto_existing_name_conflicts(storage):
    storage.insert_team(sample_team())
    storage.insert_team(sample_team("Beta", captain_id=SUBSTITUTE))

    with pytest.raises(ConflictError):
        storage.replace_team("Alpha", sample_team("Beta"))

    assert storage.get_team("Alpha") is not None


def test_delete_team_reports_removal(storage):
    storage.insert_team(sample_team())

    assert storage.delete_team("Alpha") is True
    assert storage.delete_team("Alpha") is False


def test_scrim_round_trip_with_state(storage):
    opens = datetime(2024, 6, 7, 12, 30, tzinfo=UTC)
    closes = datetime(2024, 6, 7, 13, 30, tzinfo=UTC)
    storage.upsert_scrim(Scrim("Evening", "Friday", "18:00", "19:00", "99"))
    scrim = storage.get_scrim("Evening")
    scrim.state = OPEN
    scrim.opens_at = opens
    scrim.closes_at = closes

    storage.save_scrim_state(scrim)

    stored = storage.get_scrim("Evening")
    assert stored.state == OPEN
    assert stored.opens_at == opens
    assert stored.closes_at == closes
    assert stored.mention_role_id == "99"


def test_upsert_scrim_replaces_definition(storage):
    storage.upsert_scrim(Scrim("Evening", "Friday", "18:00", "19:00", "1"))
    storage.upsert_scrim(Scrim("Evening", "Sunday", "10:00", "11:00", "2"))

    scrims = storage.list_scrims()

    assert len(scrims) == 1
    assert scrims[0].day_of_week == "Sunday"


def test_repeat_checkin_keeps_first_position(storage):
    for team in ("A", "B", "C"):
        storage.upsert_checkin(CheckinRecord("Evening", team))
    storage.upsert_checkin(CheckinRecord("Evening", "A"))

    assert [r.team_name for r in storage.list_checkins("Evening")] == ["A", "B", "C"]


def test_delete_checkins_only_touches_one_scrim(storage):
    storage.upsert_checkin(CheckinRecord("Evening", "A"))
    storage.upsert_checkin(CheckinRecord("Morning", "A"))

    assert storage.delete_checkins("Evening") == 1
    assert storage.list_checkins("Evening") == []
    assert len(storage.list_checkins("Morning")) == 1


def test_ensure_schema_upgrades_legacy_scrims_table(tmp_path):
    path = tmp_path / "legacy.sqlite"
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE scrims (scrim_name TEXT PRIMARY KEY, start_time TEXT, "
        "end_time TEXT, mention_role_id TEXT, day_of_week TEXT)"
    )
    conn.execute(
        "INSERT INTO scrims VALUES ('Evening', '18:00', '19:00', '5', 'Friday')"
    )
    conn.commit()
    conn.close()

    storage = ScrimStorage.open(path)
    try:
        scrim = storage.get_scrim("Evening")
    finally:
        storage.close()

    assert scrim.state == "WAITING_FOR_OPEN"
    assert scrim.opens_at is None
