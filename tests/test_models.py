from scrim_bot.models import (
    WAITING_FOR_OPEN,
    Scrim,
    Team,
    announcement_channel_for,
    channel_slug,
)


def test_channel_slug_lowercases_and_dashes():
    assert channel_slug("  Night  Owls Cup ") == "night-owls-cup"


def test_announcement_channel_name():
    scrim = Scrim("Night Owls", "Friday", "21:00", "22:00", "5")

    assert scrim.announcement_channel_name == "night-owls-register-here"
    assert announcement_channel_for("Night Owls") == scrim.announcement_channel_name


def test_scrim_from_row_with_unknown_state_waits():
    row = {
        "scrim_name": "Evening",
        "day_of_week": "Friday",
        "start_time": "18:00",
        "end_time": "19:00",
        "mention_role_id": None,
        "state": "EXPLODED",
        "opens_at": "",
        "closes_at": None,
    }

    scrim = Scrim.from_row(row)

    assert scrim.state == WAITING_FOR_OPEN
    assert scrim.mention_role_id == ""
    assert scrim.opens_at is None and scrim.closes_at is None


def test_team_membership_helpers():
    team = Team("Alpha", "ALP", "1", "Cap", player2_id="2", substitute_id="4")

    assert team.member_ids() == ["1", "2", "4"]
    assert team.is_captain("1") is True
    assert team.is_captain("") is False
