from datetime import time

import pytest

from scrim_bot.errors import ValidationError
from scrim_bot.validation import (
    parse_clock_time,
    parse_mention_ids,
    parse_player_lines,
    teammate_ids,
    validate_clock_time,
    validate_day_of_week,
    validate_scrim_name,
    validate_team_name,
    validate_team_tag,
)

A = "111111111111111111"
B = "222222222222222222"
C = "333333333333333333"
D = "444444444444444444"
E = "555555555555555555"


def test_parse_mention_ids_reads_mentions_then_snowflakes():
    text = f"<@{A}> <@!{B}> and {C}"
    assert parse_mention_ids(text) == [A, B, C]


def test_parse_mention_ids_deduplicates():
    assert parse_mention_ids(f"<@{A}> <@!{A}> {A}") == [A]


def test_parse_mention_ids_ignores_short_numbers():
    assert parse_mention_ids("team 42 scored 12345") == []


def test_parse_mention_ids_empty():
    assert parse_mention_ids(None) == []
    assert parse_mention_ids("") == []


def test_teammate_ids_requires_three_identities():
    with pytest.raises(ValidationError, match="Mention at least captain"):
        teammate_ids(A, f"<@{A}> <@{B}>")


def test_teammate_ids_skips_actor():
    assert teammate_ids(A, f"<@{A}> <@{B}> <@{C}>") == [B, C]


def test_teammate_ids_without_actor_mention_fills_substitute():
    assert teammate_ids(A, f"<@{B}> <@{C}> <@{D}>") == [B, C, D]


def test_teammate_ids_drops_extra_mentions():
    assert teammate_ids(A, f"<@{B}> <@{C}> <@{D}> <@{E}>") == [B, C, D]


def test_validate_team_tag_strips_brackets():
    assert validate_team_tag("[ABC]") == "ABC"


@pytest.mark.parametrize("raw", ["", "[]", "TOOLONG"])
def test_validate_team_tag_rejects(raw):
    with pytest.raises(ValidationError):
        validate_team_tag(raw)


def test_validate_team_name_trims():
    assert validate_team_name("  Alpha Squad ") == "Alpha Squad"


def test_validate_names_reject_empty_and_long():
    with pytest.raises(ValidationError):
        validate_team_name("   ")
    with pytest.raises(ValidationError):
        validate_scrim_name("x" * 81)


def test_parse_player_lines():
    assert parse_player_lines("P2 uid1\n\n P3 uid2 \nSub uid3") == [
        "P2 uid1",
        "P3 uid2",
        "Sub uid3",
    ]


@pytest.mark.parametrize("raw", ["only one", "a\nb\nc\nd"])
def test_parse_player_lines_rejects_wrong_count(raw):
    with pytest.raises(ValidationError):
        parse_player_lines(raw)


def test_validate_day_of_week_is_case_sensitive():
    assert validate_day_of_week(" Friday ") == "Friday"
    with pytest.raises(ValidationError):
        validate_day_of_week("friday")


def test_parse_clock_time():
    assert parse_clock_time("07:05") == time(7, 5)
    assert validate_clock_time("23:59") == "23:59"


@pytest.mark.parametrize("raw", ["24:00", "7:05", "12:60", "noon"])
def test_parse_clock_time_rejects(raw):
    with pytest.raises(ValidationError):
        parse_clock_time(raw)
