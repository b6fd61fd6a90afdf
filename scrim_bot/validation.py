from __future__ import annotations

import re
from datetime import time

from .errors import ValidationError

DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
MAX_TAG_LENGTH = 6
MIN_MENTIONED_IDS = 3
# button ids embed the name and Discord caps custom ids at 100 characters
MAX_NAME_LENGTH = 80

_MENTION_PATTERN = re.compile(r"<@!?(\d+)>")
_SNOWFLAKE_PATTERN = re.compile(r"(\d{17,20})")
_CLOCK_PATTERN = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")


def parse_mention_ids(raw: str | None) -> list[str]:
    """Return user ids from mention tokens, then bare snowflakes, de-duplicated."""
    if not raw:
        return []
    ids: list[str] = []
    for match in _MENTION_PATTERN.finditer(raw):
        if match.group(1) not in ids:
            ids.append(match.group(1))
    for match in _SNOWFLAKE_PATTERN.finditer(raw):
        if match.group(1) not in ids:
            ids.append(match.group(1))
    return ids


def teammate_ids(actor_id: str, mentions_text: str | None) -> list[str]:
    """Resolve teammates for the player2, player3 and substitute slots.

    At least three distinct identities must be mentioned. The actor's own id
    never fills a teammate slot, and anything past the substitute is dropped.
    """
    ids = parse_mention_ids(mentions_text)
    if len(ids) < MIN_MENTIONED_IDS:
        raise ValidationError("Mention at least captain, player2, player3.")
    return [user_id for user_id in ids if user_id != actor_id][:3]


def validate_team_name(raw: str) -> str:
    name = raw.strip()
    if not name:
        raise ValidationError("Team name cannot be empty.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Team name must be {MAX_NAME_LENGTH} characters or fewer."
        )
    return name


def validate_scrim_name(raw: str) -> str:
    name = raw.strip()
    if not name:
        raise ValidationError("Scrim name cannot be empty.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Scrim name must be {MAX_NAME_LENGTH} characters or fewer."
        )
    return name


def validate_team_tag(raw: str) -> str:
    tag = raw.strip().strip("[]").strip()
    if not tag:
        raise ValidationError("Team tag cannot be empty.")
    if len(tag) > MAX_TAG_LENGTH:
        raise ValidationError(f"Team tag must be at most {MAX_TAG_LENGTH} characters.")
    return tag


def parse_player_lines(raw: str) -> list[str]:
    """Split the players field into player2, player3 and an optional substitute."""
    lines = [line.strip() for line in raw.splitlines() if line.strip()]
    if len(lines) < 2:
        raise ValidationError(
            "List Player2 and Player3 (and an optional substitute), one per line."
        )
    if len(lines) > 3:
        raise ValidationError("At most three players besides the captain are allowed.")
    return lines


def validate_day_of_week(raw: str) -> str:
    day = raw.strip()
    if day not in DAYS_OF_WEEK:
        raise ValidationError(
            "Day of week must be one of: " + ", ".join(DAYS_OF_WEEK) + "."
        )
    return day


def parse_clock_time(raw: str) -> time:
    value = raw.strip()
    match = _CLOCK_PATTERN.fullmatch(value)
    if match is None:
        raise ValidationError(f"Time must be HH:MM in 24-hour format, got {value!r}.")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def validate_clock_time(raw: str) -> str:
    parsed = parse_clock_time(raw)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


__all__ = [
    "DAYS_OF_WEEK",
    "MAX_NAME_LENGTH",
    "MAX_TAG_LENGTH",
    "MIN_MENTIONED_IDS",
    "parse_clock_time",
    "parse_mention_ids",
    "parse_player_lines",
    "teammate_ids",
    "validate_clock_time",
    "validate_day_of_week",
    "validate_scrim_name",
    "validate_team_name",
    "validate_team_tag",
]
