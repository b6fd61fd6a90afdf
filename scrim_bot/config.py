"""Environment configuration for the scrim bot."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_DB_PATH = "./scrims.sqlite"
DEFAULT_PORT = 8080
DEFAULT_LOBBY_SIZE = 20
DEFAULT_POLL_SECONDS = 30
DEFAULT_CHALLENGE_TTL_MINUTES = 15
DEFAULT_LEADERBOARD_TITLE = "Farlight 84 Scrims"


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def env_int(name: str, *, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"Unknown TIMEZONE: {name}") from exc


@dataclass(slots=True)
class EnvironmentConfig:
    discord_token: str
    guild_id: int
    timezone: ZoneInfo
    db_path: str
    port: int
    lobby_size: int
    poll_seconds: int
    challenge_ttl_minutes: int
    reset_checkins_after_lobbies: bool
    leaderboard_title: str

    @classmethod
    def load(cls) -> "EnvironmentConfig":
        missing: list[str] = []

        def need(name: str) -> str:
            value = os.getenv(name)
            if not value:
                missing.append(name)
                return ""
            return value

        discord_token = need("DISCORD_TOKEN")
        guild_id_raw = need("GUILD_ID")

        if missing:
            raise RuntimeError("Missing env vars: " + ", ".join(sorted(set(missing))))

        try:
            guild_id = int(guild_id_raw)
        except ValueError as exc:
            raise RuntimeError(
                f"Invalid GUILD_ID={guild_id_raw}; expected an integer"
            ) from exc

        lobby_size = env_int("LOBBY_SIZE", default=DEFAULT_LOBBY_SIZE)
        if lobby_size is None or lobby_size < 1:
            lobby_size = DEFAULT_LOBBY_SIZE
        poll_seconds = env_int("SCHEDULER_POLL_SECONDS", default=DEFAULT_POLL_SECONDS)
        if poll_seconds is None or poll_seconds < 1:
            poll_seconds = DEFAULT_POLL_SECONDS

        return cls(
            discord_token=discord_token,
            guild_id=guild_id,
            timezone=load_timezone(os.getenv("TIMEZONE") or DEFAULT_TIMEZONE),
            db_path=os.getenv("DB_PATH") or DEFAULT_DB_PATH,
            port=env_int("PORT", default=DEFAULT_PORT) or DEFAULT_PORT,
            lobby_size=lobby_size,
            poll_seconds=poll_seconds,
            challenge_ttl_minutes=env_int(
                "CHALLENGE_TTL_MINUTES", default=DEFAULT_CHALLENGE_TTL_MINUTES
            )
            or DEFAULT_CHALLENGE_TTL_MINUTES,
            reset_checkins_after_lobbies=env_bool("RESET_CHECKINS_AFTER_LOBBIES"),
            leaderboard_title=os.getenv("LEADERBOARD_TITLE")
            or DEFAULT_LEADERBOARD_TITLE,
        )


__all__ = [
    "EnvironmentConfig",
    "env_bool",
    "env_int",
    "load_timezone",
]
