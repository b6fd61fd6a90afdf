from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .errors import ConflictError
from .models import CheckinRecord, Scrim, Team

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS teams (
    team_name TEXT PRIMARY KEY,
    team_tag TEXT,
    captain_id TEXT,
    captain_name TEXT,
    player2_id TEXT,
    player2_name TEXT,
    player3_id TEXT,
    player3_name TEXT,
    substitute_id TEXT,
    substitute_name TEXT
);
CREATE TABLE IF NOT EXISTS scrims (
    scrim_name TEXT PRIMARY KEY,
    start_time TEXT,
    end_time TEXT,
    mention_role_id TEXT,
    day_of_week TEXT,
    state TEXT NOT NULL DEFAULT 'WAITING_FOR_OPEN',
    opens_at TEXT NOT NULL DEFAULT '',
    closes_at TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS daily_registration (
    scrim_name TEXT,
    team_name TEXT,
    checked_in INTEGER,
    PRIMARY KEY(scrim_name, team_name)
);
"""

# Databases created before the scheduler columns existed get them added here.
_SCRIM_STATE_COLUMNS = (
    ("state", "TEXT NOT NULL DEFAULT 'WAITING_FOR_OPEN'"),
    ("opens_at", "TEXT NOT NULL DEFAULT ''"),
    ("closes_at", "TEXT NOT NULL DEFAULT ''"),
)

_MEMBER_CLAUSE = "captain_id=? OR player2_id=? OR player3_id=? OR substitute_id=?"


class ScrimStorage:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, path: str | Path) -> ScrimStorage:
        target = str(path)
        if target != ":memory:":
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        storage = cls(sqlite3.connect(target))
        storage.ensure_schema()
        log.info("Opened scrim database at %s", target)
        return storage

    def ensure_schema(self) -> None:
        with self._conn:
            self._conn.executescript(SCHEMA)
        existing = {
            row["name"] for row in self._conn.execute("PRAGMA table_info(scrims)")
        }
        with self._conn:
            for column, definition in _SCRIM_STATE_COLUMNS:
                if column not in existing:
                    self._conn.execute(
                        f"ALTER TABLE scrims ADD COLUMN {column} {definition}"
                    )

    def close(self) -> None:
        self._conn.close()

    # ----- Teams -----
    def insert_team(self, team: Team) -> None:
        columns = ",".join(Team.COLUMNS)
        placeholders = ",".join("?" for _ in Team.COLUMNS)
        try:
            with self._conn:
                self._conn.execute(
                    f"INSERT INTO teams ({columns}) VALUES ({placeholders})",
                    team.to_row(),
                )
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"Team {team.name} already exists.") from exc

    def replace_team(self, old_name: str, team: Team) -> None:
        """Overwrite ``old_name`` with ``team``, carrying check-ins over on rename."""
        assignments = ", ".join(f"{column}=?" for column in Team.COLUMNS)
        try:
            with self._conn:
                self._conn.execute(
                    f"UPDATE teams SET {assignments} WHERE team_name=?",
                    (*team.to_row(), old_name),
                )
                if team.name != old_name:
                    self._conn.execute(
                        "UPDATE OR REPLACE daily_registration SET team_name=? "
                        "WHERE team_name=?",
                        (team.name, old_name),
                    )
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"Team {team.name} already exists.") from exc

    def get_team(self, name: str) -> Team | None:
        row = self._conn.execute(
            "SELECT * FROM teams WHERE team_name=?", (name,)
        ).fetchone()
        return Team.from_row(row) if row is not None else None

    def find_team_by_member(self, user_id: str) -> Team | None:
        if not user_id:
            return None
        row = self._conn.execute(
            f"SELECT * FROM teams WHERE {_MEMBER_CLAUSE} ORDER BY rowid LIMIT 1",
            (user_id, user_id, user_id, user_id),
        ).fetchone()
        return Team.from_row(row) if row is not None else None

    def find_team_by_captain(self, user_id: str) -> Team | None:
        if not user_id:
            return None
        row = self._conn.execute(
            "SELECT * FROM teams WHERE captain_id=? ORDER BY rowid LIMIT 1",
            (user_id,),
        ).fetchone()
        return Team.from_row(row) if row is not None else None

    def list_teams(self) -> list[Team]:
        rows = self._conn.execute("SELECT * FROM teams ORDER BY rowid").fetchall()
        return [Team.from_row(row) for row in rows]

    def delete_team(self, name: str) -> bool:
        with self._conn:
            cursor = self._conn.execute("DELETE FROM teams WHERE team_name=?", (name,))
        return cursor.rowcount > 0

    # ----- Scrims -----
    def upsert_scrim(self, scrim: Scrim) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO scrims "
                "(scrim_name, start_time, end_time, mention_role_id, day_of_week, "
                "state, opens_at, closes_at) VALUES (?,?,?,?,?,?,?,?)",
                scrim.to_row(),
            )

    def save_scrim_state(self, scrim: Scrim) -> None:
        row = scrim.to_row()
        with self._conn:
            self._conn.execute(
                "UPDATE scrims SET state=?, opens_at=?, closes_at=? WHERE scrim_name=?",
                (row[5], row[6], row[7], scrim.name),
            )

    def get_scrim(self, name: str) -> Scrim | None:
        row = self._conn.execute(
            "SELECT * FROM scrims WHERE scrim_name=?", (name,)
        ).fetchone()
        return Scrim.from_row(row) if row is not None else None

    def list_scrims(self) -> list[Scrim]:
        rows = self._conn.execute("SELECT * FROM scrims ORDER BY rowid").fetchall()
        return [Scrim.from_row(row) for row in rows]

    # ----- Check-ins -----
    def upsert_checkin(self, record: CheckinRecord) -> None:
        # ON CONFLICT keeps the original rowid so check-in order survives repeats.
        with self._conn:
            self._conn.execute(
                "INSERT INTO daily_registration (scrim_name, team_name, checked_in) "
                "VALUES (?,?,?) ON CONFLICT(scrim_name, team_name) "
                "DO UPDATE SET checked_in=excluded.checked_in",
                (record.scrim_name, record.team_name, int(record.checked_in)),
            )

    def list_checkins(self, scrim_name: str) -> list[CheckinRecord]:
        rows = self._conn.execute(
            "SELECT * FROM daily_registration WHERE scrim_name=? AND checked_in=1 "
            "ORDER BY rowid",
            (scrim_name,),
        ).fetchall()
        return [CheckinRecord.from_row(row) for row in rows]

    def delete_checkins(self, scrim_name: str) -> int:
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM daily_registration WHERE scrim_name=?", (scrim_name,)
            )
        return cursor.rowcount


__all__ = ["ScrimStorage"]
