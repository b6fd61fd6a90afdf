from __future__ import annotations

import logging

from .models import WAITING_FOR_OPEN, Scrim
from .storage import ScrimStorage
from .validation import (
    validate_clock_time,
    validate_day_of_week,
    validate_scrim_name,
)

log = logging.getLogger(__name__)


class ScrimScheduleStore:
    """Weekly scrim definitions; one row per scrim name."""

    def __init__(self, storage: ScrimStorage) -> None:
        self._storage = storage

    def upsert(
        self,
        name: str,
        day_of_week: str,
        start_time: str,
        end_time: str,
        mention_role_id: str,
    ) -> Scrim:
        scrim = Scrim(
            name=validate_scrim_name(name),
            day_of_week=validate_day_of_week(day_of_week),
            start_time=validate_clock_time(start_time),
            end_time=validate_clock_time(end_time),
            mention_role_id=str(mention_role_id),
            state=WAITING_FOR_OPEN,
        )
        self._storage.upsert_scrim(scrim)
        log.info(
            "Scrim %s stored for %s %s-%s",
            scrim.name,
            scrim.day_of_week,
            scrim.start_time,
            scrim.end_time,
        )
        return scrim

    def get(self, name: str) -> Scrim | None:
        return self._storage.get_scrim(name)

    def list_all(self) -> list[Scrim]:
        return self._storage.list_scrims()

    def save_state(self, scrim: Scrim) -> None:
        self._storage.save_scrim_state(scrim)


__all__ = ["ScrimScheduleStore"]
