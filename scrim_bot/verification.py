"""In-memory check-in challenges keyed by (user id, scrim name)."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from .errors import ExpiredError, MismatchError

log = logging.getLogger(__name__)

PHRASE_PREFIX = "SCRIM"


def generate_phrase(rng: random.Random | None = None) -> str:
    source = rng or random
    return f"{PHRASE_PREFIX}{source.randint(1000, 9999)}"


@dataclass(slots=True)
class Challenge:
    phrase: str
    issued_at: datetime


class ChallengeManager:
    def __init__(
        self,
        *,
        ttl: timedelta | None = timedelta(minutes=15),
        rng: random.Random | None = None,
    ) -> None:
        self._ttl = ttl
        self._rng = rng
        self._challenges: dict[tuple[str, str], Challenge] = {}

    def __len__(self) -> int:
        return len(self._challenges)

    def issue(
        self, user_id: str, scrim_name: str, *, now: datetime | None = None
    ) -> str:
        phrase = generate_phrase(self._rng)
        self._challenges[(user_id, scrim_name)] = Challenge(
            phrase=phrase, issued_at=now or datetime.now(UTC)
        )
        return phrase

    def validate(
        self,
        user_id: str,
        scrim_name: str,
        submitted: str,
        *,
        now: datetime | None = None,
    ) -> None:
        key = (user_id, scrim_name)
        challenge = self._challenges.get(key)
        if challenge is None or self._is_expired(challenge, now or datetime.now(UTC)):
            self._challenges.pop(key, None)
            raise ExpiredError("Captcha expired. Click Register again.")
        if submitted != challenge.phrase:
            raise MismatchError("Incorrect CAPTCHA.")
        del self._challenges[key]

    def sweep(self, now: datetime | None = None) -> int:
        current = now or datetime.now(UTC)
        stale = [
            key
            for key, challenge in self._challenges.items()
            if self._is_expired(challenge, current)
        ]
        for key in stale:
            del self._challenges[key]
        if stale:
            log.debug("Dropped %d expired challenge(s)", len(stale))
        return len(stale)

    def _is_expired(self, challenge: Challenge, now: datetime) -> bool:
        if self._ttl is None:
            return False
        return now - challenge.issued_at >= self._ttl


__all__ = ["Challenge", "ChallengeManager", "generate_phrase"]
