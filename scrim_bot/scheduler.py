"""Weekly scrim windows driven by a single polling loop.

Each scrim persists its state plus the next open/close instants, so the loop
only compares the stored instants with the current time. A restart resumes
from whatever the database says instead of losing armed timers.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, tzinfo

from discord.ext import tasks

from .checkin import CheckinLedger
from .errors import NotFoundError, ValidationError
from .gateway import GuildGateway
from .lobbies import LobbyAllocator
from .models import FORMING_LOBBIES, OPEN, WAITING_FOR_OPEN, Scrim, Team
from .schedule import ScrimScheduleStore
from .validation import DAYS_OF_WEEK, parse_clock_time
from .verification import ChallengeManager

log = logging.getLogger(__name__)

ONE_WEEK = timedelta(days=7)


def naive_occurrence(
    day_of_week: str, clock: str, now: datetime, tz: tzinfo
) -> datetime:
    """Return ``day_of_week`` at ``clock`` in the Monday-based week of ``now``."""
    local_now = now.astimezone(tz)
    monday = local_now.date() - timedelta(days=local_now.weekday())
    target_day = monday + timedelta(days=DAYS_OF_WEEK.index(day_of_week))
    return datetime.combine(target_day, parse_clock_time(clock), tzinfo=tz)


def next_window(
    day_of_week: str,
    start_time: str,
    end_time: str,
    now: datetime,
    tz: tzinfo,
) -> tuple[datetime, datetime]:
    """Return the next (opens_at, closes_at) pair for a weekly window.

    When this week's start has already passed, both instants move exactly one
    week ahead. The close instant reuses the resolved day, so an end time
    earlier than the start yields an empty window.
    """
    if day_of_week not in DAYS_OF_WEEK:
        raise ValidationError(f"Unknown day of week: {day_of_week}")
    opens_at = naive_occurrence(day_of_week, start_time, now, tz)
    closes_at = naive_occurrence(day_of_week, end_time, now, tz)
    if opens_at < now:
        opens_at += ONE_WEEK
        closes_at += ONE_WEEK
    return opens_at, closes_at


class ScrimScheduler:
    def __init__(
        self,
        schedules: ScrimScheduleStore,
        ledger: CheckinLedger,
        challenges: ChallengeManager,
        allocator: LobbyAllocator,
        gateway: GuildGateway,
        *,
        tz: tzinfo,
        reset_checkins_after_lobbies: bool = False,
    ) -> None:
        self._schedules = schedules
        self._ledger = ledger
        self._challenges = challenges
        self._allocator = allocator
        self._gateway = gateway
        self.tz = tz
        self.reset_checkins_after_lobbies = reset_checkins_after_lobbies

    # ----- Arming -----
    def arm(
        self,
        scrim: Scrim,
        now: datetime | None = None,
        *,
        after: datetime | None = None,
    ) -> Scrim:
        """Persist the next window, skipping one that opens at or before ``after``."""
        current = now or datetime.now(UTC)
        opens_at, closes_at = next_window(
            scrim.day_of_week, scrim.start_time, scrim.end_time, current, self.tz
        )
        if after is not None and opens_at <= after:
            opens_at += ONE_WEEK
            closes_at += ONE_WEEK
        scrim.state = WAITING_FOR_OPEN
        scrim.opens_at = opens_at
        scrim.closes_at = closes_at
        self._schedules.save_state(scrim)
        log.info(
            "Scrim %s armed: opens %s, closes %s",
            scrim.name,
            opens_at.isoformat(),
            closes_at.isoformat(),
        )
        return scrim

    def arm_all(self, now: datetime | None = None) -> None:
        """Arm every stored scrim that has no pending window yet."""
        for scrim in self._schedules.list_all():
            if scrim.opens_at is None or scrim.closes_at is None:
                try:
                    self.arm(scrim, now)
                except ValidationError as exc:
                    log.error("Cannot schedule scrim %s: %s", scrim.name, exc)

    # ----- Polling -----
    async def tick(self, now: datetime | None = None) -> None:
        current = now or datetime.now(UTC)
        self._challenges.sweep(current)
        for scrim in self._schedules.list_all():
            try:
                await self._advance(scrim, current)
            except Exception:  # pylint: disable=broad-except
                log.exception(
                    "Scrim %s cycle failed; skipping to next week", scrim.name
                )
                self._rearm_after_failure(scrim, current)

    async def _advance(self, scrim: Scrim, now: datetime) -> None:
        if scrim.opens_at is None or scrim.closes_at is None:
            self.arm(scrim, now)
            return

        if scrim.state == WAITING_FOR_OPEN:
            if now < scrim.opens_at:
                return
            if now >= scrim.closes_at and scrim.closes_at > scrim.opens_at:
                log.warning(
                    "Scrim %s window %s-%s passed while offline; skipped",
                    scrim.name,
                    scrim.opens_at.isoformat(),
                    scrim.closes_at.isoformat(),
                )
                self._rearm_from_store(scrim, now)
                return
            await self.open(scrim)
        elif scrim.state in (OPEN, FORMING_LOBBIES) and now >= scrim.closes_at:
            await self.close(scrim, now)

    async def open(self, scrim: Scrim) -> None:
        await self._gateway.announce_checkin(scrim)
        # an admin may have re-armed the scrim while the announcement was sent
        stored = self._schedules.get(scrim.name)
        if stored is None or stored.opens_at != scrim.opens_at:
            log.warning(
                "Scrim %s was rescheduled while opening; keeping the new window",
                scrim.name,
            )
            return
        stored.state = OPEN
        self._schedules.save_state(stored)
        log.info("Check-in opened for %s", scrim.name)

    async def close(self, scrim: Scrim, now: datetime) -> None:
        scrim.state = FORMING_LOBBIES
        self._schedules.save_state(scrim)
        log.info("Check-in closed for %s; forming lobbies", scrim.name)
        await self._allocator.allocate(scrim.name)
        if self.reset_checkins_after_lobbies:
            self._ledger.clear(scrim.name)
        self._rearm_from_store(scrim, now)

    def _rearm_from_store(self, scrim: Scrim, now: datetime) -> None:
        # re-read so admin edits made during the window take effect
        stored = self._schedules.get(scrim.name)
        if stored is not None:
            self.arm(stored, now, after=scrim.opens_at)

    def _rearm_after_failure(self, scrim: Scrim, now: datetime) -> None:
        try:
            self._rearm_from_store(scrim, now)
        except Exception:  # pylint: disable=broad-except
            log.exception("Could not re-arm scrim %s", scrim.name)

    # ----- Check-in flow -----
    def _accepting_scrim(
        self, scrim_name: str, now: datetime, message: str
    ) -> Scrim:
        """Return the scrim if check-ins are accepted at ``now``."""
        scrim = self._schedules.get(scrim_name)
        if scrim is None:
            raise NotFoundError(f"Scrim {scrim_name} does not exist.")
        if scrim.state != OPEN:
            raise ValidationError(message)
        # the loop may not have closed the window yet
        if scrim.closes_at is not None and now >= scrim.closes_at:
            raise ValidationError(f"Check-in for {scrim_name} is closed.")
        return scrim

    def begin_checkin(
        self, user_id: str, scrim_name: str, *, now: datetime | None = None
    ) -> str:
        current = now or datetime.now(UTC)
        self._accepting_scrim(
            scrim_name, current, f"Check-in for {scrim_name} is not open."
        )
        return self._challenges.issue(user_id, scrim_name, now=current)

    async def complete_checkin(
        self,
        user_id: str,
        scrim_name: str,
        submitted: str,
        *,
        now: datetime | None = None,
    ) -> Team:
        current = now or datetime.now(UTC)
        self._accepting_scrim(
            scrim_name, current, f"Check-in for {scrim_name} is closed."
        )
        self._challenges.validate(user_id, scrim_name, submitted, now=current)
        team = self._ledger.check_in_member(scrim_name, user_id)
        await self._gateway.grant_checked_in_role(user_id)
        await self._gateway.send_transfer_prompt(user_id, team.name)
        return team

    # ----- Loop -----
    def start(self, poll_seconds: int) -> None:
        self.poll.change_interval(seconds=poll_seconds)
        if not self.poll.is_running():
            self.poll.start()

    def stop(self) -> None:
        self.poll.cancel()

    @tasks.loop(seconds=30)
    async def poll(self) -> None:
        try:
            await self.tick()
        except Exception:  # pylint: disable=broad-except
            log.exception("Scheduler tick failed")


__all__ = ["ONE_WEEK", "ScrimScheduler", "naive_occurrence", "next_window"]
