"""Scrim bot components."""

from .checkin import CheckinLedger, transfer_checked_in_role
from .config import EnvironmentConfig
from .errors import (
    ConflictError,
    ExpiredError,
    InternalError,
    MismatchError,
    NotFoundError,
    PermissionDeniedError,
    ScrimError,
    ValidationError,
    VerificationError,
)
from .leaderboard import build_leaderboard
from .lobbies import LobbyAllocator
from .models import CheckinRecord, LobbyGroup, Scrim, Team
from .router import InteractionRouter
from .schedule import ScrimScheduleStore
from .scheduler import ScrimScheduler, next_window
from .storage import ScrimStorage
from .teams import TeamRegistry
from .verification import ChallengeManager

__all__ = [
    "CheckinLedger",
    "transfer_checked_in_role",
    "EnvironmentConfig",
    "ConflictError",
    "ExpiredError",
    "InternalError",
    "MismatchError",
    "NotFoundError",
    "PermissionDeniedError",
    "ScrimError",
    "ValidationError",
    "VerificationError",
    "build_leaderboard",
    "LobbyAllocator",
    "CheckinRecord",
    "LobbyGroup",
    "Scrim",
    "Team",
    "InteractionRouter",
    "ScrimScheduleStore",
    "ScrimScheduler",
    "next_window",
    "ScrimStorage",
    "TeamRegistry",
    "ChallengeManager",
]
