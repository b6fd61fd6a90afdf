from __future__ import annotations


class ScrimError(Exception):
    """Base exception for failures reported back to the acting user."""


class ValidationError(ScrimError, ValueError):
    """Raised when user supplied input is malformed or insufficient."""


class ConflictError(ScrimError):
    """Raised when a uniqueness rule would be violated."""


class PermissionDeniedError(ScrimError):
    """Raised when the actor lacks the role or ownership an action needs."""


class NotFoundError(ScrimError, LookupError):
    """Raised when no matching team, scrim or teammate exists."""


class VerificationError(ScrimError):
    """Base exception for check-in verification failures."""


class ExpiredError(VerificationError):
    """Raised when no live challenge exists for the user and scrim."""


class MismatchError(VerificationError):
    """Raised when the submitted phrase differs from the issued one."""


class InternalError(ScrimError):
    """Raised when a collaborator fails in a way the actor cannot fix."""


__all__ = [
    "ScrimError",
    "ValidationError",
    "ConflictError",
    "PermissionDeniedError",
    "NotFoundError",
    "VerificationError",
    "ExpiredError",
    "MismatchError",
    "InternalError",
]
