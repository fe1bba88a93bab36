"""
Error taxonomy shared by the scoring core and the API layer

Every error carries the HTTP status it maps to, so routers never need to
translate them one by one (see the handler registered in audition.main).
"""
from typing import Any, Dict, Optional, Union


class AuditionError(Exception):
    """Base class for all rejected operations"""
    status_code: int = 500

    def __init__(self, detail: Union[str, Dict[str, Any]]):
        self.detail = detail
        super().__init__(detail if isinstance(detail, str) else detail.get("message", str(detail)))


class ValidationError(AuditionError):
    """Malformed input: bad score value, missing field, bad code format"""
    status_code = 400


class AuthorizationError(AuditionError):
    """Missing, invalid or role-mismatched credential"""
    status_code = 401

    def __init__(self, detail: Optional[str] = None):
        # Same message for every failed check
        super().__init__(detail or "Unauthorized")


class ForbiddenError(AuditionError):
    """Authenticated, but acting on somebody else's data"""
    status_code = 403


class NotFoundError(AuditionError):
    """Unknown session, group, dancer, score..."""
    status_code = 404


class ConflictError(AuditionError):
    """
    Request is well-formed but clashes with current state

    detail is a dict with an "error" code (session_locked, already_submitted,
    has_scores, ...) plus whatever the caller needs to pick a follow-up.
    """
    status_code = 409

    def __init__(self, error: str, message: str, **extra: Any):
        super().__init__({"error": error, "message": message, **extra})
        self.error = error


def session_locked() -> ConflictError:
    return ConflictError("session_locked", "Session is locked. No further edits allowed.")
