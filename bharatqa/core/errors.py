"""
Errors
======
Exception hierarchy shared by the client, the analysis monitor and the routers.
"""
from typing import Optional


class BharatQAError(Exception):
    """Base class for every error raised by this service."""


class ApiError(BharatQAError):
    """
    The BharatQA API answered with a non-2xx status, an unreadable body,
    or could not be reached at all (status_code is None in that case).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class AnalysisAlreadyPresentError(BharatQAError):
    """A bug can carry at most one AI analysis."""

    def __init__(self, bug_id) -> None:
        super().__init__(f"Bug {bug_id} already has an AI analysis")
        self.bug_id = bug_id


class SessionError(BharatQAError):
    """Raised when a session write violates the merge/replace contract."""
