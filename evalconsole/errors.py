"""
Exception taxonomy for the console.

Pure pipeline functions never raise these (apart from ``TrendBaselineError``);
session and API operations do, and callers render the message.
"""

from typing import Optional


class ConsoleApiError(Exception):
    """A call to the remote evaluation API failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class Unauthorized(ConsoleApiError):
    """401/403 from the identity or authentication endpoints."""


class ServiceUnavailable(ConsoleApiError):
    """5xx from the remote API; the user may retry later."""


class NetworkFailure(ConsoleApiError):
    """The request never produced an HTTP response."""


class TrendBaselineError(ZeroDivisionError):
    """Performance trend requested against a zero baseline score."""


def user_message(exc: Exception) -> str:
    """Text shown to the user for a failed lifecycle operation."""
    if isinstance(exc, Unauthorized):
        return "Invalid credentials or session expired. Please sign in again."
    if isinstance(exc, ServiceUnavailable):
        return "The evaluation service is temporarily unavailable. Please try again in a few minutes."
    if isinstance(exc, NetworkFailure):
        return "Could not reach the evaluation service. Check your connection."
    return str(exc) or "Unexpected error."
