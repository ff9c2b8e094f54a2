"""Error hierarchy for schedule loading and trial booking.

Two families live here:

* Operation errors the caller surfaces to the user as plain text
  (LoadError, ValidationError, SubmissionError). None of them are retried.
* Transport classification for the API client (TransientError vs
  AuthenticationError), used by tenacity to decide whether login is retried.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def login(self):
        ...
"""

from typing import Any


class SchedulingError(Exception):
    """Base exception for all schedule and booking errors."""

    pass


class LoadError(SchedulingError):
    """A schedule or list fetch failed.

    Shown as a full-panel message. The Snapshot on screen is left untouched.
    """

    pass


class ValidationError(SchedulingError):
    """A client-side required-field check failed before any network call."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class SubmissionError(SchedulingError):
    """The server rejected the create-trial call.

    Carries the HTTP status (0 for network failures) and the server's
    per-field validation errors, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        errors: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or {}


class TransientError(SchedulingError):
    """Temporary transport failure that may succeed on retry.

    Examples: connection refused, timeouts, 502/503 from the API gateway.
    """

    pass


class AuthenticationError(SchedulingError):
    """Credentials rejected or session could not be refreshed.

    Cannot be fixed by retry.
    """

    pass


class ApiError(SchedulingError):
    """Non-success response from the backend.

    Raised by the API client; callers translate it into LoadError or
    SubmissionError depending on the operation.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        errors: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or {}
