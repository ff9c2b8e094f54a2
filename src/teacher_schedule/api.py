"""HTTP client for the school admin REST API.

ApiClient owns a requests.Session, the bearer token, and the translation of
HTTP failures into the error hierarchy. Login is retried on transient
failures; schedule loads and trial submissions are never retried.

Every response uses the envelope {"status": "success"|"error", "data": ...,
"message": ..., "errors": {...}, "meta": {...}}.
"""

from datetime import date
from typing import Any

import requests
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.teacher_schedule.config import ScheduleConfig, get_config
from src.teacher_schedule.errors import (
    ApiError,
    AuthenticationError,
    LoadError,
    SubmissionError,
    TransientError,
)
from src.teacher_schedule.logging import get_logger
from src.teacher_schedule.models import (
    Course,
    Page,
    Student,
    Trial,
    TrialRequest,
    WeeklySnapshot,
)

logger = get_logger(__name__)

LOGIN_PATH = "/auth/login"
REFRESH_PATH = "/auth/refresh"
STUDENTS_PATH = "/admin/students"
COURSES_PATH = "/admin/courses"
TRIALS_PATH = "/admin/trials"

_AUTH_PATHS: frozenset[str] = frozenset({LOGIN_PATH, REFRESH_PATH})
_TRANSIENT_STATUSES: frozenset[int] = frozenset({502, 503, 504})

NETWORK_ERROR_MESSAGE = (
    "Network error. Please check your connection and ensure the API server is running."
)


def weekly_schedule_path(teacher_id: int) -> str:
    return f"/admin/teachers/{teacher_id}/weekly-schedule"


def error_message(body: Any, status: int) -> str:
    """Pick the message shown to the user from an error response body.

    The first field error wins over the top-level message.
    """
    if not isinstance(body, dict):
        body = {}
    if status == 403:
        return body.get("message") or "You do not have permission to perform this action."

    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        first = next(iter(errors.values()))
        if isinstance(first, list):
            first = first[0] if first else None
        if first:
            return str(first)
        return body.get("message") or "Validation error occurred"

    return body.get("message") or body.get("error") or "An error occurred"


def _page(envelope: dict, model: type) -> Page:
    meta = envelope.get("meta") or {}
    items = [model.model_validate(item) for item in envelope.get("data") or []]
    return Page[model](
        items=items,
        current_page=meta.get("current_page", 1),
        last_page=meta.get("last_page", 1),
        per_page=meta.get("per_page", 15),
        total=meta.get("total", len(items)),
    )


class ApiClient:
    """Synchronous client for the admin API.

    Pass a preconfigured session for tests; otherwise one is created with
    JSON headers.
    """

    def __init__(
        self,
        config: ScheduleConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or get_config()
        self.base_url = self.config.api_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )
        self.access_token: str | None = self.config.api_token or None
        self.refresh_token: str | None = None

    def close(self) -> None:
        self.session.close()

    # --- Authentication ---

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    def login(self, email: str | None = None, password: str | None = None) -> None:
        """Exchange credentials for an access token.

        Retries on TransientError but fails fast on AuthenticationError.

        Raises:
            AuthenticationError: Credentials missing or rejected.
            TransientError: Network trouble persisted across all attempts.
        """
        email = email or self.config.api_email
        password = password or self.config.api_password
        if not email or not password:
            raise AuthenticationError("No API credentials configured")

        logger.info("authentication_started", email=email)
        try:
            envelope = self._send(
                "POST", LOGIN_PATH, json={"email": email, "password": password}
            )
            data = envelope.get("data")
        except ApiError as e:
            logger.error("authentication_failed", status=e.status, error=e.message)
            raise AuthenticationError(e.message) from e

        try:
            self.access_token = data["access_token"]
        except (KeyError, TypeError) as e:
            raise AuthenticationError("Login response did not include an access token") from e
        self.refresh_token = data.get("refresh_token")
        logger.info("authentication_succeeded", expires_in=data.get("expires_in"))

    def refresh(self) -> None:
        """Swap the refresh token for a new access token.

        Clears both tokens on failure.
        """
        if not self.refresh_token:
            raise AuthenticationError("No refresh token available")
        try:
            envelope = self._send("POST", REFRESH_PATH, json={"refresh_token": self.refresh_token})
            data = envelope.get("data")
            self.access_token = data["access_token"]
        except (ApiError, TransientError, KeyError, TypeError) as e:
            self.clear_tokens()
            logger.warning("token_refresh_failed", error=str(e))
            raise AuthenticationError("Session expired, please log in again") from e
        logger.info("token_refreshed")

    def clear_tokens(self) -> None:
        self.access_token = None
        self.refresh_token = None

    def _ensure_token(self) -> None:
        if self.access_token is None:
            self.login()

    # --- Transport ---

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict:
        """Authenticated request returning the full response envelope.

        A 401 triggers one token refresh and one replay of the request.
        """
        self._ensure_token()
        try:
            return self._send(method, path, params=params, json=json)
        except AuthenticationError:
            if not self.refresh_token:
                raise
            logger.info("access_token_expired", path=path)
            self.refresh()
            return self._send(method, path, params=params, json=json)

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict:
        headers = {}
        if self.access_token and path not in _AUTH_PATHS:
            headers["Authorization"] = f"Bearer {self.access_token}"

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.Timeout as e:
            logger.warning("request_timeout", method=method, path=path)
            raise TransientError(
                f"Request to {path} timed out after {self.config.request_timeout}s"
            ) from e
        except requests.RequestException as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            raise TransientError(NETWORK_ERROR_MESSAGE) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        status = response.status_code
        if status == 401 and path not in _AUTH_PATHS:
            raise AuthenticationError(error_message(body, status))
        if status in _TRANSIENT_STATUSES:
            raise TransientError(f"Server unavailable ({status})")
        if status >= 400:
            errors = body.get("errors") if isinstance(body, dict) else None
            raise ApiError(
                error_message(body, status),
                status=status,
                errors=errors if isinstance(errors, dict) else None,
            )

        if not isinstance(body, dict) or body.get("status") != "success":
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiError(message or "Unexpected response from server", status=status)

        logger.debug("request_succeeded", method=method, path=path, status=status)
        return body

    # --- Endpoints ---

    def get_weekly_schedule(self, teacher_id: int, week_start: date) -> WeeklySnapshot:
        """Fetch the full schedule for one teacher and one Sunday-Saturday week.

        Raises:
            LoadError: Network failure, unknown teacher, or invalid payload.
        """
        params = {"week_start": week_start.strftime("%Y-%m-%d")}
        try:
            envelope = self.request("GET", weekly_schedule_path(teacher_id), params=params)
        except (ApiError, TransientError, AuthenticationError) as e:
            logger.warning(
                "schedule_load_failed",
                teacher_id=teacher_id,
                week_start=str(week_start),
                error=str(e),
            )
            raise LoadError(str(e)) from e

        data = envelope.get("data")
        if not data:
            raise LoadError("Failed to fetch teacher weekly schedule")
        try:
            snapshot = WeeklySnapshot.model_validate(data)
        except PydanticValidationError as e:
            logger.error("schedule_payload_invalid", teacher_id=teacher_id, error=str(e))
            raise LoadError("Teacher weekly schedule payload was invalid") from e

        logger.info(
            "schedule_loaded",
            teacher_id=teacher_id,
            week_start=str(week_start),
            days=len(snapshot.schedule),
        )
        return snapshot

    def search_students(
        self, query: str, *, per_page: int = 10, page: int = 1
    ) -> Page[Student]:
        """Search students by free text (name or email)."""
        params = {"search": query, "per_page": per_page, "page": page}
        try:
            envelope = self.request("GET", STUDENTS_PATH, params=params)
        except (ApiError, TransientError, AuthenticationError) as e:
            raise LoadError(str(e)) from e
        return _page(envelope, Student)

    def list_courses(self, *, per_page: int = 100, page: int = 1) -> Page[Course]:
        try:
            envelope = self.request(
                "GET", COURSES_PATH, params={"per_page": per_page, "page": page}
            )
        except (ApiError, TransientError, AuthenticationError) as e:
            raise LoadError(str(e)) from e
        return _page(envelope, Course)

    def create_trial(self, trial: TrialRequest) -> Trial:
        """Create a trial booking.

        Raises:
            SubmissionError: The server rejected the request or was unreachable.
        """
        payload = trial.to_payload()
        try:
            envelope = self.request("POST", TRIALS_PATH, json=payload)
        except ApiError as e:
            logger.warning("trial_rejected", status=e.status, error=e.message)
            raise SubmissionError(e.message, status=e.status, errors=e.errors) from e
        except (TransientError, AuthenticationError) as e:
            logger.warning("trial_submission_failed", error=str(e))
            raise SubmissionError(str(e)) from e

        data = envelope.get("data")
        if not data:
            raise SubmissionError("Failed to create trial")
        try:
            created = Trial.model_validate(data)
        except PydanticValidationError as e:
            logger.error("trial_payload_invalid", teacher_id=trial.teacher_id, error=str(e))
            raise SubmissionError("Trial response from server was invalid") from e
        logger.info(
            "trial_created",
            trial_id=created.id,
            teacher_id=trial.teacher_id,
            trial_date=str(trial.trial_date),
            start_time=trial.start_time,
        )
        return created
