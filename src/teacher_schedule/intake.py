"""Trial intake flow opened from an available calendar cell.

State machine:

  closed -> open -> validating -> submitting -> closed      (success)
                        |             |
                        +-> open      +-> open               (error kept inline)

The cell being clickable is the only overlap check: nothing re-checks other
bookings when the flow opens. On success the host's on_success callback
(normally SchedulePanel.refresh) runs exactly once, and that re-fetch is the
only way the new trial reaches the grid.
"""

import asyncio
import inspect
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Protocol

from pydantic import BaseModel, Field

from src.teacher_schedule.classifier import Slot
from src.teacher_schedule.config import ScheduleConfig, get_config
from src.teacher_schedule.countries import currency_for, timezone_for
from src.teacher_schedule.errors import LoadError, SubmissionError, ValidationError
from src.teacher_schedule.logging import get_logger
from src.teacher_schedule.models import (
    AvailabilityWindow,
    Course,
    NewStudent,
    Page,
    Student,
    Trial,
    TrialRequest,
)
from src.teacher_schedule.search import StudentSearch
from src.teacher_schedule.timeutil import add_minutes, to_minutes

log = get_logger(__name__)


class BookingApi(Protocol):
    def search_students(
        self, query: str, *, per_page: int = 10, page: int = 1
    ) -> Page[Student]: ...

    def list_courses(self, *, per_page: int = 100, page: int = 1) -> Page[Course]: ...

    def create_trial(self, trial: TrialRequest) -> Trial: ...


class IntakeState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    VALIDATING = "validating"
    SUBMITTING = "submitting"


class StudentMode(str, Enum):
    EXISTING = "existing"
    NEW = "new"


class NewStudentForm(BaseModel):
    full_name: str = ""
    email: str = ""
    whatsapp: str = ""
    country: str = ""
    currency: str = "USD"
    timezone: str = "UTC"


class TrialForm(BaseModel):
    """Editable fields of the intake form. Retained across failed submits."""

    trial_date: date | None = None
    start_time: str = ""
    end_time: str = ""
    notes: str = ""
    mode: StudentMode = StudentMode.EXISTING
    student: Student | None = None
    new_student: NewStudentForm = Field(default_factory=NewStudentForm)
    course_id: int | None = None


class TrialIntake:
    """Collects a student and course for one slot and submits the trial."""

    def __init__(
        self,
        api: BookingApi,
        teacher_id: int,
        *,
        on_success: Callable[[], Awaitable[None] | None] | None = None,
        config: ScheduleConfig | None = None,
    ) -> None:
        cfg = config or get_config()
        self.api = api
        self.teacher_id = teacher_id
        self.on_success = on_success
        self.trial_minutes = cfg.trial_minutes
        self.course_page_size = cfg.course_page_size
        self.search = StudentSearch(
            api,
            debounce_seconds=cfg.search_debounce_seconds,
            page_size=cfg.search_page_size,
        )
        self.state = IntakeState.CLOSED
        self.form = TrialForm()
        self.courses: list[Course] = []
        self.courses_error: str | None = None
        self.error: str | None = None
        self.created: Trial | None = None

    @property
    def is_open(self) -> bool:
        return self.state is not IntakeState.CLOSED

    # --- Opening and closing ---

    def open(self, slot: Slot) -> None:
        """Open prefilled from an available grid cell.

        Raises:
            ValueError: The slot is booked or outside declared availability.
        """
        if not slot.is_bookable:
            raise ValueError(f"Slot {slot.date} {slot.time} is {slot.status.value}")
        self._prefill(slot.date, slot.time)

    def open_window(self, trial_date: date, window: AvailabilityWindow) -> None:
        """Open prefilled from an availability window of the list view."""
        self._prefill(trial_date, window.start_time)

    def _prefill(self, trial_date: date, start_time: str) -> None:
        start = start_time[:5]
        self.form = TrialForm(
            trial_date=trial_date,
            start_time=start,
            end_time=add_minutes(start, self.trial_minutes),
        )
        self.search.cancel()
        self.search.query = ""
        self.search.results = []
        self.error = None
        self.created = None
        self.state = IntakeState.OPEN
        log.info(
            "trial_intake_opened",
            teacher_id=self.teacher_id,
            trial_date=str(trial_date),
            start_time=start,
        )

    def close(self) -> None:
        self.search.cancel()
        self.state = IntakeState.CLOSED

    async def load_courses(self) -> None:
        """Load the course list. A failure leaves the select empty."""
        try:
            page = await asyncio.to_thread(
                self.api.list_courses, per_page=self.course_page_size
            )
        except LoadError as e:
            log.warning("course_load_failed", error=str(e))
            self.courses = []
            self.courses_error = str(e)
            return
        self.courses = page.items
        self.courses_error = None

    # --- Field edits ---

    def set_start_time(self, value: str) -> None:
        """Change the start time; the end time follows at the default length."""
        self.form.start_time = value
        try:
            self.form.end_time = add_minutes(value, self.trial_minutes)
        except ValueError:
            # validate() reports it on submit
            log.debug("end_time_not_recomputed", start_time=value, end_time=self.form.end_time)

    def set_end_time(self, value: str) -> None:
        self.form.end_time = value

    def set_notes(self, value: str) -> None:
        self.form.notes = value

    def set_mode(self, mode: StudentMode) -> None:
        self.form.mode = StudentMode(mode)

    def set_course(self, course_id: int | None) -> None:
        self.form.course_id = course_id

    async def search_students(self, query: str) -> None:
        await self.search.update(query)

    def select_student(self, student: Student) -> None:
        self.form.student = student
        self.search.cancel()

    def set_new_student(self, **fields: str) -> None:
        """Update new-student fields; a country also sets timezone and currency."""
        updated = self.form.new_student.model_copy(update=fields)
        if "country" in fields and fields["country"]:
            updated.timezone = timezone_for(fields["country"])
            updated.currency = currency_for(fields["country"])
        self.form.new_student = updated

    # --- Validation and submission ---

    def validate(self) -> TrialRequest:
        """Check required fields and build the request.

        Raises:
            ValidationError: First failing field, in form order.
        """
        form = self.form
        if form.mode is StudentMode.EXISTING and form.student is None:
            raise ValidationError("student_id", "Please select a student")
        if form.mode is StudentMode.NEW and not form.new_student.full_name.strip():
            raise ValidationError("full_name", "Please enter student name")
        if form.course_id is None:
            raise ValidationError("course_id", "Please select a course")
        if not form.start_time or not form.end_time or form.trial_date is None:
            raise ValidationError("start_time", "Please enter start and end time")
        try:
            start = to_minutes(form.start_time)
            end = to_minutes(form.end_time)
        except ValueError:
            raise ValidationError("start_time", "Please enter a valid time")
        if end <= start:
            raise ValidationError("end_time", "End time must be after start time")

        student_id = None
        new_student = None
        if form.mode is StudentMode.EXISTING:
            student_id = form.student.id
        else:
            new = form.new_student
            new_student = NewStudent(
                full_name=new.full_name.strip(),
                email=new.email or None,
                whatsapp=new.whatsapp or None,
                country=new.country or None,
                currency=new.currency or currency_for(new.country),
                timezone=new.timezone or timezone_for(new.country),
            )

        return TrialRequest(
            teacher_id=self.teacher_id,
            course_id=form.course_id,
            trial_date=form.trial_date,
            start_time=form.start_time,
            end_time=form.end_time,
            notes=form.notes,
            student_id=student_id,
            new_student=new_student,
        )

    async def submit(self) -> Trial:
        """Validate, create the trial, close, and notify the host.

        Raises:
            RuntimeError: The flow is closed or a submission is already running.
            ValidationError: A required field is missing; nothing was sent.
            SubmissionError: The server rejected the trial; the form is kept.
        """
        if self.state is not IntakeState.OPEN:
            raise RuntimeError(f"Cannot submit while {self.state.value}")

        self.error = None
        self.state = IntakeState.VALIDATING
        try:
            request = self.validate()
        except ValidationError as e:
            self.error = e.message
            self.state = IntakeState.OPEN
            log.info("trial_intake_invalid", field=e.field, error=e.message)
            raise

        self.state = IntakeState.SUBMITTING
        try:
            trial = await asyncio.to_thread(self.api.create_trial, request)
        except SubmissionError as e:
            self.error = e.message
            self.state = IntakeState.OPEN
            raise
        except Exception as e:
            self.error = str(e) or "Failed to create trial"
            self.state = IntakeState.OPEN
            log.error("trial_submission_crashed", error=repr(e))
            raise

        self.created = trial
        self.close()
        if self.on_success is not None:
            result = self.on_success()
            if inspect.isawaitable(result):
                await result
        return trial
