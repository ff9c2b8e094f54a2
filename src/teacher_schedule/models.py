"""Pydantic models for schedule and booking data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Snapshot models are frozen and use tuples so a fetched week cannot be patched
in place; a new week is always a new object.
"""

from datetime import date
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.teacher_schedule.timeutil import to_minutes

T = TypeVar("T")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TeacherRef(_Frozen):
    id: int
    name: str
    timezone: str | None = None


class StudentRef(_Frozen):
    id: int
    full_name: str | None = None


class CourseRef(_Frozen):
    id: int
    name: str | None = None


class Interval(_Frozen):
    """Wall-clock interval within one day, in the teacher's timezone."""

    start_time: str  # "09:00" or "09:00:00"
    end_time: str


class AvailabilityWindow(Interval):
    """A teacher-declared window during which trials may be booked."""

    id: int | None = None
    teacher_id: int | None = None
    timezone: str | None = None
    is_available: bool = True


class BookedItem(Interval):
    """An existing class or trial occupying part of a day. Read-only."""

    id: int | None = None
    student: StudentRef | None = None
    course: CourseRef | None = None
    status: str | None = None


class ScheduleClass(BookedItem):
    """A confirmed (usually recurring package) class."""

    class_date: date | None = None
    package_id: int | None = None
    timetable_id: int | None = None


class ScheduleTrial(BookedItem):
    """An existing trial booking."""

    trial_date: date | None = None


class DaySchedule(_Frozen):
    day_of_week: int = Field(ge=1, le=7)  # 1=Sunday .. 7=Saturday
    date: date
    availability: tuple[AvailabilityWindow, ...] = ()
    classes: tuple[ScheduleClass, ...] = ()
    trials: tuple[ScheduleTrial, ...] = ()

    @property
    def has_content(self) -> bool:
        return bool(self.availability or self.classes or self.trials)


class WeeklySnapshot(_Frozen):
    """Full schedule for one teacher and one week, as returned by the API."""

    teacher: TeacherRef
    week_start: date | None = None
    week_end: date | None = None
    schedule: tuple[DaySchedule, ...] = ()

    @model_validator(mode="after")
    def _one_entry_per_day(self) -> "WeeklySnapshot":
        seen: set[int] = set()
        for day in self.schedule:
            if day.day_of_week in seen:
                raise ValueError(f"duplicate day_of_week {day.day_of_week} in schedule")
            seen.add(day.day_of_week)
        return self

    def day(self, day_of_week: int) -> DaySchedule | None:
        for day in self.schedule:
            if day.day_of_week == day_of_week:
                return day
        return None


class Student(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    full_name: str = ""
    email: str | None = None


class Course(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str


class Page(BaseModel, Generic[T]):
    """One page of a paginated list endpoint (data + meta envelope)."""

    items: list[T]
    current_page: int = 1
    last_page: int = 1
    per_page: int = 15
    total: int = 0


class NewStudent(BaseModel):
    """Minimal profile for a student created together with the trial."""

    full_name: str
    email: str | None = None
    whatsapp: str | None = None
    country: str | None = None
    currency: str = "USD"
    timezone: str = "UTC"


class TrialRequest(BaseModel):
    """Payload for POST /admin/trials."""

    teacher_id: int
    course_id: int
    trial_date: date
    start_time: str
    end_time: str
    notes: str = ""
    student_id: int | None = None
    new_student: NewStudent | None = None

    @model_validator(mode="after")
    def _check(self) -> "TrialRequest":
        if (self.student_id is None) == (self.new_student is None):
            raise ValueError("exactly one of student_id or new_student is required")
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("end_time must be later than start_time")
        return self

    def to_payload(self) -> dict:
        """JSON body, omitting whichever student branch is unused."""
        return self.model_dump(mode="json", exclude_none=True)


class Trial(BaseModel):
    """Trial record returned by the API after creation."""

    model_config = ConfigDict(extra="ignore")

    id: int
    teacher_id: int | None = None
    course_id: int | None = None
    student_id: int | None = None
    trial_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    status: str | None = None
    notes: str | None = None
    student: StudentRef | None = None
    course: CourseRef | None = None
