"""Slot classification for the weekly teacher calendar.

A slot is one (day, time) cell of the grid. Its status is derived from the
Snapshot on every render and has no lifecycle of its own:

  booked     a class or trial covers the probe time
  available  no booking covers it, but a declared availability window does
  empty      neither

Booked always wins over available: availability minus existing bookings.
A booking outside any declared availability still classifies as booked.
"""

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.teacher_schedule.models import (
    AvailabilityWindow,
    BookedItem,
    DaySchedule,
    ScheduleClass,
    ScheduleTrial,
    WeeklySnapshot,
)
from src.teacher_schedule.timeutil import day_label, is_within, time_grid


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    EMPTY = "empty"


class Slot(BaseModel):
    """A classified grid cell. Recomputed from the Snapshot, never stored."""

    model_config = ConfigDict(frozen=True)

    day_of_week: int
    date: date
    time: str
    status: SlotStatus
    booked: BookedItem | None = None

    @property
    def is_bookable(self) -> bool:
        return self.status is SlotStatus.AVAILABLE


def _covers(items, time: str) -> bool:
    return any(is_within(time, item.start_time, item.end_time) for item in items)


def classify(day: DaySchedule | None, time: str) -> SlotStatus:
    """Classify a probe time on one day. Pure function of its inputs."""
    if day is None:
        return SlotStatus.EMPTY
    if _covers(day.classes, time) or _covers(day.trials, time):
        return SlotStatus.BOOKED
    if _covers(day.availability, time):
        return SlotStatus.AVAILABLE
    return SlotStatus.EMPTY


def booked_item_at(day: DaySchedule | None, time: str) -> BookedItem | None:
    """First booking covering `time`. Classes are consulted before trials."""
    if day is None:
        return None
    for item in day.classes:
        if is_within(time, item.start_time, item.end_time):
            return item
    for item in day.trials:
        if is_within(time, item.start_time, item.end_time):
            return item
    return None


def slot_at(
    snapshot: WeeklySnapshot, week_start: date, day_of_week: int, time: str
) -> Slot:
    """Classify one cell of the week grid.

    The cell date comes from the snapshot when the day is present and
    falls back to week_start + (day_of_week - 1) otherwise.
    """
    day = snapshot.day(day_of_week)
    cell_date = day.date if day else week_start + timedelta(days=day_of_week - 1)
    return Slot(
        day_of_week=day_of_week,
        date=cell_date,
        time=time,
        status=classify(day, time),
        booked=booked_item_at(day, time),
    )


def build_grid(
    snapshot: WeeklySnapshot,
    week_start: date,
    times: list[str] | None = None,
) -> list[list[Slot]]:
    """Classify every cell: one row per grid time, seven cells per row."""
    if times is None:
        times = time_grid()
    return [
        [slot_at(snapshot, week_start, day_of_week, time) for day_of_week in range(1, 8)]
        for time in times
    ]


def cell_label(slot: Slot) -> str:
    """Text shown in a booked cell: student name and course name."""
    item = slot.booked
    if item is None:
        return ""
    fallback = "Class" if isinstance(item, ScheduleClass) else "Trial"
    student = item.student.full_name if item.student and item.student.full_name else fallback
    course = item.course.name if item.course and item.course.name else ""
    return f"{student} / {course}" if course else student


class DaySummary(BaseModel):
    """One day of the list view."""

    day_of_week: int
    label: str
    date: date
    availability: list[AvailabilityWindow]
    classes: list[ScheduleClass]
    trials: list[ScheduleTrial]


def day_summary(day: DaySchedule | None) -> DaySummary | None:
    """List-view entry for one day, or None when the day has nothing on it."""
    if day is None or not day.has_content:
        return None
    return DaySummary(
        day_of_week=day.day_of_week,
        label=day_label(day.day_of_week),
        date=day.date,
        availability=list(day.availability),
        classes=list(day.classes),
        trials=list(day.trials),
    )


def day_summaries(snapshot: WeeklySnapshot) -> list[DaySummary]:
    """Days with any availability, class or trial, Sunday first."""
    summaries = (day_summary(snapshot.day(n)) for n in range(1, 8))
    return [summary for summary in summaries if summary is not None]
