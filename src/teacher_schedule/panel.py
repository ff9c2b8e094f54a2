"""Weekly schedule panel: the current selection and its Snapshot.

The panel owns exactly one Snapshot at a time and replaces it wholesale on
every teacher change, week change, or post-booking refresh. Fetches are
tagged with a generation number; only the latest generation may touch the
panel, so a slow response for a previous teacher or week is dropped.
"""

import asyncio
from datetime import date
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from src.teacher_schedule import timeutil
from src.teacher_schedule.classifier import (
    DaySummary,
    Slot,
    build_grid,
    day_summaries,
    slot_at,
)
from src.teacher_schedule.config import ScheduleConfig, get_config
from src.teacher_schedule.errors import LoadError
from src.teacher_schedule.intake import BookingApi, TrialIntake
from src.teacher_schedule.logging import get_logger
from src.teacher_schedule.models import AvailabilityWindow, WeeklySnapshot

log = get_logger(__name__)


class ScheduleApi(BookingApi, Protocol):
    def get_weekly_schedule(self, teacher_id: int, week_start: date) -> WeeklySnapshot: ...


class PanelState(str, Enum):
    IDLE = "idle"  # no teacher selected
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Selection(BaseModel):
    """Which teacher and which Sunday-starting week the panel shows."""

    model_config = ConfigDict(frozen=True)

    teacher_id: int | None = None
    week_start: date


class SchedulePanel:
    """Loads and classifies one teacher's week; opens trial intakes."""

    def __init__(
        self,
        api: ScheduleApi,
        *,
        config: ScheduleConfig | None = None,
        today: date | None = None,
    ) -> None:
        self.api = api
        self.config = config or get_config()
        self.times = timeutil.time_grid(
            self.config.grid_start, self.config.grid_end, self.config.slot_minutes
        )
        self.selection = Selection(
            week_start=timeutil.week_start_for(today or date.today())
        )
        self.snapshot: WeeklySnapshot | None = None
        self.state = PanelState.IDLE
        self.error: str | None = None
        self._generation = 0

    @property
    def week_start(self) -> date:
        return self.selection.week_start

    @property
    def week_end(self) -> date:
        return timeutil.week_end_for(self.selection.week_start)

    # --- Navigation ---

    async def select_teacher(self, teacher_id: int) -> None:
        self.selection = self.selection.model_copy(update={"teacher_id": teacher_id})
        await self.load()

    async def previous_week(self) -> None:
        await self._go_to(timeutil.previous_week(self.week_start))

    async def next_week(self) -> None:
        await self._go_to(timeutil.next_week(self.week_start))

    async def current_week(self, today: date | None = None) -> None:
        await self._go_to(timeutil.week_start_for(today or date.today()))

    async def _go_to(self, week_start: date) -> None:
        self.selection = self.selection.model_copy(update={"week_start": week_start})
        await self.load()

    async def refresh(self) -> None:
        await self.load()

    # --- Loading ---

    async def load(self) -> None:
        """Fetch the Snapshot for the current selection.

        Failures are shown in the panel (state ERROR) rather than raised.
        """
        selection = self.selection
        if selection.teacher_id is None:
            return

        self._generation += 1
        generation = self._generation
        self.state = PanelState.LOADING
        self.error = None

        try:
            snapshot = await asyncio.to_thread(
                self.api.get_weekly_schedule, selection.teacher_id, selection.week_start
            )
        except LoadError as e:
            if generation != self._generation:
                log.debug("schedule_error_stale", generation=generation)
                return
            self.snapshot = None
            self.state = PanelState.ERROR
            self.error = str(e)
            return

        if generation != self._generation:
            log.info(
                "schedule_response_stale",
                teacher_id=selection.teacher_id,
                week_start=str(selection.week_start),
                generation=generation,
                latest=self._generation,
            )
            return

        self.snapshot = snapshot
        self.state = PanelState.READY

    # --- Views ---

    def _require_snapshot(self) -> WeeklySnapshot:
        """The loaded Snapshot for the current selection.

        Raises:
            LoadError: Nothing loaded, the last load failed, or a fetch for a
                new selection is still outstanding.
        """
        if self.state is PanelState.LOADING:
            raise LoadError(
                f"Schedule for week of {self.week_start} is still loading"
            )
        if self.snapshot is None:
            raise LoadError(self.error or "No schedule loaded")
        return self.snapshot

    def slot(self, day_of_week: int, time: str) -> Slot:
        return slot_at(self._require_snapshot(), self.week_start, day_of_week, time)

    def grid(self) -> list[list[Slot]]:
        return build_grid(self._require_snapshot(), self.week_start, self.times)

    def days(self) -> list[DaySummary]:
        return day_summaries(self._require_snapshot())

    # --- Booking ---

    def _new_intake(self) -> TrialIntake:
        snapshot = self._require_snapshot()
        return TrialIntake(
            self.api,
            snapshot.teacher.id,
            on_success=self.refresh,
            config=self.config,
        )

    async def click(self, day_of_week: int, time: str) -> TrialIntake | None:
        """Open a trial intake for an available cell.

        Returns None for booked or empty cells, which are not clickable.
        """
        slot = self.slot(day_of_week, time)
        if not slot.is_bookable:
            log.debug(
                "slot_not_bookable", day=day_of_week, time=time, status=slot.status.value
            )
            return None
        intake = self._new_intake()
        intake.open(slot)
        await intake.load_courses()
        return intake

    async def add_trial_from_window(
        self, day_of_week: int, window: AvailabilityWindow
    ) -> TrialIntake:
        """Open a trial intake from a list-view availability window."""
        day = self._require_snapshot().day(day_of_week)
        if day is None:
            raise ValueError(f"No schedule for day {day_of_week}")
        intake = self._new_intake()
        intake.open_window(day.date, window)
        await intake.load_courses()
        return intake
