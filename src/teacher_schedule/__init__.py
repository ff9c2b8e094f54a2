"""Teacher weekly schedule and trial booking client.

Loads a teacher's week from the school admin API, classifies each calendar
cell as available, booked or empty, and books trial classes into available
cells.
"""

from src.teacher_schedule.api import ApiClient
from src.teacher_schedule.classifier import Slot, SlotStatus, build_grid, classify
from src.teacher_schedule.intake import IntakeState, StudentMode, TrialIntake
from src.teacher_schedule.models import DaySchedule, WeeklySnapshot
from src.teacher_schedule.panel import PanelState, SchedulePanel

__all__ = [
    "ApiClient",
    "SchedulePanel",
    "PanelState",
    "TrialIntake",
    "IntakeState",
    "StudentMode",
    "WeeklySnapshot",
    "DaySchedule",
    "Slot",
    "SlotStatus",
    "build_grid",
    "classify",
]
