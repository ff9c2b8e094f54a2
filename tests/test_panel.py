import asyncio
import threading
from datetime import date

import pytest

from src.teacher_schedule.classifier import SlotStatus
from src.teacher_schedule.errors import LoadError, SubmissionError
from src.teacher_schedule.intake import IntakeState
from src.teacher_schedule.models import Student
from src.teacher_schedule.panel import PanelState, SchedulePanel
from tests.factories import WEEK_START, day_payload, make_snapshot


@pytest.fixture
def panel(fake_api, config):
    return SchedulePanel(fake_api, config=config, today=date(2025, 3, 5))


@pytest.mark.asyncio
async def test_starts_idle_on_current_week(panel, fake_api):
    assert panel.state is PanelState.IDLE
    assert panel.week_start == WEEK_START
    assert panel.week_end == date(2025, 3, 8)
    await panel.load()
    assert fake_api.schedule_calls == []
    with pytest.raises(LoadError):
        panel.grid()


@pytest.mark.asyncio
async def test_select_teacher_loads_week(panel, fake_api):
    await panel.select_teacher(12)
    assert panel.state is PanelState.READY
    assert fake_api.schedule_calls == [(12, WEEK_START)]
    assert panel.slot(1, "09:30").status is SlotStatus.AVAILABLE
    assert len(panel.grid()) == 29


@pytest.mark.asyncio
async def test_click_available_cell_opens_prefilled_intake(panel):
    await panel.select_teacher(12)
    intake = await panel.click(1, "09:30")

    assert intake.state is IntakeState.OPEN
    assert intake.teacher_id == 12
    assert intake.form.trial_date == WEEK_START
    assert (intake.form.start_time, intake.form.end_time) == ("09:30", "10:30")
    assert len(intake.courses) == 2


@pytest.mark.asyncio
async def test_booked_and_empty_cells_are_not_clickable(panel, fake_api):
    fake_api.snapshots[12] = make_snapshot(
        days=[day_payload(1, availability=[("09:00", "11:00")], classes=[("10:00", "10:30")])]
    )
    await panel.select_teacher(12)
    assert await panel.click(1, "10:00") is None
    assert await panel.click(1, "12:00") is None
    assert await panel.click(4, "09:00") is None
    assert await panel.click(1, "10:30") is not None


@pytest.mark.asyncio
async def test_successful_booking_refetches_once(panel, fake_api):
    await panel.select_teacher(12)
    intake = await panel.click(1, "09:30")
    intake.select_student(Student(id=7, full_name="Lina Haddad"))
    intake.set_course(3)

    # the server now reports the new trial
    fake_api.snapshots[12] = make_snapshot(
        days=[day_payload(1, availability=[("09:00", "11:00")], trials=[("09:30", "10:30")])]
    )
    await intake.submit()

    assert intake.state is IntakeState.CLOSED
    assert fake_api.schedule_calls == [(12, WEEK_START), (12, WEEK_START)]
    assert panel.state is PanelState.READY
    assert panel.slot(1, "09:30").status is SlotStatus.BOOKED
    assert panel.slot(1, "10:30").status is SlotStatus.AVAILABLE


@pytest.mark.asyncio
async def test_failed_booking_does_not_refetch(panel, fake_api, submission_error):
    await panel.select_teacher(12)
    intake = await panel.click(1, "09:30")
    intake.select_student(Student(id=7))
    intake.set_course(3)
    fake_api.trial_error = submission_error

    with pytest.raises(SubmissionError):
        await intake.submit()
    assert len(fake_api.schedule_calls) == 1


@pytest.mark.asyncio
async def test_load_error_clears_snapshot(panel, fake_api):
    await panel.select_teacher(12)
    fake_api.snapshots[12] = LoadError("Server unavailable (503)")

    await panel.refresh()

    assert panel.state is PanelState.ERROR
    assert panel.error == "Server unavailable (503)"
    assert panel.snapshot is None
    with pytest.raises(LoadError, match="503"):
        panel.grid()


@pytest.mark.asyncio
async def test_unknown_teacher(panel):
    await panel.select_teacher(404)
    assert panel.state is PanelState.ERROR
    assert panel.error == "backend_not_found"


@pytest.mark.asyncio
async def test_slow_response_for_previous_teacher_is_dropped(panel, fake_api):
    fake_api.snapshots[15] = make_snapshot(teacher_id=15, days=[day_payload(2)])
    gate = threading.Event()
    fake_api.gates[12] = gate

    first = asyncio.create_task(panel.select_teacher(12))
    await asyncio.sleep(0)
    await panel.select_teacher(15)
    assert panel.snapshot.teacher.id == 15

    gate.set()
    await first

    assert panel.state is PanelState.READY
    assert panel.snapshot.teacher.id == 15
    assert panel.selection.teacher_id == 15


@pytest.mark.asyncio
async def test_views_blocked_while_next_week_loads(panel, fake_api):
    await panel.select_teacher(12)
    gate = threading.Event()
    fake_api.gates[12] = gate

    navigation = asyncio.create_task(panel.next_week())
    await asyncio.sleep(0)
    assert panel.state is PanelState.LOADING
    assert panel.week_start == date(2025, 3, 9)

    with pytest.raises(LoadError, match="still loading"):
        await panel.click(1, "09:30")
    with pytest.raises(LoadError, match="still loading"):
        panel.grid()
    with pytest.raises(LoadError, match="still loading"):
        panel.days()

    gate.set()
    await navigation
    assert panel.state is PanelState.READY
    assert await panel.click(1, "09:30") is not None


@pytest.mark.asyncio
async def test_week_navigation(panel, fake_api):
    await panel.select_teacher(12)
    await panel.next_week()
    await panel.previous_week()
    await panel.previous_week()
    await panel.current_week(date(2025, 3, 8))

    assert [week for _, week in fake_api.schedule_calls] == [
        date(2025, 3, 2),
        date(2025, 3, 9),
        date(2025, 3, 2),
        date(2025, 2, 23),
        date(2025, 3, 2),
    ]
    assert panel.week_start == WEEK_START


@pytest.mark.asyncio
async def test_list_view_and_window_booking(panel):
    await panel.select_teacher(12)
    days = panel.days()
    assert [d.day_of_week for d in days] == [1]

    window = days[0].availability[0]
    intake = await panel.add_trial_from_window(1, window)
    assert intake.form.trial_date == WEEK_START
    assert (intake.form.start_time, intake.form.end_time) == ("09:00", "10:00")

    with pytest.raises(ValueError):
        await panel.add_trial_from_window(5, window)
