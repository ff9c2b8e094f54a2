import pytest

from src.teacher_schedule.config import ScheduleConfig
from src.teacher_schedule.errors import SubmissionError
from src.teacher_schedule.models import Student
from tests.factories import FakeApi, day_payload, make_snapshot


@pytest.fixture
def config():
    return ScheduleConfig(
        _env_file=None,
        api_url="https://school.test/api",
        api_token="test-token",
        search_debounce_seconds=0.0,
    )


@pytest.fixture
def sunday_morning():
    """Sunday 09:00-11:00 available, nothing booked."""
    return make_snapshot(days=[day_payload(1, availability=[("09:00", "11:00")])])


@pytest.fixture
def fake_api(sunday_morning):
    return FakeApi(
        snapshots={12: sunday_morning},
        students=[
            Student(id=7, full_name="Lina Haddad", email="lina@example.com"),
            Student(id=9, full_name="Sara Ali", email="sara@example.com"),
        ],
    )


@pytest.fixture
def submission_error():
    return SubmissionError("The start time field is required.", status=422)
