from datetime import date

import pytest
from pydantic import ValidationError

from src.teacher_schedule.countries import currency_for, find_country, timezone_for
from src.teacher_schedule.models import NewStudent, TrialRequest, WeeklySnapshot
from tests.factories import day_payload, make_snapshot, snapshot_payload


def test_snapshot_is_frozen():
    snapshot = make_snapshot(days=[day_payload(1, availability=[("09:00", "11:00")])])
    assert isinstance(snapshot.schedule, tuple)
    assert isinstance(snapshot.day(1).availability, tuple)
    with pytest.raises(ValidationError):
        snapshot.teacher = None
    with pytest.raises(ValidationError):
        snapshot.day(1).availability[0].start_time = "08:00"


def test_snapshot_rejects_duplicate_days():
    with pytest.raises(ValidationError, match="duplicate day_of_week 3"):
        WeeklySnapshot.model_validate(snapshot_payload(days=[day_payload(3), day_payload(3)]))


def test_snapshot_rejects_out_of_range_day():
    payload = snapshot_payload(days=[day_payload(1)])
    payload["schedule"][0]["day_of_week"] = 8
    with pytest.raises(ValidationError):
        WeeklySnapshot.model_validate(payload)


def test_snapshot_day_lookup():
    snapshot = make_snapshot(days=[day_payload(2), day_payload(5)])
    assert snapshot.day(5).date == date(2025, 3, 6)
    assert snapshot.day(1) is None
    assert snapshot.teacher.timezone == "Africa/Cairo"


def test_unknown_payload_keys_are_ignored():
    snapshot = WeeklySnapshot.model_validate(snapshot_payload(days=[day_payload(1)]))
    assert not hasattr(snapshot, "timetables")
    assert snapshot.day(1).has_content is False


def _request(**overrides):
    fields = dict(
        teacher_id=12,
        course_id=3,
        trial_date=date(2025, 3, 2),
        start_time="09:30",
        end_time="10:30",
    )
    fields.update(overrides)
    return TrialRequest(**fields)


def test_trial_request_needs_exactly_one_student_branch():
    with pytest.raises(ValidationError, match="exactly one"):
        _request()
    with pytest.raises(ValidationError, match="exactly one"):
        _request(student_id=7, new_student=NewStudent(full_name="Sara Ali"))
    assert _request(student_id=7).student_id == 7


@pytest.mark.parametrize("end", ["09:30", "09:00"])
def test_trial_request_end_must_follow_start(end):
    with pytest.raises(ValidationError, match="later than start_time"):
        _request(student_id=7, end_time=end)


def test_trial_request_payload_omits_unused_branch():
    payload = _request(new_student=NewStudent(full_name="Sara Ali", country="Egypt")).to_payload()
    assert "student_id" not in payload
    assert payload["trial_date"] == "2025-03-02"
    assert payload["new_student"]["country"] == "Egypt"
    assert "email" not in payload["new_student"]


def test_country_lookup_by_code_or_name():
    assert find_country("ae").name == "United Arab Emirates"
    assert find_country(" Egypt ").code == "EG"
    assert find_country("Atlantis") is None


def test_country_defaults():
    assert timezone_for("EG") == "Africa/Cairo"
    assert currency_for("Saudi Arabia") == "SAR"
    assert timezone_for("Atlantis") == "UTC"
    assert currency_for("") == "USD"
