import pytest

from src.teacher_schedule.errors import LoadError
from src.teacher_schedule.models import Student
from src.teacher_schedule.search import StudentSearch, matches
from tests.factories import FakeApi


@pytest.fixture
def directory():
    return FakeApi(
        students=[
            Student(id=7, full_name="Lina Haddad", email="lina@example.com"),
            Student(id=9, full_name="Sara Ali", email="sara@example.com"),
            Student(id=11, full_name="Omar Said", email=None),
        ]
    )


class FailingDirectory:
    def search_students(self, query, *, per_page=10, page=1):
        raise LoadError("Network error")


def test_matches_name_or_email():
    student = Student(id=9, full_name="Sara Ali", email="s.ali@example.com")
    assert matches(student, "sara")
    assert matches(student, "S.ALI@")
    assert not matches(student, "lina")
    assert not matches(Student(id=1), "x")


@pytest.mark.asyncio
async def test_only_latest_query_is_sent(directory):
    search = StudentSearch(directory, debounce_seconds=0.05)
    for query in ("s", "sa", "sar", "sara"):
        await search.update(query)
    await search.wait()

    assert directory.search_calls == ["sara"]
    assert [s.id for s in search.results] == [9]
    assert search.loading is False


@pytest.mark.asyncio
async def test_blank_query_clears_without_request(directory):
    search = StudentSearch(directory, debounce_seconds=0)
    await search.update("lina")
    await search.wait()
    assert len(search.results) == 1

    await search.update("   ")
    await search.wait()
    assert search.results == []
    assert directory.search_calls == ["lina"]


@pytest.mark.asyncio
async def test_stale_results_are_not_applied(directory):
    search = StudentSearch(directory, debounce_seconds=0)
    search.query = "omar"
    search.results = []

    # a run for an older query completing after the user moved on
    await search._run("lina")

    assert directory.search_calls == ["lina"]
    assert search.results == []


@pytest.mark.asyncio
async def test_results_are_filtered_client_side(directory):
    search = StudentSearch(directory, debounce_seconds=0)
    await search.update("example.com")
    await search.wait()
    assert [s.id for s in search.results] == [7, 9]


@pytest.mark.asyncio
async def test_failed_search_empties_results():
    search = StudentSearch(FailingDirectory(), debounce_seconds=0)
    search.results = [Student(id=1, full_name="Old")]
    await search.update("sara")
    await search.wait()
    assert search.results == []
    assert search.loading is False


class MalformedDirectory:
    def search_students(self, query, *, per_page=10, page=1):
        return Student.model_validate({"full_name": "No Id"})


@pytest.mark.asyncio
async def test_unexpected_failure_stops_loading():
    search = StudentSearch(MalformedDirectory(), debounce_seconds=0)
    search.results = [Student(id=1, full_name="Old")]
    await search.update("no")
    await search.wait()
    assert search.loading is False
    assert search.results == []


@pytest.mark.asyncio
async def test_cancel_stops_loading(directory):
    search = StudentSearch(directory, debounce_seconds=10)
    await search.update("sara")
    assert search.loading is True
    search.cancel()
    assert search.loading is False
    assert directory.search_calls == []


@pytest.mark.asyncio
async def test_page_size_is_forwarded(directory):
    search = StudentSearch(directory, debounce_seconds=0, page_size=1)
    await search.update("a")
    await search.wait()
    # FakeApi truncates to per_page before the client-side filter
    assert [s.id for s in search.results] == [7]
