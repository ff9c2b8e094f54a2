"""Debounced student search for the trial intake form.

Each update() supersedes the previous one: a pending or in-flight search for
an older query is cancelled, and its results are never applied even if the
HTTP call already completed in its worker thread.
"""

import asyncio
from typing import Protocol

from src.teacher_schedule.errors import LoadError
from src.teacher_schedule.logging import get_logger
from src.teacher_schedule.models import Page, Student

log = get_logger(__name__)


class StudentDirectory(Protocol):
    def search_students(
        self, query: str, *, per_page: int = 10, page: int = 1
    ) -> Page[Student]: ...


def matches(student: Student, query: str) -> bool:
    """Case-insensitive substring match on name or email."""
    needle = query.lower()
    name = (student.full_name or "").lower()
    email = (student.email or "").lower()
    return needle in name or needle in email


class StudentSearch:
    """Latest-query-wins search over the student directory."""

    def __init__(
        self,
        api: StudentDirectory,
        *,
        debounce_seconds: float = 0.3,
        page_size: int = 10,
    ) -> None:
        self.api = api
        self.debounce_seconds = debounce_seconds
        self.page_size = page_size
        self.query = ""
        self.results: list[Student] = []
        self.loading = False
        self._task: asyncio.Task | None = None

    async def update(self, query: str) -> None:
        """Record a new query and schedule a debounced search for it.

        Returns immediately; await wait() to block until results are in.
        """
        self.cancel()
        self.query = query
        if not query.strip():
            self.results = []
            self.loading = False
            return
        self.loading = True
        self._task = asyncio.create_task(self._run(query))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.loading = False

    async def wait(self) -> None:
        """Wait for the current search (if any) to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            # Superseded by a newer query; only our own cancellation is expected here
            if not task.cancelled():
                raise

    async def _run(self, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        try:
            page = await asyncio.to_thread(
                self.api.search_students, query, per_page=self.page_size
            )
        except LoadError as e:
            if query == self.query:
                log.warning("student_search_failed", query=query, error=str(e))
                self.results = []
            return
        except Exception as e:
            # nobody awaits a keystroke's task, so report it here
            log.error("student_search_crashed", query=query, error=repr(e))
            if query == self.query:
                self.results = []
            return
        finally:
            if query == self.query:
                self.loading = False

        if query != self.query:
            log.debug("student_search_stale", query=query, current=self.query)
            return
        self.results = [s for s in page.items if matches(s, query)]
        log.debug("student_search_done", query=query, results=len(self.results))
