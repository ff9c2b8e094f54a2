"""Book a trial class into an available cell of a teacher's schedule.

Standalone CLI script. Loads the teacher's week, checks that the requested
cell is available, fills the intake form and submits it. On success the
week is re-fetched and the created trial is printed as JSON.

Existing student:  python scripts/book_trial.py --teacher 12 --date 2025-03-02 \
                       --time 09:30 --course 4 --student 311
Search student:    python scripts/book_trial.py --teacher 12 --date 2025-03-02 \
                       --time 09:30 --course 4 --student-search "sara"
New student:       python scripts/book_trial.py --teacher 12 --date 2025-03-02 \
                       --time 09:30 --course 4 --new-student "Sara Ali" --country AE

Exit codes:
  0 = trial created (JSON on stdout)
  1 = error (slot not available, validation or server error on stderr)
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.teacher_schedule.api import ApiClient  # noqa: E402
from src.teacher_schedule.config import get_config  # noqa: E402
from src.teacher_schedule.errors import SubmissionError, ValidationError  # noqa: E402
from src.teacher_schedule.intake import StudentMode, TrialIntake  # noqa: E402
from src.teacher_schedule.logging import setup_logging_from_config  # noqa: E402
from src.teacher_schedule.models import Student  # noqa: E402
from src.teacher_schedule.panel import PanelState, SchedulePanel  # noqa: E402
from src.teacher_schedule.timeutil import day_of_week_for  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Book a trial class into an available schedule slot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--teacher", type=int, required=True, help="Teacher ID.")
    parser.add_argument(
        "--date", type=date.fromisoformat, required=True, help="Trial date (YYYY-MM-DD)."
    )
    parser.add_argument("--time", required=True, help="Grid cell start time (HH:MM).")
    parser.add_argument(
        "--end", default=None, help="End time (HH:MM, default: one hour after --time)."
    )
    parser.add_argument("--course", type=int, default=None, help="Course ID.")
    parser.add_argument("--notes", default="", help="Optional notes.")

    student_group = parser.add_mutually_exclusive_group(required=True)
    student_group.add_argument("--student", type=int, help="Existing student ID.")
    student_group.add_argument(
        "--student-search", help="Search text that must match exactly one student."
    )
    student_group.add_argument("--new-student", help="Full name of a new student.")

    parser.add_argument("--email", default="", help="New student email.")
    parser.add_argument("--whatsapp", default="", help="New student WhatsApp number.")
    parser.add_argument(
        "--country", default="", help="New student country (sets timezone and currency)."
    )
    return parser.parse_args()


async def _choose_student(intake: TrialIntake, args: argparse.Namespace) -> bool:
    if args.new_student is not None:
        intake.set_mode(StudentMode.NEW)
        intake.set_new_student(
            full_name=args.new_student,
            email=args.email,
            whatsapp=args.whatsapp,
            country=args.country,
        )
        return True

    intake.set_mode(StudentMode.EXISTING)
    if args.student is not None:
        intake.select_student(Student(id=args.student))
        return True

    await intake.search_students(args.student_search)
    await intake.search.wait()
    matches = intake.search.results
    if len(matches) != 1:
        _log(f"  {len(matches)} students match {args.student_search!r}:")
        for student in matches:
            _log(f"    {student.id}  {student.full_name}  {student.email or ''}")
        return False
    intake.select_student(matches[0])
    _log(f"  Selected student {matches[0].full_name} ({matches[0].id})")
    return True


async def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging_from_config(config)

    api = ApiClient(config)
    try:
        panel = SchedulePanel(api, config=config, today=args.date)
        await panel.select_teacher(args.teacher)
        if panel.state is PanelState.ERROR:
            _log(f"ERROR: {panel.error}")
            return 1

        day_of_week = day_of_week_for(args.date)
        intake = await panel.click(day_of_week, args.time)
        if intake is None:
            status = panel.slot(day_of_week, args.time).status.value
            _log(f"ERROR: {args.date} {args.time} is {status}, not available for a trial")
            return 1

        if intake.courses_error:
            _log(f"  Warning: could not load courses ({intake.courses_error})")
        intake.set_course(args.course)
        intake.set_notes(args.notes)
        if args.end:
            intake.set_end_time(args.end)

        if not await _choose_student(intake, args):
            return 1

        try:
            trial = await intake.submit()
        except (ValidationError, SubmissionError) as e:
            _log(f"ERROR: {e}")
            return 1

        _log(f"  Trial {trial.id} created; schedule refreshed ({panel.state.value})")
        print(json.dumps(trial.model_dump(mode="json"), indent=2))
    finally:
        api.close()
    return 0


if __name__ == "__main__":
    args = _parse_args()
    try:
        sys.exit(asyncio.run(main(args)))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
