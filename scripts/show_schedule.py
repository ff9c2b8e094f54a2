"""Show a teacher's weekly schedule as a calendar grid, a day list, or JSON.

Standalone CLI script. Logs in to the admin API (or uses SCHEDULE_API_TOKEN),
fetches the Sunday-Saturday week and prints it.

Run with: python scripts/show_schedule.py --teacher 12
Week:     python scripts/show_schedule.py --teacher 12 --week 2025-03-05
List:     python scripts/show_schedule.py --teacher 12 --list
JSON:     python scripts/show_schedule.py --teacher 12 --json

Any date works for --week; the week containing it (starting Sunday) is shown.

Exit codes:
  0 = success (grid, list or JSON on stdout)
  1 = error (message on stderr)
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
from src.teacher_schedule.classifier import Slot, SlotStatus, cell_label  # noqa: E402
from src.teacher_schedule.config import get_config  # noqa: E402
from src.teacher_schedule.logging import setup_logging_from_config  # noqa: E402
from src.teacher_schedule.panel import PanelState, SchedulePanel  # noqa: E402
from src.teacher_schedule.timeutil import day_label, format_12h  # noqa: E402

_STATUS_MARK = {
    SlotStatus.AVAILABLE: "+",
    SlotStatus.BOOKED: "#",
    SlotStatus.EMPTY: ".",
}


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show a teacher's weekly availability, classes and trials.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--teacher", type=int, required=True, help="Teacher ID.")
    parser.add_argument(
        "--week",
        type=date.fromisoformat,
        default=None,
        help="Any date (YYYY-MM-DD) inside the week to show (default: this week).",
    )

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--table",
        action="store_true",
        help="Calendar grid, one row per half hour (default).",
    )
    output_group.add_argument(
        "--list",
        action="store_true",
        help="Per-day list of availability windows, classes and trials.",
    )
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Raw weekly snapshot as JSON.",
    )
    return parser.parse_args()


def _cell(slot: Slot, width: int) -> str:
    if slot.status is SlotStatus.BOOKED:
        text = cell_label(slot) or _STATUS_MARK[slot.status]
    else:
        text = _STATUS_MARK[slot.status]
    return text[:width].ljust(width)


def _format_grid(panel: SchedulePanel) -> str:
    """Format the week as a grid: one row per time, one column per day.

    Legend: + available, # booked (with student / course), . empty
    """
    width = 18
    rows = panel.grid()
    header_cells = []
    for slot in rows[0]:
        header_cells.append(
            f"{day_label(slot.day_of_week, short=True)} {slot.date.strftime('%b %d')}".ljust(width)
        )

    lines = [" " * 9 + "| " + " | ".join(header_cells)]
    lines.append("-" * len(lines[0]))
    for row in rows:
        time_label = format_12h(row[0].time).rjust(8)
        lines.append(f"{time_label} | " + " | ".join(_cell(slot, width) for slot in row))
    lines.append("")
    lines.append("Legend: + available   # booked   . empty")
    return "\n".join(lines)


def _format_list(panel: SchedulePanel) -> str:
    """Format the week as a per-day list, skipping days with nothing on them."""
    summaries = panel.days()
    if not summaries:
        return "(no availability, classes or trials this week)"

    lines: list[str] = []
    for day in summaries:
        lines.append(f"{day.label}  {day.date.strftime('%B %d, %Y')}")
        for window in day.availability:
            lines.append(
                f"  available  {format_12h(window.start_time)} - {format_12h(window.end_time)}"
            )
        for kind, items in (("class", day.classes), ("trial", day.trials)):
            for item in items:
                student = item.student.full_name if item.student else "Student"
                course = item.course.name if item.course else "Course"
                status = f" [{item.status}]" if item.status else ""
                lines.append(
                    f"  {kind:<9}  {format_12h(item.start_time)} - "
                    f"{format_12h(item.end_time)}  {student} / {course}{status}"
                )
        lines.append("")
    return "\n".join(lines).rstrip()


async def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging_from_config(config)

    api = ApiClient(config)
    try:
        panel = SchedulePanel(api, config=config, today=args.week)
        _log(f"show_schedule: teacher={args.teacher} week_start={panel.week_start}")
        await panel.select_teacher(args.teacher)

        if panel.state is PanelState.ERROR:
            _log(f"ERROR: {panel.error}")
            return 1

        snapshot = panel.snapshot
        _log(f"  {snapshot.teacher.name}: {panel.week_start} - {panel.week_end}")
        if args.json:
            print(json.dumps(snapshot.model_dump(mode="json"), indent=2))
        elif args.list:
            print(_format_list(panel))
        else:
            print(_format_grid(panel))
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
