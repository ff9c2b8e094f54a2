"""Wall-clock time and week helpers.

Times are "HH:MM" or "HH:MM:SS" strings in the teacher's timezone. No
timezone conversion happens here: both operands of a comparison must
already share the same frame of reference.

Weeks run Sunday to Saturday and days are numbered 1 (Sunday) to 7 (Saturday).
"""

from datetime import date, timedelta

MINUTES_PER_DAY = 24 * 60

# day_of_week -> (short label, full label)
DAYS: dict[int, tuple[str, str]] = {
    1: ("Sun", "Sunday"),
    2: ("Mon", "Monday"),
    3: ("Tue", "Tuesday"),
    4: ("Wed", "Wednesday"),
    5: ("Thu", "Thursday"),
    6: ("Fri", "Friday"),
    7: ("Sat", "Saturday"),
}


def to_minutes(time_str: str) -> int:
    """Convert "HH:MM" or "HH:MM:SS" to minutes since midnight.

    Seconds are ignored.

    Raises:
        ValueError: If the string does not start with numeric hour and minute parts.
    """
    parts = time_str.split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time {time_str!r}")
    hours = int(parts[0])
    minutes = int(parts[1])
    return hours * 60 + minutes


def is_within(point: str, start: str, end: str) -> bool:
    """Return True if point falls in the half-open interval [start, end).

    A booking that ends exactly at the probe time does not occupy it.
    Malformed operands never match.
    """
    try:
        probe = to_minutes(point)
        lower = to_minutes(start)
        upper = to_minutes(end)
    except (ValueError, AttributeError):
        return False
    return lower <= probe < upper


def from_minutes(total: int) -> str:
    """Format minutes since midnight as "HH:MM", wrapping past midnight."""
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(time_str: str, minutes: int) -> str:
    """Clock arithmetic: "21:30" + 60 -> "22:30", "23:30" + 60 -> "00:30"."""
    return from_minutes(to_minutes(time_str) + minutes)


def format_12h(time_str: str) -> str:
    """Format "13:05" or "13:05:00" as "1:05 PM"."""
    hours_str, minutes_str = time_str.split(":")[:2]
    hours = int(hours_str)
    suffix = "PM" if hours >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes_str} {suffix}"


def time_grid(start: str = "08:00", end: str = "22:00", step: int = 30) -> list[str]:
    """Grid times from start to end inclusive, every `step` minutes."""
    if step <= 0:
        raise ValueError("step must be positive")
    first = to_minutes(start)
    last = to_minutes(end)
    return [from_minutes(m) for m in range(first, last + 1, step)]


def week_start_for(day: date) -> date:
    """Return the Sunday on or before `day`."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def previous_week(week_start: date) -> date:
    return week_start - timedelta(days=7)


def next_week(week_start: date) -> date:
    return week_start + timedelta(days=7)


def week_end_for(week_start: date) -> date:
    return week_start + timedelta(days=6)


def week_dates(week_start: date) -> list[tuple[int, date]]:
    """Return (day_of_week, date) pairs for the week, Sunday first.

    Example:
        week_dates(date(2025, 3, 2)) -> [(1, 2025-03-02), (2, 2025-03-03), ...]
    """
    return [(offset + 1, week_start + timedelta(days=offset)) for offset in range(7)]


def day_of_week_for(day: date) -> int:
    """1 for Sunday through 7 for Saturday."""
    return (day.weekday() + 1) % 7 + 1


def day_label(day_of_week: int, *, short: bool = False) -> str:
    short_label, full_label = DAYS[day_of_week]
    return short_label if short else full_label
