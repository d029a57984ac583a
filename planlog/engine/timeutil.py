"""Time, cell and week arithmetic for the day grid.

All values are minutes since 00:00 of a date. Cells are 10-minute columns identified
by ``"<dateISO>|<HH>|<col>"``.
"""

import math
from datetime import date, timedelta
from typing import List, Tuple, Union

from planlog.models.constants import (
    CELL_MINUTES,
    CELLS_PER_HOUR,
    HOURS_PER_DAY,
    LAST_COL,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
)


def pad2(n: int) -> str:
    return f"{int(n):02d}"


def clamp(value, lo, hi):
    return min(max(value, lo), hi)


def clamp_minute(minute) -> int:
    """Clamp a minute value into ``[0, 1440]``."""
    try:
        value = int(minute)
    except (TypeError, ValueError):
        return 0
    return clamp(value, 0, MINUTES_PER_DAY)


def snap10(minute) -> int:
    """Round to the nearest 10-minute boundary (halves round up)."""
    return int(math.floor(minute / CELL_MINUTES + 0.5)) * CELL_MINUTES


def time_to_min(text: str) -> int:
    """Parse ``"HH:MM"`` into minutes. Malformed parts count as zero."""
    parts = (text or "").strip().split(":")

    def _num(part: str) -> int:
        try:
            return int(part)
        except ValueError:
            return 0

    hh = _num(parts[0]) if parts else 0
    mm = _num(parts[1]) if len(parts) > 1 else 0
    return clamp_minute(hh * MINUTES_PER_HOUR + mm)


def min_to_time(minute: int) -> str:
    """Format minutes as ``"HH:MM"`` (24:00 allowed for the end of day)."""
    m = clamp_minute(minute)
    return f"{pad2(m // MINUTES_PER_HOUR)}:{pad2(m % MINUTES_PER_HOUR)}"


def format_range(start_min: int, end_min: int) -> str:
    return f"{min_to_time(start_min)} - {min_to_time(end_min)}"


def format_duration(total_min) -> str:
    """Format a duration as ``"45m"``, ``"2h"`` or ``"1h 20m"``."""
    m = max(0, int(round(total_min)))
    h, mm = divmod(m, MINUTES_PER_HOUR)
    if h <= 0:
        return f"{mm}m"
    if mm == 0:
        return f"{h}h"
    return f"{h}h {mm}m"


def make_cell_id(date_iso: str, hour: int, col: int) -> str:
    return f"{date_iso}|{pad2(hour)}|{col}"


def parse_cell_id(cell_id: str) -> Tuple[str, int, int]:
    """Split a cell id into ``(date_iso, hour, col)``.

    Raises:
        ValueError: if the id is not a well-formed cell id
    """
    parts = (cell_id or "").split("|")
    if len(parts) != 3:
        raise ValueError(f"Malformed cell id: {cell_id!r}")
    date_iso, hh, cc = parts
    hour, col = int(hh), int(cc)
    if not (0 <= hour < HOURS_PER_DAY and 0 <= col <= LAST_COL):
        raise ValueError(f"Cell out of range: {cell_id!r}")
    return date_iso, hour, col


def cell_index(hour: int, col: int) -> int:
    """Index of a cell on the day line (0..143)."""
    return hour * CELLS_PER_HOUR + col


def cell_start_minute(hour: int, col: int) -> int:
    return hour * MINUTES_PER_HOUR + col * CELL_MINUTES


def cell_of_minute(minute: int) -> Tuple[int, int]:
    """``(hour, col)`` of the cell containing ``minute``."""
    m = clamp(int(minute), 0, MINUTES_PER_DAY - 1)
    return m // MINUTES_PER_HOUR, (m % MINUTES_PER_HOUR) // CELL_MINUTES


def cell_id_to_index(cell_id: str) -> int:
    _, hour, col = parse_cell_id(cell_id)
    return cell_index(hour, col)


def row_for_hour(hour: int, start_hour: int) -> int:
    return (hour - start_hour + HOURS_PER_DAY) % HOURS_PER_DAY


def hour_for_row(row: int, start_hour: int) -> int:
    return (start_hour + row) % HOURS_PER_DAY


def cell_time_range(start_row: int, start_col: int, end_row: int, end_col: int, start_hour: int) -> Tuple[int, int]:
    """Minute range covered by a rectangular drag between two cells."""
    r1, r2 = min(start_row, end_row), max(start_row, end_row)
    c1, c2 = min(start_col, end_col), max(start_col, end_col)
    start_min = hour_for_row(r1, start_hour) * MINUTES_PER_HOUR + c1 * CELL_MINUTES
    end_min = hour_for_row(r2, start_hour) * MINUTES_PER_HOUR + (c2 + 1) * CELL_MINUTES
    return start_min, end_min


def minute_from_pointer(hour_row: int, start_hour: int, x_ratio: float) -> int:
    """Minute (1-minute precision) under a pointer at ``x_ratio`` across an hour-row."""
    hour = hour_for_row(hour_row, start_hour)
    minute = math.floor(x_ratio * MINUTES_PER_HOUR)
    return hour * MINUTES_PER_HOUR + clamp(minute, 0, MINUTES_PER_HOUR - 1)


DateLike = Union[str, date]


def to_date(value: DateLike) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def week_key_for(value: DateLike) -> str:
    """Week key: ISO date of the Sunday starting the week containing ``value``."""
    d = to_date(value)
    # Python weekday: Monday=0 ... Sunday=6
    days_since_sunday = (d.weekday() + 1) % 7
    return (d - timedelta(days=days_since_sunday)).isoformat()


def days_of_week(week_key: str) -> List[str]:
    base = to_date(week_key)
    return [(base + timedelta(days=i)).isoformat() for i in range(7)]
