# SPDX-License-Identifier: GPL-3.0-or-later
"""
Month-view queries for the calendar window.

The grid widget calls these with the shared DayRecordStore to decide which
cells to draw, which to badge with a note count and which to highlight.
"""

import calendar
from datetime import date, timedelta

from daynotes.constants import GRID_DAYS


def month_grid(year, month, first_weekday=calendar.SUNDAY) -> list[date]:
    """Dates shown in a six-week month view, padded with neighbouring days."""
    first = date(year, month, 1)
    offset = (first.weekday() - first_weekday) % 7
    start = first - timedelta(days=offset)
    return [start + timedelta(days=i) for i in range(GRID_DAYS)]


def shift_month(year, month, delta) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def is_in_month(day, year, month) -> bool:
    return day.year == year and day.month == month


def record_counts(store, year, month, first_weekday=calendar.SUNDAY) -> dict[date, int]:
    """Note counts for every cell of the month view, as the grid badges show them."""
    return {
        day: store.record_count(day)
        for day in month_grid(year, month, first_weekday)
    }


def marked_days(store, year, month) -> set[date]:
    """Days of the month that get the 'has notes' highlight."""
    return {date(year, month, day) for day in store.dates_with_records(year, month)}
