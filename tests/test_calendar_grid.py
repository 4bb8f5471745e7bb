# SPDX-License-Identifier: GPL-3.0-or-later

import calendar
from datetime import date

from daynotes.calendar_grid import (
    is_in_month,
    marked_days,
    month_grid,
    record_counts,
    shift_month,
)


def test_month_grid_starts_on_sunday_by_default():
    grid = month_grid(2024, 3)

    assert len(grid) == 42
    assert grid[0] == date(2024, 2, 25)
    assert grid[0].weekday() == calendar.SUNDAY
    assert date(2024, 3, 1) in grid
    assert date(2024, 3, 31) in grid


def test_month_grid_with_monday_start():
    grid = month_grid(2024, 4, first_weekday=calendar.MONDAY)
    # April 2024 starts on a Monday
    assert grid[0] == date(2024, 4, 1)
    assert grid[-1] == date(2024, 5, 12)


def test_shift_month_wraps_years():
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 3, -15) == (2022, 12)


def test_is_in_month():
    assert is_in_month(date(2024, 3, 31), 2024, 3)
    assert not is_in_month(date(2024, 4, 1), 2024, 3)


def test_record_counts(store):
    store.add_record('2024-03-05', 'a')
    store.add_record('2024-03-05', 'b')
    store.add_record('2024-02-26', 'spill-over')

    counts = record_counts(store, 2024, 3)

    assert len(counts) == 42
    assert counts[date(2024, 3, 5)] == 2
    assert counts[date(2024, 2, 26)] == 1
    assert counts[date(2024, 3, 6)] == 0


def test_marked_days(store):
    store.add_record('2024-03-05', 'a')
    store.add_record('2024-03-06', '  ')
    store.add_record('2024-04-01', 'b')

    assert marked_days(store, 2024, 3) == {date(2024, 3, 5)}
