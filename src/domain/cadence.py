"""Cadence date arithmetic

Due dates always advance from the current due date, never from "today",
so schedules do not drift. Monthly steps use calendar month addition,
clamped to the last day of the target month (Jan 31 -> Feb 28/29).
"""

from calendar import monthrange
from datetime import date, timedelta
from src.domain.subscription import Frequency


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    _, last_day = monthrange(year, month)
    return date(year, month, min(value.day, last_day))


def advance(value: date, frequency: Frequency, cycles: int = 1) -> date:
    """Move a due date forward by a number of cadence units"""
    frequency = Frequency(frequency)
    if frequency == Frequency.DAILY:
        return value + timedelta(days=cycles)
    if frequency == Frequency.WEEKLY:
        return value + timedelta(weeks=cycles)
    return add_months(value, cycles)


def roll_forward(value: date, frequency: Frequency, today: date) -> date:
    """
    First date on the cadence of `value` that is on or after `today`

    Monthly schedules are recomputed from the anchor date so a due date on
    the 31st comes back to the 31st after passing through shorter months.
    """
    if value >= today:
        return value
    cycles = 1
    candidate = advance(value, frequency, cycles)
    while candidate < today:
        cycles += 1
        candidate = advance(value, frequency, cycles)
    return candidate
