"""Working-day calendar.

The office is closed on weekends and on a set of concrete closure
dates.  Every other day is a working day.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable

ONE_DAY = datetime.timedelta(days=1)


def is_leap_year(year: int) -> bool:
    """Proleptic Gregorian leap-year rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def month_day_in_year(month: int, day: int, year: int) -> datetime.date:
    """Return *month*/*day* in *year*, rolling 29 February over to 1 March
    when *year* is not a leap year.
    """
    if month == 2 and day == 29 and not is_leap_year(year):
        return datetime.date(year, 3, 1)
    return datetime.date(year, month, day)


class WorkingCalendar:
    """Answers "is the office open?" for a given set of closure dates.

    Weekends are implicit and never stored in :attr:`closures`.  The
    closure set may grow via :meth:`close`; every query reads the set
    as it is at call time.
    """

    def __init__(self, closures: Iterable[datetime.date] = ()):
        self.closures: set[datetime.date] = set(closures)

    def close(self, day: datetime.date) -> None:
        """Mark *day* as an office closure."""
        self.closures.add(day)

    def is_working_day(self, day: datetime.date) -> bool:
        if day.weekday() >= 5:  # Saturday / Sunday
            return False
        return day not in self.closures

    def next_working_day(self, day: datetime.date) -> datetime.date:
        """Return the first working day strictly after *day*."""
        nxt = day + ONE_DAY
        while not self.is_working_day(nxt):
            nxt += ONE_DAY
        return nxt

    def next_next_working_day(self, day: datetime.date) -> datetime.date:
        """Return the working day after the next working day after *day*."""
        return self.next_working_day(self.next_working_day(day))
