"""Cake Days Scheduler.

Work out when the office provides birthday cakes, given everyone's
birthday, weekends, holiday closures and the cake-free-day rule.
"""

from cakedays.holidays import DEFAULT_HOLIDAYS, get_preset, resolve_closures
from cakedays.scheduler import (
    BirthdayRecord,
    CakeDay,
    CakeDays,
    ErrorKind,
    ScheduleConfig,
    ScheduleResult,
    compute_schedule,
)
from cakedays.workdays import WorkingCalendar

__all__ = [
    "DEFAULT_HOLIDAYS",
    "BirthdayRecord",
    "CakeDay",
    "CakeDays",
    "ErrorKind",
    "ScheduleConfig",
    "ScheduleResult",
    "WorkingCalendar",
    "compute_schedule",
    "get_preset",
    "resolve_closures",
]
