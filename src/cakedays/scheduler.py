"""Cake Days Scheduler

Turns a list of employee birthdays into the year's schedule of cake days.

Rules:
  1. A small cake is provided on the employee's first working day after
     their birthday.  Everyone gets their birthday off; if the office is
     closed on the birthday, the day off moves to the next working day.
  2. The office is closed on weekends and on the configured holidays.
  3. Cake days that coincide share one large cake.
  4. If there is cake two days running, one large cake is provided on
     the second day instead.
  5. The day after each cake is cake-free; a cake due on a cake-free day
     is postponed to the next working day.

Birthdays are replicated across ``year - 1`` .. ``year + 1`` so that cake
days pushed over New Year still interact with their neighbours.  Only
the target-year slice is exported.
"""

from __future__ import annotations

import datetime
import enum
import logging
import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from cakedays.holidays import resolve_closures, resolve_holidays
from cakedays.workdays import ONE_DAY, WorkingCalendar, is_leap_year, month_day_in_year

LOGGER = logging.getLogger(__name__)

MIN_YEAR = 1970
MAX_YEAR = 2999

LEAP_DAY_KEY = "02-29"
LEAP_DAY_FALLBACK_KEY = "03-01"

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

NameSet = tuple[str, ...]
"""Alphabetically sorted, duplicate-free names."""

CakeDayStack = dict[datetime.date, NameSet]


class ErrorKind(enum.Enum):
    """Why a birthday list was rejected."""

    EMPTY_NAME = "EmptyName"
    DUPLICATE_NAME = "DuplicateName"
    INVALID_DATE = "InvalidDate"


class InvalidRecordError(ValueError):
    """A birthday record failed validation; `kind` says why."""

    def __init__(self, kind: ErrorKind, index: int, message: str):
        super().__init__(message)
        self.kind = kind
        self.index = index


class BirthdayRecord(NamedTuple):
    """One raw input row: an ISO ``YYYY-MM-DD`` birthdate and a name."""

    birthdate: str
    name: str


class CakeDay(NamedTuple):
    """One entry of the exported schedule.  ``small + large == 1``."""

    date: datetime.date
    small: int
    large: int
    names: NameSet

    @classmethod
    def from_names(cls, day: datetime.date, names: NameSet) -> CakeDay:
        if len(names) == 1:
            return cls(date=day, small=1, large=0, names=names)
        return cls(date=day, small=0, large=1, names=names)

    def as_dict(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "small": self.small,
            "large": self.large,
            "names": list(self.names),
        }


class ScheduleConfig(NamedTuple):
    """Target year and holiday specs for one schedule computation.

    Build it with :meth:`create`, which replaces an out-of-range year or
    an unusable holiday list with the defaults.
    """

    year: int
    holidays: tuple[str, ...]

    @classmethod
    def create(
        cls,
        year: int | None = None,
        holidays: Iterable[str] | None = None,
    ) -> ScheduleConfig:
        return cls(year=resolve_year(year), holidays=resolve_holidays(holidays))


class ScheduleResult(NamedTuple):
    """Either a schedule (``error is None``) or the reason there is none."""

    schedule: list[CakeDay]
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _current_year() -> int:
    return datetime.date.today().year


def resolve_year(year: object) -> int:
    """Return *year* if it is an int in ``[MIN_YEAR, MAX_YEAR]``, else the
    current calendar year.
    """
    if year is None:
        return _current_year()
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        LOGGER.warning("Ignoring target year %r, using the current year", year)
        return _current_year()
    return year


def _union(*groups: Iterable[str]) -> NameSet:
    return tuple(sorted(set().union(*groups)))


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def validate_records(
    records: Iterable[BirthdayRecord | tuple[str, str]],
) -> list[tuple[datetime.date, str]]:
    """Validate raw ``(birthdate, name)`` records in input order.

    Returns ``(date, name)`` pairs with the name trimmed.  Raises
    :class:`InvalidRecordError` on the first empty name, repeated name or
    invalid date, in that order of precedence per record.
    """
    seen: set[str] = set()
    valid: list[tuple[datetime.date, str]] = []

    for index, (birthdate, name) in enumerate(records):
        name = (name or "").strip()
        if not name:
            raise InvalidRecordError(ErrorKind.EMPTY_NAME, index, f"Record {index}: empty name")
        if name in seen:
            raise InvalidRecordError(
                ErrorKind.DUPLICATE_NAME, index, f"Record {index}: duplicate name {name!r}"
            )
        seen.add(name)

        raw = (birthdate or "").strip()
        if not _ISO_DATE.match(raw):
            raise InvalidRecordError(
                ErrorKind.INVALID_DATE, index, f"Record {index}: invalid date {raw!r}"
            )
        try:
            day = datetime.date(int(raw[:4]), int(raw[5:7]), int(raw[8:]))
        except ValueError as exc:
            raise InvalidRecordError(
                ErrorKind.INVALID_DATE, index, f"Record {index}: invalid date {raw!r}"
            ) from exc
        valid.append((day, name))

    return valid


def index_birthdays(records: Iterable[tuple[datetime.date, str]]) -> dict[str, NameSet]:
    """Group names by ``"MM-DD"`` birthday, dropping the birth year."""
    grouped: dict[str, set[str]] = {}
    for day, name in records:
        grouped.setdefault(day.strftime("%m-%d"), set()).add(name)
    return {key: _union(names) for key, names in sorted(grouped.items())}


def normalize_leap_day(birthdays: Mapping[str, NameSet], year: int) -> dict[str, NameSet]:
    """Fold 29 February birthdays into 1 March when *year* is not a leap year."""
    result = dict(birthdays)
    if LEAP_DAY_KEY in result and not is_leap_year(year):
        leap_names = result.pop(LEAP_DAY_KEY)
        result[LEAP_DAY_FALLBACK_KEY] = _union(result.get(LEAP_DAY_FALLBACK_KEY, ()), leap_names)
    return dict(sorted(result.items()))


def build_cake_day_stack(
    birthdays: Mapping[str, NameSet],
    year: int,
    calendar: WorkingCalendar,
) -> CakeDayStack:
    """Map each birthday, in ``year - 1`` .. ``year + 1``, to its raw cake day.

    A working-day birthday is taken off, so cake comes on the next working
    day.  If the office is closed on the birthday the day off itself moves
    to the next working day and cake comes on the one after that.
    """
    stack: CakeDayStack = {}

    for key, names in birthdays.items():
        month, day = (int(part) for part in key.split("-"))
        for y in (year - 1, year, year + 1):
            birthday = month_day_in_year(month, day, y)
            if calendar.is_working_day(birthday):
                cake_day = calendar.next_working_day(birthday)
            else:
                cake_day = calendar.next_next_working_day(birthday)
            stack[cake_day] = _union(stack.get(cake_day, ()), names)

    LOGGER.debug("Built cake day stack with %d dates", len(stack))
    return stack


def merge_coincident_days(stack: Mapping[datetime.date, NameSet]) -> CakeDayStack:
    """Merge each cake day into the following day's cake, if there is one.

    Single forward pass: a day that has just been merged into is not
    itself checked against the day after it, so a run of three or more
    consecutive cake days merges pairwise.
    """
    merged: CakeDayStack = dict(stack)
    skip = False

    for day in sorted(merged):
        if skip:
            skip = False
            continue
        tomorrow = day + ONE_DAY
        if tomorrow in merged:
            merged[tomorrow] = _union(merged[tomorrow], merged.pop(day))
            LOGGER.debug("Merged cake day %s into %s", day, tomorrow)
            skip = True

    return merged


def enforce_cake_free_days(
    stack: Mapping[datetime.date, NameSet],
    calendar: WorkingCalendar,
) -> CakeDayStack:
    """Postpone any cake day that follows another to the next working day.

    Walks the dates present when the pass starts, in ascending order.
    After a postponement the next of those dates is skipped, and dates
    created by a postponement are not revisited.
    """
    result: CakeDayStack = dict(stack)
    skip = False

    for day in sorted(result):
        if skip:
            skip = False
            continue
        if day - ONE_DAY in result:
            target = calendar.next_working_day(day)
            result[target] = _union(result.get(target, ()), result.pop(day))
            LOGGER.debug("Cake-free day %s: postponed cake to %s", day, target)
            skip = True

    return result


def export_schedule(stack: Mapping[datetime.date, NameSet], year: int) -> list[CakeDay]:
    """Return the target-year cake days in date order."""
    return [
        CakeDay.from_names(day, names)
        for day, names in sorted(stack.items())
        if day.year == year
    ]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def compute_schedule(
    records: Iterable[BirthdayRecord | tuple[str, str]],
    config: ScheduleConfig | None = None,
) -> ScheduleResult:
    """Compute the cake day schedule for *records*.

    Never raises for bad input: a rejected birthday list comes back as a
    :class:`ScheduleResult` with an empty schedule and ``error`` set.
    """
    if config is None:
        config = ScheduleConfig.create()
    else:
        config = ScheduleConfig.create(config.year, config.holidays)

    try:
        valid = validate_records(records)
    except InvalidRecordError as exc:
        LOGGER.warning("Rejected birthday list (%s): %s", exc.kind.value, exc)
        return ScheduleResult(schedule=[], error=exc.kind)

    birthdays = normalize_leap_day(index_birthdays(valid), config.year)
    calendar = WorkingCalendar(resolve_closures(config.holidays, config.year))

    stack = build_cake_day_stack(birthdays, config.year, calendar)
    stack = merge_coincident_days(stack)
    stack = enforce_cake_free_days(stack, calendar)
    schedule = export_schedule(stack, config.year)

    LOGGER.info(
        "Computed %d cake days for %d from %d birthdays",
        len(schedule),
        config.year,
        len(valid),
    )
    return ScheduleResult(schedule=schedule)


class CakeDays:
    """Object surface over :func:`compute_schedule`.

    The schedule is computed on first read and cached.  From then on the
    configuration is frozen: :meth:`set_year` and :meth:`set_holidays`
    become no-ops, so every later read returns the same schedule.
    """

    def __init__(
        self,
        records: Iterable[BirthdayRecord | tuple[str, str]],
        *,
        year: int | None = None,
        holidays: Iterable[str] | None = None,
    ):
        self.records = list(records)
        self._year = year
        self._holidays = None if holidays is None else list(holidays)
        self._config: ScheduleConfig | None = None
        self._result: ScheduleResult | None = None

    @property
    def frozen(self) -> bool:
        return self._result is not None

    @property
    def config(self) -> ScheduleConfig:
        if self._config is not None:
            return self._config
        return ScheduleConfig.create(self._year, self._holidays)

    def set_year(self, year: int) -> None:
        if self.frozen:
            LOGGER.debug("Schedule already computed; ignoring year %r", year)
            return
        self._year = year

    def set_holidays(self, holidays: Iterable[str]) -> None:
        if self.frozen:
            LOGGER.debug("Schedule already computed; ignoring holidays")
            return
        self._holidays = list(holidays)

    def result(self) -> ScheduleResult:
        if self._result is None:
            self._config = self.config
            self._result = compute_schedule(self.records, self._config)
        return self._result._replace(schedule=list(self._result.schedule))

    @property
    def error(self) -> ErrorKind | None:
        return self.result().error

    def get_cake_days(self) -> list[CakeDay]:
        """Return the schedule; empty if the input was rejected."""
        return self.result().schedule


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_schedule(schedule: list[CakeDay], year: int) -> str:
    """Return a human-readable summary of a cake day schedule."""
    lines: list[str] = []
    w = 64

    lines.append("=" * w)
    lines.append(f"  CAKE DAYS {year}")
    lines.append("=" * w)

    if not schedule:
        lines.append("  No cake days.")
        return "\n".join(lines)

    for entry in schedule:
        size = "small" if entry.small else "large"
        day = entry.date.strftime("%a, %b %d")
        lines.append(f"  {day:>12}  {size:<5}  {', '.join(entry.names)}")

    small = sum(e.small for e in schedule)
    large = sum(e.large for e in schedule)
    people = sum(len(e.names) for e in schedule)
    lines.append("  " + "-" * (w - 4))
    cakes = f"{small} small + {large} large cake{'s' if large != 1 else ''}"
    lines.append(f"  {cakes} for {people} people")

    return "\n".join(lines)
