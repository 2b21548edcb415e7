"""Holiday presets and office-closure resolution.

A holiday is described by a ``"day Month"`` spec such as ``"25 December"``.
Closures are resolved for the target year *and* both neighbouring years,
since cake days near the turn of the year can spill across it.

Rollover rule: if a holiday falls on a weekend (or on a day already
closed by an earlier holiday) the office closes on the next working day
instead.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable

from cakedays.workdays import WorkingCalendar, month_day_in_year

LOGGER = logging.getLogger(__name__)


class InvalidHolidayError(ValueError):
    """A holiday spec is not a valid ``"day Month"`` string."""


# ---------------------------------------------------------------------------
# Spec parsing
# ---------------------------------------------------------------------------

_MONTHS: dict[str, int] = {
    name: number
    for number, names in enumerate(
        [
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ],
        start=1,
    )
    for name in names
}


def parse_holiday_spec(spec: str) -> tuple[int, int]:
    """Parse a ``"day Month"`` spec into ``(month, day)``.

    Month names are matched case-insensitively and may be abbreviated
    (``"1 Jan"``).  ``"29 February"`` is accepted.
    """
    if not isinstance(spec, str):
        raise InvalidHolidayError(f"Holiday spec must be a string, got {spec!r}")

    parts = spec.split()
    if len(parts) != 2 or not parts[0].isdigit():
        raise InvalidHolidayError(f"Invalid holiday spec {spec!r}. Use 'day Month'.")

    day = int(parts[0])
    month = _MONTHS.get(parts[1].lower())
    if month is None:
        raise InvalidHolidayError(f"Unknown month in holiday spec {spec!r}")

    try:
        datetime.date(2000, month, day)  # 2000 is a leap year
    except ValueError as exc:
        raise InvalidHolidayError(f"Invalid day in holiday spec {spec!r}") from exc
    return month, day


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

DEFAULT_HOLIDAYS: tuple[str, ...] = ("1 January", "25 December", "26 December")

HOLIDAY_NAMES: dict[tuple[int, int], str] = {
    (1, 1): "New Year's Day",
    (12, 25): "Christmas Day",
    (12, 26): "Boxing Day",
}

PRESETS: dict[str, str] = {
    "office": "Office closures: New Year's Day, Christmas Day and Boxing Day",
    "none": "No holiday closures (weekends only)",
}

_PRESET_SPECS: dict[str, tuple[str, ...]] = {
    "office": DEFAULT_HOLIDAYS,
    "none": (),
}


def get_preset(name: str) -> list[str]:
    """Return the holiday specs of the preset called *name*.

    Raises ``KeyError`` if the preset is not known.
    """
    specs = _PRESET_SPECS.get(name)
    if specs is None:
        supported = ", ".join(sorted(PRESETS))
        msg = f"Unknown holiday preset {name!r}. Supported: {supported}"
        raise KeyError(msg)
    return list(specs)


def resolve_holidays(holidays: Iterable[str] | None) -> tuple[str, ...]:
    """Return *holidays* as a tuple, or the defaults if it is unusable.

    A list with any unparseable spec is ignored as a whole.
    """
    if holidays is None:
        return DEFAULT_HOLIDAYS
    if isinstance(holidays, str):
        LOGGER.warning("Ignoring holiday list given as a single string: %r", holidays)
        return DEFAULT_HOLIDAYS

    specs = tuple(holidays)
    for spec in specs:
        try:
            parse_holiday_spec(spec)
        except InvalidHolidayError as exc:
            LOGGER.warning("Ignoring holiday list, using defaults: %s", exc)
            return DEFAULT_HOLIDAYS
    return specs


# ---------------------------------------------------------------------------
# Closure resolution
# ---------------------------------------------------------------------------


def holiday_label(spec: str) -> str:
    """Human-readable name for a holiday spec, falling back to the spec."""
    return HOLIDAY_NAMES.get(parse_holiday_spec(spec), spec)


def resolve_closure_dates(
    holidays: Iterable[str], year: int
) -> list[tuple[datetime.date, str]]:
    """Return ``(closure_date, spec)`` pairs for ``year - 1`` .. ``year + 1``.

    Holidays are resolved year by year, in spec order, against the
    closures accumulated so far.  The result is sorted by date.
    """
    parsed = [(spec, parse_holiday_spec(spec)) for spec in holidays]
    calendar = WorkingCalendar()
    resolved: list[tuple[datetime.date, str]] = []

    for y in (year - 1, year, year + 1):
        for spec, (month, day) in parsed:
            d = month_day_in_year(month, day, y)
            if not calendar.is_working_day(d):
                rolled = calendar.next_working_day(d)
                LOGGER.debug("Holiday %s %d rolls over to %s", spec, y, rolled)
                d = rolled
            calendar.close(d)
            resolved.append((d, spec))

    return sorted(resolved)


def resolve_closures(holidays: Iterable[str], year: int) -> frozenset[datetime.date]:
    """Return the office closure set for ``year - 1`` .. ``year + 1``."""
    return frozenset(d for d, _spec in resolve_closure_dates(holidays, year))
