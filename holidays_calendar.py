"""
Holiday classification for budget period boundaries.

A date is a non-business day when it falls on a weekend, matches an entry
in the fixed month/day holiday table, or is Easter Sunday / Easter Monday
of its year. The holiday table is data (HolidayCalendar) so regional
variants can be supplied from configuration without code changes.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from exceptions import ConfigError

logger = logging.getLogger(__name__)

# Month/day pairs observed every year
DEFAULT_FIXED_HOLIDAYS: FrozenSet[Tuple[int, int]] = frozenset({
    (1, 1),    # New Year's Day
    (1, 6),    # Epiphany
    (4, 25),   # Liberation Day
    (5, 1),    # Labour Day
    (6, 2),    # Republic Day
    (8, 15),   # Assumption
    (11, 1),   # All Saints
    (12, 8),   # Immaculate Conception
    (12, 25),  # Christmas
    (12, 26),  # St. Stephen
})

# date.weekday(): Monday=0 ... Sunday=6
DEFAULT_WEEKEND_DAYS: FrozenSet[int] = frozenset({5, 6})


@dataclass(frozen=True)
class HolidayCalendar:
    """
    Holiday table consulted by the classifier.

    Attributes:
        fixed_holidays: (month, day) pairs that are holidays every year
        weekend_days: Weekday numbers (Monday=0) treated as non-business days
        observe_easter: Whether Easter Sunday is a holiday
        observe_easter_monday: Whether Easter Monday is a holiday
    """
    fixed_holidays: FrozenSet[Tuple[int, int]] = DEFAULT_FIXED_HOLIDAYS
    weekend_days: FrozenSet[int] = DEFAULT_WEEKEND_DAYS
    observe_easter: bool = True
    observe_easter_monday: bool = True


DEFAULT_HOLIDAY_CALENDAR = HolidayCalendar()


@lru_cache(maxsize=256)
def easter_sunday(year: int) -> date:
    """
    Compute Easter Sunday for a Gregorian calendar year.

    Uses the anonymous Gregorian algorithm (Meeus/Jones/Butcher).

    Args:
        year: Calendar year

    Returns:
        Date of Easter Sunday
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def easter_monday(year: int) -> date:
    """Return the Monday following Easter Sunday."""
    return easter_sunday(year) + timedelta(days=1)


def is_holiday(day: date, calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR) -> bool:
    """
    Return True if ``day`` is a non-business day.

    Args:
        day: Date to classify
        calendar: Holiday table to consult

    Returns:
        True for weekends, fixed holidays and observed Easter dates
    """
    if day.weekday() in calendar.weekend_days:
        return True
    if (day.month, day.day) in calendar.fixed_holidays:
        return True
    if calendar.observe_easter and day == easter_sunday(day.year):
        return True
    if calendar.observe_easter_monday and day == easter_monday(day.year):
        return True
    return False


def holidays_in_year(year: int, calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR) -> List[date]:
    """
    List the non-weekend holidays observed in a year.

    Weekends are omitted; a fixed holiday falling on a weekend is still listed.

    Args:
        year: Calendar year
        calendar: Holiday table to consult

    Returns:
        Sorted list of holiday dates
    """
    days = set()
    for month, day in calendar.fixed_holidays:
        try:
            days.add(date(year, month, day))
        except ValueError:
            # 02-29 outside leap years
            continue
    if calendar.observe_easter:
        days.add(easter_sunday(year))
    if calendar.observe_easter_monday:
        days.add(easter_monday(year))
    return sorted(days)


def _parse_fixed_holiday(raw: Any) -> Tuple[int, int]:
    """Parse a "MM-DD" string or a [month, day] pair."""
    try:
        if isinstance(raw, str):
            month_str, day_str = raw.strip().split("-")
            month, day = int(month_str), int(day_str)
        else:
            month, day = (int(part) for part in raw)
        # 2000 is a leap year so 02-29 stays valid
        date(2000, month, day)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid fixed holiday entry: {raw!r}",
            details={"expected": "MM-DD"},
            original_error=exc
        ) from exc
    return month, day


def _parse_weekend_days(raw: Iterable[Any]) -> FrozenSet[int]:
    days = set()
    for value in raw:
        try:
            weekday = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid weekend day: {value!r}", original_error=exc) from exc
        if not 0 <= weekday <= 6:
            raise ConfigError(
                f"Weekend day out of range: {weekday}",
                details={"expected": "0 (Monday) to 6 (Sunday)"}
            )
        days.add(weekday)
    return frozenset(days)


def calendar_from_config(config: Dict[str, Any]) -> HolidayCalendar:
    """
    Build a HolidayCalendar from the ``holidays`` configuration section.

    Missing keys keep the default table.

    Args:
        config: Full configuration dictionary

    Returns:
        Configured HolidayCalendar

    Raises:
        ConfigError: If a holiday or weekend entry is malformed
    """
    section = (config or {}).get("holidays") or {}
    if not isinstance(section, dict):
        raise ConfigError("Config section 'holidays' must be a mapping")

    fixed = DEFAULT_FIXED_HOLIDAYS
    if section.get("fixed") is not None:
        fixed = frozenset(_parse_fixed_holiday(entry) for entry in section["fixed"])

    weekend = DEFAULT_WEEKEND_DAYS
    if section.get("weekend_days") is not None:
        weekend = _parse_weekend_days(section["weekend_days"])

    calendar = HolidayCalendar(
        fixed_holidays=fixed,
        weekend_days=weekend,
        observe_easter=bool(section.get("observe_easter", True)),
        observe_easter_monday=bool(section.get("observe_easter_monday", True)),
    )
    logger.debug(
        "Holiday calendar configured: %d fixed holidays, weekend=%s",
        len(calendar.fixed_holidays),
        sorted(calendar.weekend_days)
    )
    return calendar
