"""
Business-day resolution on top of the holiday classifier.

Walks are bounded: a holiday table that marks more than
MAX_BUSINESS_DAY_WALK consecutive days as non-business days is treated as
misconfigured and raises BusinessDayNotFoundError instead of looping.
"""

import logging
from datetime import date, timedelta

from exceptions import BusinessDayNotFoundError
from holidays_calendar import DEFAULT_HOLIDAY_CALENDAR, HolidayCalendar, is_holiday

logger = logging.getLogger(__name__)

MAX_BUSINESS_DAY_WALK = 14


def is_business_day(day: date, calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR) -> bool:
    """Return True if ``day`` is neither a weekend nor a holiday."""
    return not is_holiday(day, calendar)


def _walk(day: date, step: int, calendar: HolidayCalendar, max_steps: int) -> date:
    candidate = day
    for _ in range(max_steps + 1):
        if not is_holiday(candidate, calendar):
            return candidate
        candidate += timedelta(days=step)
    direction = "previous" if step < 0 else "next"
    logger.error(
        "No %s business day within %d days of %s; holiday table is misconfigured",
        direction, max_steps, day.isoformat()
    )
    raise BusinessDayNotFoundError(
        f"No {direction} business day found",
        details={"date": day.isoformat(), "max_steps": max_steps}
    )


def previous_business_day(
    day: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    max_steps: int = MAX_BUSINESS_DAY_WALK
) -> date:
    """
    Return the closest business day at or before ``day``.

    Args:
        day: Starting date
        calendar: Holiday table to consult
        max_steps: Maximum number of days to walk back

    Returns:
        ``day`` itself when it is a business day, else the first earlier one

    Raises:
        BusinessDayNotFoundError: If no business day is found within max_steps
    """
    return _walk(day, -1, calendar, max_steps)


def next_business_day(
    day: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    max_steps: int = MAX_BUSINESS_DAY_WALK
) -> date:
    """
    Return the closest business day at or after ``day``.

    Raises:
        BusinessDayNotFoundError: If no business day is found within max_steps
    """
    return _walk(day, 1, calendar, max_steps)
