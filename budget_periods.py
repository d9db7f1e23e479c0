"""
Period boundary calculation for the normal (unmodified) budget cycle.

A person's cycle starts every month on their configured cycle start day,
moved back to the closest business day. A period ends the day before the
next cycle's adjusted start; the end itself is not re-checked against the
holiday calendar.
"""

import calendar as month_calendar
import logging
from datetime import date, timedelta
from typing import Optional, Tuple

from business_days import previous_business_day
from holidays_calendar import DEFAULT_HOLIDAY_CALENDAR, HolidayCalendar
from models import Person, PeriodWindow, validate_cycle_start_day

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_WINDOW_DAYS = 30


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Return (year, month) moved by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _cycle_date(cycle_start_day: int, year: int, month: int) -> date:
    # Days past the end of a short month clamp to its last day
    last_day = month_calendar.monthrange(year, month)[1]
    return date(year, month, min(cycle_start_day, last_day))


def period_for_cycle(
    cycle_start_day: int,
    year: int,
    month: int,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> PeriodWindow:
    """
    Compute the period whose unadjusted start is the cycle day of ``month``.

    Args:
        cycle_start_day: Day of month the cycle starts (1-31)
        year: Year of the cycle start
        month: Month of the cycle start
        calendar: Holiday table used for business-day adjustment

    Returns:
        PeriodWindow from the adjusted start to the day before the next
        cycle's adjusted start
    """
    start = previous_business_day(_cycle_date(cycle_start_day, year, month), calendar)
    next_year, next_month = shift_month(year, month, 1)
    next_start = previous_business_day(_cycle_date(cycle_start_day, next_year, next_month), calendar)
    return PeriodWindow(start=start, end=next_start - timedelta(days=1))


def cycle_month_for(
    cycle_start_day: int,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> Tuple[int, int]:
    """
    Return the (year, month) of the cycle whose period contains ``reference_date``.

    The candidate is the reference month, or the previous month when the
    reference day is before the cycle start day. When the next cycle's start
    rolls back onto or before the reference date, the next cycle is the one
    that contains it.
    """
    year, month = reference_date.year, reference_date.month
    if reference_date.day < cycle_start_day:
        year, month = shift_month(year, month, -1)

    while reference_date > period_for_cycle(cycle_start_day, year, month, calendar).end:
        year, month = shift_month(year, month, 1)
    return year, month


def current_normal_period(
    cycle_start_day: int,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> PeriodWindow:
    """
    Compute the normal budget period containing ``reference_date``.

    Args:
        cycle_start_day: Day of month the cycle starts (1-31)
        reference_date: Date to resolve the period for
        calendar: Holiday table used for business-day adjustment

    Returns:
        PeriodWindow with a business-day start

    Raises:
        InvalidCycleStartDayError: If cycle_start_day is outside 1-31
        BusinessDayNotFoundError: If the holiday table has no business day nearby
    """
    validate_cycle_start_day(cycle_start_day)
    year, month = cycle_month_for(cycle_start_day, reference_date, calendar)
    window = period_for_cycle(cycle_start_day, year, month, calendar)
    logger.debug(
        "Normal period for day %d at %s: %s to %s",
        cycle_start_day, reference_date, window.start, window.end
    )
    return window


def next_cycle_start(
    cycle_start_day: int,
    day: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> date:
    """Return the adjusted start of the cycle after the one containing ``day``."""
    return current_normal_period(cycle_start_day, day, calendar).end + timedelta(days=1)


def fallback_period(reference_date: date, days: int = DEFAULT_FALLBACK_WINDOW_DAYS) -> PeriodWindow:
    """Return a fixed ``days``-long window starting at ``reference_date``."""
    return PeriodWindow(start=reference_date, end=reference_date + timedelta(days=max(days, 1) - 1))


def resolve_normal_period(
    person: Person,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    fallback_days: Optional[int] = None
) -> PeriodWindow:
    """
    Resolve the normal period for a person, falling back when unconfigured.

    People without a cycle start day get a fixed window starting at the
    reference date instead of an error.
    """
    if person.cycle_start_day is None:
        days = fallback_days or DEFAULT_FALLBACK_WINDOW_DAYS
        logger.info(
            "Person %s has no cycle start day; using %d-day window from %s",
            person.id, days, reference_date
        )
        return fallback_period(reference_date, days)
    return current_normal_period(person.cycle_start_day, reference_date, calendar)
