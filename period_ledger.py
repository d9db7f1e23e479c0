"""
Period ledger: the ordered history of a person's budget periods.

The ledger holds closed periods plus at most one open (current) period,
sorted ascending by start date. Every mutator returns a new Person; the
caller persists it. Closing the current period rolls over into the next
cycle automatically.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from budget_periods import current_normal_period, next_cycle_start, resolve_normal_period
from holidays_calendar import DEFAULT_HOLIDAY_CALENDAR, HolidayCalendar
from models import ClosedPeriod, OpenPeriod, Period, Person

logger = logging.getLogger(__name__)


def _sorted_periods(periods: Iterable[Period]) -> Tuple[Period, ...]:
    return tuple(sorted(periods, key=lambda p: p.start_date))


def current_open_period(person: Person) -> Optional[OpenPeriod]:
    """Return the earliest open period, or None when every period is closed."""
    open_periods = [p for p in person.periods if isinstance(p, OpenPeriod)]
    if not open_periods:
        return None
    return min(open_periods, key=lambda p: p.start_date)


def completed_periods(person: Person) -> List[ClosedPeriod]:
    """Return closed periods, oldest first."""
    return [p for p in person.periods if isinstance(p, ClosedPeriod)]


def open_period(person: Person, start_date: date) -> Person:
    """
    Open a new period starting on ``start_date``.

    Idempotent: a person that already has a period with this start date is
    returned unchanged. A still-open earlier period is closed on the day
    before ``start_date`` so only one period stays open.

    Args:
        person: Person whose ledger to update
        start_date: Start of the new period

    Returns:
        Person with the new open period, or the unchanged person
    """
    if any(p.start_date == start_date for p in person.periods):
        logger.debug("Period starting %s already tracked for person %s", start_date, person.id)
        return person

    periods: List[Period] = list(person.periods)
    current = current_open_period(person)
    if current is not None:
        if start_date < current.start_date:
            logger.warning(
                "Not opening period %s for person %s: it precedes the open period starting %s",
                start_date, person.id, current.start_date
            )
            return person
        closed = ClosedPeriod(start_date=current.start_date, end_date=start_date - timedelta(days=1))
        periods = [closed if p == current else p for p in periods]
        logger.info(
            "Closed open period %s for person %s before opening %s",
            current.start_date, person.id, start_date
        )

    periods.append(OpenPeriod(start_date=start_date))
    logger.info("Opened period starting %s for person %s", start_date, person.id)
    return replace(person, periods=_sorted_periods(periods))


def close_period(
    person: Person,
    end_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> Person:
    """
    Close the current period on ``end_date`` and roll over to the next one.

    When no open period is tracked, the normal period containing
    ``end_date`` is opened first. The next period starts at the next
    adjusted cycle start after ``end_date``; people without a cycle start
    day continue on the following day.

    No-op cases (the person is returned unchanged and a warning is logged):
    no open period and no cycle start day to derive one, a derived start
    inside an existing closed period, or an end date before the open
    period's start.

    Returns:
        Person with the closed period and the newly opened one
    """
    original = person
    current = current_open_period(person)
    if current is None:
        if person.cycle_start_day is None:
            logger.warning(
                "Cannot close period for person %s: no open period and no cycle start day",
                person.id
            )
            return original
        derived = current_normal_period(person.cycle_start_day, end_date, calendar)
        if any(p.start_date <= derived.start <= p.end_date for p in completed_periods(person)):
            logger.warning(
                "Cannot close period for person %s: derived start %s falls inside a closed period",
                person.id, derived.start
            )
            return original
        person = open_period(person, derived.start)
        current = current_open_period(person)

    if end_date < current.start_date:
        logger.warning(
            "Cannot close period for person %s: end %s precedes start %s",
            person.id, end_date, current.start_date
        )
        return original

    closed = ClosedPeriod(start_date=current.start_date, end_date=end_date)
    person = replace(
        person,
        periods=_sorted_periods(closed if p == current else p for p in person.periods)
    )
    logger.info("Closed period %s to %s for person %s", closed.start_date, end_date, person.id)

    if person.cycle_start_day is None:
        next_start = end_date + timedelta(days=1)
    else:
        next_start = next_cycle_start(person.cycle_start_day, end_date, calendar)
    return open_period(person, next_start)


def delete_period(person: Person, start_date: date) -> Person:
    """Remove the period starting on ``start_date``; unknown dates are a no-op."""
    kept = tuple(p for p in person.periods if p.start_date != start_date)
    if len(kept) == len(person.periods):
        logger.warning("No period starting %s for person %s", start_date, person.id)
        return person
    logger.info("Deleted period starting %s for person %s", start_date, person.id)
    return replace(person, periods=kept)


def derive_current_period(
    person: Person,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    fallback_days: Optional[int] = None
) -> OpenPeriod:
    """Return the tracked open period, or the one implied by the normal cycle."""
    current = current_open_period(person)
    if current is not None:
        return current
    window = resolve_normal_period(person, reference_date, calendar, fallback_days)
    return OpenPeriod(start_date=window.start)


def available_periods_for_selection(
    person: Person,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    fallback_days: Optional[int] = None
) -> List[Period]:
    """
    List the periods a user can pick from: completed ones plus the current one.

    Returns:
        Periods sorted newest first
    """
    periods: List[Period] = list(completed_periods(person))
    current = derive_current_period(person, reference_date, calendar, fallback_days)
    if not any(p.start_date == current.start_date for p in periods):
        periods.append(current)
    return sorted(periods, key=lambda p: p.start_date, reverse=True)
