"""
Budget exceptions: manual overrides of the normal budget cycle.

An exception declares that a budget period starts on its trigger date
instead of the normal cycle start. Exceptions never modify a person's
stored periods; they are consulted when the active period is resolved.
When several exceptions apply, the most recent trigger date wins.
"""

import logging
import uuid
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Union

from budget_periods import cycle_month_for, period_for_cycle, resolve_normal_period, shift_month
from holidays_calendar import DEFAULT_HOLIDAY_CALENDAR, HolidayCalendar
from models import ActivePeriod, BudgetException, Person, PeriodWindow, validate_cycle_start_day

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 90


def exception_window(
    cycle_start_day: int,
    exception: BudgetException,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> PeriodWindow:
    """
    Compute the window displaced by an exception.

    The window starts exactly on the trigger date (no business-day
    adjustment) and ends one cycle after the end of the normal period that
    contains the trigger date.

    Args:
        cycle_start_day: Person's cycle start day (1-31)
        exception: Exception to resolve
        calendar: Holiday table used for business-day adjustment

    Returns:
        PeriodWindow that always contains the trigger date
    """
    validate_cycle_start_day(cycle_start_day)
    trigger = exception.trigger_date
    year, month = cycle_month_for(cycle_start_day, trigger, calendar)
    next_year, next_month = shift_month(year, month, 1)
    end = period_for_cycle(cycle_start_day, next_year, next_month, calendar).end
    return PeriodWindow(start=trigger, end=end)


def find_active_exception(
    person: Person,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR
) -> Optional[BudgetException]:
    """
    Find the exception overriding the period at ``reference_date``.

    Exceptions are evaluated most recent trigger date first; the first one
    whose window contains the reference date wins.

    Returns:
        The winning exception, or None
    """
    if not person.exceptions or person.cycle_start_day is None:
        return None

    ordered = sorted(person.exceptions, key=lambda e: e.trigger_date, reverse=True)
    for exception in ordered:
        window = exception_window(person.cycle_start_day, exception, calendar)
        if window.contains(reference_date):
            return exception
    return None


def resolve_active_period(
    person: Person,
    reference_date: date,
    calendar: HolidayCalendar = DEFAULT_HOLIDAY_CALENDAR,
    fallback_days: Optional[int] = None
) -> ActivePeriod:
    """
    Resolve the budget period in force at ``reference_date``.

    Args:
        person: Person to resolve the period for
        reference_date: Date of interest
        calendar: Holiday table used for business-day adjustment
        fallback_days: Window length for people without a cycle start day

    Returns:
        ActivePeriod describing either the exception window or the normal period
    """
    if person.exceptions and person.cycle_start_day is None:
        logger.warning(
            "Ignoring %d exception(s) for person %s without a cycle start day",
            len(person.exceptions), person.id
        )

    active = find_active_exception(person, reference_date, calendar)
    if active is not None:
        window = exception_window(person.cycle_start_day, active, calendar)
        logger.debug(
            "Exception %s overrides period for person %s: %s to %s",
            active.id, person.id, window.start, window.end
        )
        return ActivePeriod(start=window.start, end=window.end, is_exception=True, exception=active)

    window = resolve_normal_period(person, reference_date, calendar, fallback_days)
    return ActivePeriod(start=window.start, end=window.end, is_exception=False)


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def prune_stale_exceptions(
    person: Person,
    now: Union[date, datetime],
    retention_days: int = DEFAULT_RETENTION_DAYS
) -> Person:
    """
    Drop exceptions whose trigger date is more than ``retention_days`` before ``now``.

    Remaining exceptions keep their order. The input person is not modified.

    Returns:
        New Person with stale exceptions removed
    """
    cutoff = _as_date(now) - timedelta(days=retention_days)
    kept = tuple(e for e in person.exceptions if e.trigger_date >= cutoff)
    removed = len(person.exceptions) - len(kept)
    if removed:
        logger.info(
            "Pruned %d stale exception(s) for person %s (cutoff %s)",
            removed, person.id, cutoff.isoformat()
        )
    return replace(person, exceptions=kept)


def create_budget_exception(
    trigger_date: date,
    reason: Optional[str] = None,
    now: Optional[datetime] = None
) -> BudgetException:
    """Create a new exception with a generated id."""
    return BudgetException(
        id=f"exception_{uuid.uuid4().hex[:12]}",
        trigger_date=trigger_date,
        reason=reason or None,
        created_at=now or datetime.now(UTC),
    )


def add_exception(person: Person, exception: BudgetException) -> Person:
    """
    Attach an exception to a person.

    An existing exception with the same trigger date is replaced.
    """
    kept = tuple(e for e in person.exceptions if e.trigger_date != exception.trigger_date)
    if len(kept) != len(person.exceptions):
        logger.info(
            "Replacing exception on %s for person %s",
            exception.trigger_date.isoformat(), person.id
        )
    return replace(person, exceptions=kept + (exception,))


def remove_exception(person: Person, exception_id: str) -> Person:
    """Remove the exception with ``exception_id``; unknown ids are a no-op."""
    kept = tuple(e for e in person.exceptions if e.id != exception_id)
    if len(kept) == len(person.exceptions):
        logger.warning("Exception %s not found for person %s", exception_id, person.id)
    return replace(person, exceptions=kept)
