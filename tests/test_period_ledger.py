"""
Unit tests for the period ledger.
"""

from datetime import date, timedelta

from budget_periods import current_normal_period
from models import ClosedPeriod, OpenPeriod
from period_ledger import (
    available_periods_for_selection,
    close_period,
    completed_periods,
    current_open_period,
    delete_period,
    derive_current_period,
    open_period,
)


def _assert_ledger_invariants(person):
    starts = [p.start_date for p in person.periods]
    assert starts == sorted(starts)
    assert len([p for p in person.periods if not p.is_completed]) <= 1


class TestOpenPeriod:
    """Test opening periods."""

    def test_open_on_empty_ledger(self, make_person):
        person = open_period(make_person(), date(2024, 3, 1))
        assert person.periods == (OpenPeriod(date(2024, 3, 1)),)
        assert current_open_period(person) == OpenPeriod(date(2024, 3, 1))

    def test_open_is_idempotent(self, make_person):
        person = open_period(make_person(), date(2024, 3, 1))
        assert open_period(person, date(2024, 3, 1)) is person

    def test_open_closes_earlier_open_period(self, make_person):
        person = open_period(make_person(), date(2024, 3, 1))
        person = open_period(person, date(2024, 3, 29))
        assert person.periods == (
            ClosedPeriod(date(2024, 3, 1), date(2024, 3, 28)),
            OpenPeriod(date(2024, 3, 29)),
        )
        _assert_ledger_invariants(person)

    def test_open_before_open_period_is_ignored(self, make_person):
        person = open_period(make_person(), date(2024, 3, 29))
        assert open_period(person, date(2024, 3, 1)) is person

    def test_periods_stay_sorted(self, make_person):
        person = make_person(periods=[ClosedPeriod(date(2024, 2, 1), date(2024, 2, 29))])
        person = open_period(person, date(2024, 1, 2))
        person = open_period(person, date(2024, 3, 1))
        _assert_ledger_invariants(person)


class TestClosePeriod:
    """Test closing the current period with automatic rollover."""

    def test_close_rolls_over_to_next_cycle(self, make_person):
        person = make_person(cycle_start_day=1, periods=[OpenPeriod(date(2024, 3, 1))])
        person = close_period(person, date(2024, 3, 28))
        assert person.periods == (
            ClosedPeriod(date(2024, 3, 1), date(2024, 3, 28)),
            OpenPeriod(date(2024, 3, 29)),
        )

    def test_close_without_open_period_derives_one(self, make_person):
        person = close_period(make_person(cycle_start_day=1), date(2024, 3, 28))
        assert completed_periods(person) == [ClosedPeriod(date(2024, 3, 1), date(2024, 3, 28))]
        assert current_open_period(person) == OpenPeriod(date(2024, 3, 29))

    def test_close_without_cycle_day_continues_next_day(self, make_person):
        person = make_person(cycle_start_day=None, periods=[OpenPeriod(date(2024, 3, 1))])
        person = close_period(person, date(2024, 3, 20))
        assert current_open_period(person) == OpenPeriod(date(2024, 3, 21))

    def test_close_without_anything_is_noop(self, make_person):
        person = make_person(cycle_start_day=None)
        assert close_period(person, date(2024, 3, 20)) is person

    def test_close_with_derived_start_inside_closed_period_is_noop(self, make_person):
        """Test a derived period overlapping a closed one is not opened."""
        person = make_person(cycle_start_day=1, periods=[ClosedPeriod(date(2024, 2, 1), date(2024, 3, 10))])
        assert close_period(person, date(2024, 3, 28)) is person

        person = make_person(cycle_start_day=1, periods=[ClosedPeriod(date(2024, 3, 1), date(2024, 3, 5))])
        assert close_period(person, date(2024, 3, 28)) is person

    def test_close_with_derived_start_after_closed_periods(self, make_person):
        person = make_person(cycle_start_day=1, periods=[ClosedPeriod(date(2024, 2, 1), date(2024, 2, 29))])
        person = close_period(person, date(2024, 3, 28))
        assert completed_periods(person)[-1] == ClosedPeriod(date(2024, 3, 1), date(2024, 3, 28))
        assert current_open_period(person) == OpenPeriod(date(2024, 3, 29))
        _assert_ledger_invariants(person)

    def test_close_before_start_is_noop(self, make_person):
        person = make_person(cycle_start_day=1, periods=[OpenPeriod(date(2024, 3, 1))])
        assert close_period(person, date(2024, 2, 20)) is person

    def test_close_on_start_date(self, make_person):
        person = make_person(cycle_start_day=None, periods=[OpenPeriod(date(2024, 3, 1))])
        person = close_period(person, date(2024, 3, 1))
        assert completed_periods(person) == [ClosedPeriod(date(2024, 3, 1), date(2024, 3, 1))]

    def test_repeated_closing_keeps_ledger_consistent(self, make_person):
        """Test a year of month-end closings yields contiguous periods and one open period."""
        person = make_person(cycle_start_day=15)
        person = open_period(person, current_normal_period(15, date(2024, 1, 20)).start)
        for _ in range(12):
            current = current_open_period(person)
            end = current_normal_period(15, current.start_date).end
            person = close_period(person, end)
            _assert_ledger_invariants(person)

        closed = completed_periods(person)
        assert len(closed) == 12
        for earlier, later in zip(closed, closed[1:]):
            assert later.start_date == earlier.end_date + timedelta(days=1)
        assert current_open_period(person).start_date == closed[-1].end_date + timedelta(days=1)


class TestDeletePeriod:
    """Test removing periods."""

    def test_delete_existing(self, make_person):
        person = make_person(periods=[
            ClosedPeriod(date(2024, 2, 1), date(2024, 2, 29)),
            OpenPeriod(date(2024, 3, 1)),
        ])
        updated = delete_period(person, date(2024, 2, 1))
        assert updated.periods == (OpenPeriod(date(2024, 3, 1)),)

    def test_delete_unknown_is_noop(self, make_person):
        person = make_person(periods=[OpenPeriod(date(2024, 3, 1))])
        assert delete_period(person, date(2024, 1, 1)) is person


class TestAvailablePeriods:
    """Test the periods offered for selection."""

    def test_newest_first(self, make_person):
        person = make_person(periods=[
            ClosedPeriod(date(2024, 1, 1), date(2024, 1, 31)),
            ClosedPeriod(date(2024, 2, 1), date(2024, 2, 29)),
            OpenPeriod(date(2024, 3, 1)),
        ])
        periods = available_periods_for_selection(person, date(2024, 3, 15))
        assert [p.start_date for p in periods] == [date(2024, 3, 1), date(2024, 2, 1), date(2024, 1, 1)]

    def test_derives_current_when_none_open(self, make_person):
        person = make_person(cycle_start_day=1, periods=[ClosedPeriod(date(2024, 2, 1), date(2024, 2, 29))])
        periods = available_periods_for_selection(person, date(2024, 3, 15))
        assert periods[0] == OpenPeriod(date(2024, 3, 1))
        assert len(periods) == 2

    def test_derive_uses_fallback_without_cycle_day(self, make_person):
        person = make_person(cycle_start_day=None)
        assert derive_current_period(person, date(2024, 3, 15)) == OpenPeriod(date(2024, 3, 15))
