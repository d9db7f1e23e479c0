"""
Unit tests for holiday classification and Easter computation.
"""

from datetime import date

import pytest

from exceptions import ConfigError
from holidays_calendar import (
    DEFAULT_HOLIDAY_CALENDAR,
    HolidayCalendar,
    calendar_from_config,
    easter_monday,
    easter_sunday,
    holidays_in_year,
    is_holiday,
)


class TestEaster:
    """Test the Easter computation."""

    @pytest.mark.parametrize("year,expected", [
        (2000, date(2000, 4, 23)),
        (2019, date(2019, 4, 21)),
        (2024, date(2024, 3, 31)),
        (2025, date(2025, 4, 20)),
        (2038, date(2038, 4, 25)),
    ])
    def test_known_easter_dates(self, year, expected):
        """Test Easter Sunday against published dates."""
        assert easter_sunday(year) == expected

    def test_easter_is_always_sunday(self):
        """Test every computed Easter falls on a Sunday."""
        for year in range(1900, 2101):
            assert easter_sunday(year).weekday() == 6

    def test_easter_monday_follows_sunday(self):
        """Test Easter Monday is the day after Easter Sunday."""
        assert easter_monday(2024) == date(2024, 4, 1)


class TestIsHoliday:
    """Test the default holiday table."""

    def test_weekends(self):
        """Test Saturdays and Sundays are holidays."""
        assert is_holiday(date(2024, 3, 16))
        assert is_holiday(date(2024, 3, 17))

    def test_plain_weekday(self):
        """Test an ordinary weekday is a business day."""
        assert not is_holiday(date(2024, 3, 15))
        assert not is_holiday(date(2024, 4, 2))

    @pytest.mark.parametrize("day", [
        date(2024, 1, 1),
        date(2024, 4, 25),
        date(2024, 5, 1),
        date(2024, 8, 15),
        date(2024, 12, 25),
        date(2024, 12, 26),
    ])
    def test_fixed_holidays(self, day):
        """Test fixed month/day holidays on weekdays."""
        assert day.weekday() < 5
        assert is_holiday(day)

    def test_easter_dates(self):
        """Test Easter Sunday and Monday are holidays."""
        assert is_holiday(date(2024, 3, 31))
        assert is_holiday(date(2024, 4, 1))
        assert is_holiday(date(2025, 4, 21))

    def test_easter_monday_can_be_disabled(self, no_easter_monday_calendar):
        """Test Easter Monday is a business day when not observed."""
        assert not is_holiday(date(2024, 4, 1), no_easter_monday_calendar)
        assert is_holiday(date(2024, 3, 31), no_easter_monday_calendar)


class TestCustomCalendar:
    """Test regional holiday tables."""

    def test_empty_fixed_table(self):
        """Test a calendar without fixed holidays or Easter."""
        calendar = HolidayCalendar(fixed_holidays=frozenset(), observe_easter=False, observe_easter_monday=False)
        assert not is_holiday(date(2024, 12, 25), calendar)
        assert not is_holiday(date(2024, 4, 1), calendar)
        assert is_holiday(date(2024, 3, 30), calendar)

    def test_custom_weekend(self):
        """Test a Friday/Saturday weekend."""
        calendar = HolidayCalendar(weekend_days=frozenset({4, 5}))
        assert is_holiday(date(2024, 3, 15), calendar)
        assert not is_holiday(date(2024, 3, 17), calendar)


class TestHolidaysInYear:
    """Test listing holidays of a year."""

    def test_default_year_listing(self):
        """Test the 2024 listing contains fixed and Easter holidays in order."""
        holidays = holidays_in_year(2024)
        assert len(holidays) == 12
        assert holidays == sorted(holidays)
        assert holidays[0] == date(2024, 1, 1)
        assert date(2024, 3, 31) in holidays
        assert date(2024, 4, 1) in holidays

    def test_leap_day_holiday_skipped_in_common_year(self):
        """Test a 02-29 holiday only appears in leap years."""
        calendar = HolidayCalendar(fixed_holidays=frozenset({(2, 29)}), observe_easter=False,
                                   observe_easter_monday=False)
        assert holidays_in_year(2023, calendar) == []
        assert holidays_in_year(2024, calendar) == [date(2024, 2, 29)]


class TestCalendarFromConfig:
    """Test building a calendar from configuration."""

    def test_empty_config_uses_defaults(self):
        """Test missing section yields the default table."""
        assert calendar_from_config({}) == DEFAULT_HOLIDAY_CALENDAR

    def test_custom_section(self):
        """Test fixed holidays and Easter Monday come from config."""
        calendar = calendar_from_config({
            "holidays": {"fixed": ["07-04", [11, 28]], "observe_easter_monday": False}
        })
        assert calendar.fixed_holidays == frozenset({(7, 4), (11, 28)})
        assert is_holiday(date(2024, 7, 4), calendar)
        assert not is_holiday(date(2024, 12, 25), calendar)
        assert not is_holiday(date(2024, 4, 1), calendar)

    @pytest.mark.parametrize("entry", ["13-01", "02-30", "abc", [1]])
    def test_invalid_fixed_holiday(self, entry):
        """Test malformed holiday entries raise ConfigError."""
        with pytest.raises(ConfigError):
            calendar_from_config({"holidays": {"fixed": [entry]}})

    def test_invalid_weekend_day(self):
        """Test weekday numbers outside 0-6 raise ConfigError."""
        with pytest.raises(ConfigError):
            calendar_from_config({"holidays": {"weekend_days": [7]}})

    def test_section_must_be_mapping(self):
        """Test a non-mapping section raises ConfigError."""
        with pytest.raises(ConfigError):
            calendar_from_config({"holidays": ["01-01"]})
