"""
Unit tests for the unified exception hierarchy.

Tests exception creation, attributes, string representations, and error context.
"""

import pytest
from exceptions import (
    FinanceAppError,
    ConfigError,
    InvalidCycleStartDayError,
    CalendarError,
    BusinessDayNotFoundError,
    BudgetError,
    HouseholdDataError,
)


class TestFinanceAppError:
    """Test base FinanceAppError class."""

    def test_basic_exception_creation(self):
        """Test creating a basic FinanceAppError."""
        error = FinanceAppError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}
        assert error.original_error is None

    def test_exception_with_details(self):
        """Test creating exception with details dictionary."""
        details = {"key1": "value1", "key2": 123}
        error = FinanceAppError("Test error", details=details)
        assert error.details == details
        assert str(error) == "Test error (key1=value1, key2=123)"

    def test_exception_with_original_error(self):
        """Test creating exception with original error chaining."""
        original = ValueError("Original error")
        error = FinanceAppError("Wrapped error", original_error=original)
        assert error.original_error is original

    def test_exception_inheritance(self):
        """Test that FinanceAppError is a subclass of Exception."""
        assert isinstance(FinanceAppError("Test"), Exception)


class TestExceptionHierarchy:
    """Test specific exception subclasses."""

    def test_config_error(self):
        """Test ConfigError creation and attributes."""
        error = ConfigError(
            "Config file not found",
            details={"config_path": "/path/to/config.yaml"}
        )
        assert isinstance(error, FinanceAppError)
        assert error.details["config_path"] == "/path/to/config.yaml"

    def test_invalid_cycle_start_day_is_config_error(self):
        """Test InvalidCycleStartDayError inherits from ConfigError."""
        error = InvalidCycleStartDayError("Bad day", details={"cycle_start_day": 0})
        assert isinstance(error, ConfigError)
        assert isinstance(error, FinanceAppError)
        assert "cycle_start_day=0" in str(error)

    def test_calendar_error_hierarchy(self):
        """Test BusinessDayNotFoundError inherits from CalendarError."""
        error = BusinessDayNotFoundError("No business day", details={"date": "2024-01-01"})
        assert isinstance(error, CalendarError)
        assert isinstance(error, FinanceAppError)

    def test_budget_error(self):
        """Test BudgetError creation."""
        assert isinstance(BudgetError("Unknown person"), FinanceAppError)

    def test_household_data_error(self):
        """Test HouseholdDataError creation."""
        original = KeyError("id")
        error = HouseholdDataError("Malformed record", original_error=original)
        assert isinstance(error, FinanceAppError)
        assert error.original_error is original

    def test_subclasses_caught_by_base(self):
        """Test that every engine error is handled by one except clause."""
        for error_class in (ConfigError, InvalidCycleStartDayError, CalendarError,
                            BusinessDayNotFoundError, BudgetError, HouseholdDataError):
            with pytest.raises(FinanceAppError):
                raise error_class("boom")
