"""
Unified exception hierarchy for the budget cycle engine.

FinanceAppError is the base exception so callers (the CLI in particular)
can handle every engine failure in one place while still distinguishing
configuration problems from calendar or data-file problems.
"""

from typing import Optional


class FinanceAppError(Exception):
    """
    Base exception class for all budget engine errors.

    Attributes:
        message: Human-readable error message
        details: Context rendered after the message as key=value pairs
        original_error: Lower-level exception this error wraps, if any
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        original_error: Optional[Exception] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"


class ConfigError(FinanceAppError):
    """Raised when configuration loading or validation fails."""
    pass


class InvalidCycleStartDayError(ConfigError):
    """Raised when a person's cycle start day is outside 1-31."""
    pass


class CalendarError(FinanceAppError):
    """Base error for holiday calendar failures."""
    pass


class BusinessDayNotFoundError(CalendarError):
    """Raised when the business-day walk exceeds its bound."""
    pass


class BudgetError(FinanceAppError):
    """Raised when a budget, person or period lookup fails."""
    pass


class HouseholdDataError(FinanceAppError):
    """Raised when a household data record cannot be parsed."""
    pass
