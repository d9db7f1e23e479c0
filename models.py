"""
Data model for the budget cycle engine.

All records are immutable dataclasses. Each persisted record converts to
and from the plain-dict shape exchanged with collaborators: camelCase
keys, ISO calendar date strings for boundaries and an ISO timestamp for
``createdAt``.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

from exceptions import HouseholdDataError, InvalidCycleStartDayError
from utils import parse_iso_date

logger = logging.getLogger(__name__)


def validate_cycle_start_day(value: Any) -> int:
    """
    Validate a cycle start day.

    Args:
        value: Candidate day-of-month

    Returns:
        The day as an int in 1-31

    Raises:
        InvalidCycleStartDayError: If the value is not an integer in 1-31
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCycleStartDayError(
            "Cycle start day must be an integer",
            details={"cycle_start_day": value}
        )
    if not 1 <= value <= 31:
        raise InvalidCycleStartDayError(
            "Cycle start day must be between 1 and 31",
            details={"cycle_start_day": value}
        )
    return value


def _require(data: Dict[str, Any], key: str, record: str) -> Any:
    if key not in data or data[key] is None:
        raise HouseholdDataError(
            f"{record} record is missing '{key}'",
            details={"record": record, "field": key}
        )
    return data[key]


def _date_field(data: Dict[str, Any], key: str, record: str) -> date:
    raw = _require(data, key, record)
    try:
        return parse_iso_date(raw)
    except ValueError as exc:
        raise HouseholdDataError(
            f"{record} field '{key}' is not an ISO date",
            details={"record": record, "value": raw},
            original_error=exc
        ) from exc


class TransactionKind(str, Enum):
    """Transaction direction."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive date range ``[start, end]``."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class OpenPeriod:
    """The current, still running budget period of a person."""
    start_date: date

    @property
    def is_completed(self) -> bool:
        return False

    @property
    def end_date(self) -> None:
        return None


@dataclass(frozen=True)
class ClosedPeriod:
    """A completed budget period."""
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"Period end {self.end_date.isoformat()} precedes start {self.start_date.isoformat()}"
            )

    @property
    def is_completed(self) -> bool:
        return True


Period = Union[OpenPeriod, ClosedPeriod]


def period_to_dict(period: Period) -> Dict[str, Any]:
    """Convert a period into its persisted shape."""
    data: Dict[str, Any] = {
        "startDate": period.start_date.isoformat(),
        "isCompleted": period.is_completed,
    }
    if isinstance(period, ClosedPeriod):
        data["endDate"] = period.end_date.isoformat()
    return data


def period_from_dict(data: Dict[str, Any]) -> Period:
    """
    Build a period from its persisted shape.

    Raises:
        HouseholdDataError: If the record is malformed or inconsistent
    """
    start = _date_field(data, "startDate", "Period")
    completed = bool(data.get("isCompleted", False))
    if not completed:
        if data.get("endDate"):
            raise HouseholdDataError(
                "Open period must not carry an endDate",
                details={"startDate": start.isoformat()}
            )
        return OpenPeriod(start_date=start)
    end = _date_field(data, "endDate", "Period")
    try:
        return ClosedPeriod(start_date=start, end_date=end)
    except ValueError as exc:
        raise HouseholdDataError(str(exc), original_error=exc) from exc


@dataclass(frozen=True)
class BudgetException:
    """
    A manually declared date that displaces the normal budget cycle.

    Attributes:
        id: Unique identifier
        trigger_date: Date the exceptional period starts
        reason: Optional free-text note
        created_at: Creation timestamp
    """
    id: str
    trigger_date: date
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "triggerDate": self.trigger_date.isoformat(),
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at.isoformat()
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetException":
        created_raw = data.get("createdAt")
        created_at = None
        if isinstance(created_raw, datetime):
            created_at = created_raw
        elif created_raw:
            try:
                created_at = datetime.fromisoformat(str(created_raw))
            except ValueError as exc:
                raise HouseholdDataError(
                    "Exception field 'createdAt' is not an ISO timestamp",
                    details={"value": created_raw},
                    original_error=exc
                ) from exc
        return cls(
            id=str(_require(data, "id", "Exception")),
            trigger_date=_date_field(data, "triggerDate", "Exception"),
            reason=data.get("reason"),
            created_at=created_at,
        )


@dataclass(frozen=True)
class Person:
    """
    A tracked person and their budgeting configuration.

    ``periods`` is kept sorted ascending by start date. A ``None``
    ``cycle_start_day`` means the person has no configured cycle.
    """
    id: str
    name: str = ""
    cycle_start_day: Optional[int] = None
    periods: Tuple[Period, ...] = ()
    exceptions: Tuple[BudgetException, ...] = ()

    def __post_init__(self) -> None:
        if self.cycle_start_day is not None:
            validate_cycle_start_day(self.cycle_start_day)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cycleStartDay": self.cycle_start_day,
            "periods": [period_to_dict(p) for p in self.periods],
            "exceptions": [e.to_dict() for e in self.exceptions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        """
        Build a person from raw data.

        A numeric string cycle start day is accepted and converted.

        Raises:
            InvalidCycleStartDayError: If the cycle start day is outside 1-31
            HouseholdDataError: If a nested record is malformed
        """
        raw_day = data.get("cycleStartDay")
        if isinstance(raw_day, str) and raw_day.strip().isdigit():
            raw_day = int(raw_day.strip())
        periods = tuple(sorted(
            (period_from_dict(p) for p in data.get("periods") or []),
            key=lambda p: p.start_date
        ))
        return cls(
            id=str(_require(data, "id", "Person")),
            name=str(data.get("name") or ""),
            cycle_start_day=raw_day,
            periods=periods,
            exceptions=tuple(BudgetException.from_dict(e) for e in data.get("exceptions") or []),
        )


@dataclass(frozen=True)
class ActivePeriod:
    """Resolved current budget window, possibly displaced by an exception."""
    start: date
    end: date
    is_exception: bool = False
    exception: Optional[BudgetException] = None

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Budget:
    """Spending limit over a set of categories, owned by one person."""
    id: str
    amount: float
    categories: FrozenSet[str]
    owner_person_id: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "categories": sorted(self.categories),
            "ownerPersonId": self.owner_person_id,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Budget":
        raw_categories = data.get("categories") or []
        if isinstance(raw_categories, str):
            raw_categories = [raw_categories]
        try:
            amount = float(_require(data, "amount", "Budget"))
        except (TypeError, ValueError) as exc:
            raise HouseholdDataError(
                "Budget amount is not numeric",
                details={"value": data.get("amount")},
                original_error=exc
            ) from exc
        return cls(
            id=str(_require(data, "id", "Budget")),
            amount=amount,
            categories=frozenset(str(c) for c in raw_categories),
            owner_person_id=str(_require(data, "ownerPersonId", "Budget")),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Transaction:
    """
    A single money movement.

    Amounts are positive; ``kind`` carries the direction.
    ``reconciled_amount`` is the remaining balance counted once reconciled.
    """
    id: str
    date: date
    category: str
    amount: float
    kind: TransactionKind
    account_id: str
    is_reconciled: bool = False
    reconciled_amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "date": self.date.isoformat(),
            "category": self.category,
            "amount": self.amount,
            "kind": self.kind.value,
            "accountId": self.account_id,
            "isReconciled": self.is_reconciled,
        }
        if self.reconciled_amount is not None:
            data["reconciledAmount"] = self.reconciled_amount
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        raw_kind = str(_require(data, "kind", "Transaction")).lower()
        try:
            kind = TransactionKind(raw_kind)
            amount = float(_require(data, "amount", "Transaction"))
            reconciled = data.get("reconciledAmount")
            reconciled_amount = float(reconciled) if reconciled is not None else None
        except (TypeError, ValueError) as exc:
            raise HouseholdDataError(
                "Transaction has an invalid kind or amount",
                details={"id": data.get("id"), "kind": raw_kind},
                original_error=exc
            ) from exc
        return cls(
            id=str(_require(data, "id", "Transaction")),
            date=_date_field(data, "date", "Transaction"),
            category=str(data.get("category") or ""),
            amount=amount,
            kind=kind,
            account_id=str(_require(data, "accountId", "Transaction")),
            is_reconciled=bool(data.get("isReconciled", False)),
            reconciled_amount=reconciled_amount,
        )
