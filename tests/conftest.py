from pathlib import Path

import pytest
import yaml

from holidays_calendar import HolidayCalendar
from models import Person


@pytest.fixture()
def no_easter_monday_calendar():
    """Holiday table without Easter Monday."""
    return HolidayCalendar(observe_easter_monday=False)


@pytest.fixture()
def make_person():
    """Factory for Person records with sensible defaults."""
    def _make(person_id="p1", cycle_start_day=1, periods=(), exceptions=(), name=""):
        return Person(
            id=person_id,
            name=name,
            cycle_start_day=cycle_start_day,
            periods=tuple(periods),
            exceptions=tuple(exceptions),
        )
    return _make


@pytest.fixture()
def household_data():
    """Raw household records in their persisted shape."""
    return {
        "people": [
            {
                "id": "anna",
                "name": "Anna",
                "cycleStartDay": 27,
                "periods": [
                    {"startDate": "2024-02-27", "isCompleted": False},
                    {"startDate": "2024-01-26", "isCompleted": True, "endDate": "2024-02-26"},
                ],
                "exceptions": [],
            },
            {
                "id": "marco",
                "name": "Marco",
                "cycleStartDay": 1,
                "periods": [],
                "exceptions": [
                    {
                        "id": "exception_4f1c2a9d0b7e",
                        "triggerDate": "2024-03-10",
                        "reason": "Early salary",
                        "createdAt": "2024-03-09T18:20:00+00:00",
                    }
                ],
            },
            {"id": "luca", "name": "Luca", "cycleStartDay": None},
        ],
        "accounts": [
            {"id": "joint", "name": "Joint checking", "members": ["anna", "marco"]},
            {"id": "marco-card", "name": "Marco credit card", "members": ["marco"]},
        ],
        "budgets": [
            {
                "id": "groceries",
                "amount": 400.0,
                "categories": ["groceries"],
                "ownerPersonId": "marco",
                "description": "Groceries",
            },
            {
                "id": "going-out",
                "amount": 150.0,
                "categories": ["restaurants", "bars"],
                "ownerPersonId": "marco",
                "description": "Going out",
            },
        ],
        "transactions": [
            {"id": "t1", "date": "2024-03-12", "category": "groceries", "amount": 82.4,
             "kind": "expense", "accountId": "joint"},
            {"id": "t2", "date": "2024-03-14", "category": "restaurants", "amount": 45.0,
             "kind": "expense", "accountId": "marco-card", "isReconciled": True, "reconciledAmount": 30.0},
            {"id": "t3", "date": "2024-03-15", "category": "groceries", "amount": 1500.0,
             "kind": "income", "accountId": "joint"},
            {"id": "t4", "date": "2024-03-16", "category": "transfer", "amount": 200.0,
             "kind": "transfer", "accountId": "joint"},
        ],
    }


@pytest.fixture()
def household_file(tmp_path: Path, household_data) -> Path:
    """Write the sample household to a temporary YAML file."""
    path = tmp_path / "household.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(household_data, f, sort_keys=False)
    return path
