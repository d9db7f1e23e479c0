"""
Household data file: the plain records the engine reads and writes.

The file is YAML with four top-level lists (people, accounts, budgets,
transactions) in the camelCase shapes produced by ``models``. Loading
validates every record; saving writes the same shapes back so periods and
exceptions round-trip exactly.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Union

import yaml

from exceptions import BudgetError, HouseholdDataError
from models import Budget, Person, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    """An account and the people who share it."""
    id: str
    name: str = ""
    members: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "members": sorted(self.members)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        if data.get("id") is None:
            raise HouseholdDataError("Account record is missing 'id'")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            members=frozenset(str(m) for m in data.get("members") or []),
        )


@dataclass(frozen=True)
class Household:
    """All records of one household data file."""
    people: Dict[str, Person] = field(default_factory=dict)
    accounts: Dict[str, Account] = field(default_factory=dict)
    budgets: List[Budget] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)

    @property
    def account_members(self) -> Dict[str, FrozenSet[str]]:
        """Lookup of account id to member person ids."""
        return {account_id: account.members for account_id, account in self.accounts.items()}

    def get_person(self, person_id: str) -> Person:
        """
        Return the person with ``person_id``.

        Raises:
            BudgetError: If the person is unknown
        """
        try:
            return self.people[person_id]
        except KeyError:
            raise BudgetError(
                f"Unknown person '{person_id}'",
                details={"known": ", ".join(self.people) or "none"}
            ) from None

    def budgets_for(self, person_id: str) -> List[Budget]:
        return [b for b in self.budgets if b.owner_person_id == person_id]

    def with_person(self, person: Person) -> "Household":
        """Return a household with ``person`` replaced (or added)."""
        people = dict(self.people)
        people[person.id] = person
        return replace(self, people=people)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "people": [p.to_dict() for p in self.people.values()],
            "accounts": [a.to_dict() for a in self.accounts.values()],
            "budgets": [b.to_dict() for b in self.budgets],
            "transactions": [t.to_dict() for t in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Household":
        people = [Person.from_dict(p) for p in data.get("people") or []]
        accounts = [Account.from_dict(a) for a in data.get("accounts") or []]
        return cls(
            people={p.id: p for p in people},
            accounts={a.id: a for a in accounts},
            budgets=[Budget.from_dict(b) for b in data.get("budgets") or []],
            transactions=[Transaction.from_dict(t) for t in data.get("transactions") or []],
        )


def load_household(path: Union[str, Path]) -> Household:
    """
    Load a household data file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed Household

    Raises:
        HouseholdDataError: If the file is missing, not valid YAML or has malformed records
        InvalidCycleStartDayError: If a person's cycle start day is outside 1-31
    """
    path = Path(path)
    if not path.exists():
        raise HouseholdDataError("Household file not found", details={"path": str(path)})

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise HouseholdDataError(
            "Household file is not valid YAML",
            details={"path": str(path)},
            original_error=exc
        ) from exc

    if not isinstance(data, dict):
        raise HouseholdDataError("Household file root must be a mapping", details={"path": str(path)})

    household = Household.from_dict(data)
    logger.info(
        "Loaded household from %s: %d people, %d budgets, %d transactions",
        path, len(household.people), len(household.budgets), len(household.transactions)
    )
    return household


def save_household(household: Household, path: Union[str, Path]) -> None:
    """Write a household back to its YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(household.to_dict(), f, default_flow_style=False, sort_keys=False)
    logger.info("Saved household to %s", path)
