"""
Spend aggregation against budgets within a resolved period window.

Only expense transactions count toward a budget: income and transfers are
always excluded. A transaction belongs to a budget owner when the owner is
a member of the transaction's account; account membership and the
effective amount of a transaction are supplied by the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Collection, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Union

from models import ActivePeriod, Budget, PeriodWindow, Transaction, TransactionKind

logger = logging.getLogger(__name__)

TRANSFER_CATEGORY = "transfer"

EffectiveAmount = Callable[[Transaction], float]
AccountMembers = Mapping[str, Collection[str]]
Window = Union[PeriodWindow, ActivePeriod]


@dataclass
class BudgetStatus:
    """
    Status of a budget within a period.

    Attributes:
        budget_id: Budget identifier
        description: Budget description
        allocated: Budget amount
        spent: Amount spent in the window
        remaining: allocated - spent
        percentage_used: Percentage of the budget used
    """
    budget_id: str
    description: str
    allocated: float
    spent: float
    remaining: float
    percentage_used: float


def default_effective_amount(transaction: Transaction) -> float:
    """Return the reconciled remaining balance when available, else the nominal amount."""
    if transaction.is_reconciled and transaction.reconciled_amount is not None:
        return transaction.reconciled_amount
    return transaction.amount


def _budget_categories(budget: Budget) -> FrozenSet[str]:
    raw: Any = getattr(budget, "categories", None)
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        return frozenset({raw})
    try:
        return frozenset(str(c) for c in raw if c is not None)
    except TypeError:
        logger.warning("Budget %s has malformed categories: %r", getattr(budget, "id", "?"), raw)
        return frozenset()


def _members(account_members: Optional[AccountMembers], account_id: str) -> Collection[str]:
    if not account_members:
        return ()
    return account_members.get(account_id) or ()


def matching_transactions(
    budget: Budget,
    transactions: Iterable[Transaction],
    window: Window,
    account_members: Optional[AccountMembers]
) -> Iterator[Transaction]:
    """Yield the expense transactions that count toward ``budget`` in ``window``."""
    categories = _budget_categories(budget)
    if not categories:
        return
    for transaction in transactions:
        if transaction.kind != TransactionKind.EXPENSE:
            continue
        if transaction.category == TRANSFER_CATEGORY or transaction.category not in categories:
            continue
        if not window.start <= transaction.date <= window.end:
            continue
        if budget.owner_person_id not in _members(account_members, transaction.account_id):
            continue
        yield transaction


def spent_for_budget(
    budget: Budget,
    transactions: Iterable[Transaction],
    window: Window,
    account_members: Optional[AccountMembers],
    effective_amount: EffectiveAmount = default_effective_amount
) -> float:
    """
    Sum the spend counted against a budget within a window.

    Args:
        budget: Budget to aggregate for
        transactions: Candidate transactions
        window: Inclusive date window (PeriodWindow or ActivePeriod)
        account_members: Lookup of account id to member person ids
        effective_amount: Amount counted per transaction

    Returns:
        Total spent; 0.0 when nothing matches
    """
    total = 0.0
    for transaction in matching_transactions(budget, transactions, window, account_members):
        total += effective_amount(transaction)
    logger.debug(
        "Budget %s spent %.2f between %s and %s",
        budget.id, total, window.start, window.end
    )
    return total


def budget_status(
    budget: Budget,
    transactions: Iterable[Transaction],
    window: Window,
    account_members: Optional[AccountMembers],
    effective_amount: EffectiveAmount = default_effective_amount
) -> BudgetStatus:
    """Build the status of one budget within a window."""
    spent = spent_for_budget(budget, transactions, window, account_members, effective_amount)
    allocated = float(budget.amount)
    percentage = (spent / allocated * 100) if allocated > 0 else 0.0
    return BudgetStatus(
        budget_id=budget.id,
        description=budget.description,
        allocated=allocated,
        spent=spent,
        remaining=allocated - spent,
        percentage_used=percentage,
    )


def budget_statuses(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    window: Window,
    account_members: Optional[AccountMembers],
    person_id: Optional[str] = None,
    effective_amount: EffectiveAmount = default_effective_amount
) -> List[BudgetStatus]:
    """Build statuses for every budget (optionally only those owned by ``person_id``)."""
    transactions = list(transactions)
    return [
        budget_status(budget, transactions, window, account_members, effective_amount)
        for budget in budgets
        if person_id is None or budget.owner_person_id == person_id
    ]


def period_totals(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    window: Window,
    account_members: Optional[AccountMembers],
    person_id: str,
    effective_amount: EffectiveAmount = default_effective_amount
) -> Dict[str, Any]:
    """
    Summarize a person's spend across their budgets for one period.

    Only budgets owned by ``person_id`` with a positive amount are counted.
    A transaction matched by several budgets counts once in
    ``category_spending``.

    Returns:
        Dictionary with total_budget, total_spent, total_saved and
        category_spending (category -> amount)
    """
    transactions = list(transactions)
    valid = [b for b in budgets if b.owner_person_id == person_id and b.amount > 0]

    total_budget = 0.0
    total_spent = 0.0
    seen = set()
    category_spending: Dict[str, float] = {}
    for budget in valid:
        total_budget += budget.amount
        for transaction in matching_transactions(budget, transactions, window, account_members):
            amount = effective_amount(transaction)
            total_spent += amount
            if transaction.id in seen:
                continue
            seen.add(transaction.id)
            category_spending[transaction.category] = category_spending.get(transaction.category, 0.0) + amount

    return {
        "total_budget": total_budget,
        "total_spent": total_spent,
        "total_saved": max(0.0, total_budget - total_spent),
        "category_spending": category_spending,
    }
