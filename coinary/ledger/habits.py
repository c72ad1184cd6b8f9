"""Spending habit detection."""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List

from .models import ZERO, MonetaryRecord, coerce_amount

ANT_EXPENSE_MAX_AMOUNT = Decimal("9000")
ANT_EXPENSE_MIN_REPEATS = 2
ANT_EXPENSE_LOOKBACK_DAYS = 7

SMALL_EXPENSE_SHARE = Decimal("0.05")
SMALL_EXPENSE_MIN_OCCURRENCES = 3


def is_ant_expense(
    amount: Decimal,
    past_frequency: int,
    max_amount: Decimal = ANT_EXPENSE_MAX_AMOUNT,
    min_repeats: int = ANT_EXPENSE_MIN_REPEATS
) -> bool:
    """
    Decide whether a new expense is an "ant expense".

    An ant expense is cheap and recurring: the amount is at most max_amount
    and the same category was already bought at least min_repeats times in
    the lookback period (so the new one is the third or later).
    """
    return coerce_amount(amount) <= max_amount and past_frequency >= min_repeats


def ant_expenses(expenses: Iterable[MonetaryRecord]) -> List[MonetaryRecord]:
    """Expenses flagged as ant expenses when they were recorded."""
    return [expense for expense in expenses if expense.is_ant_expense]


def insufficient_funds(amount: Decimal, balance: Decimal) -> bool:
    return coerce_amount(amount) > balance


def small_frequent_expenses(
    expenses: Iterable[MonetaryRecord],
    share: Decimal = SMALL_EXPENSE_SHARE,
    min_occurrences: int = SMALL_EXPENSE_MIN_OCCURRENCES
) -> Dict[str, Decimal]:
    """
    Descriptions that repeat often but add up to little.

    Args:
        expenses: Expenses to inspect
        share: Upper bound on a description's share of total spending
        min_occurrences: Minimum number of times a description must appear

    Returns:
        Mapping of description -> summed amount
    """
    expenses = list(expenses)
    overall = sum((coerce_amount(expense.amount) for expense in expenses), ZERO)

    counts: Dict[str, int] = defaultdict(int)
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for expense in expenses:
        description = (expense.description or "").strip()
        if not description:
            continue
        counts[description] += 1
        totals[description] += coerce_amount(expense.amount)

    limit = overall * share
    return {
        description: total
        for description, total in totals.items()
        if counts[description] >= min_occurrences and total < limit
    }
