"""Transaction aggregation engine.

Every function here is a pure transform over an already-fetched snapshot
of records: inputs are never mutated and every call builds new values.
Bad fields degrade per record (zero amount, fallback category, no date)
instead of failing the whole computation.
"""
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from coinary.utils.logger import get_logger
from coinary.utils.exceptions import ValidationError
from .models import (
    ZERO,
    DateWindow,
    MonetaryRecord,
    MonthlySummary,
    RangeTotals,
    RecordKind,
    TransactionFilter,
    coerce_amount,
    coerce_category,
)
from .windows import validate_month, week_window

logger = get_logger()

DayTotals = List[Tuple[int, Decimal]]
CategoryTotals = Dict[str, Decimal]


def partition(records: Iterable[MonetaryRecord]) -> Tuple[List[MonetaryRecord], List[MonetaryRecord]]:
    """
    Split a mixed list into incomes and expenses.

    Args:
        records: Records of either kind

    Returns:
        (incomes, expenses), each in input order
    """
    incomes: List[MonetaryRecord] = []
    expenses: List[MonetaryRecord] = []
    for record in records:
        if RecordKind(record.kind) is RecordKind.INCOME:
            incomes.append(record)
        else:
            expenses.append(record)
    return incomes, expenses


def total_amount(records: Iterable[MonetaryRecord]) -> Decimal:
    """Sum of amounts, malformed ones counting as zero."""
    return sum((coerce_amount(record.amount) for record in records), ZERO)


def net_balance(incomes: Iterable[MonetaryRecord], expenses: Iterable[MonetaryRecord]) -> Decimal:
    return total_amount(incomes) - total_amount(expenses)


def day_totals(records: Iterable[MonetaryRecord]) -> DayTotals:
    """
    Sum amounts per day of month.

    The caller must pass records of a single month; the month is not
    re-checked here. Records without a usable date are skipped.

    Returns:
        (day, total) pairs sorted by day
    """
    totals: Dict[int, Decimal] = defaultdict(Decimal)
    skipped = 0
    for record in records:
        moment = record.moment
        if moment is None:
            skipped += 1
            continue
        totals[moment.day] += coerce_amount(record.amount)

    if skipped:
        logger.debug(f"Skipped {skipped} records without a usable date in day totals")

    return sorted(totals.items())


def category_totals(records: Iterable[MonetaryRecord]) -> CategoryTotals:
    """
    Sum amounts per category.

    Missing or blank categories share the fallback bucket. Keys keep the
    order in which each category was first seen.
    """
    totals: CategoryTotals = {}
    for record in records:
        category = coerce_category(record.category)
        totals[category] = totals.get(category, ZERO) + coerce_amount(record.amount)
    return totals


def top_categories(totals: CategoryTotals, limit: Optional[int] = None) -> List[Tuple[str, Decimal]]:
    """Categories by descending total; ties keep first-seen order."""
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 0):
        raise ValidationError(f"Limit must be a non-negative integer, got {limit!r}")

    # sorted() is stable, so equal totals stay in insertion order
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


def records_in_window(records: Iterable[MonetaryRecord], window: DateWindow) -> List[MonetaryRecord]:
    """Records whose date falls inside the inclusive window."""
    return [record for record in records if window.contains(record.moment)]


def weekly_category_totals(reference: datetime, expenses: Iterable[MonetaryRecord]) -> CategoryTotals:
    """Category totals for the Monday-Sunday week containing reference."""
    window = week_window(reference)
    in_week = records_in_window(expenses, window)
    logger.debug(
        f"Week {window.start:%Y-%m-%d} - {window.end:%Y-%m-%d}: {len(in_week)} expenses"
    )
    return category_totals(in_week)


def summarize_month(
    month: int,
    year: int,
    incomes: Iterable[MonetaryRecord],
    expenses: Iterable[MonetaryRecord]
) -> MonthlySummary:
    """Sum one month's already-fetched incomes and expenses."""
    validate_month(month)
    return MonthlySummary(
        month=month,
        year=year,
        total_income=total_amount(incomes),
        total_expense=total_amount(expenses)
    )


def range_totals(incomes: Sequence[MonetaryRecord], expenses: Sequence[MonetaryRecord]) -> RangeTotals:
    """Dashboard totals for records already restricted to one window."""
    return RangeTotals(
        total_income=total_amount(incomes),
        total_expense=total_amount(expenses),
        expenses_by_category=category_totals(expenses)
    )


def filter_transactions(
    incomes: Sequence[MonetaryRecord],
    expenses: Sequence[MonetaryRecord],
    transaction_filter: Union[TransactionFilter, str] = TransactionFilter.ALL
) -> List[MonetaryRecord]:
    """
    Transaction listing, newest first.

    Records without a usable date go last, in input order.
    """
    transaction_filter = TransactionFilter(transaction_filter)
    if transaction_filter is TransactionFilter.INCOME:
        selected = list(incomes)
    elif transaction_filter is TransactionFilter.EXPENSE:
        selected = list(expenses)
    else:
        selected = list(incomes) + list(expenses)

    dated = [record for record in selected if record.moment is not None]
    undated = [record for record in selected if record.moment is None]
    dated.sort(key=lambda record: record.moment, reverse=True)
    return dated + undated
