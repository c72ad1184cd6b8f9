"""Ledger records and the aggregation engine."""
from .models import (
    UNCATEGORIZED,
    DateWindow,
    MonetaryRecord,
    MonthlySummary,
    RangeTotals,
    RecordDocument,
    RecordKind,
    TimeRange,
    TransactionFilter,
)
from .windows import month_window, rolling_months, time_range_window, week_window
from .aggregator import (
    category_totals,
    day_totals,
    filter_transactions,
    net_balance,
    partition,
    range_totals,
    records_in_window,
    summarize_month,
    top_categories,
    total_amount,
    weekly_category_totals,
)
from .goals import Debt, SavingsGoal

__all__ = [
    "UNCATEGORIZED",
    "DateWindow",
    "MonetaryRecord",
    "MonthlySummary",
    "RangeTotals",
    "RecordDocument",
    "RecordKind",
    "TimeRange",
    "TransactionFilter",
    "month_window",
    "rolling_months",
    "time_range_window",
    "week_window",
    "category_totals",
    "day_totals",
    "filter_transactions",
    "net_balance",
    "partition",
    "range_totals",
    "records_in_window",
    "summarize_month",
    "top_categories",
    "total_amount",
    "weekly_category_totals",
    "Debt",
    "SavingsGoal",
]
