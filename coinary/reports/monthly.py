"""Monthly report assembly and export."""
import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from coinary.ledger.aggregator import (
    CategoryTotals,
    DayTotals,
    category_totals,
    day_totals,
    filter_transactions,
    partition,
    summarize_month,
    total_amount,
)
from coinary.ledger.models import MonetaryRecord, MonthlySummary, RecordKind, TransactionFilter
from coinary.store.base import RecordStore
from coinary.utils.logger import get_logger

logger = get_logger()

CSV_DATE_FORMAT = "%d/%m/%Y"
CSV_HEADER = ["date", "kind", "category", "description", "amount"]


@dataclass
class MonthlyReport:
    """Line items and aggregates for one month."""
    month: int
    year: int
    transaction_filter: TransactionFilter
    summary: MonthlySummary
    transactions: List[MonetaryRecord] = field(default_factory=list)
    income_by_category: CategoryTotals = field(default_factory=dict)
    expense_by_category: CategoryTotals = field(default_factory=dict)
    income_by_day: DayTotals = field(default_factory=list)
    expense_by_day: DayTotals = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.transactions


def build_monthly_report(
    store: RecordStore,
    month: int,
    year: int,
    transaction_filter: Union[TransactionFilter, str] = TransactionFilter.ALL
) -> MonthlyReport:
    """
    Fetch one month and assemble its report.

    Args:
        store: Persistence collaborator
        month: Month (1-12)
        year: Year
        transaction_filter: Which kinds the line items show

    Returns:
        MonthlyReport; aggregates always cover both kinds
    """
    incomes = store.fetch_month(RecordKind.INCOME, month, year)
    expenses = store.fetch_month(RecordKind.EXPENSE, month, year)
    transaction_filter = TransactionFilter(transaction_filter)

    report = MonthlyReport(
        month=month,
        year=year,
        transaction_filter=transaction_filter,
        summary=summarize_month(month, year, incomes, expenses),
        transactions=filter_transactions(incomes, expenses, transaction_filter),
        income_by_category=category_totals(incomes),
        expense_by_category=category_totals(expenses),
        income_by_day=day_totals(incomes),
        expense_by_day=day_totals(expenses)
    )
    logger.info(
        f"Report {month:02d}/{year} ({transaction_filter.value}): "
        f"{len(report.transactions)} transactions"
    )
    return report


def write_report_csv(report: MonthlyReport, path: Path) -> Path:
    """Write the report's line items with a totals footer."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    incomes, expenses = partition(report.transactions)

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for record in report.transactions:
            moment = record.moment
            writer.writerow([
                moment.strftime(CSV_DATE_FORMAT) if moment else "",
                record.kind.value,
                record.category,
                record.description,
                str(record.amount)
            ])

        writer.writerow([])
        if report.transaction_filter is not TransactionFilter.EXPENSE:
            writer.writerow(["Total income", "", "", "", str(total_amount(incomes))])
        if report.transaction_filter is not TransactionFilter.INCOME:
            writer.writerow(["Total expense", "", "", "", str(total_amount(expenses))])
        if report.transaction_filter is TransactionFilter.ALL:
            writer.writerow(["Net balance", "", "", "", str(total_amount(incomes) - total_amount(expenses))])

    logger.info(f"Report written to {path}")
    return path
