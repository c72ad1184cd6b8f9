"""Tests for the aggregation engine."""
import unittest
from datetime import datetime
from decimal import Decimal

from coinary.ledger.aggregator import (
    category_totals,
    day_totals,
    filter_transactions,
    net_balance,
    partition,
    range_totals,
    summarize_month,
    top_categories,
    total_amount,
    weekly_category_totals,
)
from coinary.ledger.models import UNCATEGORIZED, MonetaryRecord, RecordKind, TransactionFilter
from coinary.utils.exceptions import ValidationError


def income(amount, category="Salary", date=None, record_id="i"):
    return MonetaryRecord(id=record_id, kind=RecordKind.INCOME, amount=Decimal(amount), category=category, date=date)


def expense(amount, category="Food", date=None, record_id="e", description=""):
    return MonetaryRecord(
        id=record_id,
        kind=RecordKind.EXPENSE,
        amount=Decimal(amount),
        category=category,
        date=date,
        description=description
    )


class TestPartition(unittest.TestCase):
    """Test splitting records by kind."""

    def test_partition_keeps_order_and_kind(self):
        records = [
            income("100", record_id="i1"),
            expense("10", record_id="e1"),
            income("200", record_id="i2"),
            expense("20", record_id="e2"),
        ]

        incomes, expenses = partition(records)

        self.assertEqual([r.id for r in incomes], ["i1", "i2"])
        self.assertEqual([r.id for r in expenses], ["e1", "e2"])
        self.assertEqual(len(incomes) + len(expenses), len(records))

    def test_partition_empty(self):
        self.assertEqual(partition([]), ([], []))


class TestTotals(unittest.TestCase):
    """Test sums and balances."""

    def test_total_amount_counts_malformed_as_zero(self):
        records = [
            expense("10.50"),
            MonetaryRecord(id="x", kind=RecordKind.EXPENSE, amount="not a number"),
            MonetaryRecord(id="y", kind=RecordKind.EXPENSE, amount=None),
        ]
        self.assertEqual(total_amount(records), Decimal("10.50"))

    def test_net_balance(self):
        self.assertEqual(
            net_balance([income("1000"), income("500")], [expense("300")]),
            Decimal("1200")
        )

    def test_summarize_month(self):
        summary = summarize_month(5, 2025, [income("1000")], [expense("250"), expense("50")])

        self.assertEqual(summary.month, 5)
        self.assertEqual(summary.total_income, Decimal("1000"))
        self.assertEqual(summary.total_expense, Decimal("300"))
        self.assertEqual(summary.net_balance, Decimal("700"))

    def test_summarize_month_rejects_bad_month(self):
        with self.assertRaises(ValidationError):
            summarize_month(13, 2025, [], [])

    def test_range_totals(self):
        totals = range_totals([income("900")], [expense("100", "Food"), expense("50", "Bus")])

        self.assertEqual(totals.net_balance, Decimal("750"))
        self.assertEqual(totals.expenses_by_category, {"Food": Decimal("100"), "Bus": Decimal("50")})


class TestDayTotals(unittest.TestCase):
    """Test day-of-month buckets."""

    def test_day_totals_sorted_by_day(self):
        records = [
            expense("30", date=datetime(2025, 5, 20, 10, 0)),
            expense("10", date=datetime(2025, 5, 3, 8, 0)),
            expense("5", date=datetime(2025, 5, 20, 23, 59)),
        ]

        self.assertEqual(day_totals(records), [(3, Decimal("10")), (20, Decimal("35"))])

    def test_day_totals_skips_undated_records(self):
        records = [expense("30", date=datetime(2025, 5, 1)), expense("99"), expense("1", date="garbage")]
        self.assertEqual(day_totals(records), [(1, Decimal("30"))])

    def test_day_totals_accepts_string_dates(self):
        records = [expense("12", date="07/05/2025 14:30")]
        self.assertEqual(day_totals(records), [(7, Decimal("12"))])


class TestCategoryTotals(unittest.TestCase):
    """Test per-category sums."""

    def test_missing_categories_use_fallback(self):
        records = [
            expense("10", category="Food"),
            expense("20", category=""),
            expense("5", category=None),
            expense("7", category="   "),
        ]

        totals = category_totals(records)

        self.assertEqual(totals, {"Food": Decimal("10"), UNCATEGORIZED: Decimal("32")})

    def test_sum_is_conserved(self):
        records = [expense("10", "A"), expense("2.5", "B"), expense("7.5", "A"), expense("1", None)]
        self.assertEqual(sum(category_totals(records).values()), total_amount(records))

    def test_repeated_calls_give_equal_results(self):
        records = [expense("10", "A"), expense("20", "B")]
        self.assertEqual(category_totals(records), category_totals(records))

    def test_top_categories_ties_keep_first_seen_order(self):
        totals = {"B": Decimal("10"), "A": Decimal("30"), "C": Decimal("10")}

        self.assertEqual(
            top_categories(totals),
            [("A", Decimal("30")), ("B", Decimal("10")), ("C", Decimal("10"))]
        )
        self.assertEqual(top_categories(totals, 1), [("A", Decimal("30"))])

    def test_top_categories_rejects_negative_limit(self):
        with self.assertRaises(ValidationError):
            top_categories({}, -1)


class TestWeeklyCategoryTotals(unittest.TestCase):
    """Test the Monday-Sunday weekly window."""

    def test_weekly_totals_for_wednesday_reference(self):
        # Wednesday 2025-05-14; the week runs Mon 12th to Sun 18th
        reference = datetime(2025, 5, 14, 12, 0)
        expenses = [
            expense("40000", "Food", datetime(2025, 5, 12, 0, 0)),
            expense("20000", "Food", datetime(2025, 5, 18, 23, 59, 59)),
            expense("60000", "Rent", datetime(2025, 5, 15, 9, 0)),
            expense("999", "Food", datetime(2025, 5, 11, 23, 59, 59)),
            expense("888", "Food", datetime(2025, 5, 19, 0, 0)),
        ]

        totals = weekly_category_totals(reference, expenses)

        self.assertEqual(totals, {"Food": Decimal("60000"), "Rent": Decimal("60000")})

    def test_empty_week(self):
        self.assertEqual(weekly_category_totals(datetime(2025, 5, 14), []), {})


class TestFilterTransactions(unittest.TestCase):
    """Test transaction listings."""

    def setUp(self):
        self.incomes = [income("100", date=datetime(2025, 5, 2), record_id="i1")]
        self.expenses = [
            expense("10", date=datetime(2025, 5, 1), record_id="e1"),
            expense("20", record_id="e2"),
            expense("30", date=datetime(2025, 5, 9), record_id="e3"),
        ]

    def test_all_newest_first_undated_last(self):
        listing = filter_transactions(self.incomes, self.expenses)
        self.assertEqual([r.id for r in listing], ["e3", "i1", "e1", "e2"])

    def test_filter_by_kind(self):
        self.assertEqual(
            [r.id for r in filter_transactions(self.incomes, self.expenses, TransactionFilter.INCOME)],
            ["i1"]
        )
        self.assertEqual(
            [r.id for r in filter_transactions(self.incomes, self.expenses, "expense")],
            ["e3", "e1", "e2"]
        )


if __name__ == "__main__":
    unittest.main()
