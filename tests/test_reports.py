"""Tests for monthly reports and the advisor context."""
import csv
import unittest
import tempfile
import shutil
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from coinary.ledger.models import MonetaryRecord, RecordKind, TransactionFilter
from coinary.orchestrator import MonthSnapshot
from coinary.reports import build_financial_context, build_monthly_report, write_report_csv
from coinary.store import SqliteRecordStore


class TestMonthlyReport(unittest.TestCase):
    """Test report assembly and CSV export."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.store = SqliteRecordStore(self.test_dir / "ledger.db")
        self.store.add_record(RecordKind.INCOME, Decimal("2000"), "Salary", datetime(2025, 5, 1, 9, 0), "May pay")
        self.store.add_record(RecordKind.EXPENSE, Decimal("300"), "Food", datetime(2025, 5, 3, 13, 0), "Market")
        self.store.add_record(RecordKind.EXPENSE, Decimal("150.50"), "Transport", datetime(2025, 5, 3, 18, 0))
        self.store.add_record(RecordKind.EXPENSE, Decimal("999"), "Food", datetime(2025, 4, 30, 23, 0))

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_build_report(self):
        report = build_monthly_report(self.store, 5, 2025)

        self.assertFalse(report.is_empty)
        self.assertEqual(len(report.transactions), 3)
        self.assertEqual(report.transactions[0].category, "Transport")
        self.assertEqual(report.summary.net_balance, Decimal("1549.50"))
        self.assertEqual(report.expense_by_day, [(3, Decimal("450.50"))])
        self.assertEqual(report.expense_by_category["Food"], Decimal("300"))

    def test_filtered_report_keeps_full_summary(self):
        report = build_monthly_report(self.store, 5, 2025, "income")

        self.assertEqual([r.kind for r in report.transactions], [RecordKind.INCOME])
        self.assertEqual(report.summary.total_expense, Decimal("450.50"))

    def test_empty_month(self):
        self.assertTrue(build_monthly_report(self.store, 1, 2025).is_empty)

    def test_write_csv(self):
        report = build_monthly_report(self.store, 5, 2025)
        path = write_report_csv(report, self.test_dir / "out" / "may.csv")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        self.assertEqual(rows[0], ["date", "kind", "category", "description", "amount"])
        self.assertEqual(rows[3], ["01/05/2025", "income", "Salary", "May pay", "2000"])
        self.assertEqual(rows[4], [])
        self.assertEqual(rows[5][0], "Total income")
        self.assertEqual(rows[-1], ["Net balance", "", "", "", "1549.50"])

    def test_write_csv_expense_footer_only(self):
        report = build_monthly_report(self.store, 5, 2025, TransactionFilter.EXPENSE)
        path = write_report_csv(report, self.test_dir / "expenses.csv")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        self.assertEqual(rows[-1], ["Total expense", "", "", "", "450.50"])
        self.assertNotIn("Total income", [row[0] for row in rows if row])


class TestFinancialContext(unittest.TestCase):
    """Test the advisor brief."""

    def _expense(self, amount, category, description="", day=1, month=5):
        return MonetaryRecord(
            id=f"{category}-{amount}-{day}",
            kind=RecordKind.EXPENSE,
            amount=Decimal(amount),
            category=category,
            date=datetime(2025, month, day),
            description=description
        )

    def test_context_sections(self):
        income = MonetaryRecord(id="i", kind=RecordKind.INCOME, amount=Decimal("1000"), category="Salary",
                                date=datetime(2025, 5, 1))
        expenses = [
            self._expense("500", "Housing"),
            self._expense("200", "Food"),
            self._expense("5", "Coffee", "Latte", 2),
            self._expense("5", "Coffee", "Latte", 3),
            self._expense("5", "Coffee", "Latte", 4),
        ]
        history = [
            MonthSnapshot(month=4, year=2025, failed=True),
            MonthSnapshot(month=5, year=2025, incomes=[income], expenses=expenses),
        ]

        context = build_financial_context(history)

        self.assertTrue(context.startswith("Detailed financial analysis:"))
        self.assertIn("* Summary of the last 2 months:", context)
        self.assertIn("- Total income: 1000.00", context)
        self.assertIn("- Housing: 500.00 total (250.00/month)", context)
        self.assertIn("- Highest variable expense: Food (100.00/month)", context)
        self.assertIn("- Possible ant expenses: 1 distinct descriptions identified", context)
        self.assertIn("- April 2025: 0.00 (data unavailable)", context)
        self.assertIn("- May 2025: 285.00 (28% savings)", context)

    def test_context_without_expenses(self):
        context = build_financial_context([MonthSnapshot(month=5, year=2025)])

        self.assertNotIn("* Expense distribution:", context)
        self.assertIn("- May 2025: 0.00", context)


if __name__ == "__main__":
    unittest.main()
