"""Tests for the SQLite record store."""
import unittest
import tempfile
import shutil
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from coinary.ledger.models import UNCATEGORIZED, MonetaryRecord, RecordKind
from coinary.store import Movement, SqliteRecordStore
from coinary.utils.exceptions import StoreError


class TestSqliteRecordStore(unittest.TestCase):
    """Test SqliteRecordStore functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.store = SqliteRecordStore(self.test_dir / "data" / "test.db")

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_add_and_fetch_month(self):
        self.store.add_record(RecordKind.EXPENSE, Decimal("12.50"), "Food", datetime(2025, 5, 1, 0, 0))
        self.store.add_record(RecordKind.EXPENSE, Decimal("7"), "Bus", datetime(2025, 5, 31, 23, 59, 59, 999000))
        self.store.add_record(RecordKind.EXPENSE, Decimal("99"), "Food", datetime(2025, 6, 1, 0, 0))
        self.store.add_record(RecordKind.INCOME, Decimal("1000"), "Salary", datetime(2025, 5, 15))

        expenses = self.store.fetch_month(RecordKind.EXPENSE, 5, 2025)
        incomes = self.store.fetch_month(RecordKind.INCOME, 5, 2025)

        self.assertEqual(sorted(r.amount for r in expenses), [Decimal("7"), Decimal("12.50")])
        self.assertEqual(len(incomes), 1)
        self.assertEqual(incomes[0].kind, RecordKind.INCOME)

    def test_records_round_trip_fields(self):
        added = self.store.add_record(
            RecordKind.EXPENSE, "4500", "", "07/05/2025 08:15", "Latte", is_ant_expense=True
        )

        fetched, = self.store.fetch_all(RecordKind.EXPENSE)

        self.assertEqual(fetched.id, added.id)
        self.assertEqual(fetched.amount, Decimal("4500"))
        self.assertEqual(fetched.category, UNCATEGORIZED)
        self.assertEqual(fetched.date, datetime(2025, 5, 7, 8, 15))
        self.assertEqual(fetched.description, "Latte")
        self.assertTrue(fetched.is_ant_expense)

    def test_update_and_delete_record(self):
        record = self.store.add_record(RecordKind.INCOME, Decimal("10"), "Gift", datetime(2025, 5, 1))
        self.store.update_record(MonetaryRecord(
            id=record.id, kind=RecordKind.INCOME, amount=Decimal("15"), category="Gift", date=record.date
        ))
        self.assertEqual(self.store.fetch_all(RecordKind.INCOME)[0].amount, Decimal("15"))

        self.store.delete_record(RecordKind.INCOME, record.id)
        self.assertEqual(self.store.fetch_all(RecordKind.INCOME), [])

    def test_update_missing_record_raises(self):
        with self.assertRaises(StoreError):
            self.store.update_record(MonetaryRecord(id="missing", kind=RecordKind.EXPENSE, amount=Decimal("1")))

    def test_count_recent(self):
        for day in (1, 5, 6):
            self.store.add_record(RecordKind.EXPENSE, Decimal("3000"), "Coffee", datetime(2025, 5, day, 9, 0))
        self.store.add_record(RecordKind.EXPENSE, Decimal("3000"), "Snacks", datetime(2025, 5, 6, 9, 0))

        self.assertEqual(self.store.count_recent(RecordKind.EXPENSE, "Coffee", datetime(2025, 5, 2)), 2)

    def test_debt_payments(self):
        debt = self.store.add_debt(Decimal("1000"), "Loan", "Ana", datetime(2025, 6, 30))

        partial = self.store.record_debt_payment(debt.id, Decimal("400"))
        self.assertFalse(partial.is_paid)
        self.assertEqual(partial.remaining_balance(), Decimal("600"))

        settled = self.store.record_debt_payment(debt.id, Decimal("600"))
        self.assertTrue(settled.is_paid)
        self.assertTrue(self.store.get_debts()[0].is_paid)

    def test_payment_on_missing_debt_raises(self):
        with self.assertRaises(StoreError):
            self.store.record_debt_payment("missing", Decimal("1"))

    def test_debt_payment_writes_movements_atomically(self):
        debt = self.store.add_debt(Decimal("1000"), "Loan", "Ana", None)
        payment = Movement(RecordKind.EXPENSE, Decimal("400"), "Debt Payment", datetime(2025, 5, 10), "Payment")

        self.store.record_debt_payment(debt.id, Decimal("400"), [payment])
        self.assertEqual(len(self.store.fetch_all(RecordKind.EXPENSE)), 1)

        with self.assertRaises(StoreError):
            self.store.record_debt_payment("missing", Decimal("400"), [payment])
        self.assertEqual(len(self.store.fetch_all(RecordKind.EXPENSE)), 1)

    def test_goal_contribution_on_missing_goal_keeps_no_movements(self):
        income = Movement(RecordKind.INCOME, Decimal("50"), "Other", datetime(2025, 5, 10))
        saving = Movement(RecordKind.EXPENSE, Decimal("50"), "Savings", datetime(2025, 5, 10))

        with self.assertRaises(StoreError):
            self.store.add_to_goal("missing", Decimal("50"), [income, saving])

        self.assertEqual(self.store.fetch_all(RecordKind.INCOME), [])
        self.assertEqual(self.store.fetch_all(RecordKind.EXPENSE), [])

    def test_goal_contributions(self):
        goal = self.store.add_goal("Bike", Decimal("500"), datetime(2025, 12, 1))

        self.assertFalse(self.store.add_to_goal(goal.id, Decimal("200")).is_completed)
        completed = self.store.add_to_goal(goal.id, Decimal("300"))

        self.assertTrue(completed.is_completed)
        self.assertEqual(self.store.get_goals()[0].current_amount, Decimal("500"))

        self.store.delete_goal(goal.id)
        self.assertEqual(self.store.get_goals(), [])


if __name__ == "__main__":
    unittest.main()
