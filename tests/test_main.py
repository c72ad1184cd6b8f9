"""Tests for the command-line interface."""
import io
import logging
import unittest
import tempfile
import shutil
from contextlib import redirect_stdout
from pathlib import Path

import yaml

from coinary.main import main

PROJECT_CONFIG = Path(__file__).parent.parent / "coinary" / "config" / "config.yaml"


class TestMain(unittest.TestCase):
    """Run CLI commands against a temporary data directory."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        with open(PROJECT_CONFIG, encoding="utf-8") as f:
            config = yaml.safe_load(f)
        config["paths"] = {
            "data_dir": str(self.test_dir),
            "database_file": str(self.test_dir / "coinary.db"),
            "reminders_file": str(self.test_dir / "reminders.json"),
            "logs_dir": str(self.test_dir / "logs"),
        }
        self.config_path = self.test_dir / "config.yaml"
        self.config_path.write_text(yaml.safe_dump(config), encoding="utf-8")

    def tearDown(self):
        """Clean up test fixtures."""
        logger = logging.getLogger("coinary")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def run_cli(self, *argv) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            main(["--config", str(self.config_path), *argv])
        return out.getvalue()

    def test_add_income_and_summary(self):
        self.run_cli("add-income", "1500", "Salary", "--date", "02/05/2025")
        self.run_cli("add-expense", "400", "Food", "--date", "03/05/2025", "--description", "Market")

        output = self.run_cli("summary", "--month", "5", "--year", "2025")

        self.assertIn("Mar 2025", output)
        self.assertIn("May 2025", output)
        self.assertIn("1,100.00", output)

    def test_expense_without_funds_stops(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("add-expense", "50", "Food")
        self.assertEqual(ctx.exception.code, 2)

    def test_expense_as_debt(self):
        output = self.run_cli("add-expense", "50", "Food", "--as-debt")
        self.assertIn("Debt created instead of expense", output)

        debts = self.run_cli("debts")
        self.assertIn("Expense without funds: Food", debts)

    def test_debt_and_goal_commands(self):
        self.run_cli("add-income", "1000", "Salary")

        output = self.run_cli("add-debt", "300", "Loan", "Ana")
        debt_id = output.strip().rsplit("id=", 1)[1]
        self.assertIn("Debt settled: Loan", self.run_cli("pay-debt", debt_id, "300"))

        output = self.run_cli("add-goal", "Bike", "200")
        goal_id = output.strip().rsplit("id=", 1)[1]
        self.assertIn("50% of Bike", self.run_cli("contribute", goal_id, "100"))
        self.assertIn("Goal reached: Bike", self.run_cli("contribute", goal_id, "100"))

    def test_report_with_csv(self):
        self.run_cli("add-income", "1500", "Salary", "--date", "02/05/2025")
        csv_path = self.test_dir / "may.csv"

        output = self.run_cli("report", "--month", "5", "--year", "2025", "--csv", str(csv_path))

        self.assertIn("Salary", output)
        self.assertTrue(csv_path.exists())

    def test_invalid_month_exits_with_error(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("categories", "--month", "13", "--year", "2025")
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
