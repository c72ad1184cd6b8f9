"""Reports built from ledger aggregates."""
from .monthly import MonthlyReport, build_monthly_report, write_report_csv
from .context import build_financial_context

__all__ = ["MonthlyReport", "build_monthly_report", "write_report_csv", "build_financial_context"]
