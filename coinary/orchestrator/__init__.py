"""Orchestration of store fetches and ledger write flows."""
from .summary import MonthSnapshot, SummaryOrchestrator
from .service import ExpenseCheck, LedgerService

__all__ = ["MonthSnapshot", "SummaryOrchestrator", "ExpenseCheck", "LedgerService"]
