"""Coinary: personal-finance ledger and aggregation engine."""

__version__ = "1.0.0"
