"""AI financial advisor."""
from .gemini import FinancialAdvisor

__all__ = ["FinancialAdvisor"]
