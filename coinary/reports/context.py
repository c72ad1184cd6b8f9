"""Plain-text financial brief used to prime the advisor."""
import calendar
from decimal import Decimal
from typing import List, Sequence

from coinary.ledger.aggregator import category_totals, top_categories, total_amount
from coinary.ledger.habits import small_frequent_expenses
from coinary.orchestrator.summary import MonthSnapshot

FIXED_CATEGORIES = ("Housing", "Transport")


def build_financial_context(history: Sequence[MonthSnapshot]) -> str:
    """
    Summarize a window of months for the advisor.

    Args:
        history: Month snapshots, oldest first

    Returns:
        Multi-line text brief
    """
    months = max(len(history), 1)
    all_incomes = [record for snapshot in history for record in snapshot.incomes]
    all_expenses = [record for snapshot in history for record in snapshot.expenses]
    overall_income = total_amount(all_incomes)
    overall_expense = total_amount(all_expenses)

    lines: List[str] = ["Detailed financial analysis:"]

    lines.append("")
    lines.append(f"* Summary of the last {len(history)} months:")
    lines.append(f"- Total income: {overall_income:.2f}")
    lines.append(f"- Total expenses: {overall_expense:.2f}")

    if all_expenses:
        ranked = top_categories(category_totals(all_expenses))

        lines.append("")
        lines.append("* Expense distribution:")
        for category, total in ranked:
            lines.append(f"- {category}: {total:.2f} total ({total / months:.2f}/month)")

        lines.append("")
        lines.append("* Detected patterns:")
        variable = [(category, total) for category, total in ranked if category not in FIXED_CATEGORIES]
        if variable:
            category, total = variable[0]
            lines.append(f"- Highest variable expense: {category} ({total / months:.2f}/month)")

        small_frequent = small_frequent_expenses(all_expenses)
        if small_frequent:
            lines.append(f"- Possible ant expenses: {len(small_frequent)} distinct descriptions identified")

    lines.append("")
    lines.append("* Monthly evolution:")
    for snapshot in history:
        income = total_amount(snapshot.incomes)
        savings = income - total_amount(snapshot.expenses)
        label = f"{calendar.month_name[snapshot.month]} {snapshot.year}"
        if income > 0:
            rate = savings * Decimal("100") / income
            lines.append(f"- {label}: {savings:.2f} ({rate:.0f}% savings)")
        else:
            lines.append(f"- {label}: {savings:.2f}")
        if snapshot.failed:
            lines[-1] += " (data unavailable)"

    return "\n".join(lines)
