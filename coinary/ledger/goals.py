"""Debts and savings goals."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from coinary.utils.exceptions import ValidationError
from .models import ZERO, coerce_amount

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Debt:
    """Money owed to a creditor."""
    id: str
    amount: Decimal
    description: str
    creditor: str
    due_date: Optional[datetime] = None
    is_paid: bool = False
    amount_paid: Decimal = ZERO

    def remaining_balance(self) -> Decimal:
        return self.amount - self.amount_paid

    def progress_percentage(self) -> Decimal:
        if self.amount <= 0:
            return ZERO
        return self.amount_paid / self.amount * HUNDRED


@dataclass(frozen=True)
class SavingsGoal:
    """A savings target with a deadline."""
    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = ZERO
    deadline: Optional[datetime] = None
    is_completed: bool = False

    def remaining_amount(self) -> Decimal:
        return self.target_amount - self.current_amount

    def progress_percentage(self) -> Decimal:
        if self.target_amount <= 0:
            return ZERO
        return self.current_amount / self.target_amount * HUNDRED


def validate_debt(amount: Decimal, description: str, creditor: str) -> None:
    if coerce_amount(amount) <= 0 or not (description or "").strip() or not (creditor or "").strip():
        raise ValidationError("Please complete all fields correctly.")


def validate_goal(name: str, target_amount: Decimal) -> None:
    if not (name or "").strip():
        raise ValidationError("Goal name is required")
    if coerce_amount(target_amount) <= 0:
        raise ValidationError("Goal target must be positive")


def validate_debt_payment(debt: Debt, payment: Decimal, balance: Decimal, from_new_income: bool) -> None:
    """
    Check that a payment can be applied to a debt.

    Args:
        debt: Debt being paid
        payment: Payment amount
        balance: Current all-time balance
        from_new_income: Whether the payment is backed by a new income

    Raises:
        ValidationError: When the payment must be rejected
    """
    payment = coerce_amount(payment)
    if debt.is_paid:
        raise ValidationError("This debt is already fully paid.")
    if payment <= 0:
        raise ValidationError("Invalid amount")
    remaining = debt.remaining_balance()
    if payment > remaining:
        raise ValidationError(f"You only need to pay {remaining:,.2f} to settle this debt.")
    if not from_new_income and payment > balance:
        raise ValidationError(f"Insufficient balance. You have: {balance:,.2f}")


def validate_goal_contribution(goal: SavingsGoal, amount: Decimal, balance: Decimal, from_new_income: bool) -> None:
    """Check that a contribution can be applied to a savings goal."""
    amount = coerce_amount(amount)
    if amount <= 0:
        raise ValidationError("Invalid amount")
    if goal.is_completed:
        raise ValidationError("This goal is already completed.")
    remaining = goal.remaining_amount()
    if amount > remaining:
        raise ValidationError(f"You only need to contribute {remaining:,.2f} to complete this goal.")
    if not from_new_income and amount > balance:
        raise ValidationError(f"Insufficient balance. You have: {balance:,.2f}")
