"""Ledger write flows: movements, debts and savings goals."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from coinary.ledger.aggregator import net_balance
from coinary.ledger.goals import (
    Debt,
    SavingsGoal,
    validate_debt,
    validate_debt_payment,
    validate_goal,
    validate_goal_contribution,
)
from coinary.ledger.habits import (
    ANT_EXPENSE_LOOKBACK_DAYS,
    ANT_EXPENSE_MAX_AMOUNT,
    ANT_EXPENSE_MIN_REPEATS,
    insufficient_funds,
    is_ant_expense,
)
from coinary.ledger.models import MonetaryRecord, RecordKind, coerce_amount
from coinary.reminders.scheduler import ReminderScheduler
from coinary.store.base import Movement, RecordStore
from coinary.utils.exceptions import StoreError, ValidationError
from coinary.utils.logger import get_logger

logger = get_logger()

AUTO_DEBT_CREDITOR = "Auto-generated (Coinary)"
DEBT_PAYMENT_CATEGORY = "Debt Payment"
SAVINGS_CATEGORY = "Savings"
OTHER_CATEGORY = "Other"


@dataclass(frozen=True)
class ExpenseCheck:
    """Outcome of checking an expense against the available balance."""
    amount: Decimal
    balance: Optional[Decimal]
    sufficient: bool

    @property
    def propose_debt(self) -> bool:
        return not self.sufficient


class LedgerService:
    """Applies user actions to the store and keeps reminders in step."""

    def __init__(
        self,
        store: RecordStore,
        scheduler: Optional[ReminderScheduler] = None,
        ant_max_amount: Decimal = ANT_EXPENSE_MAX_AMOUNT,
        ant_min_repeats: int = ANT_EXPENSE_MIN_REPEATS,
        ant_lookback_days: int = ANT_EXPENSE_LOOKBACK_DAYS
    ):
        self.store = store
        self.scheduler = scheduler
        self.ant_max_amount = ant_max_amount
        self.ant_min_repeats = ant_min_repeats
        self.ant_lookback_days = ant_lookback_days

    @classmethod
    def from_settings(cls, store: RecordStore, settings, scheduler: Optional[ReminderScheduler] = None) -> "LedgerService":
        return cls(
            store,
            scheduler=scheduler,
            ant_max_amount=settings.ant_expense_max_amount,
            ant_min_repeats=settings.ant_expense_min_repeats,
            ant_lookback_days=settings.ant_expense_lookback_days
        )

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    def current_balance(self) -> Decimal:
        """All-time incomes minus all-time expenses."""
        return net_balance(
            self.store.fetch_all(RecordKind.INCOME),
            self.store.fetch_all(RecordKind.EXPENSE)
        )

    def add_income(self, amount: Decimal, category: str, date: datetime, description: str = "") -> MonetaryRecord:
        if coerce_amount(amount) <= 0:
            raise ValidationError("Amount must be positive")
        record = self.store.add_record(RecordKind.INCOME, amount, category, date, description)
        logger.info(f"Income saved: {record.amount} ({record.category})")
        return record

    def check_expense(self, amount: Decimal) -> ExpenseCheck:
        """
        Compare an expense with the all-time balance.

        When the balance cannot be read the expense is let through.
        """
        amount = coerce_amount(amount)
        try:
            balance = self.current_balance()
        except StoreError as e:
            logger.warning(f"Balance unavailable, saving expense without funds check: {e}")
            return ExpenseCheck(amount=amount, balance=None, sufficient=True)
        return ExpenseCheck(amount=amount, balance=balance, sufficient=not insufficient_funds(amount, balance))

    def add_expense(
        self,
        amount: Decimal,
        category: str,
        date: datetime,
        description: str = "",
        now: Optional[datetime] = None
    ) -> MonetaryRecord:
        """
        Save an expense, flagging it as an ant expense when it is cheap and recurring.

        If the recent-frequency lookup fails the expense is saved unflagged.
        """
        if coerce_amount(amount) <= 0:
            raise ValidationError("Amount must be positive")

        since = (now or datetime.now()) - timedelta(days=self.ant_lookback_days)
        try:
            past_frequency = self.store.count_recent(RecordKind.EXPENSE, category, since)
            ant = is_ant_expense(amount, past_frequency, self.ant_max_amount, self.ant_min_repeats)
        except StoreError as e:
            logger.warning(f"Ant expense check failed, saving without analysis: {e}")
            ant = False

        record = self.store.add_record(RecordKind.EXPENSE, amount, category, date, description, is_ant_expense=ant)
        if ant:
            logger.info(f"Ant expense habit detected ({record.category}): {record.amount}")
        else:
            logger.info(f"Expense saved: {record.amount} ({record.category})")
        return record

    def create_debt_for_expense(self, amount: Decimal, description: str, now: Optional[datetime] = None) -> Debt:
        """Record an expense the balance cannot cover as a debt due now."""
        return self.add_debt(
            amount,
            f"Expense without funds: {description}",
            AUTO_DEBT_CREDITOR,
            now or datetime.now(),
            now=now
        )

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def _find_debt(self, debt_id: str) -> Debt:
        debt = next((d for d in self.store.get_debts() if d.id == debt_id), None)
        if debt is None:
            raise ValidationError("Debt not found")
        return debt

    def add_debt(
        self,
        amount: Decimal,
        description: str,
        creditor: str,
        due_date: datetime,
        now: Optional[datetime] = None
    ) -> Debt:
        validate_debt(amount, description, creditor)
        debt = self.store.add_debt(amount, description.strip(), creditor.strip(), due_date)
        logger.info(f"Debt created: {debt.description} ({debt.amount}) owed to {debt.creditor}")
        if self.scheduler and debt.due_date:
            self.scheduler.schedule_debt_reminders(debt.id, debt.description, debt.due_date, now)
        return debt

    def pay_debt(
        self,
        debt_id: str,
        payment: Decimal,
        from_new_income: bool = False,
        now: Optional[datetime] = None
    ) -> Debt:
        """
        Apply a payment to a debt.

        The payment is recorded as a "Debt Payment" expense; when it is
        backed by new income, a matching income is recorded too. Both are
        written in the same store transaction as the debt update.
        """
        debt = self._find_debt(debt_id)
        balance = self.current_balance() if not from_new_income else Decimal("0")
        validate_debt_payment(debt, payment, balance, from_new_income)

        now = now or datetime.now()
        payment = coerce_amount(payment)
        movements = []
        if from_new_income:
            movements.append(Movement(RecordKind.INCOME, payment, OTHER_CATEGORY, now, f"Income for debt: {debt.description}"))
        movements.append(Movement(RecordKind.EXPENSE, payment, DEBT_PAYMENT_CATEGORY, now, f"Payment for debt: {debt.description}"))

        updated = self.store.record_debt_payment(debt_id, payment, movements)
        logger.info(f"Payment of {payment} registered for debt {debt_id}, remaining {updated.remaining_balance()}")
        if updated.is_paid and self.scheduler:
            self.scheduler.cancel_debt_reminders(debt_id)
        return updated

    def update_debt_due_date(self, debt_id: str, due_date: datetime, now: Optional[datetime] = None) -> Debt:
        """Move a debt's due date and reschedule its reminders."""
        debt = self._find_debt(debt_id)
        updated = Debt(
            id=debt.id,
            amount=debt.amount,
            description=debt.description,
            creditor=debt.creditor,
            due_date=due_date,
            is_paid=debt.is_paid,
            amount_paid=debt.amount_paid
        )
        self.store.update_debt(updated)
        if self.scheduler:
            self.scheduler.cancel_debt_reminders(debt_id)
            if not updated.is_paid:
                self.scheduler.schedule_debt_reminders(debt_id, debt.description, due_date, now)
        return updated

    def delete_debt(self, debt_id: str) -> None:
        self.store.delete_debt(debt_id)
        if self.scheduler:
            self.scheduler.cancel_debt_reminders(debt_id)
        logger.info(f"Debt {debt_id} deleted")

    # ------------------------------------------------------------------
    # Savings goals
    # ------------------------------------------------------------------

    def add_goal(self, name: str, target_amount: Decimal, deadline: Optional[datetime]) -> SavingsGoal:
        validate_goal(name, target_amount)
        goal = self.store.add_goal(name.strip(), target_amount, deadline)
        logger.info(f"Goal created: {goal.name} ({goal.target_amount})")
        return goal

    def contribute_to_goal(
        self,
        goal_id: str,
        amount: Decimal,
        from_new_income: bool = False,
        now: Optional[datetime] = None
    ) -> SavingsGoal:
        """Move money into a savings goal, recorded as a "Savings" expense."""
        goal = next((g for g in self.store.get_goals() if g.id == goal_id), None)
        if goal is None:
            raise ValidationError("Goal not found")
        balance = self.current_balance() if not from_new_income else Decimal("0")
        validate_goal_contribution(goal, amount, balance, from_new_income)

        now = now or datetime.now()
        amount = coerce_amount(amount)
        movements = []
        if from_new_income:
            movements.append(Movement(RecordKind.INCOME, amount, OTHER_CATEGORY, now, f"Income for goal: {goal.name}"))
        movements.append(Movement(RecordKind.EXPENSE, amount, SAVINGS_CATEGORY, now, f"Contribution to goal: {goal.name}"))

        updated = self.store.add_to_goal(goal_id, amount, movements)
        if updated.is_completed:
            logger.info(f"Goal reached: {updated.name}")
            if self.scheduler:
                self.scheduler.goal_completed(updated.name, updated.target_amount, now)
        return updated
