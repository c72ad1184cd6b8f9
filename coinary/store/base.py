"""Persistence collaborator interface."""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence

from coinary.ledger.goals import Debt, SavingsGoal
from coinary.ledger.models import MonetaryRecord, RecordKind


class Movement(NamedTuple):
    """An income or expense to be written together with a debt or goal update."""
    kind: RecordKind
    amount: Decimal
    category: str
    date: datetime
    description: str = ""


class RecordStore(ABC):
    """Source of ledger records, debts and goals.

    Fetches return fully materialized snapshots; callers re-fetch to see
    new data.
    """

    @abstractmethod
    def fetch_month(self, kind: RecordKind, month: int, year: int) -> List[MonetaryRecord]:
        """Records of one kind dated inside the given month."""

    @abstractmethod
    def fetch_range(self, kind: RecordKind, start: datetime, end: datetime) -> List[MonetaryRecord]:
        """Records of one kind dated inside [start, end]."""

    @abstractmethod
    def fetch_all(self, kind: RecordKind) -> List[MonetaryRecord]:
        """Every record of one kind, newest first."""

    @abstractmethod
    def add_record(
        self,
        kind: RecordKind,
        amount: Decimal,
        category: str,
        date: datetime,
        description: str = "",
        is_ant_expense: bool = False
    ) -> MonetaryRecord:
        """Persist a new record and return it with its assigned id."""

    @abstractmethod
    def update_record(self, record: MonetaryRecord) -> None:
        """Overwrite amount, category, description and date of a stored record."""

    @abstractmethod
    def delete_record(self, kind: RecordKind, record_id: str) -> None:
        """Remove a record."""

    @abstractmethod
    def count_recent(self, kind: RecordKind, category: str, since: datetime) -> int:
        """Number of records in a category dated at or after since."""

    @abstractmethod
    def add_debt(self, amount: Decimal, description: str, creditor: str, due_date: Optional[datetime]) -> Debt:
        """Persist a new debt."""

    @abstractmethod
    def get_debts(self) -> List[Debt]:
        """All debts, soonest due first."""

    @abstractmethod
    def update_debt(self, debt: Debt) -> None:
        """Overwrite a stored debt."""

    @abstractmethod
    def delete_debt(self, debt_id: str) -> None:
        """Remove a debt."""

    @abstractmethod
    def record_debt_payment(self, debt_id: str, amount: Decimal, movements: Sequence[Movement] = ()) -> Debt:
        """
        Add a payment to a debt, marking it paid once settled.

        The movements are stored in the same transaction: if the debt
        cannot be updated, none of them is kept.
        """

    @abstractmethod
    def add_goal(self, name: str, target_amount: Decimal, deadline: Optional[datetime]) -> SavingsGoal:
        """Persist a new savings goal."""

    @abstractmethod
    def get_goals(self) -> List[SavingsGoal]:
        """All savings goals."""

    @abstractmethod
    def update_goal(self, goal: SavingsGoal) -> None:
        """Overwrite a stored goal."""

    @abstractmethod
    def delete_goal(self, goal_id: str) -> None:
        """Remove a goal."""

    @abstractmethod
    def add_to_goal(self, goal_id: str, amount: Decimal, movements: Sequence[Movement] = ()) -> SavingsGoal:
        """Add a contribution to a goal, marking it completed once reached.

        Movements are stored atomically with the update, as in record_debt_payment.
        """
