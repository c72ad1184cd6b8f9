"""SQLite-backed record store."""
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence

from coinary.ledger.goals import Debt, SavingsGoal
from coinary.ledger.models import MonetaryRecord, RecordKind, coerce_amount, coerce_category, parse_date
from coinary.ledger.windows import month_window
from coinary.utils.exceptions import RetryableStoreError, StoreError
from coinary.utils.logger import get_logger
from .base import Movement, RecordStore

logger = get_logger()

RECORD_TABLES = {
    RecordKind.INCOME: "incomes",
    RecordKind.EXPENSE: "expenses",
}


def _format_date(value) -> Optional[str]:
    moment = parse_date(value)
    return moment.isoformat(timespec="microseconds") if moment else None


class SqliteRecordStore(RecordStore):
    """Keeps incomes, expenses, debts and goals in a local SQLite database."""

    def __init__(self, db_path: Path, timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            db_path: Database file, created on first use
            timeout: Seconds to wait on a locked database
        """
        self.db_path = Path(db_path).expanduser()
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except StoreError:
            conn.rollback()
            raise
        except sqlite3.OperationalError as e:
            conn.rollback()
            raise RetryableStoreError(f"Database operation failed: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Database error: {e}") from e
        finally:
            conn.close()

    def _init_db(self):
        with self._connect() as conn:
            cursor = conn.cursor()
            for table in RECORD_TABLES.values():
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id TEXT PRIMARY KEY,
                        amount TEXT,
                        category TEXT,
                        description TEXT,
                        date TEXT,
                        created_at TEXT,
                        is_ant_expense INTEGER DEFAULT 0
                    )
                """)
                cursor.execute(f"CREATE INDEX IF NOT EXISTS idx_{table}_date ON {table}(date)")
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS debts (
                    id TEXT PRIMARY KEY,
                    amount TEXT,
                    description TEXT,
                    creditor TEXT,
                    due_date TEXT,
                    is_paid INTEGER DEFAULT 0,
                    amount_paid TEXT
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS goals (
                    id TEXT PRIMARY KEY,
                    name TEXT,
                    target_amount TEXT,
                    current_amount TEXT,
                    deadline TEXT,
                    is_completed INTEGER DEFAULT 0
                )
            """)

    # ------------------------------------------------------------------
    # Incomes and expenses
    # ------------------------------------------------------------------

    def fetch_month(self, kind: RecordKind, month: int, year: int) -> List[MonetaryRecord]:
        window = month_window(month, year)
        return self.fetch_range(kind, window.start, window.end)

    def fetch_range(self, kind: RecordKind, start: datetime, end: datetime) -> List[MonetaryRecord]:
        table = RECORD_TABLES[RecordKind(kind)]
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM {table} WHERE date >= ? AND date <= ? ORDER BY date DESC",
                (_format_date(start), _format_date(end))
            ).fetchall()
        return [self._row_to_record(kind, row) for row in rows]

    def fetch_all(self, kind: RecordKind) -> List[MonetaryRecord]:
        table = RECORD_TABLES[RecordKind(kind)]
        with self._connect() as conn:
            rows = conn.execute(f"SELECT * FROM {table} ORDER BY date DESC").fetchall()
        return [self._row_to_record(kind, row) for row in rows]

    def add_record(
        self,
        kind: RecordKind,
        amount: Decimal,
        category: str,
        date: datetime,
        description: str = "",
        is_ant_expense: bool = False
    ) -> MonetaryRecord:
        record = self._new_record(kind, amount, category, date, description, is_ant_expense)
        with self._connect() as conn:
            self._insert_record(conn, record)
        logger.debug(f"Added {record.kind.value} {record.id}: {record.amount} ({record.category})")
        return record

    @staticmethod
    def _new_record(kind, amount, category, date, description="", is_ant_expense=False) -> MonetaryRecord:
        kind = RecordKind(kind)
        return MonetaryRecord(
            id=uuid.uuid4().hex,
            kind=kind,
            amount=coerce_amount(amount),
            category=coerce_category(category),
            date=parse_date(date),
            description=description or "",
            created_at=datetime.now(),
            is_ant_expense=is_ant_expense and kind is RecordKind.EXPENSE
        )

    @staticmethod
    def _insert_record(conn: sqlite3.Connection, record: MonetaryRecord) -> None:
        conn.execute(
            f"""
            INSERT INTO {RECORD_TABLES[record.kind]}
            (id, amount, category, description, date, created_at, is_ant_expense)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                str(record.amount),
                record.category,
                record.description,
                _format_date(record.date),
                _format_date(record.created_at),
                int(record.is_ant_expense)
            )
        )

    def _insert_movements(self, conn: sqlite3.Connection, movements: Sequence[Movement]) -> None:
        for movement in movements:
            self._insert_record(conn, self._new_record(*movement))

    def update_record(self, record: MonetaryRecord) -> None:
        if not record.id:
            raise StoreError("Cannot update a record without an id")
        table = RECORD_TABLES[RecordKind(record.kind)]
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE {table} SET amount = ?, category = ?, description = ?, date = ? WHERE id = ?",
                (
                    str(coerce_amount(record.amount)),
                    coerce_category(record.category),
                    record.description or "",
                    _format_date(record.date),
                    record.id
                )
            )
            if cursor.rowcount == 0:
                raise StoreError(f"No {record.kind.value} with id {record.id}")

    def delete_record(self, kind: RecordKind, record_id: str) -> None:
        table = RECORD_TABLES[RecordKind(kind)]
        with self._connect() as conn:
            conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))

    def count_recent(self, kind: RecordKind, category: str, since: datetime) -> int:
        table = RECORD_TABLES[RecordKind(kind)]
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM {table} WHERE category = ? AND date >= ?",
                (coerce_category(category), _format_date(since))
            ).fetchone()
        return row[0]

    @staticmethod
    def _row_to_record(kind: RecordKind, row: sqlite3.Row) -> MonetaryRecord:
        return MonetaryRecord.from_document(RecordKind(kind), row["id"], dict(row))

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def add_debt(self, amount: Decimal, description: str, creditor: str, due_date: Optional[datetime]) -> Debt:
        debt = Debt(
            id=uuid.uuid4().hex,
            amount=coerce_amount(amount),
            description=description,
            creditor=creditor,
            due_date=parse_date(due_date)
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO debts (id, amount, description, creditor, due_date, is_paid, amount_paid)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    debt.id,
                    str(debt.amount),
                    debt.description,
                    debt.creditor,
                    _format_date(debt.due_date),
                    int(debt.is_paid),
                    str(debt.amount_paid)
                )
            )
        return debt

    def get_debts(self) -> List[Debt]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM debts ORDER BY due_date").fetchall()
        return [self._row_to_debt(row) for row in rows]

    def update_debt(self, debt: Debt) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE debts SET amount = ?, description = ?, creditor = ?, due_date = ?,
                    is_paid = ?, amount_paid = ?
                WHERE id = ?
                """,
                (
                    str(debt.amount),
                    debt.description,
                    debt.creditor,
                    _format_date(debt.due_date),
                    int(debt.is_paid),
                    str(debt.amount_paid),
                    debt.id
                )
            )
            if cursor.rowcount == 0:
                raise StoreError(f"No debt with id {debt.id}")

    def delete_debt(self, debt_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM debts WHERE id = ?", (debt_id,))

    def record_debt_payment(self, debt_id: str, amount: Decimal, movements: Sequence[Movement] = ()) -> Debt:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM debts WHERE id = ?", (debt_id,)).fetchone()
            if row is None:
                raise StoreError(f"No debt with id {debt_id}")
            debt = self._row_to_debt(row)
            amount_paid = debt.amount_paid + coerce_amount(amount)
            is_paid = amount_paid >= debt.amount
            conn.execute(
                "UPDATE debts SET amount_paid = ?, is_paid = ? WHERE id = ?",
                (str(amount_paid), int(is_paid), debt_id)
            )
            self._insert_movements(conn, movements)
        return Debt(
            id=debt.id,
            amount=debt.amount,
            description=debt.description,
            creditor=debt.creditor,
            due_date=debt.due_date,
            is_paid=is_paid,
            amount_paid=amount_paid
        )

    @staticmethod
    def _row_to_debt(row: sqlite3.Row) -> Debt:
        return Debt(
            id=row["id"],
            amount=coerce_amount(row["amount"]),
            description=row["description"] or "",
            creditor=row["creditor"] or "",
            due_date=parse_date(row["due_date"]),
            is_paid=bool(row["is_paid"]),
            amount_paid=coerce_amount(row["amount_paid"])
        )

    # ------------------------------------------------------------------
    # Savings goals
    # ------------------------------------------------------------------

    def add_goal(self, name: str, target_amount: Decimal, deadline: Optional[datetime]) -> SavingsGoal:
        goal = SavingsGoal(
            id=uuid.uuid4().hex,
            name=name,
            target_amount=coerce_amount(target_amount),
            deadline=parse_date(deadline)
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO goals (id, name, target_amount, current_amount, deadline, is_completed)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    goal.id,
                    goal.name,
                    str(goal.target_amount),
                    str(goal.current_amount),
                    _format_date(goal.deadline),
                    int(goal.is_completed)
                )
            )
        return goal

    def get_goals(self) -> List[SavingsGoal]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM goals ORDER BY deadline").fetchall()
        return [self._row_to_goal(row) for row in rows]

    def update_goal(self, goal: SavingsGoal) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE goals SET name = ?, target_amount = ?, current_amount = ?, deadline = ?,
                    is_completed = ?
                WHERE id = ?
                """,
                (
                    goal.name,
                    str(goal.target_amount),
                    str(goal.current_amount),
                    _format_date(goal.deadline),
                    int(goal.is_completed),
                    goal.id
                )
            )
            if cursor.rowcount == 0:
                raise StoreError(f"No goal with id {goal.id}")

    def delete_goal(self, goal_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,))

    def add_to_goal(self, goal_id: str, amount: Decimal, movements: Sequence[Movement] = ()) -> SavingsGoal:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM goals WHERE id = ?", (goal_id,)).fetchone()
            if row is None:
                raise StoreError(f"No goal with id {goal_id}")
            goal = self._row_to_goal(row)
            current_amount = goal.current_amount + coerce_amount(amount)
            is_completed = current_amount >= goal.target_amount
            conn.execute(
                "UPDATE goals SET current_amount = ?, is_completed = ? WHERE id = ?",
                (str(current_amount), int(is_completed), goal_id)
            )
            self._insert_movements(conn, movements)
        return SavingsGoal(
            id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
            current_amount=current_amount,
            deadline=goal.deadline,
            is_completed=is_completed
        )

    @staticmethod
    def _row_to_goal(row: sqlite3.Row) -> SavingsGoal:
        return SavingsGoal(
            id=row["id"],
            name=row["name"] or "",
            target_amount=coerce_amount(row["target_amount"]),
            current_amount=coerce_amount(row["current_amount"]),
            deadline=parse_date(row["deadline"]),
            is_completed=bool(row["is_completed"])
        )
