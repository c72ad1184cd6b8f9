"""Data models for ledger records and aggregates."""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNCATEGORIZED = "Uncategorized"
ZERO = Decimal("0")

DATE_FORMATS = [
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
]


class RecordKind(str, Enum):
    """Discriminator between money coming in and money going out."""
    INCOME = "income"
    EXPENSE = "expense"


class TimeRange(str, Enum):
    """Dashboard periods, each ending at the end of the current day."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TransactionFilter(str, Enum):
    """Which kinds a transaction listing shows."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


def coerce_amount(value: Any) -> Decimal:
    """Return a finite Decimal for value, or zero when it cannot be read as one."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def coerce_category(value: Any) -> str:
    """Return a usable category label, substituting the fallback bucket."""
    if value is None:
        return UNCATEGORIZED
    label = str(value).strip()
    return label or UNCATEGORIZED


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a record date into a naive datetime.

    Aware datetimes keep their wall-clock time; the caller owns the
    reference calendar. Unreadable values give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    # ISO-8601, including a trailing Z
    try:
        return datetime.fromisoformat(re.sub(r"Z$", "+00:00", text)).replace(tzinfo=None)
    except ValueError:
        return None


class RecordDocument(BaseModel):
    """Lenient schema for income/expense documents read from a store."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    amount: Decimal = Field(default=ZERO, description="Amount in the ledger's currency unit")
    category: str = Field(default=UNCATEGORIZED, description="Category label")
    description: str = Field(default="", description="Free-text description")
    date: Optional[datetime] = Field(default=None, description="Economic date of the movement")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    is_ant_expense: bool = Field(default=False, alias="isAntExpense")

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return coerce_amount(value)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value):
        return coerce_category(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value):
        return "" if value is None else str(value)

    @field_validator("date", "created_at", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        return parse_date(value)

    @field_validator("is_ant_expense", mode="before")
    @classmethod
    def _coerce_flag(cls, value):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class MonetaryRecord:
    """A single income or expense movement."""
    id: str
    kind: RecordKind
    amount: Decimal
    category: str = UNCATEGORIZED
    date: Optional[datetime] = None
    description: str = ""
    created_at: Optional[datetime] = None
    is_ant_expense: bool = False

    @classmethod
    def from_document(cls, kind: RecordKind, record_id: str, document: Dict[str, Any]) -> "MonetaryRecord":
        """Build a record from a raw store document, degrading bad fields."""
        doc = RecordDocument.model_validate(document)
        return cls(
            id=record_id,
            kind=kind,
            amount=doc.amount,
            category=doc.category,
            date=doc.date,
            description=doc.description,
            created_at=doc.created_at,
            is_ant_expense=doc.is_ant_expense and kind is RecordKind.EXPENSE
        )

    @property
    def moment(self) -> Optional[datetime]:
        """The record date as a naive datetime, or None when it has no usable date."""
        return parse_date(self.date)


@dataclass(frozen=True)
class MonthlySummary:
    """Income and expense totals for one calendar month."""
    month: int  # 1-12
    year: int
    total_income: Decimal
    total_expense: Decimal

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @classmethod
    def empty(cls, month: int, year: int) -> "MonthlySummary":
        return cls(month=month, year=year, total_income=ZERO, total_expense=ZERO)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive datetime window."""
    start: datetime
    end: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class RangeTotals:
    """Dashboard totals for one date window."""
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    expenses_by_category: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expense
