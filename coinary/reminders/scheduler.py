"""Reminder scheduling for debts, goals and the daily entry nudge.

Only the schedule and its persisted list live here; delivering the
notification is the host platform's job.
"""
import time as clock
import zlib
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from coinary.ledger.models import parse_date
from coinary.utils.exceptions import ReminderError
from coinary.utils.logger import get_logger
from .storage import REMINDER_DATETIME_FORMAT, ReminderItem, ReminderStorage

logger = get_logger()

DEBT_REMINDER_DAYS = (15, 8, 1)
DEBT_REMINDER_TIME = time(9, 0)

DEBT_REMINDER_TITLES = {
    15: "Debt due in 15 days",
    8: "Debt due in 8 days",
    1: "Debt due tomorrow",
}


def debt_reminder_id(debt_id: str, days_before: int) -> int:
    """Stable reminder id for one of a debt's reminders."""
    return zlib.crc32(debt_id.encode("utf-8")) + days_before * 1000


def debt_reminder_schedule(
    debt_id: str,
    description: str,
    due_date: datetime,
    now: Optional[datetime] = None
) -> List[ReminderItem]:
    """
    Reminders at 09:00 on 15, 8 and 1 days before the due date.

    Reminders whose moment is not strictly after now are left out.
    """
    due = parse_date(due_date)
    if due is None:
        raise ReminderError(f"Invalid due date: {due_date!r}")
    now = now or datetime.now()

    schedule = []
    for days_before in DEBT_REMINDER_DAYS:
        moment = datetime.combine(due.date() - timedelta(days=days_before), DEBT_REMINDER_TIME)
        if moment <= now:
            continue
        day_word = "day" if days_before == 1 else "days"
        schedule.append(ReminderItem(
            id=debt_reminder_id(debt_id, days_before),
            title=DEBT_REMINDER_TITLES[days_before],
            message=f"Your debt '{description}' is due in {days_before} {day_word}.",
            date_time=moment.strftime(REMINDER_DATETIME_FORMAT)
        ))
    return schedule


def next_daily_reminder(hour: int, minute: int, now: Optional[datetime] = None) -> datetime:
    """Today at hour:minute, or tomorrow if that moment has already passed."""
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ReminderError(f"Invalid reminder time {hour:02d}:{minute:02d}")
    now = now or datetime.now()
    moment = datetime.combine(now.date(), time(hour, minute))
    if moment <= now:
        moment += timedelta(days=1)
    return moment


class ReminderScheduler:
    """Keeps the persisted reminder list in step with debts and goals."""

    def __init__(self, storage: ReminderStorage):
        self.storage = storage

    def _next_id(self) -> int:
        """Millisecond timestamp, bumped past the largest stored id."""
        taken = [item.id for item in self.storage.load()]
        return max([int(clock.time() * 1000)] + [i + 1 for i in taken])

    def add_reminder(self, date_time: str, title: str, message: str) -> ReminderItem:
        """Store a one-off reminder given as "dd/mm/yyyy HH:MM"."""
        try:
            datetime.strptime(date_time, REMINDER_DATETIME_FORMAT)
        except (TypeError, ValueError):
            raise ReminderError(f"Invalid reminder date: {date_time!r}")

        reminder = ReminderItem(
            id=self._next_id(),
            title=title,
            message=message,
            date_time=date_time
        )
        self.storage.add(reminder)
        return reminder

    def schedule_debt_reminders(
        self,
        debt_id: str,
        description: str,
        due_date: datetime,
        now: Optional[datetime] = None
    ) -> List[ReminderItem]:
        schedule = debt_reminder_schedule(debt_id, description, due_date, now)
        if schedule:
            ids = {item.id for item in schedule}
            reminders = [item for item in self.storage.load() if item.id not in ids]
            self.storage.save(reminders + schedule)
        logger.info(f"Scheduled {len(schedule)} reminders for debt {debt_id}")
        return schedule

    def cancel_debt_reminders(self, debt_id: str) -> None:
        ids = {debt_reminder_id(debt_id, days_before) for days_before in DEBT_REMINDER_DAYS}
        reminders = self.storage.load()
        remaining = [item for item in reminders if item.id not in ids]
        if len(remaining) != len(reminders):
            self.storage.save(remaining)
            logger.info(f"Cancelled {len(reminders) - len(remaining)} reminders for debt {debt_id}")

    def goal_completed(self, goal_name: str, target_amount: Decimal, now: Optional[datetime] = None) -> ReminderItem:
        """Record the "goal reached" notice in the reminder list."""
        now = now or datetime.now()
        reminder = ReminderItem(
            id=self._next_id(),
            title="Savings goal reached",
            message=f"Congratulations! You reached your goal '{goal_name}' of {target_amount:,.0f}.",
            date_time=now.strftime(REMINDER_DATETIME_FORMAT)
        )
        self.storage.add(reminder)
        return reminder
