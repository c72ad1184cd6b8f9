"""Reminder scheduling and persistence."""
from .storage import ReminderItem, ReminderStorage
from .scheduler import ReminderScheduler, debt_reminder_schedule, next_daily_reminder

__all__ = [
    "ReminderItem",
    "ReminderStorage",
    "ReminderScheduler",
    "debt_reminder_schedule",
    "next_daily_reminder",
]
