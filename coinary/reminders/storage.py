"""Local persistence of scheduled reminders."""
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List

from coinary.utils.exceptions import ReminderError
from coinary.utils.logger import get_logger

logger = get_logger()

REMINDER_DATETIME_FORMAT = "%d/%m/%Y %H:%M"


@dataclass(frozen=True)
class ReminderItem:
    """A reminder shown to the user at date_time ("dd/mm/yyyy HH:MM")."""
    id: int
    title: str
    message: str
    date_time: str


class ReminderStorage:
    """Keeps the reminder list in a JSON file."""

    def __init__(self, path: Path):
        """
        Initialize reminder storage.

        Args:
            path: JSON file holding the reminder list
        """
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> List[ReminderItem]:
        """Load stored reminders; a missing or unreadable file gives an empty list."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [ReminderItem(**item) for item in data]
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load reminders from {self.path}: {e}")
            return []

    def save(self, reminders: List[ReminderItem]) -> None:
        """Replace the stored list."""
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([asdict(item) for item in reminders], f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise ReminderError(f"Failed to save reminders to {self.path}: {e}")

    def add(self, reminder: ReminderItem) -> None:
        reminders = self.load()
        reminders.append(reminder)
        self.save(reminders)
        logger.debug(f"Stored reminder {reminder.id}: {reminder.title} at {reminder.date_time}")

    def remove(self, reminder_id: int) -> None:
        reminders = self.load()
        remaining = [item for item in reminders if item.id != reminder_id]
        if len(remaining) != len(reminders):
            self.save(remaining)
