"""Logging infrastructure with user context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


def default_log_dir() -> Path:
    """Resolve the log directory from COINARY_HOME or the user's home."""
    home = os.getenv("COINARY_HOME")
    base = Path(home).expanduser() if home else Path.home() / ".coinary"
    return base / "logs"


class UserContextFilter(logging.Filter):
    """Add user context to log records."""

    def __init__(self):
        super().__init__()
        self.user_id: Optional[str] = None

    def filter(self, record):
        """Add user_id to record."""
        record.user_id = self.user_id or "system"
        return True


class CoinaryLogger:
    """Centralized logging manager."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 30
    ):
        self.log_dir = Path(log_dir) if log_dir else default_log_dir()
        self.log_file = self.log_dir / "coinary.log"
        self.user_filter = UserContextFilter()

        # Configure package logger
        self.logger = logging.getLogger("coinary")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.propagate = False

        # Remove existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [user:%(user_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(self.user_filter)
        self.logger.addHandler(console_handler)

        # File handler with rotation; read-only homes fall back to console only
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding='utf-8'
            )
        except OSError as e:
            self.logger.warning(f"File logging disabled, cannot write to {self.log_dir}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.user_filter)
            self.logger.addHandler(file_handler)

    def set_user_context(self, user_id: Optional[str]):
        """Set current user context for logging."""
        self.user_filter.user_id = user_id

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[CoinaryLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = CoinaryLogger(log_level)
    return _logger_instance.get_logger()


def configure_logging(settings) -> logging.Logger:
    """
    Rebuild the global logger from application settings.

    Module-level loggers keep working because they hold the same
    ``logging.getLogger("coinary")`` object.
    """
    global _logger_instance
    _logger_instance = CoinaryLogger(
        log_level=settings.log_level,
        log_dir=Path(settings.logs_dir).expanduser(),
        max_file_size_mb=settings.log_max_file_size_mb,
        backup_count=settings.log_backup_count
    )
    return _logger_instance.get_logger()


def set_user_context(user_id: Optional[str]):
    """Set user context for logging."""
    global _logger_instance
    if _logger_instance:
        _logger_instance.set_user_context(user_id)
