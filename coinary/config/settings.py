"""Application settings loader from YAML configuration."""
import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from coinary.utils.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # Ledger rules
    rolling_window_months: int
    ant_expense_max_amount: Decimal
    ant_expense_min_repeats: int
    ant_expense_lookback_days: int

    # Concurrency
    max_concurrent_fetches: int
    fetch_timeout_seconds: float

    # Retry
    retry_max_retries: int
    retry_initial_delay_seconds: float
    retry_backoff_factor: float

    # Advisor
    advisor_model_name: str
    advisor_history_months: int

    # Paths
    data_dir: str
    database_file: str
    reminders_file: str
    logs_dir: str

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AppSettings":
        """Build settings from the parsed YAML mapping."""
        try:
            return cls(
                app_name=config["app"]["name"],
                app_version=str(config["app"]["version"]),
                log_level=config["logging"]["level"],
                log_max_file_size_mb=config["logging"]["max_file_size_mb"],
                log_backup_count=config["logging"]["backup_count"],
                rolling_window_months=config["ledger"]["rolling_window_months"],
                ant_expense_max_amount=Decimal(str(config["ledger"]["ant_expense_max_amount"])),
                ant_expense_min_repeats=config["ledger"]["ant_expense_min_repeats"],
                ant_expense_lookback_days=config["ledger"]["ant_expense_lookback_days"],
                max_concurrent_fetches=config["concurrency"]["max_concurrent_fetches"],
                fetch_timeout_seconds=config["concurrency"]["fetch_timeout_seconds"],
                retry_max_retries=config["retry"]["max_retries"],
                retry_initial_delay_seconds=config["retry"]["initial_delay_seconds"],
                retry_backoff_factor=config["retry"]["backoff_factor"],
                advisor_model_name=config["advisor"]["model_name"],
                advisor_history_months=config["advisor"]["history_months"],
                data_dir=config["paths"]["data_dir"],
                database_file=config["paths"]["database_file"],
                reminders_file=config["paths"]["reminders_file"],
                logs_dir=config["paths"]["logs_dir"]
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid configuration, missing or malformed key: {e}")

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            env_path = os.getenv("COINARY_CONFIG")
            if env_path:
                config_path = Path(env_path)
            else:
                config_path = DEFAULT_CONFIG_PATH

        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path} (pass --config or set COINARY_CONFIG)"
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {config_path}: {e}")

        return cls.from_dict(config or {})

    def validate(self) -> Tuple[bool, str]:
        """Validate configuration values."""
        if not 1 <= self.rolling_window_months <= 24:
            return False, "Rolling window must be between 1 and 24 months"

        if self.ant_expense_max_amount <= 0:
            return False, "Ant expense amount limit must be positive"

        if self.ant_expense_lookback_days < 1:
            return False, "Ant expense lookback must be at least 1 day"

        if self.max_concurrent_fetches < 1:
            return False, "Max concurrent fetches must be at least 1"

        if self.fetch_timeout_seconds <= 0:
            return False, "Fetch timeout must be positive"

        if self.retry_max_retries < 1:
            return False, "Retry count must be at least 1"

        if self.advisor_history_months < 1:
            return False, "Advisor history must cover at least 1 month"

        return True, "Configuration is valid"

    @property
    def gemini_api_key(self) -> Optional[str]:
        """Gemini API key, read from the environment only."""
        return os.getenv("GEMINI_API_KEY")


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
