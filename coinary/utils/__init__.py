"""Utility modules."""
from .logger import get_logger, set_user_context, configure_logging
from .exceptions import (
    CoinaryError,
    ConfigError,
    ValidationError,
    StoreError,
    NetworkError,
    LLMError,
    ReminderError,
    RetryableError,
    RetryableStoreError,
    RetryableNetworkError,
    RetryableLLMError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_user_context",
    "configure_logging",
    "CoinaryError",
    "ConfigError",
    "ValidationError",
    "StoreError",
    "NetworkError",
    "LLMError",
    "ReminderError",
    "RetryableError",
    "RetryableStoreError",
    "RetryableNetworkError",
    "RetryableLLMError",
    "retry_with_backoff"
]
