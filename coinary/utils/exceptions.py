"""Custom exception classes for Coinary."""


class CoinaryError(Exception):
    """Base exception for Coinary."""
    pass


class ConfigError(CoinaryError):
    """Configuration-related errors."""
    pass


class ValidationError(CoinaryError):
    """Rejected arguments and data validation errors."""
    pass


class StoreError(CoinaryError):
    """Persistence errors."""
    pass


class NetworkError(CoinaryError):
    """Network and API-related errors."""
    pass


class LLMError(CoinaryError):
    """Advisor model errors."""
    pass


class ReminderError(CoinaryError):
    """Reminder scheduling and storage errors."""
    pass


# Retryable errors
class RetryableError(CoinaryError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableStoreError(RetryableError, StoreError):
    """Store errors that can be retried (locked database, busy connection)."""
    pass


class RetryableNetworkError(RetryableError, NetworkError):
    """Network errors that can be retried."""
    pass


class RetryableLLMError(RetryableError, LLMError):
    """Advisor model errors that can be retried."""
    pass
