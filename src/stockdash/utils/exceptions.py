"""Custom exception classes for StockDash."""


class StockDashError(Exception):
    """Base exception for StockDash."""
    pass


class ConfigError(StockDashError):
    """Configuration-related errors."""
    pass


class DataFetchError(StockDashError):
    """DataStore call failed or returned malformed data."""
    pass


class MalformedRecordError(StockDashError):
    """A record field could not be parsed as the expected type."""

    def __init__(self, field: str, value, reason: str = ""):
        self.field = field
        self.value = value
        message = f"Malformed value for '{field}': {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ExportIOError(StockDashError):
    """Export document could not be written."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write export to {path}: {cause}")


class AuthorizationError(StockDashError):
    """Session is not allowed to perform an action."""
    pass


class AuthenticationError(StockDashError):
    """Sign-in against the auth backend failed."""
    pass


class ValidationError(StockDashError):
    """Data validation errors."""
    pass
