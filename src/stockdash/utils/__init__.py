"""Utility modules."""
from .logger import get_logger, set_user_context, set_log_level, get_home_dir
from .exceptions import (
    StockDashError,
    ConfigError,
    DataFetchError,
    MalformedRecordError,
    ExportIOError,
    AuthorizationError,
    AuthenticationError,
    ValidationError
)

__all__ = [
    "get_logger",
    "set_user_context",
    "set_log_level",
    "get_home_dir",
    "StockDashError",
    "ConfigError",
    "DataFetchError",
    "MalformedRecordError",
    "ExportIOError",
    "AuthorizationError",
    "AuthenticationError",
    "ValidationError"
]
