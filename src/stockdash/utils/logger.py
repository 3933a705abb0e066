"""Logging infrastructure with signed-in user context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


def get_home_dir() -> Path:
    """Directory holding StockDash config, logs and exports."""
    home = os.getenv("STOCKDASH_HOME")
    return Path(home) if home else Path.home() / ".stockdash"


class UserContextFilter(logging.Filter):
    """Add user context to log records."""

    def __init__(self):
        super().__init__()
        self.user: Optional[str] = None

    def filter(self, record):
        """Add user to record."""
        record.user = self.user or "system"
        return True


class StockDashLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", max_bytes: int = 10 * 1024 * 1024, backup_count: int = 30):
        self.log_dir = get_home_dir() / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / "stockdash.log"
        self.user_filter = UserContextFilter()

        self.logger = logging.getLogger("stockdash")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [user:%(user)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        file_handler.addFilter(self.user_filter)
        console_handler.addFilter(self.user_filter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def set_user_context(self, user: Optional[str]):
        """Set current user context for logging."""
        self.user_filter.user = user

    def set_level(self, log_level: str):
        """Change the logger level after startup."""
        self.logger.setLevel(getattr(logging, log_level.upper()))

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[StockDashLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = StockDashLogger(log_level)
    return _logger_instance.get_logger()


def set_user_context(user: Optional[str]):
    """Set user context for logging."""
    if _logger_instance:
        _logger_instance.set_user_context(user)


def set_log_level(log_level: str):
    """Apply a configured log level to the global logger."""
    get_logger()
    _logger_instance.set_level(log_level)
