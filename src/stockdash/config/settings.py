"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import List

from stockdash.utils.exceptions import ConfigError


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str = "StockDash"
    app_version: str = "1.0.0"

    # Logging
    log_level: str = "INFO"
    log_max_file_size_mb: int = 10
    log_backup_count: int = 30

    # Reporting
    currency_label: str = "Frw"
    default_granularity: str = "month"
    export_dir: str = "exports"

    # Inventory
    low_stock_threshold: int = 20
    critical_stock_threshold: int = 7
    search_fuzzy_threshold: int = 2

    # DataStore
    datastore_timeout_seconds: int = 30

    # Authorization
    admin_roles: List[str] = field(default_factory=lambda: ["admin", "supa-admin"])
    privileged_roles: List[str] = field(default_factory=lambda: ["supa-admin"])

    @classmethod
    def load(cls, config_path: Path = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            # Default to config.yaml in project root
            config_path = Path(__file__).parent.parent.parent.parent / "config.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid settings file {config_path}: {e}")

        try:
            settings = cls(
                app_name=config["app"]["name"],
                app_version=str(config["app"]["version"]),
                log_level=config["logging"]["level"],
                log_max_file_size_mb=config["logging"]["max_file_size_mb"],
                log_backup_count=config["logging"]["backup_count"],
                currency_label=config["reporting"]["currency_label"],
                default_granularity=config["reporting"]["default_granularity"],
                export_dir=config["reporting"]["export_dir"],
                low_stock_threshold=config["inventory"]["low_stock_threshold"],
                critical_stock_threshold=config["inventory"]["critical_stock_threshold"],
                search_fuzzy_threshold=config["inventory"]["search_fuzzy_threshold"],
                datastore_timeout_seconds=config["datastore"]["timeout_seconds"],
                admin_roles=list(config["auth"]["admin_roles"]),
                privileged_roles=list(config["auth"]["privileged_roles"])
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid settings file {config_path}: missing {e}")

        if settings.default_granularity not in ("day", "month"):
            raise ConfigError(f"Unsupported default granularity: {settings.default_granularity}")

        return settings


# Global settings instance
_settings: AppSettings = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
