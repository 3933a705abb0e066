"""Deployment configuration stored as JSON with environment overrides."""
import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from stockdash.utils.logger import get_home_dir
from stockdash.utils.exceptions import ConfigError


@dataclass
class Config:
    """Backend connection and display configuration."""
    supabase_url: str
    supabase_anon_key: str
    currency_label: str = "Frw"
    log_level: str = "INFO"
    export_dir: Optional[str] = None


class ConfigManager:
    """Manages deployment configuration."""

    def __init__(self):
        self.config_dir = get_home_dir()
        self.config_file = self.config_dir / "config.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> Optional[Config]:
        """
        Load configuration from file, then apply environment overrides.

        Raises:
            ConfigError: config.json is unreadable or has unknown keys
        """
        config_dict = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config_dict = json.load(f)
            except (OSError, ValueError) as e:
                raise ConfigError(f"Failed to load configuration: {e}")
            if not isinstance(config_dict, dict):
                raise ConfigError(f"Configuration must be a JSON object: {self.config_file}")

        env_url = os.getenv("SUPABASE_URL")
        env_key = os.getenv("SUPABASE_ANON_KEY")
        if env_url:
            config_dict["supabase_url"] = env_url
        if env_key:
            config_dict["supabase_anon_key"] = env_key

        if not config_dict:
            return None

        config_dict.setdefault("supabase_url", "")
        config_dict.setdefault("supabase_anon_key", "")
        try:
            return Config(**config_dict)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration in {self.config_file}: {e}")

    def save_config(self, config: Config) -> None:
        """Save configuration to file."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}")

    def validate_config(self, config: Config) -> tuple[bool, str]:
        """Validate configuration values."""
        if not config.supabase_url:
            return False, "Supabase URL is required"

        if not config.supabase_url.startswith(("http://", "https://")):
            return False, "Supabase URL must start with http:// or https://"

        if not config.supabase_anon_key:
            return False, "Supabase anon key is required"

        if not config.currency_label or not config.currency_label.strip():
            return False, "Currency label must not be blank"

        if config.export_dir and Path(config.export_dir).exists() and not Path(config.export_dir).is_dir():
            return False, "Export directory points to a file"

        return True, "Configuration is valid"
