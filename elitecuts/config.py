"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.calendar import SUPPORTED_LOCALES
from .domain.models import normalize_time_label, parse_time_label


class DefaultsConfig(BaseModel):
    """Default settings for slots and the admin availability editor."""
    slot_minutes: int = 30
    booking_horizon_days: int = 14
    default_start: str = "09:00"
    default_end: str = "18:00"

    @field_validator("slot_minutes", "booking_horizon_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure step and horizon are positive."""
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("default_start", "default_end")
    @classmethod
    def validate_label(cls, value: str) -> str:
        """Validate and normalize HH:MM labels."""
        return normalize_time_label(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the default window opens before it closes."""
        if self.get_end_time() <= self.get_start_time():
            raise ValueError("default_end must be later than default_start")
        return self

    def get_start_time(self) -> time:
        """Get default start as time object."""
        return parse_time_label(self.default_start)

    def get_end_time(self) -> time:
        """Get default end as time object."""
        return parse_time_label(self.default_end)


class AppConfig(BaseModel):
    """Application configuration."""
    supabase_url: str
    supabase_anon_key: str
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: str = "Europe/Copenhagen"
    language: str = "en"
    mock_data_file: Optional[Path] = None
    session_cache_file: Optional[Path] = None

    @field_validator("supabase_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Require an http(s) project URL without trailing slash."""
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"supabase_url must start with http:// or https://, got {value!r}")
        return value.rstrip("/")

    @field_validator("language")
    @classmethod
    def validate_language(cls, value: str) -> str:
        """Restrict to the locales the date labels support."""
        value = value.lower()
        if value not in SUPPORTED_LOCALES:
            raise ValueError(f"language must be one of {', '.join(SUPPORTED_LOCALES)}, got {value!r}")
        return value

    @field_validator("mock_data_file", "session_cache_file")
    @classmethod
    def expand_path(cls, value: Optional[Path]) -> Optional[Path]:
        """Expand ``~`` in configured paths."""
        return value.expanduser() if value is not None else None

    def get_rest_url(self) -> str:
        """Get the PostgREST base URL."""
        return f"{self.supabase_url}/rest/v1"

    def get_auth_url(self) -> str:
        """Get the auth (GoTrue) base URL."""
        return f"{self.supabase_url}/auth/v1"

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
