"""
Tests for configuration loading.
"""

from datetime import time

import pytest
from pydantic import ValidationError

from elitecuts.config import AppConfig, DefaultsConfig


class TestDefaultsConfig:
    """Tests for DefaultsConfig validation."""

    def test_defaults(self):
        """Test the shipped defaults."""
        defaults = DefaultsConfig()

        assert defaults.slot_minutes == 30
        assert defaults.booking_horizon_days == 14
        assert defaults.get_start_time() == time(9, 0)
        assert defaults.get_end_time() == time(18, 0)

    def test_rejects_reversed_hours(self):
        """Test end before start is rejected."""
        with pytest.raises(ValidationError, match="default_end must be later"):
            DefaultsConfig(default_start="18:00", default_end="09:00")

    def test_rejects_zero_step(self):
        """Test a zero slot size is rejected."""
        with pytest.raises(ValidationError):
            DefaultsConfig(slot_minutes=0)


class TestAppConfig:
    """Tests for AppConfig loading."""

    def test_load_from_yaml(self, tmp_path):
        """Test loading a complete file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "supabase_url: https://demo.supabase.co/\n"
            "supabase_anon_key: anon\n"
            "language: DA\n"
            "defaults:\n"
            "  slot_minutes: 15\n"
            "  default_start: '8:00'\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.supabase_url == "https://demo.supabase.co"
        assert config.get_rest_url() == "https://demo.supabase.co/rest/v1"
        assert config.get_auth_url() == "https://demo.supabase.co/auth/v1"
        assert config.language == "da"
        assert config.defaults.slot_minutes == 15
        assert config.defaults.default_start == "08:00"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping_root(self, tmp_path):
        """Test a YAML list at the root is rejected."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_invalid_yaml(self, tmp_path):
        """Test broken YAML raises ValueError."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("supabase_url: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_rejects_unsupported_language(self):
        """Test language must be a supported locale."""
        with pytest.raises(ValidationError):
            AppConfig(supabase_url="https://x.supabase.co", supabase_anon_key="k", language="fr")

    def test_rejects_url_without_scheme(self):
        """Test the project URL needs a scheme."""
        with pytest.raises(ValidationError):
            AppConfig(supabase_url="x.supabase.co", supabase_anon_key="k")
