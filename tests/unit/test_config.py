"""Tests for katika.core.config — configuration management.

Tests cover:
- Default values for the configuration fields.
- Environment variable overrides via the KATIKA_ prefix.
- Automatic directory creation on initialisation.
- Pydantic validation constraints (port range, environment literal).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from katika.core.config import KatikaConfig


def _config(temp_dir: Path, **overrides) -> KatikaConfig:
    return KatikaConfig(
        data_dir=temp_dir / "data",
        uploads_dir=temp_dir / "uploads",
        _env_file=None,
        **overrides,
    )


class TestConfigDefaults:
    """Verify that KatikaConfig provides sensible defaults."""

    def test_default_environment(self, monkeypatch, temp_dir):
        monkeypatch.delenv("KATIKA_ENVIRONMENT", raising=False)
        cfg = _config(temp_dir)
        assert cfg.environment == "development"
        assert cfg.is_production is False

    def test_default_server(self, monkeypatch, temp_dir):
        monkeypatch.delenv("KATIKA_SERVER_PORT", raising=False)
        cfg = _config(temp_dir)
        assert cfg.server_host == "0.0.0.0"
        assert cfg.server_port == 5000

    def test_default_branding(self, test_config: KatikaConfig):
        assert test_config.brand_name == "KatikaNaMe Platform"
        assert test_config.brand_domain == "katikaname.com"

    def test_default_page_sizes(self, test_config: KatikaConfig):
        assert test_config.directory_page_size == 12
        assert test_config.artist_directory_limit == 20


class TestConfigDirectoryCreation:
    """Verify that KatikaConfig creates required directories."""

    def test_data_dir_created(self, test_config: KatikaConfig):
        assert test_config.data_dir.is_dir()

    def test_upload_subdirectories_created(self, test_config: KatikaConfig):
        assert test_config.pdf_dir == test_config.uploads_dir / "portfolios"
        assert test_config.web_dir == test_config.uploads_dir / "web-portfolios"
        assert test_config.pdf_dir.is_dir()
        assert test_config.web_dir.is_dir()

    def test_store_path(self, test_config: KatikaConfig):
        assert test_config.store_path == test_config.data_dir / "katika.json"


class TestConfigEnvironment:
    """Verify KATIKA_ environment variable overrides."""

    def test_env_override(self, monkeypatch, temp_dir):
        monkeypatch.setenv("KATIKA_ENVIRONMENT", "production")
        monkeypatch.setenv("KATIKA_BRAND_DOMAIN", "portfolios.example.org")
        cfg = _config(temp_dir)
        assert cfg.is_production is True
        assert cfg.brand_domain == "portfolios.example.org"

    def test_list_override(self, monkeypatch, temp_dir):
        """List settings are parsed from JSON."""
        monkeypatch.setenv("KATIKA_CORS_ORIGINS", '["https://katikaname.com"]')
        assert _config(temp_dir).cors_origins == ["https://katikaname.com"]


class TestConfigValidation:
    """Verify field constraints."""

    def test_port_below_range(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, server_port=80)

    def test_unknown_environment(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, environment="staging")
