"""Tests for configuration management."""

import os
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from rugscan.config.settings import AppSettings, ScoringThresholds, load_settings


def test_app_settings_defaults() -> None:
    """Test that AppSettings has correct defaults."""
    settings = AppSettings()

    assert settings.dexscreener_base == "https://api.dexscreener.com"
    assert settings.http_timeout_seconds == 10.0
    assert settings.cache_ttl_seconds == 10.0
    assert settings.database_path == "./rugscan.sqlite"
    assert settings.recent_limit == 8
    assert settings.thresholds == ScoringThresholds()


def test_scoring_threshold_defaults() -> None:
    """Test the default scoring thresholds."""
    t = ScoringThresholds()

    assert t.min_liquidity_sol == 2.0
    assert t.max_fdv_to_liquidity == 50.0
    assert t.min_transactions_5m == 10
    assert t.min_volume_5m_usd == 500.0
    assert t.min_pair_age_hours == 12.0
    assert t.volume_liquidity_alert == 1.5
    assert t.sell_pressure_ratio == 0.7
    assert t.min_trades_for_pressure == 20
    assert t.default_sol_price_usd == 150.0


def test_app_settings_validation() -> None:
    """Test that AppSettings validates fields."""
    with pytest.raises(ValidationError):
        AppSettings(cache_ttl_seconds=0)

    with pytest.raises(ValidationError):
        AppSettings(recent_limit=0)

    with pytest.raises(ValidationError):
        ScoringThresholds(default_sol_price_usd=0)


def test_load_settings_from_yaml() -> None:
    """Test loading a YAML configuration."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("""
            cache_ttl_seconds: 30
            database_path: "/tmp/scan.sqlite"
            thresholds:
              min_liquidity_sol: 5
              sell_pressure_ratio: 0.6
        """)
        yaml_path = f.name

    try:
        settings = load_settings(yaml_path)

        assert settings.cache_ttl_seconds == 30.0
        assert settings.database_path == "/tmp/scan.sqlite"
        assert settings.thresholds.min_liquidity_sol == 5.0
        assert settings.thresholds.sell_pressure_ratio == 0.6
        assert settings.thresholds.min_pair_age_hours == 12.0
    finally:
        os.unlink(yaml_path)


def test_load_settings_empty_yaml() -> None:
    """Test an empty YAML file yields defaults."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml_path = f.name

    try:
        settings = load_settings(yaml_path)
        assert settings.recent_limit == 8
    finally:
        os.unlink(yaml_path)


def test_load_settings_file_not_found() -> None:
    """Test loading settings with non-existent file."""
    with pytest.raises(FileNotFoundError):
        load_settings("/nonexistent/file.yaml")


def test_load_settings_invalid_yaml() -> None:
    """Test loading settings with invalid YAML."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("cache_ttl_seconds: [unclosed\n")
        yaml_path = f.name

    try:
        with pytest.raises(ValueError, match="Invalid YAML configuration"):
            load_settings(yaml_path)
    finally:
        os.unlink(yaml_path)


def test_load_settings_non_mapping_yaml() -> None:
    """Test a YAML list is rejected."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("- one\n- two\n")
        yaml_path = f.name

    try:
        with pytest.raises(ValueError, match="expected a mapping"):
            load_settings(yaml_path)
    finally:
        os.unlink(yaml_path)


def test_load_settings_invalid_values() -> None:
    """Test invalid values raise ValidationError."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("recent_limit: -1\n")
        yaml_path = f.name

    try:
        with pytest.raises(ValidationError):
            load_settings(yaml_path)
    finally:
        os.unlink(yaml_path)


def test_environment_overrides_defaults(monkeypatch) -> None:
    """Test environment variables fill settings, including nested ones."""
    monkeypatch.setenv("CACHE_TTL_SECONDS", "25")
    monkeypatch.setenv("THRESHOLDS__MIN_LIQUIDITY_SOL", "3.5")

    settings = AppSettings()

    assert settings.cache_ttl_seconds == 25.0
    assert settings.thresholds.min_liquidity_sol == 3.5


def test_default_config_file_loads() -> None:
    """Test the shipped default configuration is valid."""
    config = Path(__file__).parent.parent / "configs" / "default.yaml"

    settings = load_settings(str(config))

    assert settings.thresholds == ScoringThresholds()
    assert settings.cache_ttl_seconds == 10.0
