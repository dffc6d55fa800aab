"""Tests for configuration module."""

import pytest
import tempfile
import json
import os
import logging

from ad_reconcile.config.loader import load_config, validate_config
from ad_reconcile.config.models import Config, ActiveDirectoryConfig, ReportsConfig
from ad_reconcile.core.errors import ConfigurationError


@pytest.fixture
def config_data():
    """Minimal valid configuration."""
    return {
        "active_directory": {
            "server": "ldap://test.local:389",
            "domain": "test.local",
            "base_dn": "DC=test,DC=local",
            "bind_dn": "CN=admin,DC=test,DC=local",
            "password": "password123"
        }
    }


def test_load_config_from_file(config_data):
    """Test loading configuration from JSON file."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        config_path = f.name
    
    try:
        config = load_config(config_path)
        assert isinstance(config, Config)
        assert config.active_directory.server == "ldap://test.local:389"
        assert config.active_directory.domain == "test.local"
    finally:
        os.unlink(config_path)


def test_load_config_from_env(config_data, monkeypatch):
    """Test loading configuration from environment variable."""
    config_data["active_directory"]["domain"] = "env-test.local"
    
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        config_path = f.name
    
    try:
        monkeypatch.setenv('AD_RECONCILE_CONFIG', config_path)
        
        config = load_config()
        assert isinstance(config, Config)
        assert config.active_directory.domain == "env-test.local"
    finally:
        os.unlink(config_path)


def test_load_config_without_path(monkeypatch):
    """Test that a missing path and environment variable is a configuration error."""
    monkeypatch.delenv('AD_RECONCILE_CONFIG', raising=False)
    
    with pytest.raises(ConfigurationError):
        load_config()


def test_config_validation(config_data):
    """Test configuration validation."""
    config = Config(**config_data)
    # Should not raise exception
    validate_config(config)


def test_config_validation_warns_on_match_attribute_without_column(config_data, caplog):
    """Test warning when an id attribute is configured without an HR id column."""
    config_data["reconciliation"] = {"match_attribute": "employeeID"}
    config = Config(**config_data)
    
    validate_config(config)
    
    assert "falls back to display name" in caplog.text


def test_config_validation_warns_on_unknown_date_range(config_data, caplog):
    """Test warning when the configured date range has no matching window."""
    config_data["reconciliation"] = {"date_range": "Fortnight"}
    config = Config(**config_data)

    with caplog.at_level(logging.WARNING):
        validate_config(config)

    assert "Unknown reconciliation.date_range 'Fortnight'" in caplog.text


@pytest.mark.parametrize("date_range", ["LastWeek", "lastquarter", "All", None])
def test_config_validation_accepts_known_date_range(config_data, caplog, date_range):
    """Test that known range names and an unset range validate quietly."""
    config_data["reconciliation"] = {"date_range": date_range}
    config = Config(**config_data)

    with caplog.at_level(logging.WARNING):
        validate_config(config)

    assert "date_range" not in caplog.text


def test_invalid_server_url():
    """Test validation of invalid server URL."""
    with pytest.raises(ValueError, match="Server must start with ldap:// or ldaps://"):
        ActiveDirectoryConfig(
            server="http://invalid.com",
            domain="test.local",
            base_dn="DC=test,DC=local",
            bind_dn="CN=admin,DC=test,DC=local",
            password="password123"
        )


def test_invalid_stale_days():
    """Test validation of the stale-account threshold."""
    with pytest.raises(ValueError):
        ReportsConfig(stale_days=0)


def test_missing_config_file():
    """Test handling of missing configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path/config.json")


def test_invalid_json():
    """Test handling of invalid JSON."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        f.write("invalid json content")
        config_path = f.name
    
    try:
        with pytest.raises(json.JSONDecodeError):
            load_config(config_path)
    finally:
        os.unlink(config_path)


def test_missing_required_fields():
    """Test validation of missing required fields."""
    config_data = {
        "active_directory": {
            "server": "ldap://test.local:389",
            # Missing required fields
        }
    }
    
    with pytest.raises(ValueError):
        Config(**config_data)


def test_default_values(config_data):
    """Test default configuration values."""
    config = Config(**config_data)
    
    assert config.security.enable_tls == True
    assert config.logging.level == "INFO"
    assert config.logging.transcript_dir is None
    assert config.performance.page_size == 1000
    assert config.active_directory.use_ssl == True
    assert config.hr_source.first_name_column == "First Name"
    assert config.hr_source.effective_date_column == "Status Eff Date"
    assert config.hr_source.date_format == "%m/%d/%Y"
    assert config.hr_source.terminated_status == "Terminated"
    assert config.reconciliation.date_range is None
    assert config.reconciliation.disable_accounts == False
    assert config.reports.stale_days == 90
