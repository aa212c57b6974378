"""Pytest configuration and fixtures for apnea-cluster tests."""

import pytest

from apnea_cluster.analysis.config import ClusteringConfig


def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that do not require external dependencies"
    )
    config.addinivalue_line(
        "markers", "business_logic: Tests for core business logic and algorithms"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests combining multiple components"
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and keep logging off the user's home."""
    import apnea_cluster.config
    import apnea_cluster.logging_config

    app_home = tmp_path / "home"
    monkeypatch.setattr(apnea_cluster.config, "APP_HOME", app_home)
    monkeypatch.setattr(apnea_cluster.logging_config, "_logging_configured", True)
    return apnea_cluster.config.get_config_path()


@pytest.fixture
def default_config():
    """Return the default clustering configuration."""
    return ClusteringConfig()
