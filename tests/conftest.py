"""Pytest configuration and fixtures for AVTRACK tests."""

import logging

from logging.handlers import RotatingFileHandler

import pytest

from avtrack import logging_config
from avtrack.constants import CONFIG_PATH_ENV_VAR


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
    config.addinivalue_line(
        "markers", "integration_pipeline: Full end-to-end pipeline integration tests"
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point config and log files at a per-test directory.

    Also undoes any logging configuration a CLI invocation installed, so
    handlers bound to a closed CliRunner stream never outlive the test.
    """
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(tmp_path / "config.toml"))
    monkeypatch.setattr(logging_config, "DEFAULT_LOG_DIR", tmp_path / "logs")

    root = logging.getLogger()
    original_level = root.level
    logging_config.reset_logging()

    yield tmp_path

    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(original_level)
    logging_config.reset_logging()


@pytest.fixture
def config_path(isolated_home):
    """Path of the isolated config file (not created until written)."""
    return isolated_home / "config.toml"
