"""Unit tests configuration file."""

import logging

import pytest
from click.testing import CliRunner


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch):
    """Keep FFIWIRE_CONFIG from the host environment out of the tests."""
    monkeypatch.delenv("FFIWIRE_CONFIG", raising=False)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo configure_logging() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    ffiwire_logger = logging.getLogger("ffiwire")
    ffiwire_level = ffiwire_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    ffiwire_logger.setLevel(ffiwire_level)
