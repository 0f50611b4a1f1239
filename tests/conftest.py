"""Pytest configuration and fixtures for syscheck tests."""

import tempfile
from pathlib import Path

import pytest

from syscheck.core.config import CheckSpec, DisplayConfig
from syscheck.core.log import ConsoleSink, FileSink, setup_logger
from syscheck.core.result import CheckResult, CheckStatus


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level for the whole session.

    No log files are written.
    """
    test_log_root = Path(tempfile.gettempdir()) / "syscheck-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
        file=FileSink(enabled=False),
    )


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings loaded from packaged defaults, logging under tmp_path."""
    from syscheck.core.config import Settings

    monkeypatch.setenv("SYSCHECK_CONFIG__LOG_ROOT", str(tmp_path))
    with Settings() as loaded:
        yield loaded


@pytest.fixture
def display():
    return DisplayConfig()


@pytest.fixture
def spec():
    """Build a CheckSpec."""
    def _spec(name, command, hint=""):
        return CheckSpec(name=name, command=command, hint=hint)
    return _spec


@pytest.fixture
def two_results():
    return (
        CheckResult(
            name="Kernel Check",
            status=CheckStatus.PASSED,
            message="6.1.0-18-amd64 (0.01s)",
        ),
        CheckResult(
            name="UFW Firewall Status",
            status=CheckStatus.FAILED,
            message="UFW firewall is inactive or not installed. (0.03s)",
        ),
    )
