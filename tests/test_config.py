"""Tests for settings loading."""

import pytest
from pydantic import ConfigDict, ValidationError

from syscheck.core.base import BaseConfig
from syscheck.core.config import CheckConfig, CheckSpec, DisplayConfig, Settings


def test_default_catalogue(settings):
    catalogue = settings.config.check.catalogue
    names = [spec.name for spec in catalogue]

    assert len(catalogue) == 10
    assert names[0] == "System Update"
    assert "Kernel Check" in names
    assert "Password Policy" in names
    kernel = catalogue[names.index("Kernel Check")]
    assert kernel.command == "uname -r"
    assert kernel.hint == "Kernel information not available."


def test_tls_command_keeps_backslash(settings):
    tls = next(
        spec for spec in settings.config.check.catalogue
        if spec.name == "TLS Support"
    )
    assert "'TLSv1.2\\|TLSv1.3'" in tls.command


def test_defaults(settings):
    assert settings.json_output is False
    assert settings.config.check.timeout is None
    assert settings.config.display.tick_interval == 0.1
    assert settings.config.display.quit_key == "q"
    assert settings.config.logger.console.level == "warn"
    assert settings.config.logger.file.enabled


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("SYSCHECK_CONFIG__LOG_ROOT", str(tmp_path))
    monkeypatch.setenv("SYSCHECK_CONFIG__CHECK__TIMEOUT", "30")
    monkeypatch.setenv("SYSCHECK_CONFIG__DISPLAY__QUIT_KEY", "x")

    with Settings() as settings:
        assert settings.config.check.timeout == 30
        assert settings.config.display.quit_key == "x"
        # Untouched values still come from the packaged defaults
        assert len(settings.config.check.catalogue) == 10


def test_log_file_written_under_log_root(settings, tmp_path):
    config = settings.config
    log_file = tmp_path / config.run_name / "syscheck.log"
    assert log_file.exists()


def test_catalogue_is_immutable(settings):
    spec = settings.config.check.catalogue[0]
    with pytest.raises(ValidationError):
        spec.command = "rm -rf /"


def test_duplicate_names_rejected():
    with pytest.raises(ValidationError, match="Duplicate check names: A"):
        CheckConfig(
            catalogue=[
                CheckSpec(name="A", command="true"),
                CheckSpec(name="A", command="false"),
            ]
        )


def test_hint_defaults_to_empty():
    assert CheckSpec(name="A", command="true").hint == ""


def test_quit_key_is_single_character():
    with pytest.raises(ValidationError):
        DisplayConfig(quit_key="qq")


@pytest.mark.parametrize("name", ["JSON", "SYSCHECK_JSON", "SYSCHECK_JSON_OUTPUT"])
def test_output_mode_ignores_environment(tmp_path, monkeypatch, name):
    monkeypatch.setenv("SYSCHECK_CONFIG__LOG_ROOT", str(tmp_path))
    monkeypatch.setenv(name, "1")

    with Settings() as settings:
        assert settings.json_output is False


class Resource:
    def __init__(self, fail=False):
        self.fail = fail
        self.closed = False

    def close(self):
        self.closed = True
        if self.fail:
            raise OSError("disk gone")


class Owner(BaseConfig):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    first: Resource
    second: Resource


def test_close_reaches_every_child(capsys):
    owner = Owner(first=Resource(fail=True), second=Resource())

    with owner:
        pass

    assert owner.first.closed
    assert owner.second.closed
    assert "could not close first: disk gone" in capsys.readouterr().err
