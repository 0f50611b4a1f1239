"""Application settings and configuration."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import platformdirs
from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from syscheck.core.base import BaseConfig
from syscheck.core.log import Logger

# Packaged defaults; the check catalogue lives here
DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"


# ============================================================
# CHECK CATALOGUE
# ============================================================

class CheckSpec(BaseConfig):
    """One entry of the check catalogue."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name, unique in the catalogue")
    command: str = Field(description="Shell command; exit 0 means passed")
    hint: str = Field(
        default="",
        description="Explanation shown in front of the output on failure",
    )


class CheckConfig(BaseConfig):
    """Check execution configuration."""

    model_config = ConfigDict(frozen=True)

    catalogue: tuple[CheckSpec, ...] = Field(
        default=(),
        description="Checks to run, all of them concurrently",
    )
    timeout: float | None = Field(
        default=None,
        description=(
            "Per-check timeout in seconds. Unset means a hung command "
            "holds the whole batch back"
        ),
    )
    shell: str | None = Field(
        default=None,
        description="Shell used to run commands (invoke default: /bin/bash)",
    )

    @field_validator("catalogue")
    @classmethod
    def _unique_names(
        cls, catalogue: tuple[CheckSpec, ...]
    ) -> tuple[CheckSpec, ...]:
        names = [spec.name for spec in catalogue]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Duplicate check names: {', '.join(duplicates)}"
            )
        return catalogue


# ============================================================
# DISPLAY
# ============================================================

class Styles(BaseConfig):
    """Rich style definitions for the report."""

    model_config = ConfigDict(frozen=True)

    title: str = "bold #FF79C6"
    success: str = "#50FA7B"
    error: str = "#FF5555"
    loading: str = "bold #F1FA8C"
    footer: str = "italic #6272A4"


class DisplayConfig(BaseConfig):
    """Terminal presentation settings."""

    model_config = ConfigDict(frozen=True)

    tick_interval: float = Field(
        default=0.1,
        gt=0,
        description="Seconds between spinner frames",
    )
    quit_key: str = Field(
        default="q",
        min_length=1,
        max_length=1,
        description="Key that leaves the report",
    )
    spinner_frames: tuple[str, ...] = Field(
        default=("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"),
        min_length=1,
        description="Frames of the loading indicator",
    )
    styles: Styles = Field(default_factory=Styles)


# ============================================================
# CONFIG ROOT
# ============================================================

class Config(BaseConfig):
    """Application configuration loaded from packaged defaults and
    the environment."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    check: CheckConfig = Field(
        default_factory=CheckConfig,
        description="Check catalogue and execution settings",
    )
    display: DisplayConfig = Field(
        default_factory=DisplayConfig,
        description="Terminal presentation settings",
    )
    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Default log level: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "syscheck"
        ),
        description="Root directory for all log files",
    )
    run_name: str = Field(
        default_factory=(
            lambda: f"run-{datetime.now().strftime('%Y%m%d-%H%M%S')}"
        ),
        description="Per-run log subdirectory",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger singleton once config loads."""
        from syscheck.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        self.logger = setup_logger(
            log_root=self.log_root,
            run_name=self.run_name,
            level=self.log_level,
            console=self.logger.console,
            file=self.logger.file,
        )
        return self


# ============================================================
# SETTINGS (config + command-line flags)
# ============================================================

class ConfigEnvSettingsSource(EnvSettingsSource):
    """SYSCHECK_ environment variables, for the config tree only.

    The output mode comes from the command line alone. An aliased field
    is looked up without the prefix, as a bare JSON variable.
    """

    def __call__(self) -> dict:
        data = super().__call__()
        return {key: value for key, value in data.items() if key == "config"}


class Settings(BaseSettings):
    """Everything the run needs: configuration plus the output mode.

    Sources, highest priority first: constructor / command-line
    arguments, SYSCHECK_CONFIG__* environment variables, packaged
    defaults. There is no user configuration file.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration",
    )
    json_output: bool = Field(
        default=False,
        alias="json",
        description="Print the results as JSON instead of a table",
    )

    model_config = SettingsConfigDict(
        env_prefix="SYSCHECK_",
        env_nested_delimiter="__",
        populate_by_name=True,
        cli_prog_name="syscheck",
        cli_implicit_flags=True,
        cli_ignore_unknown_args=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            ConfigEnvSettingsSource(settings_cls),
            YamlConfigSettingsSource(settings_cls, yaml_file=DEFAULTS_FILE),
        )

    def close(self):
        self.config.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


__all__ = [
    "CheckConfig",
    "CheckSpec",
    "Config",
    "DisplayConfig",
    "Settings",
    "Styles",
]
