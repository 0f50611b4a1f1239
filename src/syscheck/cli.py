#!/usr/bin/env python3
"""syscheck CLI - concurrent system health checks with a live report."""

import os

from pydantic_settings import CliApp

from syscheck.checks.runner import CheckRunner
from syscheck.core.config import Settings
from syscheck.core.log import bootstrap_logger, logger
from syscheck.ui.app import App
from syscheck.ui.view import View


def is_privileged() -> bool:
    """True when running as root (POSIX) or as an administrator
    (Windows)."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None:
        return geteuid() == 0

    import ctypes
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False


def require_privileges() -> None:
    """Exit with status 1 unless the process is privileged.

    Runs before any settings exist, so it logs through the bootstrap
    logger.
    """
    if is_privileged():
        return
    bootstrap = bootstrap_logger()
    bootstrap.fatal("This program must be run as root.")
    bootstrap.close()
    raise SystemExit(1)


class Cli(Settings):
    """Run system checks concurrently and show the results.

    Press 'q' to leave the report. With --json the results are printed
    as a JSON array instead of a table. Other arguments are ignored.

    Configuration comes from the packaged defaults and SYSCHECK_
    environment variables (SYSCHECK_CONFIG__CHECK__TIMEOUT=30).
    """

    def cli_cmd(self):
        with self:
            app = build_app(self)
            state = app.run()
            logger.info("Exiting", quit_by_user=state.quitting)
        raise SystemExit(0)


def build_app(settings: Settings) -> App:
    """Wire runner and view from settings."""
    check = settings.config.check
    display = settings.config.display
    runner = CheckRunner(check.catalogue, timeout=check.timeout, shell=check.shell)
    view = View(display, json_output=settings.json_output)
    return App(runner, view, display)


def main():
    """Main entry point for CLI."""
    require_privileges()
    CliApp.run(Cli)


if __name__ == "__main__":
    main()
