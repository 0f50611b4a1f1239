"""Concurrent check execution."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence

from invoke.exceptions import Failure, ThreadException

from syscheck.core.config import CheckSpec
from syscheck.core.log import logger
from syscheck.core.result import (
    CheckResult,
    CheckStatus,
    ResultBatch,
    with_elapsed,
)
from syscheck.core.runner import Runner


class ResultCollector:
    """Append-only result list shared by the worker threads.

    Readers only get a snapshot, and only the batch owner takes one,
    after every worker has been joined.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results: list[CheckResult] = []

    def append(self, result: CheckResult) -> None:
        with self._lock:
            self._results.append(result)

    def snapshot(self) -> ResultBatch:
        with self._lock:
            return tuple(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


class CheckRunner:
    """Run every catalogue check at once and collect one batch."""

    def __init__(
        self,
        catalogue: Sequence[CheckSpec],
        timeout: float | None = None,
        shell: str | None = None,
    ):
        """Initialize check runner.

        Args:
            catalogue: Checks to execute
            timeout: Per-check timeout in seconds, None for no limit
            shell: Shell to run commands with (invoke's default if None)
        """
        self.catalogue = tuple(catalogue)
        self.timeout = timeout
        self.shell = shell

    def run_all(self) -> ResultBatch:
        """Run all checks concurrently and wait for every one.

        One thread per check; the batch is in completion order.
        """
        collector = ResultCollector()
        workers = [
            threading.Thread(
                target=self._worker,
                args=(spec, collector),
                name=f"check-{spec.name}",
                daemon=True,
            )
            for spec in self.catalogue
        ]

        with logger.span("Running checks", count=len(workers)):
            for worker in workers:
                worker.start()
            for worker in workers:
                worker.join()

        batch = collector.snapshot()
        failed = sum(1 for result in batch if not result.passed)
        logger.info(
            "Checks finished", total=len(batch), failed=failed
        )
        return batch

    def _worker(self, spec: CheckSpec, collector: ResultCollector) -> None:
        # Every check must report, even if run_one itself breaks
        start = time.perf_counter()
        try:
            result = self.run_one(spec)
        except Exception as e:
            logger.error("Check crashed", check=spec.name, error=repr(e))
            result = CheckResult(
                name=spec.name,
                status=CheckStatus.FAILED,
                message=with_elapsed(
                    _failure_body(spec.hint, str(e)),
                    time.perf_counter() - start,
                ),
            )
        collector.append(result)

    def run_one(self, spec: CheckSpec) -> CheckResult:
        """Run one check and turn its outcome into a result.

        Never raises for a failing or unstartable command; that is a
        Failed result.
        """
        start = time.perf_counter()
        with logger.span("Running check", check=spec.name):
            logger.debug("Executing", command=spec.command)
            status, output = self._execute(spec.command)
        elapsed = time.perf_counter() - start

        if status is CheckStatus.FAILED:
            body = _failure_body(spec.hint, output)
        else:
            body = output

        logger.info(
            "Check completed",
            check=spec.name,
            status=status.value,
            seconds=round(elapsed, 2),
        )
        return CheckResult(
            name=spec.name,
            status=status,
            message=with_elapsed(body, elapsed),
        )

    def _execute(self, command: str) -> tuple[CheckStatus, str]:
        """Return status and trimmed combined output of a command."""
        try:
            result = Runner(shell=self.shell).execute(
                command, timeout=self.timeout
            )
        except (OSError, Failure, ThreadException) as e:
            logger.warn("Could not run check command", error=str(e))
            return CheckStatus.FAILED, str(e).strip()

        output = result.stdout.strip()
        if result.exited == -1 and self.timeout:
            output = _join(output, f"timed out after {self.timeout:g} s")
        if result.exited == 0:
            return CheckStatus.PASSED, output
        return CheckStatus.FAILED, output


def _join(first: str, second: str) -> str:
    return "\n".join(part for part in (first, second) if part)


def _failure_body(hint: str, output: str) -> str:
    """Hint first, then what the command actually printed."""
    if not output:
        return hint
    if not hint:
        return output
    return f"{hint} ({output})"
