"""Check execution."""

from syscheck.checks.runner import CheckRunner, ResultCollector

__all__ = ["CheckRunner", "ResultCollector"]
