"""syscheck - concurrent system health checks with a live terminal report."""

__version__ = "0.1.0"
