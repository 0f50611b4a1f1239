"""Shared base model for configuration sections.

Lives apart from config.py because log.py builds on it too.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    def close(self) -> None: ...


class BaseConfig(BaseModel):
    """Configuration section that owns the resources in its fields.

    close() closes every field holding something Closeable, so closing
    the root closes the whole tree:

        Settings -> Config -> Logger -> FileSink

    A child that fails to close is reported on stderr and the rest are
    still closed.
    """

    def close(self):
        for name, child in self:
            if not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(f"syscheck: could not close {name}: {e}", file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


__all__ = ["BaseConfig", "Closeable"]
