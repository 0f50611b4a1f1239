"""Result types for check execution."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, TypeAdapter

_TIMING_SUFFIX = re.compile(r"\s*(\(\d+\.\d{2}s\))\Z")


class CheckStatus(str, Enum):
    """Outcome of a single check."""

    PASSED = "Passed"
    FAILED = "Failed"


class CheckResult(BaseModel):
    """Result of one check execution.

    The message always ends with the elapsed time, e.g. "(0.12s)".
    """

    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    message: str

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASSED


# Completion-ordered, one entry per catalogue check
ResultBatch = tuple[CheckResult, ...]

_batch_adapter = TypeAdapter(list[CheckResult])


def format_elapsed(seconds: float) -> str:
    """Render a duration the way it is appended to messages."""
    return f"({seconds:.2f}s)"


def with_elapsed(body: str, seconds: float) -> str:
    """Append the elapsed-time suffix to a message body."""
    elapsed = format_elapsed(seconds)
    return f"{body} {elapsed}" if body else elapsed


def split_elapsed(message: str) -> tuple[str, str]:
    """Split a message into (body, timing suffix).

    Messages without a timing suffix come back unchanged with an
    empty suffix.
    """
    match = _TIMING_SUFFIX.search(message)
    if match is None:
        return message, ""
    return message[:match.start()], match.group(1)


def batch_to_json(batch: ResultBatch, indent: int = 2) -> str:
    """Serialize a batch as a JSON array of name/status/message objects."""
    return _batch_adapter.dump_json(list(batch), indent=indent).decode()
