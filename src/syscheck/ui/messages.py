"""Events consumed by the presentation loop and effects it produces."""

from __future__ import annotations

from dataclasses import dataclass

from syscheck.core.result import ResultBatch

# ============================================================
# EVENTS
# ============================================================


@dataclass(frozen=True)
class BatchReady:
    """Every check has finished."""

    batch: ResultBatch


@dataclass(frozen=True)
class Tick:
    """Spinner timer fired."""


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class Quit:
    """Leave the loop."""


Event = BatchReady | Tick | KeyPress | Quit


# ============================================================
# EFFECTS
# ============================================================


@dataclass(frozen=True)
class ScheduleTick:
    """Deliver a Tick after `delay` seconds."""

    delay: float


@dataclass(frozen=True)
class Send:
    """Queue another event behind the current one."""

    event: Event


@dataclass(frozen=True)
class Exit:
    """Stop the loop after rendering."""


Effect = ScheduleTick | Send | Exit
