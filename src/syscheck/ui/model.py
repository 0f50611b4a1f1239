"""Presentation state and its transition function."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from syscheck.core.config import DisplayConfig
from syscheck.core.result import ResultBatch
from syscheck.ui.messages import (
    BatchReady,
    Effect,
    Event,
    Exit,
    KeyPress,
    Quit,
    ScheduleTick,
    Send,
    Tick,
)


class Phase(str, Enum):
    LOADING = "loading"
    DISPLAYING = "displaying"
    QUITTING = "quitting"


@dataclass(frozen=True)
class PresentationState:
    """What the screen shows; replaced, never mutated."""

    batch: ResultBatch | None = None
    quitting: bool = False
    spinner_frame: int = 0

    @property
    def phase(self) -> Phase:
        if self.quitting:
            return Phase.QUITTING
        if self.batch is None:
            return Phase.LOADING
        return Phase.DISPLAYING


def init(display: DisplayConfig) -> tuple[PresentationState, list[Effect]]:
    """Initial state; the first Tick is scheduled right away."""
    return PresentationState(), [ScheduleTick(display.tick_interval)]


def update(
    state: PresentationState,
    event: Event,
    display: DisplayConfig,
) -> tuple[PresentationState, list[Effect]]:
    """Apply one event.

    Pure: no I/O, no clock. The loop performs the returned effects.
    """
    if isinstance(event, BatchReady):
        return replace(state, batch=event.batch), []

    if isinstance(event, Tick):
        if state.quitting:
            return state, []
        frame = (state.spinner_frame + 1) % len(display.spinner_frames)
        return (
            replace(state, spinner_frame=frame),
            [ScheduleTick(display.tick_interval)],
        )

    if isinstance(event, KeyPress):
        if event.key == display.quit_key:
            return state, [Send(Quit())]
        return state, []

    if isinstance(event, Quit):
        return replace(state, quitting=True), [Exit()]

    raise TypeError(f"Unknown event: {event!r}")
