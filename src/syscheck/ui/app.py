"""Event loop driving the live terminal view."""

from __future__ import annotations

import asyncio
import contextlib
import threading

from rich.console import Console
from rich.live import Live

from syscheck.checks.runner import CheckRunner
from syscheck.core.config import DisplayConfig
from syscheck.core.log import logger
from syscheck.ui.keys import KeyReader
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
from syscheck.ui.model import PresentationState, init, update
from syscheck.ui.view import View


class App:
    """Single-threaded loop: one event at a time through update().

    Check execution happens on a background thread; its batch comes
    back as exactly one BatchReady event.
    """

    def __init__(
        self,
        runner: CheckRunner,
        view: View,
        display: DisplayConfig,
        keys: KeyReader | None = None,
        console: Console | None = None,
    ):
        self.runner = runner
        self.view = view
        self.display = display
        self.keys = keys if keys is not None else KeyReader()
        self.console = console if console is not None else Console(
            highlight=False
        )
        self._queue: asyncio.Queue[Event] | None = None
        self._tick: asyncio.TimerHandle | None = None

    def run(self) -> PresentationState:
        """Run until quit; returns the final state."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> PresentationState:
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        interactive = self.keys.available

        self._launch_checks(loop)
        state, effects = init(self.display)

        with Live(
            self.view.render(state),
            console=self.console,
            auto_refresh=False,
            transient=True,
            vertical_overflow="visible",
        ) as live:
            if interactive:
                self.keys.start(loop, self._on_key, self._on_close)
            try:
                done = self._apply(effects, loop)
                while not done:
                    event = await self._queue.get()
                    state, effects = update(state, event, self.display)
                    live.update(self.view.render(state), refresh=True)
                    done = self._apply(effects, loop)
                    # Without a keyboard nobody can press quit
                    if isinstance(event, BatchReady) and not interactive:
                        done = True
            finally:
                if interactive:
                    self.keys.stop(loop)
                if self._tick is not None:
                    self._tick.cancel()

        # Last frame stays on screen, uncropped
        self.view.print(self.console, state)
        return state

    def _launch_checks(self, loop: asyncio.AbstractEventLoop) -> None:
        logger.info("Launching checks", count=len(self.runner.catalogue))
        queue = self._queue

        def work():
            batch = self.runner.run_all()
            # The loop is gone if the user quit before the batch finished
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(
                    queue.put_nowait, BatchReady(batch)
                )

        threading.Thread(target=work, name="check-batch", daemon=True).start()

    def _on_key(self, key: str) -> None:
        self._queue.put_nowait(KeyPress(key))

    def _on_close(self) -> None:
        logger.warn("Terminal input closed, quitting")
        self._queue.put_nowait(Quit())

    def _apply(
        self, effects: list[Effect], loop: asyncio.AbstractEventLoop
    ) -> bool:
        """Perform effects; True when the loop should stop."""
        done = False
        for effect in effects:
            if isinstance(effect, ScheduleTick):
                self._tick = loop.call_later(
                    effect.delay, self._queue.put_nowait, Tick()
                )
            elif isinstance(effect, Send):
                self._queue.put_nowait(effect.event)
            elif isinstance(effect, Exit):
                done = True
        return done
