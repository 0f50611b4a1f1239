"""Single-key input from the terminal."""

from __future__ import annotations

import asyncio
import contextlib
import os
import sys
from collections.abc import Callable
from typing import TextIO

try:
    import termios
    import tty
except ImportError:  # Windows
    termios = None
    tty = None


class KeyReader:
    """Feeds key presses into the event loop.

    Puts the terminal in cbreak mode (keys arrive without Enter, no
    echo) while active, and restores the previous mode on stop().
    """

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdin
        self._saved_attrs = None
        self._fd: int | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def available(self) -> bool:
        """True when there is an interactive POSIX terminal to read."""
        if termios is None:
            return False
        try:
            return self.stream.isatty()
        except ValueError:
            # Closed stream
            return False

    def start(
        self,
        loop: asyncio.AbstractEventLoop,
        on_key: Callable[[str], None],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        """Deliver each key to on_key; on_close runs once if the terminal
        goes away."""
        self._fd = self.stream.fileno()
        self._loop = loop
        self._saved_attrs = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        loop.add_reader(self._fd, self._read, on_key, on_close)

    def stop(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._fd is None:
            return
        loop.remove_reader(self._fd)
        # A hung-up terminal has no mode left to restore
        with contextlib.suppress(termios.error):
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        self._fd = None
        self._saved_attrs = None

    def _read(
        self,
        on_key: Callable[[str], None],
        on_close: Callable[[], None] | None,
    ) -> None:
        try:
            data = os.read(self._fd, 32)
        except OSError:
            # EIO after a hangup
            data = b""
        if not data:
            # End of input stays readable forever; stop polling it
            self._loop.remove_reader(self._fd)
            if on_close is not None:
                on_close()
            return
        for key in data.decode(errors="ignore"):
            on_key(key)
