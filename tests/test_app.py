"""Tests for the presentation event loop."""

import io
import json
import threading
import time

import pytest
from rich.console import Console

from syscheck.ui.app import App
from syscheck.ui.model import Phase
from syscheck.ui.view import View


class StubRunner:
    """Stands in for CheckRunner; returns a fixed batch."""

    def __init__(self, batch, delay=0.0, release=None):
        self.batch = batch
        self.catalogue = tuple(result.name for result in batch)
        self.delay = delay
        self.release = release
        self.calls = 0

    def run_all(self):
        self.calls += 1
        if self.release is not None:
            self.release.wait()
        time.sleep(self.delay)
        return self.batch


class NoKeys:
    available = False


class ScriptedKeys:
    """Presses the given keys one after another."""

    available = True

    def __init__(self, keys, interval=0.05):
        self.keys = keys
        self.interval = interval
        self.started = False
        self.stopped = False

    def start(self, loop, on_key, on_close=None):
        self.started = True
        for index, key in enumerate(self.keys, start=1):
            loop.call_later(self.interval * index, on_key, key)

    def stop(self, loop):
        self.stopped = True


class ClosedTerminal(ScriptedKeys):
    """Input ends without a key ever being pressed."""

    def __init__(self):
        super().__init__([])

    def start(self, loop, on_key, on_close=None):
        self.started = True
        loop.call_later(0.2, on_close)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=100, color_system=None)


def make_app(runner, display, console, keys, json_output=False):
    view = View(display, json_output=json_output, color_system=None)
    return App(runner, view, display, keys=keys, console=console)


def test_without_keyboard_exits_after_report(display, console, two_results):
    runner = StubRunner(two_results)
    state = make_app(runner, display, console, NoKeys()).run()

    assert state.phase is Phase.DISPLAYING
    assert runner.calls == 1
    output = console.file.getvalue()
    assert "System Check Results:" in output
    assert "Kernel Check" in output
    assert "Exiting..." not in output


def test_json_output_is_a_valid_document(display, two_results):
    narrow = Console(file=io.StringIO(), width=20, color_system=None)
    app = make_app(
        StubRunner(two_results), display, narrow, NoKeys(), json_output=True
    )
    app.run()

    document = json.loads(narrow.file.getvalue())
    assert [entry["name"] for entry in document] == [
        "Kernel Check",
        "UFW Firewall Status",
    ]


def test_quit_key_ends_loop(display, console, two_results):
    keys = ScriptedKeys(["x", "q"], interval=0.1)
    runner = StubRunner(two_results)
    state = make_app(runner, display, console, keys).run()

    assert state.quitting
    assert state.batch == two_results
    assert keys.started and keys.stopped
    assert console.file.getvalue().endswith("Exiting...\n")


def test_quit_before_batch_does_not_wait(display, console, two_results):
    release = threading.Event()
    runner = StubRunner(two_results, release=release)
    keys = ScriptedKeys(["q"])

    try:
        start = time.perf_counter()
        state = make_app(runner, display, console, keys).run()
        elapsed = time.perf_counter() - start
    finally:
        release.set()

    assert state.quitting
    assert state.batch is None
    assert elapsed < 2


def test_spinner_animates_while_loading(display, console, two_results):
    runner = StubRunner(two_results, delay=0.5)
    keys = ScriptedKeys(["q"], interval=0.8)
    state = make_app(runner, display, console, keys).run()

    assert state.quitting
    # Roughly one frame per 100 ms of loading and displaying
    assert state.spinner_frame >= 3


def test_closed_terminal_quits(display, console, two_results):
    keys = ClosedTerminal()
    state = make_app(StubRunner(two_results), display, console, keys).run()

    assert state.quitting
    assert keys.stopped
