"""Rendering of presentation state."""

from __future__ import annotations

import io

from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich.text import Text

from syscheck.core.config import DisplayConfig
from syscheck.core.result import CheckResult, batch_to_json, split_elapsed
from syscheck.ui.model import Phase, PresentationState

PASS_GLYPH = "✔"
FAIL_GLYPH = "✘"
CONTINUATION_INDENT = "  "


class View:
    """Turns a PresentationState into something rich can print.

    render() depends on nothing but the state and the settings given
    here, so the same state always renders the same way.
    """

    def __init__(
        self,
        display: DisplayConfig,
        json_output: bool = False,
        width: int = 100,
        color_system: str | None = "truecolor",
    ):
        """Initialize view.

        Args:
            display: Styles, spinner frames and quit key
            json_output: Render the batch as JSON instead of a table
            width: Line width used by render_text()
            color_system: Rich color system for render_text(), None
                for plain text
        """
        self.display = display
        self.styles = display.styles
        self.json_output = json_output
        self.width = width
        self.color_system = color_system

    def render(self, state: PresentationState) -> RenderableType:
        phase = state.phase
        if phase is Phase.QUITTING:
            return Text("Exiting...")
        if phase is Phase.LOADING:
            frames = self.display.spinner_frames
            frame = frames[state.spinner_frame % len(frames)]
            return Text(
                f"Performing system checks... {frame}",
                style=self.styles.loading,
            )
        if self.json_output:
            return Text(batch_to_json(state.batch))
        return self._report(state.batch)

    def render_text(self, state: PresentationState) -> str:
        """Render to a string with this view's width and colors."""
        console = Console(
            file=io.StringIO(),
            width=self.width,
            color_system=self.color_system,
            force_terminal=self.color_system is not None,
            no_color=False,
            highlight=False,
            legacy_windows=False,
        )
        self.print(console, state)
        return console.file.getvalue()

    def print(self, console: Console, state: PresentationState) -> None:
        """Print a frame outside the live region.

        The JSON document is printed with soft wrap so that no line
        is wrapped or cropped at the console width.
        """
        document = self.json_output and state.phase is Phase.DISPLAYING
        console.print(self.render(state), soft_wrap=document)

    def _report(self, batch) -> RenderableType:
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column(no_wrap=True)
        table.add_column()

        for result in batch:
            style = self.styles.success if result.passed else self.styles.error
            glyph = PASS_GLYPH if result.passed else FAIL_GLYPH
            table.add_row(
                Text(glyph, style=style),
                Text(result.name),
                Text(format_message(result), style=style),
            )

        return Group(
            Text("System Check Results:", style=self.styles.title),
            Text(""),
            table,
            Text(""),
            Text(
                f"Press '{self.display.quit_key}' to quit",
                style=self.styles.footer,
            ),
        )


def format_message(result: CheckResult) -> str:
    """Keep the timing on the first line and indent the rest."""
    body, timing = split_elapsed(result.message)
    lines = body.splitlines() or [""]
    first = " ".join(part for part in (lines[0], timing) if part)
    rest = [CONTINUATION_INDENT + line for line in lines[1:]]
    return "\n".join([first, *rest])
