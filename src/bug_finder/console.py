"""Progress (stderr) and report (stdout) output channels."""

from __future__ import annotations

from typing import Literal

import click

StreamName = Literal["stdout", "stderr"]


class Console:
    """Write to stdout/stderr while keeping interleaved output on separate lines.

    Streamed assistant deltas rarely end with a newline, so every status line
    first terminates whatever partial line the other stream left open.
    """

    def __init__(self, *, color: bool | None = None) -> None:
        self._color = color
        self._ended_with_newline = True

    def write(
        self,
        stream: StreamName,
        value: str,
        *,
        style: dict[str, object] | None = None,
    ) -> None:
        if not value:
            return
        text = click.style(value, **style) if style else value
        click.echo(text, nl=False, err=stream == "stderr", color=self._color)
        self._ended_with_newline = value.endswith("\n")

    def ensure_line_break(self, stream: StreamName) -> None:
        if self._ended_with_newline:
            return
        click.echo("", err=stream == "stderr")
        self._ended_with_newline = True

    def write_line(
        self,
        stream: StreamName,
        value: str,
        *,
        style: dict[str, object] | None = None,
    ) -> None:
        self.ensure_line_break("stdout")
        self.write(stream, f"{value}\n", style=style)

    def thinking(self, value: str) -> None:
        self.write("stdout", value, style={"fg": "bright_black"})

    def report(self, value: str) -> None:
        self.write("stdout", value, style={"fg": "bright_white"})

    def status(self, message: str) -> None:
        self.write_line("stderr", message, style={"dim": True})

    def tool(self, message: str) -> None:
        self.write_line("stderr", f"🛠 {message}", style={"fg": "bright_cyan"})

    def intent(self, message: str) -> None:
        self.write_line("stderr", message, style={"fg": "bright_yellow"})

    def warn(self, message: str) -> None:
        self.write_line("stderr", message, style={"fg": "yellow"})

    def error(self, message: str) -> None:
        self.write_line("stderr", message, style={"fg": "bright_red"})
