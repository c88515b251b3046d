"""CLI entrypoint for bug-finder."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path

import rich_click as click

from bug_finder import __version__
from bug_finder.assistant.base import ClientFactory
from bug_finder.assistant.copilot_backend import CopilotAssistantClient
from bug_finder.config import Settings
from bug_finder.console import Console
from bug_finder.controllers import AnalysisSummary, AnalyzeBugsCommand, BugFinderController
from bug_finder.errors import format_error

click.rich_click.USE_MARKDOWN = True
CLIENT_FACTORY: ClientFactory = CopilotAssistantClient

_BUG_JSON_HELP = """
**Bug JSON schema**

```
[
  {
    "title": "Bug title",
    "description": "Detailed description of the bug",
    "status": "todo",
    "bug-details": null,
    "localRepoUrls": ["/absolute/path/to/local/repo"],
    "imagePaths": ["/absolute/path/to/screenshot.png"]
  }
]
```

- `status` is optional and defaults to `todo`; allowed values: todo, in-progress, done.
- `bug-details` is filled with structured findings after analysis.
- `localRepoUrl` (string) is still supported for a single repository entry.
- `imagePaths` is optional.

Environment: `COPILOT_MODEL` overrides the model, `COPILOT_PATH` the Copilot CLI binary.
"""


@click.command(epilog=_BUG_JSON_HELP)
@click.version_option(version=__version__, prog_name="bug-finder")
@click.argument("bug_json", metavar="<bug.json>", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--show-reasoning/--hide-reasoning",
    default=None,
    help="Stream assistant reasoning to stdout. Defaults to BUG_FINDER_SHOW_REASONING.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def bug_finder(bug_json: Path, show_reasoning: bool | None, verbose: bool) -> None:
    """Analyze a bug description against local repositories using the GitHub Copilot SDK."""

    _configure_logging(verbose)
    console = Console()
    try:
        settings = Settings.from_env()
        if show_reasoning is not None:
            output = replace(settings.output, show_reasoning=show_reasoning)
            settings = replace(settings, output=output)
        settings.validate()

        controller = BugFinderController(
            settings=settings,
            client_factory=CLIENT_FACTORY,
            console=console,
        )
        summary = controller.analyze(AnalyzeBugsCommand(bug_json_path=bug_json))
    except Exception as error:  # noqa: BLE001
        logging.getLogger(__name__).debug("Analysis failed", exc_info=True)
        console.ensure_line_break("stdout")
        raise click.ClickException(format_error(error)) from error
    _emit_summary(console, summary)


def _emit_summary(console: Console, summary: AnalysisSummary) -> None:
    console.status(
        f"🏁 Done: {summary.processed} analyzed, {summary.skipped} already done, "
        f"{summary.total} total.",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":  # pragma: no cover
    bug_finder()
