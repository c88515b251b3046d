"""Generate a per-repository architecture index when it is missing."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from bug_finder.assistant.base import Attachment, ClientFactory
from bug_finder.config import Settings
from bug_finder.console import Console
from bug_finder.errors import ArchitectureDocError, format_error
from bug_finder.events import SessionEventRenderer
from bug_finder.prompts import build_doc_prompt, build_doc_system_message
from bug_finder.session import SessionRequest, run_session

logger = logging.getLogger(__name__)


def has_architecture_doc(repo_path: Path, doc_name: str) -> bool:
    return (repo_path / doc_name).is_file()


async def ensure_architecture_docs(
    repo_paths: Sequence[Path],
    *,
    settings: Settings,
    client_factory: ClientFactory,
    console: Console,
) -> list[Path]:
    """Make sure every repository has an architecture index; return generated files.

    Repositories are handled one at a time and the first failure aborts.
    """

    doc_name = settings.architecture_doc_name
    generated: list[Path] = []
    for repo_path in repo_paths:
        doc_path = repo_path / doc_name
        if has_architecture_doc(repo_path, doc_name):
            console.status(f"✅ Existing {doc_name} detected at {doc_path}")
            continue

        console.status(f"🧩 Generating {doc_name} for {repo_path}...")
        try:
            content = await generate_architecture_doc(
                repo_path,
                settings=settings,
                client_factory=client_factory,
                console=console,
            )
        except Exception as error:
            raise ArchitectureDocError(
                f"Failed to generate {doc_name} for {repo_path}: {format_error(error)}",
            ) from error

        doc_path.write_text(f"{content.rstrip()}\n", "utf-8")
        console.status(f"💾 Written {doc_name} to {doc_path}")
        generated.append(doc_path)
    return generated


async def generate_architecture_doc(
    repo_path: Path,
    *,
    settings: Settings,
    client_factory: ClientFactory,
    console: Console,
) -> str:
    doc_name = settings.architecture_doc_name
    result = await run_session(
        request=SessionRequest(
            prompt=build_doc_prompt(repo_path, doc_name),
            system_message=build_doc_system_message(doc_name),
            working_directory=repo_path,
            timeout_seconds=settings.assistant.doc_timeout_seconds,
            attachments=[Attachment.directory(repo_path)],
            streaming=False,
            label=f"{doc_name} generation",
            prefer_reply=True,
        ),
        settings=settings.assistant,
        client_factory=client_factory,
        console=console,
        renderer=SessionEventRenderer(
            console,
            show_reasoning=False,
            echo_report=False,
            snippet_max_chars=settings.output.tool_snippet_max_chars,
        ),
    )
    logger.debug("Generated %s for %s (%d chars)", doc_name, repo_path, len(result.text))
    return result.text
