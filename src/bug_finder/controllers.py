"""Controller for the bug analysis CLI command."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from bug_finder.architecture_doc import ensure_architecture_docs
from bug_finder.assistant.base import Attachment, ClientFactory
from bug_finder.bugs import BugFile, BugRecord, BugStatus, read_bug_file
from bug_finder.config import Settings
from bug_finder.console import Console
from bug_finder.events import SessionEventRenderer
from bug_finder.findings import Finding, parse_findings
from bug_finder.paths import find_common_ancestor, resolve_image_paths, resolve_repo_paths
from bug_finder.prompts import build_prompt, build_system_message
from bug_finder.session import SessionRequest, run_session

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalyzeBugsCommand:
    """CLI input for one analysis run over a bug file."""

    bug_json_path: Path
    base_dir: Path | None = None


@dataclass(slots=True)
class AnalysisSummary:
    """What one run did to the bug file."""

    total: int
    skipped: int
    findings: list[tuple[str, Finding]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.findings)


class BugFinderController:
    """Process every pending bug in a work file, one at a time."""

    def __init__(
        self,
        *,
        settings: Settings,
        client_factory: ClientFactory,
        console: Console,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._console = console

    def analyze(self, command: AnalyzeBugsCommand) -> AnalysisSummary:
        return asyncio.run(self.analyze_async(command))

    async def analyze_async(self, command: AnalyzeBugsCommand) -> AnalysisSummary:
        bug_json_path = command.bug_json_path.absolute()
        self._console.status(f"📄 Reading bug file: {bug_json_path}")
        bug_file = read_bug_file(bug_json_path)
        pending = bug_file.pending()
        summary = AnalysisSummary(
            total=len(bug_file.records),
            skipped=len(bug_file.records) - len(pending),
        )
        if not pending:
            self._console.status("✅ No pending bugs; every entry is already done.")
            return summary

        base_dir = command.base_dir or Path.cwd()
        for position, (index, record) in enumerate(pending, start=1):
            self._console.status(
                f"🐞 Bug {position}/{len(pending)} (entry {index}): {record.title}",
            )
            finding = await self._process(bug_file, record, base_dir=base_dir)
            summary.findings.append((record.title, finding))
        return summary

    async def _process(self, bug_file: BugFile, record: BugRecord, *, base_dir: Path) -> Finding:
        record.advance(BugStatus.IN_PROGRESS)
        bug_file.save()

        repo_paths = resolve_repo_paths(record.local_repo_urls, base_dir=base_dir)
        image_paths = resolve_image_paths(record.image_paths, base_dir=base_dir)
        working_directory = find_common_ancestor(repo_paths)
        repo_lines = "\n".join(f"- {repo_path}" for repo_path in repo_paths)
        self._console.status(f"📂 Using repositories:\n{repo_lines}")
        self._console.status(f"📍 Working directory: {working_directory}")

        await ensure_architecture_docs(
            repo_paths,
            settings=self._settings,
            client_factory=self._client_factory,
            console=self._console,
        )

        attachments = [Attachment.directory(path) for path in repo_paths]
        attachments.extend(Attachment.file(path) for path in image_paths)
        self._console.status("🔎 Running bug analysis...")
        result = await run_session(
            request=SessionRequest(
                prompt=build_prompt(record, repo_paths, image_paths),
                system_message=build_system_message(self._settings.architecture_doc_name),
                working_directory=working_directory,
                timeout_seconds=self._settings.assistant.analysis_timeout_seconds,
                attachments=attachments,
                streaming=True,
                label="bug analysis",
            ),
            settings=self._settings.assistant,
            client_factory=self._client_factory,
            console=self._console,
            renderer=SessionEventRenderer(
                self._console,
                show_reasoning=self._settings.output.show_reasoning,
                snippet_max_chars=self._settings.output.tool_snippet_max_chars,
            ),
        )

        finding = parse_findings(result.text)
        record.details = finding.to_payload()
        record.advance(BugStatus.DONE)
        bug_file.save()
        logger.info(
            "Bug analyzed: title=%r confidence=%.2f tool_calls=%d",
            record.title,
            finding.confidence_score,
            result.tool_calls,
        )
        self._console.status(
            f"💾 Saved findings for {record.title!r} (confidence {finding.confidence_score:.2f})",
        )
        return finding
