"""Prompt templates for root-cause analysis and architecture index generation."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from bug_finder.bugs import BugRecord
from bug_finder.config import ARCHITECTURE_DOC_NAME

FINDINGS_SCHEMA_EXAMPLE = """\
{
  "probableCause": "string",
  "reason": "string",
  "suggestedFixes": ["string"],
  "confidenceScore": 0.0,
  "evidence": [{"file": "string", "lines": "string", "detail": "string"}]
}"""

_ANALYSIS_SYSTEM_MESSAGE = """\
You are a senior software engineer specializing in root-cause analysis.
Use the repository tools to inspect the codebases listed in the prompt, and consult \
each repository's '{doc_name}' (when present) as the architecture index. Cite it when \
referencing its entries and let its structure guide your investigation.
If images are attached, use them as supporting evidence.

Return ONLY a valid JSON object with this exact shape:
{schema}

Requirements:
- Base conclusions on repository evidence and include file paths and line references when possible.
- If evidence is limited, state it clearly in "reason" and "evidence".
- confidenceScore must be a number between 0 and 1.
- Do not include markdown code fences or any text outside the JSON object.
"""

_ANALYSIS_TASK = """\
Task:
Analyze the repository to find the most probable cause of the bug.
Do not rely on the bug title or description as factual; treat them only as hints.
Investigate the codebase to determine the actual root cause and base conclusions on evidence.
Explain the reasoning, propose fixes, and provide a confidence score.
"""

_DOC_SYSTEM_MESSAGE = """\
You are a documentation engineer who generates concise architecture guides.
Produce only the contents of a {doc_name} file for the attached repository.
Focus on creating an "Architecture Index" that lists high-level directories or modules \
with short descriptions (1-2 sentences) and how they relate to the project.
Keep the format purely Markdown and avoid analysis, to-do lists, or narrative text.
"""

_DOC_TASK = """\
Task: Inspect the attached repository to create a concise {doc_name}.
Outline an Architecture Index section (or similar structure) that lists the most \
relevant directories/modules followed by a short purpose sentence that describes how \
each area helps navigate the codebase.
Include any other sections that support navigation (e.g., key entry points, important frameworks).
Return only the markdown content of {doc_name}.
"""


def build_system_message(doc_name: str = ARCHITECTURE_DOC_NAME) -> str:
    message = _ANALYSIS_SYSTEM_MESSAGE.format(doc_name=doc_name, schema=FINDINGS_SCHEMA_EXAMPLE)
    return message.strip()


def build_prompt(
    bug: BugRecord,
    repo_paths: Sequence[Path],
    image_paths: Sequence[Path] = (),
) -> str:
    """Render the user prompt for one bug.

    Image paths default to the ones stored on the record when none are given.
    """

    images = [str(path) for path in image_paths] or list(bug.image_paths or [])
    sections = [
        f"Bug title: {bug.title}",
        f"Bug description:\n{bug.description}",
        f"Current workflow status: {bug.status.value}",
        f"Repository roots:\n{_bullets(str(path) for path in repo_paths)}",
        f"Bug images:\n{_bullets(images) if images else 'None'}",
        _ANALYSIS_TASK.strip(),
    ]
    return "\n\n".join(sections)


def build_doc_system_message(doc_name: str = ARCHITECTURE_DOC_NAME) -> str:
    return _DOC_SYSTEM_MESSAGE.format(doc_name=doc_name).strip()


def build_doc_prompt(repo_path: Path, doc_name: str = ARCHITECTURE_DOC_NAME) -> str:
    return f"Repository root: {repo_path}\n\n" + _DOC_TASK.format(doc_name=doc_name).strip()


def _bullets(items) -> str:
    return "\n".join(f"- {item}" for item in items)
