"""One-line summaries of assistant tool invocations."""

from __future__ import annotations

import re
from collections.abc import Mapping

DEFAULT_SNIPPET_MAX_CHARS = 160

_WHITESPACE = re.compile(r"\s+")

# argument keys consulted in order when a tool has no dedicated rule
_DETAIL_KEYS = (
    "path",
    "filePath",
    "url",
    "pattern",
    "description",
    "command",
    "query",
    "question",
    "intent",
    "prompt",
    "input",
)


def format_snippet(value: str, max_chars: int = DEFAULT_SNIPPET_MAX_CHARS) -> str:
    """Collapse whitespace and cap length, marking truncation with `...`."""

    collapsed = _WHITESPACE.sub(" ", value).strip()
    if len(collapsed) <= max_chars:
        return collapsed
    return f"{collapsed[: max(0, max_chars - 3)]}..."


def summarize_tool_args(
    tool_name: str,
    arguments: object,
    max_chars: int = DEFAULT_SNIPPET_MAX_CHARS,
) -> str:
    if arguments is None:
        return ""
    if isinstance(arguments, str):
        return format_snippet(arguments, max_chars)
    if not isinstance(arguments, Mapping):
        return format_snippet(str(arguments), max_chars)

    values = {key: value for key, value in arguments.items() if isinstance(value, str)}
    pattern = values.get("pattern")
    if tool_name in {"rg", "grep", "glob"} and pattern:
        path = values.get("path")
        return format_snippet(f"{pattern} in {path}" if path else pattern, max_chars)

    if tool_name == "bash":
        detail = values.get("description") or values.get("command")
        return format_snippet(detail, max_chars) if detail else ""

    for key in _DETAIL_KEYS:
        detail = values.get(key)
        if detail:
            return format_snippet(detail, max_chars)
    return ""


def format_tool_usage(
    tool_name: str,
    arguments: object,
    max_chars: int = DEFAULT_SNIPPET_MAX_CHARS,
) -> str:
    detail = summarize_tool_args(tool_name, arguments, max_chars)
    return f"{tool_name} → {detail}" if detail else tool_name
