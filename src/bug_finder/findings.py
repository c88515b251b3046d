"""Findings contract: extract and validate the assistant's JSON report."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from bug_finder.errors import FindingsError

CONFIDENCE_MIN = 0.0
CONFIDENCE_MAX = 1.0

_FENCED_BLOCK = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n(?P<body>.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Finding:
    """Root-cause analysis result for one bug."""

    probable_cause: str
    reason: str
    suggested_fixes: tuple[str, ...]
    confidence_score: float
    evidence: Any = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "probableCause": self.probable_cause,
            "reason": self.reason,
            "suggestedFixes": list(self.suggested_fixes),
            "confidenceScore": self.confidence_score,
        }
        if self.evidence is not None:
            payload["evidence"] = self.evidence
        return payload


def strip_code_fence(text: str) -> str:
    """Remove a single fenced code block wrapping the whole text."""

    stripped = text.strip()
    match = _FENCED_BLOCK.match(stripped)
    if match is None:
        return stripped
    return match.group("body").strip()


def parse_findings(report_text: str) -> Finding:
    """Parse raw report text into a validated `Finding`."""

    body = strip_code_fence(report_text)
    if not body:
        raise FindingsError("Copilot report is empty; expected a JSON object.")
    try:
        raw = json.loads(body)
    except json.JSONDecodeError as error:
        raise FindingsError(
            f"Copilot report is not valid JSON ({error.msg} at line {error.lineno} "
            f"column {error.colno}): {_preview(body)}",
        ) from error
    if not isinstance(raw, dict):
        raise FindingsError(f"Copilot report must be a JSON object, got {type(raw).__name__}.")
    return validate_findings(raw)


def validate_findings(raw: dict[str, Any]) -> Finding:
    return Finding(
        probable_cause=_require_non_empty_string(raw.get("probableCause"), "probableCause"),
        reason=_require_non_empty_string(raw.get("reason"), "reason"),
        suggested_fixes=_require_fix_list(raw.get("suggestedFixes")),
        confidence_score=_require_confidence(raw.get("confidenceScore")),
        evidence=raw.get("evidence"),
    )


def _require_non_empty_string(value: object, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise FindingsError(f'Findings field "{field_name}" must be a non-empty string.')
    return value.strip()


def _require_fix_list(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise FindingsError('Findings field "suggestedFixes" must be an array.')
    fixes: list[str] = []
    for index, item in enumerate(value):
        if item is None or isinstance(item, (dict, list)):
            raise FindingsError(
                f'Findings field "suggestedFixes[{index}]" must be a non-empty string.',
            )
        text = str(item).strip()
        if not text:
            raise FindingsError(
                f'Findings field "suggestedFixes[{index}]" must be a non-empty string.',
            )
        fixes.append(text)
    return tuple(fixes)


def _require_confidence(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FindingsError('Findings field "confidenceScore" must be a finite number.')
    # ints are compared exactly; float() would overflow on huge literals
    if isinstance(value, float) and not math.isfinite(value):
        raise FindingsError('Findings field "confidenceScore" must be a finite number.')
    if not CONFIDENCE_MIN <= value <= CONFIDENCE_MAX:
        raise FindingsError(
            f'Findings field "confidenceScore" must be between {CONFIDENCE_MIN:g} and '
            f"{CONFIDENCE_MAX:g}, got {value!r}.",
        )
    return value


def _preview(text: str, limit: int = 120) -> str:
    compact = " ".join(text.split())
    return compact if len(compact) <= limit else f"{compact[: limit - 3]}..."
