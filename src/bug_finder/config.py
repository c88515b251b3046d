"""Runtime configuration for bug analysis sessions."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MODEL = "gpt-4.1"
ARCHITECTURE_DOC_NAME = "bug-finder.md"


def default_cli_path() -> Path:
    """Per-user install location of the Copilot CLI."""

    return Path.home() / ".local" / "bin" / "copilot"


@dataclass(slots=True)
class AssistantSettings:
    """Copilot client and session settings."""

    model: str = DEFAULT_MODEL
    cli_path: Path = field(default_factory=default_cli_path)
    log_dir: Path = Path("copilot-logs")
    log_level: str = "debug"
    analysis_timeout_seconds: float = 600.0
    doc_timeout_seconds: float = 180.0


@dataclass(slots=True)
class OutputSettings:
    """Console rendering settings."""

    show_reasoning: bool = True
    tool_snippet_max_chars: int = 160


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    assistant: AssistantSettings = field(default_factory=AssistantSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    architecture_doc_name: str = ARCHITECTURE_DOC_NAME

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for local use."""

        cli_path_raw = os.getenv("COPILOT_PATH", "").strip()
        return cls(
            assistant=AssistantSettings(
                model=os.getenv("COPILOT_MODEL", "").strip() or DEFAULT_MODEL,
                cli_path=Path(cli_path_raw).expanduser() if cli_path_raw else default_cli_path(),
                log_dir=Path(os.getenv("BUG_FINDER_LOG_DIR", "copilot-logs")),
                analysis_timeout_seconds=_env_float(
                    "BUG_FINDER_ANALYSIS_TIMEOUT_SECONDS",
                    default=600.0,
                ),
                doc_timeout_seconds=_env_float("BUG_FINDER_DOC_TIMEOUT_SECONDS", default=180.0),
            ),
            output=OutputSettings(
                show_reasoning=_env_bool("BUG_FINDER_SHOW_REASONING", default=True),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values a session cannot run with."""

        if not self.assistant.model.strip():
            raise ValueError("COPILOT_MODEL must not be empty.")
        if self.assistant.analysis_timeout_seconds <= 0:
            raise ValueError("BUG_FINDER_ANALYSIS_TIMEOUT_SECONDS must be > 0.")
        if self.assistant.doc_timeout_seconds <= 0:
            raise ValueError("BUG_FINDER_DOC_TIMEOUT_SECONDS must be > 0.")
        if self.output.tool_snippet_max_chars < 4:
            raise ValueError("Tool snippet length must be at least 4 characters.")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid number for {name}: {raw!r}") from error
    if not math.isfinite(value):
        raise ValueError(f"Invalid number for {name}: {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
