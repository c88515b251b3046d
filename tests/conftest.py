"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from bug_finder import main
from bug_finder.assistant import ScriptedAssistantClient

_ENV_VARS = (
    "COPILOT_MODEL",
    "COPILOT_PATH",
    "BUG_FINDER_LOG_DIR",
    "BUG_FINDER_ANALYSIS_TIMEOUT_SECONDS",
    "BUG_FINDER_DOC_TIMEOUT_SECONDS",
    "BUG_FINDER_SHOW_REASONING",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def scripted_assistant(monkeypatch) -> ScriptedAssistantClient:
    """Route the CLI to an in-process scripted assistant instead of Copilot."""
    client = ScriptedAssistantClient()
    monkeypatch.setattr(main, "CLIENT_FACTORY", client.factory)
    return client


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    """Repository directory that already carries an architecture index."""
    path = tmp_path / "workspace" / "repo"
    path.mkdir(parents=True)
    (path / "bug-finder.md").write_text("# Architecture Index\n", "utf-8")
    return path

