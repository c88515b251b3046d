from __future__ import annotations

from pathlib import Path

import allure
import pytest

from bug_finder.config import DEFAULT_MODEL, AssistantSettings, Settings, default_cli_path

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Environment Settings"),
]


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.assistant.model == DEFAULT_MODEL == "gpt-4.1"
    assert settings.assistant.cli_path == default_cli_path()
    assert settings.assistant.cli_path.parts[-3:] == (".local", "bin", "copilot")
    assert settings.assistant.analysis_timeout_seconds == 600.0
    assert settings.assistant.doc_timeout_seconds == 180.0
    assert settings.output.show_reasoning is True
    assert settings.architecture_doc_name == "bug-finder.md"
    settings.validate()


def test_from_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("COPILOT_MODEL", " claude-sonnet-4 ")
    monkeypatch.setenv("COPILOT_PATH", "/opt/copilot/bin/copilot")
    monkeypatch.setenv("BUG_FINDER_LOG_DIR", "/tmp/logs")
    monkeypatch.setenv("BUG_FINDER_ANALYSIS_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("BUG_FINDER_DOC_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("BUG_FINDER_SHOW_REASONING", "off")

    settings = Settings.from_env()

    assert settings.assistant.model == "claude-sonnet-4"
    assert settings.assistant.cli_path == Path("/opt/copilot/bin/copilot")
    assert settings.assistant.log_dir == Path("/tmp/logs")
    assert settings.assistant.analysis_timeout_seconds == 30.0
    assert settings.assistant.doc_timeout_seconds == 12.5
    assert settings.output.show_reasoning is False


def test_blank_model_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("COPILOT_MODEL", "   ")

    assert Settings.from_env().assistant.model == DEFAULT_MODEL


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("BUG_FINDER_SHOW_REASONING", "maybe", "Invalid boolean value for BUG_FINDER_SHOW"),
        ("BUG_FINDER_ANALYSIS_TIMEOUT_SECONDS", "ten", "Invalid number for BUG_FINDER_ANALYSIS"),
        ("BUG_FINDER_DOC_TIMEOUT_SECONDS", "inf", "Invalid number for BUG_FINDER_DOC"),
    ],
)
def test_from_env_rejects_invalid_values(monkeypatch, name: str, value: str, message: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=message):
        Settings.from_env()


def test_validate_rejects_non_positive_timeouts() -> None:
    with pytest.raises(ValueError, match="ANALYSIS_TIMEOUT_SECONDS"):
        Settings(assistant=AssistantSettings(analysis_timeout_seconds=0)).validate()
    with pytest.raises(ValueError, match="DOC_TIMEOUT_SECONDS"):
        Settings(assistant=AssistantSettings(doc_timeout_seconds=-1)).validate()
