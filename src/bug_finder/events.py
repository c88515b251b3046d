"""Assistant session events and their console rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from bug_finder.console import Console
from bug_finder.tool_usage import DEFAULT_SNIPPET_MAX_CHARS, format_tool_usage


class EventKind(StrEnum):
    """Session event kinds consumed from the assistant; values are SDK event names."""

    INTENT = "assistant.intent"
    REASONING_DELTA = "assistant.reasoning_delta"
    REASONING = "assistant.reasoning"
    TOOL_EXECUTION_START = "tool.execution_start"
    SESSION_INFO = "session.info"
    SESSION_ERROR = "session.error"
    MODEL_CHANGE = "session.model_change"
    COMPACTION_START = "session.compaction_start"
    COMPACTION_COMPLETE = "session.compaction_complete"
    SUBAGENT_STARTED = "subagent.started"
    SUBAGENT_COMPLETED = "subagent.completed"
    SUBAGENT_FAILED = "subagent.failed"
    MESSAGE_DELTA = "assistant.message_delta"
    MESSAGE = "assistant.message"


@dataclass(frozen=True, slots=True)
class AssistantEvent:
    """One event emitted by a live session."""

    kind: EventKind
    data: Mapping[str, Any] = field(default_factory=dict)

    def text(self, key: str, default: str = "") -> str:
        value = self.data.get(key)
        if value is None:
            return default
        return value if isinstance(value, str) else str(value)


class SessionEventRenderer:
    """Render session events and collect the final report text.

    State is explicit: `reasoning_active` is set while reasoning deltas stream
    and `streamed_output` once any message delta has been written, so a final
    message payload is not printed twice.
    """

    def __init__(
        self,
        console: Console,
        *,
        show_reasoning: bool = True,
        echo_report: bool = True,
        snippet_max_chars: int = DEFAULT_SNIPPET_MAX_CHARS,
    ) -> None:
        self._console = console
        self._show_reasoning = show_reasoning
        self._echo_report = echo_report
        self._snippet_max_chars = snippet_max_chars
        self.reasoning_active = False
        self.streamed_output = False
        self.final_text: str | None = None
        self.session_errors: list[str] = []
        self.tool_calls = 0
        self._delta_parts: list[str] = []
        self._handlers: dict[EventKind, Callable[[AssistantEvent], None]] = {
            EventKind.INTENT: self.on_intent,
            EventKind.REASONING_DELTA: self.on_reasoning_delta,
            EventKind.REASONING: self.on_reasoning,
            EventKind.TOOL_EXECUTION_START: self.on_tool_execution_start,
            EventKind.SESSION_INFO: self.on_session_info,
            EventKind.SESSION_ERROR: self.on_session_error,
            EventKind.MODEL_CHANGE: self.on_model_change,
            EventKind.COMPACTION_START: self.on_compaction_start,
            EventKind.COMPACTION_COMPLETE: self.on_compaction_complete,
            EventKind.SUBAGENT_STARTED: self.on_subagent_started,
            EventKind.SUBAGENT_COMPLETED: self.on_subagent_completed,
            EventKind.SUBAGENT_FAILED: self.on_subagent_failed,
            EventKind.MESSAGE_DELTA: self.on_message_delta,
            EventKind.MESSAGE: self.on_message,
        }

    def __call__(self, event: AssistantEvent) -> None:
        self._handlers[event.kind](event)

    @property
    def report_text(self) -> str | None:
        """First non-empty message after the last tool call, or pending deltas if none arrived."""

        if self.final_text is not None:
            return self.final_text
        pending = "".join(self._delta_parts).strip()
        return pending or None

    def finish(self) -> None:
        self._end_reasoning()
        self._console.ensure_line_break("stdout")

    def on_intent(self, event: AssistantEvent) -> None:
        self._console.intent(f"🧭 Intent: {event.text('intent')}")

    def on_reasoning_delta(self, event: AssistantEvent) -> None:
        if not self._show_reasoning:
            return
        if not self.reasoning_active:
            self._console.ensure_line_break("stdout")
            self.reasoning_active = True
        self._console.thinking(event.text("delta_content"))

    def on_reasoning(self, event: AssistantEvent) -> None:  # noqa: ARG002
        self._end_reasoning()

    def on_tool_execution_start(self, event: AssistantEvent) -> None:
        self.tool_calls += 1
        # the turn continues, so an earlier message was not the final answer
        self.final_text = None
        self._console.tool(
            format_tool_usage(
                event.text("tool_name", "tool"),
                event.data.get("arguments"),
                self._snippet_max_chars,
            ),
        )

    def on_session_info(self, event: AssistantEvent) -> None:
        self._console.status(f"ℹ️ {event.text('info_type')}: {event.text('message')}")

    def on_session_error(self, event: AssistantEvent) -> None:
        message = event.text("message", "unknown error")
        self.session_errors.append(message)
        self._console.error(f"❌ Session error ({event.text('error_type', 'unknown')}): {message}")

    def on_model_change(self, event: AssistantEvent) -> None:
        previous = event.text("previous_model", "unknown")
        self._console.status(f"🔁 Model change: {previous} → {event.text('new_model')}")

    def on_compaction_start(self, event: AssistantEvent) -> None:  # noqa: ARG002
        self._console.status("🧹 Context compaction started.")

    def on_compaction_complete(self, event: AssistantEvent) -> None:
        if event.data.get("success", True):
            self._console.status("🧹 Context compaction complete.")
        else:
            self._console.warn(
                f"🧹 Context compaction failed: {event.text('error', 'unknown error')}",
            )

    def on_subagent_started(self, event: AssistantEvent) -> None:
        name = event.text("agent_display_name") or event.text("agent_name")
        self._console.status(f"🤖 Subagent started: {name}")

    def on_subagent_completed(self, event: AssistantEvent) -> None:
        self._console.status(f"🤖 Subagent completed: {event.text('agent_name')}")

    def on_subagent_failed(self, event: AssistantEvent) -> None:
        self._console.error(
            f"🤖 Subagent failed: {event.text('agent_name')} - {event.text('error')}",
        )

    def on_message_delta(self, event: AssistantEvent) -> None:
        self._end_reasoning(double_break=True)
        delta = event.text("delta_content")
        self._delta_parts.append(delta)
        self.streamed_output = True
        if self._echo_report:
            self._console.report(delta)

    def on_message(self, event: AssistantEvent) -> None:
        self._end_reasoning()
        content = event.text("content") or "".join(self._delta_parts)
        self._delta_parts.clear()
        if self._echo_report and not self.streamed_output:
            self._console.report(content)
        if event.data.get("tool_requests"):
            return
        if self.final_text is None and content.strip():
            self.final_text = content.strip()

    def _end_reasoning(self, *, double_break: bool = False) -> None:
        if not self.reasoning_active:
            return
        self._console.ensure_line_break("stdout")
        if double_break:
            self._console.write("stdout", "\n")
        self.reasoning_active = False
