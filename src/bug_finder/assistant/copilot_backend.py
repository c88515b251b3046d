"""GitHub Copilot SDK implementation of the assistant backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from copilot import CopilotClient

from bug_finder.assistant.base import (
    AssistantMessage,
    AssistantSession,
    EventHandler,
    SessionOptions,
)
from bug_finder.config import AssistantSettings
from bug_finder.events import AssistantEvent, EventKind

logger = logging.getLogger(__name__)

# snake_case attributes of SDK event payloads that the renderer reads
_EVENT_FIELDS = (
    "intent",
    "delta_content",
    "content",
    "tool_requests",
    "tool_name",
    "arguments",
    "info_type",
    "message",
    "error_type",
    "previous_model",
    "new_model",
    "success",
    "error",
    "agent_name",
    "agent_display_name",
)


def convert_sdk_event(event: Any) -> AssistantEvent | None:
    """Map an SDK session event to an `AssistantEvent`; unknown kinds give None."""

    raw_type = getattr(event, "type", None)
    type_value = getattr(raw_type, "value", raw_type)
    try:
        kind = EventKind(type_value)
    except ValueError:
        return None

    payload = getattr(event, "data", None)
    data: dict[str, Any] = {}
    for name in _EVENT_FIELDS:
        value = getattr(payload, name, None)
        if value is not None:
            data[name] = value
    return AssistantEvent(kind=kind, data=data)


class CopilotSession:
    """Adapter over one `copilot` SDK session."""

    def __init__(self, session: Any) -> None:
        self._session = session

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        def _on_event(event: Any) -> None:
            converted = convert_sdk_event(event)
            if converted is not None:
                handler(converted)

        unsubscribe = self._session.on(_on_event)
        return unsubscribe if callable(unsubscribe) else _noop

    async def send_and_wait(self, message: AssistantMessage, timeout_seconds: float) -> str | None:
        options: dict[str, Any] = {"prompt": message.prompt}
        if message.attachments:
            options["attachments"] = [
                {
                    "type": attachment.type,
                    "path": str(attachment.path),
                    "displayName": attachment.display_name,
                }
                for attachment in message.attachments
            ]
        response = await self._session.send_and_wait(options, timeout=timeout_seconds)
        content = getattr(getattr(response, "data", None), "content", None)
        return content if isinstance(content, str) else None

    async def destroy(self) -> None:
        await self._session.destroy()


class CopilotAssistantClient:
    """Adapter over `copilot.CopilotClient` driving the local Copilot CLI."""

    def __init__(self, settings: AssistantSettings) -> None:
        self._client = CopilotClient(
            {
                "cli_path": str(settings.cli_path),
                "log_level": settings.log_level,
                "cli_args": ["--log-dir", str(settings.log_dir)],
            },
        )

    async def start(self) -> None:
        await self._client.start()

    async def create_session(self, options: SessionOptions) -> AssistantSession:
        logger.debug(
            "Creating Copilot session model=%s streaming=%s cwd=%s",
            options.model,
            options.streaming,
            options.working_directory,
        )
        session = await self._client.create_session(
            {
                "model": options.model,
                "streaming": options.streaming,
                "system_message": {"content": options.system_message},
                "working_directory": str(options.working_directory),
            },
        )
        return CopilotSession(session)

    async def stop(self) -> list[str]:
        errors = await self._client.stop()
        if not errors:
            return []
        return [str(getattr(error, "message", error)) for error in errors]


def _noop() -> None:
    return None
