"""Assistant session lifecycle: connect, create, send, collect, tear down."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from bug_finder.assistant.base import (
    AssistantClient,
    AssistantMessage,
    AssistantSession,
    Attachment,
    ClientFactory,
    SessionOptions,
)
from bug_finder.config import AssistantSettings
from bug_finder.console import Console
from bug_finder.errors import AssistantSessionError, format_error
from bug_finder.events import SessionEventRenderer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionRequest:
    """Everything needed to run one task in a fresh session."""

    prompt: str
    system_message: str
    working_directory: Path
    timeout_seconds: float
    attachments: list[Attachment] = field(default_factory=list)
    streaming: bool = True
    label: str = "assistant task"
    # take the reply returned by send_and_wait over streamed messages
    prefer_reply: bool = False


@dataclass(slots=True)
class SessionResult:
    """Outcome of a completed session."""

    text: str
    tool_calls: int
    elapsed_seconds: float


async def run_session(  # noqa: C901
    *,
    request: SessionRequest,
    settings: AssistantSettings,
    client_factory: ClientFactory,
    console: Console,
    renderer: SessionEventRenderer,
) -> SessionResult:
    """Run one prompt in a dedicated session and return the report text.

    The session is destroyed and the client stopped on every exit path;
    failures while doing so are reported as warnings and never replace the
    primary error or result.
    """

    client: AssistantClient | None = None
    session: AssistantSession | None = None
    unsubscribe: Callable[[], None] | None = None
    started = time.monotonic()
    try:
        console.status("🔗 Connecting to Copilot CLI...")
        client = client_factory(settings)
        try:
            await client.start()
        except Exception as error:
            raise AssistantSessionError(
                f"Failed to connect to Copilot CLI at {settings.cli_path}: {format_error(error)}",
            ) from error

        console.status(f"🧠 Creating Copilot session (model: {settings.model})...")
        try:
            session = await client.create_session(
                SessionOptions(
                    model=settings.model,
                    system_message=request.system_message,
                    working_directory=request.working_directory,
                    streaming=request.streaming,
                ),
            )
        except Exception as error:
            raise AssistantSessionError(
                f"Failed to create Copilot session: {format_error(error)}",
            ) from error
        unsubscribe = session.subscribe(renderer)

        logger.debug("Sending %s prompt (%d chars)", request.label, len(request.prompt))
        reply = await _send(session, request)

        reply_text = reply.strip() if reply else ""
        if request.prefer_reply:
            text = reply_text or renderer.report_text or ""
        else:
            text = renderer.report_text or reply_text
        if not text:
            if renderer.session_errors:
                raise AssistantSessionError(
                    f"Copilot session failed during {request.label}: {renderer.session_errors[-1]}",
                )
            raise AssistantSessionError(f"Copilot did not return any content for {request.label}.")

        elapsed = time.monotonic() - started
        logger.info(
            "Session completed: task=%s tool_calls=%d elapsed=%.1fs",
            request.label,
            renderer.tool_calls,
            elapsed,
        )
        return SessionResult(text=text, tool_calls=renderer.tool_calls, elapsed_seconds=elapsed)
    finally:
        renderer.finish()
        if unsubscribe is not None:
            unsubscribe()
        if session is not None or client is not None:
            console.status("🧹 Cleaning up session...")
        if session is not None:
            await _destroy_session(session, console)
        if client is not None:
            await _stop_client(client, console)


async def _send(session: AssistantSession, request: SessionRequest) -> str | None:
    message = AssistantMessage(prompt=request.prompt, attachments=list(request.attachments))
    try:
        return await asyncio.wait_for(
            session.send_and_wait(message, request.timeout_seconds),
            timeout=request.timeout_seconds,
        )
    except TimeoutError as error:
        raise AssistantSessionError(
            f"Copilot {request.label} timed out after {request.timeout_seconds:g} seconds.",
        ) from error
    except AssistantSessionError:
        raise
    except Exception as error:
        raise AssistantSessionError(
            f"Copilot {request.label} failed: {format_error(error)}",
        ) from error


async def _destroy_session(session: AssistantSession, console: Console) -> None:
    try:
        await session.destroy()
    except Exception as error:  # noqa: BLE001
        logger.debug("Session destroy failed", exc_info=True)
        console.warn(f"⚠️ Failed to destroy session: {format_error(error)}")


async def _stop_client(client: AssistantClient, console: Console) -> None:
    try:
        stop_errors = await client.stop()
    except Exception as error:  # noqa: BLE001
        logger.debug("Client stop failed", exc_info=True)
        console.warn(f"⚠️ Failed to stop Copilot client: {format_error(error)}")
        return
    if stop_errors:
        console.warn(f"⚠️ Errors while stopping Copilot client: {'; '.join(stop_errors)}")
