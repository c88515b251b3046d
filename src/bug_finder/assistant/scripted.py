"""In-process assistant backend that replays scripted sessions.

Used for deterministic integration runs without the Copilot CLI: each created
session consumes the next `ScriptedTurn`, emits its events to subscribers and
returns its reply.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from bug_finder.assistant.base import (
    AssistantClient,
    AssistantMessage,
    AssistantSession,
    EventHandler,
    SessionOptions,
)
from bug_finder.config import AssistantSettings
from bug_finder.events import AssistantEvent, EventKind


@dataclass(slots=True)
class ScriptedTurn:
    """Scripted behaviour of one session."""

    events: list[AssistantEvent] = field(default_factory=list)
    reply: str | None = None
    delay_seconds: float = 0.0
    send_error: Exception | None = None
    destroy_error: Exception | None = None


def reply_turn(text: str, *, chunk_size: int = 0, reasoning: str = "") -> ScriptedTurn:
    """Build a turn answering with `text`, optionally streamed in chunks."""

    events: list[AssistantEvent] = []
    if reasoning:
        events.append(AssistantEvent(EventKind.REASONING_DELTA, {"delta_content": reasoning}))
        events.append(AssistantEvent(EventKind.REASONING, {"content": reasoning}))
    if chunk_size > 0:
        for start in range(0, len(text), chunk_size):
            events.append(
                AssistantEvent(
                    EventKind.MESSAGE_DELTA,
                    {"delta_content": text[start : start + chunk_size]},
                ),
            )
    events.append(AssistantEvent(EventKind.MESSAGE, {"content": text}))
    return ScriptedTurn(events=events, reply=text)


class ScriptedSession:
    """Session replaying one scripted turn."""

    def __init__(self, turn: ScriptedTurn, options: SessionOptions) -> None:
        self.turn = turn
        self.options = options
        self.messages: list[AssistantMessage] = []
        self.destroyed = False
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    async def send_and_wait(  # noqa: ARG002
        self,
        message: AssistantMessage,
        timeout_seconds: float,
    ) -> str | None:
        self.messages.append(message)
        if self.turn.delay_seconds:
            await asyncio.sleep(self.turn.delay_seconds)
        for event in self.turn.events:
            for handler in list(self._handlers):
                handler(event)
        if self.turn.send_error is not None:
            raise self.turn.send_error
        return self.turn.reply

    async def destroy(self) -> None:
        self.destroyed = True
        if self.turn.destroy_error is not None:
            raise self.turn.destroy_error


class ScriptedAssistantClient:
    """Client handing out `ScriptedSession`s in turn order."""

    def __init__(
        self,
        turns: Iterable[ScriptedTurn] = (),
        *,
        start_error: Exception | None = None,
        stop_errors: Iterable[str] = (),
    ) -> None:
        self._turns = deque(turns)
        self._start_error = start_error
        self._stop_errors = list(stop_errors)
        self.sessions: list[ScriptedSession] = []
        self.started = 0
        self.stopped = 0

    def factory(self, settings: AssistantSettings) -> AssistantClient:  # noqa: ARG002
        return self

    def add_turn(self, turn: ScriptedTurn) -> None:
        self._turns.append(turn)

    async def start(self) -> None:
        self.started += 1
        if self._start_error is not None:
            raise self._start_error

    async def create_session(self, options: SessionOptions) -> AssistantSession:
        if not self._turns:
            raise RuntimeError("No scripted turn left for a new session.")
        session = ScriptedSession(self._turns.popleft(), options)
        self.sessions.append(session)
        return session

    async def stop(self) -> list[str]:
        self.stopped += 1
        return list(self._stop_errors)
