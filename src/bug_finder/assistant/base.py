"""Backend interface for conversational assistant sessions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

from bug_finder.config import AssistantSettings
from bug_finder.events import AssistantEvent

EventHandler = Callable[[AssistantEvent], None]


@dataclass(frozen=True, slots=True)
class Attachment:
    """A directory or file handed to the assistant as context."""

    type: Literal["directory", "file"]
    path: Path

    @property
    def display_name(self) -> str:
        return self.path.name or str(self.path)

    @classmethod
    def directory(cls, path: Path) -> Attachment:
        return cls(type="directory", path=path)

    @classmethod
    def file(cls, path: Path) -> Attachment:
        return cls(type="file", path=path)


@dataclass(slots=True)
class SessionOptions:
    """Inputs required to open one session."""

    model: str
    system_message: str
    working_directory: Path
    streaming: bool = True


@dataclass(slots=True)
class AssistantMessage:
    """One prompt submission with its attachments."""

    prompt: str
    attachments: list[Attachment] = field(default_factory=list)


class AssistantSession(Protocol):
    """Live conversation scoped to a single task."""

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register an event handler and return a callable that removes it."""

    async def send_and_wait(self, message: AssistantMessage, timeout_seconds: float) -> str | None:
        """Submit a prompt and wait until the session goes idle.

        Returns the content of the last assistant message, if any.
        """

    async def destroy(self) -> None:
        """Release server-side session state."""


class AssistantClient(Protocol):
    """Connection to the assistant service."""

    async def start(self) -> None:
        """Connect to the service."""

    async def create_session(self, options: SessionOptions) -> AssistantSession:
        """Open a new session."""

    async def stop(self) -> list[str]:
        """Disconnect and return errors reported while shutting down."""


ClientFactory = Callable[[AssistantSettings], AssistantClient]
