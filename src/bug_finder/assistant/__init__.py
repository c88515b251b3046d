"""Assistant backends."""

from bug_finder.assistant.base import (
    AssistantClient,
    AssistantMessage,
    AssistantSession,
    Attachment,
    ClientFactory,
    SessionOptions,
)
from bug_finder.assistant.scripted import ScriptedAssistantClient, ScriptedTurn, reply_turn

__all__ = [
    "AssistantClient",
    "AssistantMessage",
    "AssistantSession",
    "Attachment",
    "ClientFactory",
    "ScriptedAssistantClient",
    "ScriptedTurn",
    "SessionOptions",
    "reply_turn",
]
