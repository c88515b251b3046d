"""Exception hierarchy for bug-finder."""

from __future__ import annotations


class BugFinderError(RuntimeError):
    """Base class for every fatal bug-finder error."""


class BugValidationError(BugFinderError):
    """Bug JSON is malformed or a record field is invalid."""


class PathResolutionError(BugFinderError):
    """A repository or image path does not exist or has the wrong type."""


class AssistantSessionError(BugFinderError):
    """The assistant session failed, timed out or returned nothing."""


class ArchitectureDocError(BugFinderError):
    """Architecture index generation failed for a repository."""


class FindingsError(BugFinderError):
    """Assistant report does not satisfy the findings contract."""


def format_error(error: BaseException) -> str:
    """Render an exception as a single human-readable line."""

    message = str(error).strip()
    if message:
        return message
    return type(error).__name__
