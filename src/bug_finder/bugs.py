"""Bug work file: record parsing, validation and in-place persistence."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from bug_finder.errors import BugValidationError


class BugStatus(StrEnum):
    """Workflow status of one bug record."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


_STATUS_ORDER = {BugStatus.TODO: 0, BugStatus.IN_PROGRESS: 1, BugStatus.DONE: 2}
STATUS_DISPLAY = ", ".join(status.value for status in BugStatus)

DETAILS_KEY = "bug-details"
_KNOWN_KEYS = frozenset(
    {"title", "description", "status", DETAILS_KEY, "localRepoUrls", "localRepoUrl", "imagePaths"},
)


@dataclass(slots=True)
class BugRecord:
    """One unit of work: a suspected defect plus the repositories to inspect."""

    title: str
    description: str
    local_repo_urls: list[str]
    status: BugStatus = BugStatus.TODO
    image_paths: list[str] | None = None
    details: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_pending(self) -> bool:
        return self.status is not BugStatus.DONE

    def advance(self, status: BugStatus) -> None:
        """Move to `status`; moving backwards is rejected."""

        if _STATUS_ORDER[status] < _STATUS_ORDER[self.status]:
            raise BugValidationError(
                f"Illegal status transition for bug {self.title!r}: "
                f"{self.status.value} -> {status.value}",
            )
        self.status = status

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            DETAILS_KEY: self.details,
            "localRepoUrls": list(self.local_repo_urls),
        }
        if self.image_paths is not None:
            payload["imagePaths"] = list(self.image_paths)
        payload.update(self.extra)
        return payload


@dataclass(slots=True)
class BugFile:
    """Parsed bug work file bound to its location on disk."""

    path: Path
    records: list[BugRecord]
    single_object: bool = False

    def pending(self) -> list[tuple[int, BugRecord]]:
        return [(index, record) for index, record in enumerate(self.records) if record.is_pending]

    def to_payload(self) -> list[dict[str, Any]] | dict[str, Any]:
        if self.single_object:
            return self.records[0].to_payload()
        return [record.to_payload() for record in self.records]

    def save(self) -> None:
        """Rewrite the whole file; called after every status transition."""

        write_bug_file(self.path, self.to_payload())


def read_bug_file(path: Path) -> BugFile:
    """Load and validate a bug work file."""

    try:
        text = path.read_text("utf-8")
    except FileNotFoundError as error:
        raise BugValidationError(f"Bug file not found: {path}") from error
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as error:
        raise BugValidationError(f"Failed to parse JSON in {path}: {error}") from error

    if isinstance(raw, dict):
        return BugFile(path=path, records=[parse_bug_record(raw)], single_object=True)
    if not isinstance(raw, list):
        raise BugValidationError("Bug JSON must be an array of bug objects.")
    if not raw:
        raise BugValidationError("Bug JSON array must contain at least one bug.")
    records = [parse_bug_record(item, prefix=f"bugs[{index}].") for index, item in enumerate(raw)]
    return BugFile(path=path, records=records)


def write_bug_file(path: Path, payload: list[dict[str, Any]] | dict[str, Any]) -> None:
    """Persist bug payload pretty-printed, preserving non-ASCII text."""

    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", "utf-8")


def parse_bug_record(raw: object, *, prefix: str = "") -> BugRecord:
    """Validate one bug object; field errors are qualified with `prefix`."""

    if not isinstance(raw, dict):
        label = prefix.rstrip(".") or "Bug JSON"
        raise BugValidationError(f"{label} must be an object.")

    if "localRepoUrls" in raw:
        repo_urls = _require_non_empty_string_list(raw["localRepoUrls"], f"{prefix}localRepoUrls")
    else:
        repo_urls = [_require_non_empty_string(raw.get("localRepoUrl"), f"{prefix}localRepoUrl")]

    image_paths = raw.get("imagePaths")
    if image_paths is not None:
        image_paths = _require_string_list(image_paths, f"{prefix}imagePaths")

    details = raw.get(DETAILS_KEY)
    if details is not None and not isinstance(details, dict):
        raise BugValidationError(
            f'Bug JSON field "{prefix}{DETAILS_KEY}" must be an object or null.',
        )

    return BugRecord(
        title=_require_non_empty_string(raw.get("title"), f"{prefix}title"),
        description=_require_non_empty_string(raw.get("description"), f"{prefix}description"),
        local_repo_urls=repo_urls,
        status=_parse_status(raw.get("status"), f"{prefix}status"),
        image_paths=image_paths,
        details=details,
        extra={key: value for key, value in raw.items() if key not in _KNOWN_KEYS},
    )


def _parse_status(value: object, field_name: str) -> BugStatus:
    if value is None:
        return BugStatus.TODO
    if isinstance(value, str):
        try:
            return BugStatus(value.strip())
        except ValueError:
            pass
    raise BugValidationError(f'Bug JSON field "{field_name}" must be one of: {STATUS_DISPLAY}.')


def _require_non_empty_string(value: object, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BugValidationError(f'Bug JSON field "{field_name}" must be a non-empty string.')
    return value.strip()


def _require_non_empty_string_list(value: object, field_name: str) -> list[str]:
    if not isinstance(value, list) or not value:
        raise BugValidationError(
            f'Bug JSON field "{field_name}" must be a non-empty array of strings.',
        )
    return [
        _require_non_empty_string(item, f"{field_name}[{index}]")
        for index, item in enumerate(value)
    ]


def _require_string_list(value: object, field_name: str) -> list[str]:
    if not isinstance(value, list):
        raise BugValidationError(f'Bug JSON field "{field_name}" must be an array of strings.')
    return [
        _require_non_empty_string(item, f"{field_name}[{index}]")
        for index, item in enumerate(value)
    ]
