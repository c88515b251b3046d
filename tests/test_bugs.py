from __future__ import annotations

import json
import re
from pathlib import Path

import allure
import pytest

from bug_finder.bugs import BugStatus, parse_bug_record, read_bug_file
from bug_finder.errors import BugValidationError

pytestmark = [
    allure.epic("Bug Work File"),
    allure.feature("Record Validation & Persistence"),
]


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), "utf-8")
    return path


def test_parse_bug_record_applies_defaults_and_trims() -> None:
    record = parse_bug_record(
        {"title": "  Crash  ", "description": "Boom", "localRepoUrls": ["/repo"]},
    )

    assert record.title == "Crash"
    assert record.status is BugStatus.TODO
    assert record.local_repo_urls == ["/repo"]
    assert record.image_paths is None
    assert record.details is None


def test_parse_bug_record_accepts_legacy_single_repo_field() -> None:
    record = parse_bug_record({"title": "T", "description": "D", "localRepoUrl": "/repo"})

    assert record.local_repo_urls == ["/repo"]
    assert record.to_payload()["localRepoUrls"] == ["/repo"]
    assert "localRepoUrl" not in record.to_payload()


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"description": "D", "localRepoUrls": ["/r"]}, '"title" must be a non-empty string'),
        ({"title": "T", "description": " ", "localRepoUrls": ["/r"]}, '"description"'),
        (
            {"title": "T", "description": "D", "localRepoUrls": []},
            '"localRepoUrls" must be a non-empty',
        ),
        ({"title": "T", "description": "D", "localRepoUrls": ["/r", 3]}, '"localRepoUrls[1]"'),
        ({"title": "T", "description": "D"}, '"localRepoUrl" must be a non-empty string'),
        (
            {"title": "T", "description": "D", "localRepoUrls": ["/r"], "status": "closed"},
            "one of: todo",
        ),
        (
            {"title": "T", "description": "D", "localRepoUrls": ["/r"], "imagePaths": "a.png"},
            '"imagePaths"',
        ),
        (
            {"title": "T", "description": "D", "localRepoUrls": ["/r"], "bug-details": "x"},
            '"bug-details"',
        ),
    ],
)
def test_parse_bug_record_names_invalid_field(payload: dict, message: str) -> None:
    with pytest.raises(BugValidationError, match=re.escape(message)):
        parse_bug_record(payload)


def test_read_bug_file_qualifies_errors_with_entry_index(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "bugs.json",
        [
            {"title": "T", "description": "D", "localRepoUrls": ["/r"]},
            {"title": "", "description": "D", "localRepoUrls": ["/r"]},
        ],
    )

    with pytest.raises(BugValidationError, match=r"bugs\[1\]\.title"):
        read_bug_file(path)


def test_read_bug_file_rejects_malformed_json(tmp_path: Path) -> None:
    path = tmp_path / "bugs.json"
    path.write_text("[{", "utf-8")

    with pytest.raises(BugValidationError, match="Failed to parse JSON"):
        read_bug_file(path)


def test_read_bug_file_rejects_non_collection_top_level(tmp_path: Path) -> None:
    path = _write(tmp_path / "bugs.json", "just a string")

    with pytest.raises(BugValidationError, match="must be an array"):
        read_bug_file(path)


def test_read_bug_file_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(BugValidationError, match="Bug file not found"):
        read_bug_file(tmp_path / "missing.json")


def test_round_trip_preserves_records_and_unknown_keys(tmp_path: Path) -> None:
    original = [
        {
            "title": "Löschen schlägt fehl",
            "description": "D",
            "status": "in-progress",
            "bug-details": None,
            "localRepoUrls": ["/a", "/b"],
            "imagePaths": ["/a/shot.png"],
            "ticket": "BUG-17",
        },
        {
            "title": "T2",
            "description": "D2",
            "status": "done",
            "bug-details": {"probableCause": "c", "confidenceScore": 0.5},
            "localRepoUrls": ["/c"],
        },
    ]
    path = _write(tmp_path / "bugs.json", original)

    bug_file = read_bug_file(path)
    bug_file.save()

    assert json.loads(path.read_text("utf-8")) == original
    assert "Löschen" in path.read_text("utf-8")
    assert path.read_text("utf-8").endswith("\n")
    reread = read_bug_file(path)
    assert [record.to_payload() for record in reread.records] == original


def test_single_object_file_is_written_back_as_object(tmp_path: Path) -> None:
    payload = {"title": "T", "description": "D", "localRepoUrls": ["/r"]}
    path = _write(tmp_path / "bug.json", payload)

    bug_file = read_bug_file(path)
    bug_file.save()

    assert bug_file.single_object is True
    assert isinstance(json.loads(path.read_text("utf-8")), dict)


def test_status_transitions_are_monotonic() -> None:
    record = parse_bug_record({"title": "T", "description": "D", "localRepoUrls": ["/r"]})

    record.advance(BugStatus.IN_PROGRESS)
    record.advance(BugStatus.IN_PROGRESS)
    record.advance(BugStatus.DONE)

    with pytest.raises(BugValidationError, match="done -> todo"):
        record.advance(BugStatus.TODO)
    assert record.status is BugStatus.DONE


def test_pending_skips_done_entries(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "bugs.json",
        [
            {"title": "A", "description": "D", "localRepoUrls": ["/r"], "status": "done"},
            {"title": "B", "description": "D", "localRepoUrls": ["/r"], "status": "in-progress"},
            {"title": "C", "description": "D", "localRepoUrls": ["/r"]},
        ],
    )

    pending = read_bug_file(path).pending()

    assert [(index, record.title) for index, record in pending] == [(1, "B"), (2, "C")]
