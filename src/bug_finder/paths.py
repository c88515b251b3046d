"""Repository and image path resolution."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from bug_finder.errors import PathResolutionError


def resolve_repo_paths(repo_urls: Iterable[str], *, base_dir: Path) -> list[Path]:
    """Resolve repository paths to absolute directories, deduplicated in order."""

    resolved: list[Path] = []
    for repo_url in repo_urls:
        repo_path = _absolute(repo_url, base_dir)
        if not repo_path.exists():
            raise PathResolutionError(f"Repository path not found: {repo_path}")
        if not repo_path.is_dir():
            raise PathResolutionError(f"Repository path is not a directory: {repo_path}")
        resolved.append(repo_path)
    if not resolved:
        raise PathResolutionError("At least one repository path must be provided.")
    return _dedupe(resolved)


def resolve_image_paths(image_paths: Iterable[str] | None, *, base_dir: Path) -> list[Path]:
    """Resolve optional image paths to absolute files, deduplicated in order."""

    resolved: list[Path] = []
    for image_path in image_paths or ():
        path = _absolute(image_path, base_dir)
        if not path.exists():
            raise PathResolutionError(f"Image path not found: {path}")
        if not path.is_file():
            raise PathResolutionError(f"Image path is not a file: {path}")
        resolved.append(path)
    return _dedupe(resolved)


def find_common_ancestor(paths: Iterable[Path]) -> Path:
    """Longest shared path-segment prefix of absolute paths.

    `/a/b/c` and `/a/b/d` give `/a/b`; a single path is its own ancestor;
    paths sharing nothing below the root give the root.
    """

    absolute = [Path(path).absolute() for path in paths]
    if not absolute:
        raise PathResolutionError("At least one repository path must be provided.")

    common = list(absolute[0].parts)
    for path in absolute[1:]:
        parts = path.parts
        match = 0
        while match < len(common) and match < len(parts) and common[match] == parts[match]:
            match += 1
        common = common[:match]

    if not common:
        # different drives on Windows
        raise PathResolutionError("Repository paths do not share a filesystem root.")
    return Path(*common)


def _absolute(raw: str, base_dir: Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _dedupe(paths: list[Path]) -> list[Path]:
    seen: set[Path] = set()
    deduped: list[Path] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        deduped.append(path)
    return deduped
