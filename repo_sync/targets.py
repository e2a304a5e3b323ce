"""Resolve the list of repositories a run should process."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from repo_sync.models import RepoTarget


def repo_full_path(repo: str, base_path: Path) -> Path:
    """Absolute entries are used as-is; bare names live under base_path."""
    candidate = Path(repo).expanduser()
    if candidate.is_absolute():
        return candidate
    return base_path.expanduser() / candidate


def resolve_targets(
    requested: Sequence[str],
    default: Sequence[str],
    exclude: Sequence[str],
    base_path: Path,
) -> list[RepoTarget]:
    """Build the ordered target list.

    An explicit request replaces the default list entirely. Exclusions match
    the repository name (the last path component) exactly.
    """
    entries = list(requested) if requested else list(default)
    excluded = set(exclude)
    targets = []
    for entry in entries:
        target = RepoTarget.from_path(repo_full_path(entry, base_path))
        if target.name in excluded:
            continue
        targets.append(target)
    return targets
