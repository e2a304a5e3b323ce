"""Repository scanner: lists git working copies directly under the base path."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path


class RepositoryScanner:
    """Discovers candidate repositories for the --init wizard"""

    def __init__(self, include_hidden: bool = False):
        self.include_hidden = include_hidden

    def find_repositories(self, base_dir: Path) -> Iterator[Path]:
        """Yield immediate subdirectories of base_dir with a .git directory, sorted by name.

        Nested repositories are not searched. Symlinked entries are ignored so
        the same working copy is never offered twice.
        """
        if not base_dir.is_dir():
            return
        for child in sorted(base_dir.iterdir(), key=lambda p: p.name):
            if child.name.startswith('.') and not self.include_hidden:
                continue
            if child.is_symlink() or not child.is_dir():
                continue
            if (child / '.git').is_dir():
                yield child

    def find_repository_names(self, base_dir: Path) -> list[str]:
        """Names of the repositories found, as REPOSITORIES entries."""
        return [repo.name for repo in self.find_repositories(base_dir)]
