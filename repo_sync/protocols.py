"""Protocols for dependency injection."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from repo_sync.models import CommandResult, OperationResult


class GitRepository(Protocol):
    """Protocol for git repository operations"""

    def remote_names(self) -> list[str]: ...
    def ref_exists(self, ref: str) -> bool: ...
    def unpushed_commits(self, remote_ref: str) -> list[str]: ...
    def status_lines(self) -> list[str]: ...
    def stash_push(self, message: str, include_untracked: bool = True) -> OperationResult: ...
    def stash_pop(self, ref: str) -> OperationResult: ...
    def checkout(self, branch: str) -> OperationResult: ...
    def checkout_from_remote(self, branch: str, remote_ref: str) -> OperationResult: ...
    def pull(self, remote: str, branch: str) -> OperationResult: ...
    def latest_commit_summary(self) -> str: ...
    def close(self) -> None: ...

    @property
    def path(self) -> Path: ...

    @property
    def current_branch(self) -> str | None: ...


class CommandRunner(Protocol):
    """Protocol for running external processes (ssh, hook scripts)"""

    def run(
        self,
        working_dir: Path | None,
        argv: Sequence[str],
        merge_stderr: bool = False,
    ) -> CommandResult: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0, min_verbosity: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def raw(self, text: str, indent: int = 0) -> None: ...
