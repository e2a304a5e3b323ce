"""Per-repository failure taxonomy.

Every error here is local to one repository: it ends that repository's sync
and the orchestrator moves on to the next one.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for failures that end one repository's sync."""

    default_reason = "sync failed"

    def __init__(self, reason: str | None = None, *, cleanup: list[str] | None = None):
        self.reason = reason or self.default_reason
        self.cleanup: list[str] = list(cleanup or [])
        super().__init__(self.reason)

    def add_cleanup(self, note: str) -> None:
        """Record the result of a best-effort recovery step."""
        self.cleanup.append(note)

    @property
    def detail(self) -> str:
        """Reason plus any recovery notes, on one line."""
        if not self.cleanup:
            return self.reason
        return f"{self.reason} ({'; '.join(self.cleanup)})"


class ConfigurationError(SyncError):
    default_reason = "missing required configuration"


class NotAGitRepository(SyncError):
    default_reason = "not a git repository"


class DetachedHead(SyncError):
    default_reason = "detached HEAD"


class BranchSwitchFailed(SyncError):
    default_reason = "could not switch branch"


class StashFailed(SyncError):
    default_reason = "failed to stash local changes"


class StashRestoreConflict(SyncError):
    default_reason = "stash restore failed, manual resolution required"


class PullFailed(SyncError):
    default_reason = "pull failed"


class RemoteUnreachable(SyncError):
    default_reason = "remote server is not reachable"


class DirectoryNotFound(SyncError):
    default_reason = "directory not found"


class ScriptExecutionFailed(SyncError):
    """A post-pull script exited non-zero."""

    def __init__(self, script: str, exit_code: int, output: str = ''):
        self.script = script
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"{script} failed with status {exit_code}")
