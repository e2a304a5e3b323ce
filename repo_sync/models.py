"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repo_sync.errors import SyncError


class OutcomeStatus(Enum):
    """Final classification of one repository"""
    SUCCESS = auto()
    ERROR = auto()
    SKIPPED = auto()


class ScriptMode(Enum):
    """Whether post-pull scripts run for this invocation"""
    ALWAYS = auto()
    NEVER = auto()
    DEFAULT = auto()


class OperationType(Enum):
    """Types of git operations"""
    CHECKOUT = auto()
    PULL = auto()
    STASH = auto()
    STASH_POP = auto()


@dataclass(frozen=True)
class RepoTarget:
    """A repository to sync: display name plus absolute location"""
    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path) -> RepoTarget:
        return cls(name=path.name, path=path)


@dataclass(frozen=True)
class BranchSet:
    """Ordered branch alternatives; the first one is the primary branch."""
    names: tuple[str, ...]

    def __post_init__(self):
        if not self.names:
            raise ValueError("BranchSet needs at least one branch name")

    @classmethod
    def parse(cls, value: str) -> BranchSet:
        """Parse a comma-separated list such as 'master,main'."""
        return cls(tuple(_split_list(value)))

    @property
    def primary(self) -> str:
        return self.names[0]

    def __contains__(self, branch: object) -> bool:
        return branch in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __str__(self) -> str:
        return ','.join(self.names)


@dataclass(frozen=True)
class RemoteNamePreference:
    """Remote names in order of preference."""
    names: tuple[str, ...]
    fallback: str = 'origin'

    @classmethod
    def parse(cls, value: str) -> RemoteNamePreference:
        return cls(tuple(_split_list(value)))

    def resolve(self, available: Iterable[str]) -> str:
        """Pick the first preferred name present among the repository's remotes."""
        present = set(available)
        for name in self.names:
            if name in present:
                return name
        return self.fallback

    def __str__(self) -> str:
        return ','.join(self.names)


@dataclass(frozen=True)
class PostPullScriptPlan:
    """Ordered groups of interchangeable hook script names.

    Within a group the first script that exists and is executable wins.
    Groups run in order and a failing script aborts the remaining groups.
    """
    groups: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def parse(cls, value: str) -> PostPullScriptPlan:
        """Parse 'sync,syncAll webhook' into [['sync', 'syncAll'], ['webhook']]."""
        groups = []
        for token in value.split():
            alternatives = tuple(_split_list(token))
            if alternatives:
                groups.append(alternatives)
        return cls(tuple(groups))

    def __bool__(self) -> bool:
        return bool(self.groups)

    def __iter__(self) -> Iterator[tuple[str, ...]]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def __str__(self) -> str:
        return ' '.join(','.join(group) for group in self.groups)


@dataclass(frozen=True)
class SyncPolicy:
    """Per-run behaviour built from CLI flags"""
    force_target_branch: bool = False
    script_mode: ScriptMode = ScriptMode.DEFAULT
    verbosity: int = 0

    def should_run_scripts(self, plan: PostPullScriptPlan, sync_by_default: bool = True) -> bool:
        """Resolve the tri-state script mode against the configured default."""
        if self.script_mode is ScriptMode.ALWAYS:
            return True
        if self.script_mode is ScriptMode.NEVER:
            return False
        return sync_by_default and bool(plan)


@dataclass(frozen=True)
class OperationResult:
    """Result of a single git operation"""
    success: bool
    operation: OperationType
    message: str
    error: Exception | None = None
    output: str = ''
    ref: str | None = None


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured streams of one external process"""
    exit_code: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class SyncOutcome:
    """Result of processing one repository"""
    status: OutcomeStatus
    reason: str
    executed_scripts: tuple[str, ...] | None = None
    error: SyncError | None = None

    @classmethod
    def succeeded(cls, reason: str = "synced with remote",
                  executed_scripts: Iterable[str] | None = None) -> SyncOutcome:
        scripts = tuple(executed_scripts) if executed_scripts is not None else None
        return cls(OutcomeStatus.SUCCESS, reason, scripts)

    @classmethod
    def skipped(cls, reason: str) -> SyncOutcome:
        return cls(OutcomeStatus.SKIPPED, reason)

    @classmethod
    def failed(cls, error: SyncError) -> SyncOutcome:
        return cls(OutcomeStatus.ERROR, error.detail, error=error)

    @property
    def scripts_label(self) -> str:
        """'(Scripts: a, b)' suffix for the success line, or '' when scripts did not run."""
        if self.executed_scripts is None:
            return ''
        names = ', '.join(self.executed_scripts) if self.executed_scripts else '(none found)'
        return f"(Scripts: {names})"


@dataclass(frozen=True)
class RepoResult:
    """One repository's outcome as it appears in the report"""
    target: RepoTarget
    outcome: SyncOutcome

    @property
    def line(self) -> str:
        if self.outcome.status is OutcomeStatus.SUCCESS:
            label = self.outcome.scripts_label
            return f"{self.target.name} {label}" if label else self.target.name
        return f"{self.target.name}: {self.outcome.reason}"


@dataclass
class SyncReport:
    """Mutable result accumulator"""
    results: list[RepoResult] = field(default_factory=list)
    elapsed: float = 0.0

    def add(self, target: RepoTarget, outcome: SyncOutcome) -> RepoResult:
        result = RepoResult(target, outcome)
        self.results.append(result)
        return result

    def by_status(self, status: OutcomeStatus) -> list[RepoResult]:
        """Filter results by outcome bucket."""
        return [r for r in self.results if r.outcome.status is status]

    @property
    def successful(self) -> list[RepoResult]:
        return self.by_status(OutcomeStatus.SUCCESS)

    @property
    def failed(self) -> list[RepoResult]:
        return self.by_status(OutcomeStatus.ERROR)

    @property
    def skipped(self) -> list[RepoResult]:
        return self.by_status(OutcomeStatus.SKIPPED)

    @property
    def repos_processed(self) -> int:
        return len(self.results)

    def has_failures(self) -> bool:
        """Return True if any repository ended in the failed bucket."""
        return bool(self.failed)

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures() else 0


DEFAULT_REPO_BASE_PATH = Path.home() / 'repos'
DEFAULT_REMOTE_NAMES = 'upstream,origin'
DEFAULT_BRANCHES = 'master,main'
DEFAULT_RUN_AFTER_PULL = 'sync,syncAll'
DEFAULT_MAX_CONNECT_ATTEMPTS = 3
DEFAULT_CONNECT_RETRY_WAIT = 10


@dataclass(frozen=True)
class RepoSyncSettings:
    """Resolved configuration for a run"""
    base_path: Path = DEFAULT_REPO_BASE_PATH
    repositories: tuple[str, ...] = ()
    remote_names: RemoteNamePreference = field(
        default_factory=lambda: RemoteNamePreference.parse(DEFAULT_REMOTE_NAMES))
    branches: BranchSet = field(default_factory=lambda: BranchSet.parse(DEFAULT_BRANCHES))
    ssh_connection: str = ''
    post_pull: PostPullScriptPlan = field(
        default_factory=lambda: PostPullScriptPlan.parse(DEFAULT_RUN_AFTER_PULL))
    max_connect_attempts: int = DEFAULT_MAX_CONNECT_ATTEMPTS
    connect_retry_wait: int = DEFAULT_CONNECT_RETRY_WAIT
    sync_by_default: bool = True

    def with_updates(self, **kwargs) -> RepoSyncSettings:
        """Return a new RepoSyncSettings with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return RepoSyncSettings(**current)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(',') if item.strip()]
