"""
repo-sync: Repository Sync Tool

Synchronizes a set of local git working copies with their remotes, stashing
local changes around the pull, or runs each repository's post-pull scripts.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from repo_sync import X` keeps working.
from repo_sync.cli import main  # noqa: E402
from repo_sync.config import (  # noqa: E402
    create_argument_parser,
    load_config_file,
    load_settings,
    save_config_file,
    settings_from_mapping,
)
from repo_sync.context import RunContext  # noqa: E402
from repo_sync.errors import (  # noqa: E402
    BranchSwitchFailed,
    ConfigurationError,
    DetachedHead,
    DirectoryNotFound,
    NotAGitRepository,
    PullFailed,
    RemoteUnreachable,
    ScriptExecutionFailed,
    StashFailed,
    StashRestoreConflict,
    SyncError,
)
from repo_sync.models import (  # noqa: E402
    BranchSet,
    CommandResult,
    OperationResult,
    OperationType,
    OutcomeStatus,
    PostPullScriptPlan,
    RemoteNamePreference,
    RepoResult,
    RepoSyncSettings,
    RepoTarget,
    ScriptMode,
    SyncOutcome,
    SyncPolicy,
    SyncReport,
)
from repo_sync.orchestrator import SyncOrchestrator  # noqa: E402
from repo_sync.output import SECTION_WIDTH, ConsoleOutputHandler, NullOutputHandler  # noqa: E402
from repo_sync.protocols import CommandRunner, GitRepository, OutputHandler  # noqa: E402
from repo_sync.remote import RemoteAvailability  # noqa: E402
from repo_sync.reporter import SummaryReporter, format_duration  # noqa: E402
from repo_sync.repository import GitPythonRepository  # noqa: E402
from repo_sync.runner import SubprocessCommandRunner  # noqa: E402
from repo_sync.scanner import RepositoryScanner  # noqa: E402
from repo_sync.scripts import PostPullScriptRunner, truncate_output  # noqa: E402
from repo_sync.synchronizer import RepoSyncEngine  # noqa: E402
from repo_sync.targets import repo_full_path, resolve_targets  # noqa: E402
from repo_sync.wizard import InitWizard, parse_selection  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "BranchSet",
    "CommandResult",
    "OperationResult",
    "OperationType",
    "OutcomeStatus",
    "PostPullScriptPlan",
    "RemoteNamePreference",
    "RepoResult",
    "RepoSyncSettings",
    "RepoTarget",
    "ScriptMode",
    "SyncOutcome",
    "SyncPolicy",
    "SyncReport",
    # Errors
    "BranchSwitchFailed",
    "ConfigurationError",
    "DetachedHead",
    "DirectoryNotFound",
    "NotAGitRepository",
    "PullFailed",
    "RemoteUnreachable",
    "ScriptExecutionFailed",
    "StashFailed",
    "StashRestoreConflict",
    "SyncError",
    # Protocols
    "CommandRunner",
    "GitRepository",
    "OutputHandler",
    # Implementations
    "GitPythonRepository",
    "SubprocessCommandRunner",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    # Services
    "InitWizard",
    "PostPullScriptRunner",
    "RemoteAvailability",
    "RepoSyncEngine",
    "RepositoryScanner",
    "RunContext",
    "SyncOrchestrator",
    "SummaryReporter",
    # Helpers
    "format_duration",
    "parse_selection",
    "repo_full_path",
    "resolve_targets",
    "truncate_output",
    # Config / CLI
    "create_argument_parser",
    "load_config_file",
    "load_settings",
    "save_config_file",
    "settings_from_mapping",
    "main",
]
