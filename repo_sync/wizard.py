"""Interactive configuration wizard (--init)."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

from repo_sync.config import save_config_file
from repo_sync.models import (
    DEFAULT_CONNECT_RETRY_WAIT,
    DEFAULT_MAX_CONNECT_ATTEMPTS,
    DEFAULT_REMOTE_NAMES,
    PostPullScriptPlan,
    RemoteNamePreference,
    RepoSyncSettings,
)
from repo_sync.protocols import OutputHandler
from repo_sync.scanner import RepositoryScanner


def parse_selection(selection: str, options: list[str]) -> list[str]:
    """Map '1,3' or 'a'/'all' onto options. Invalid indices are ignored."""
    selection = selection.strip().lower()
    if selection in ('a', 'all'):
        return list(options)

    chosen = []
    for token in selection.split(','):
        token = token.strip()
        if not token.isdigit():
            continue
        index = int(token)
        if 1 <= index <= len(options) and options[index - 1] not in chosen:
            chosen.append(options[index - 1])
    return chosen


class InitWizard:
    """Walks the user through creating a config file."""

    def __init__(
        self,
        output: OutputHandler,
        prompt: Callable[[str], str] | None = None,
        interactive: bool | None = None,
        scanner: RepositoryScanner | None = None,
    ):
        self.output = output
        self.prompt = prompt or input
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        self.scanner = scanner or RepositoryScanner()

    def _ask(self, message: str, default: str) -> str:
        answer = self.prompt(f"{message} [{default}]: ").strip()
        return answer or default

    def run(self, current: RepoSyncSettings, config_path: Path) -> RepoSyncSettings:
        """Prompt for every setting, save the result to config_path and return it."""
        self.output.section("Repository Sync Tool Configuration Wizard")
        self.output.raw("This wizard will help you configure the Repository Sync Tool.")
        self.output.raw("Press Enter to accept the default values shown in brackets.")
        if config_path.exists():
            self.output.raw(f"Existing configuration at {config_path} will be replaced.")
        self.output.raw("")

        self.output.raw("Step 1: Repository Base Path")
        base_path = Path(self._ask("Base directory for your repositories", str(current.base_path))).expanduser()
        self.output.raw(f"Using repository base path: {base_path}")
        self.output.raw("")

        self.output.raw("Step 2: Remote Connection")
        if self.interactive:
            ssh_connection = self._ask("SSH connection string for remote server", current.ssh_connection)
        else:
            ssh_connection = current.ssh_connection
            self.output.raw(f"Using default SSH connection: {ssh_connection}")
        self.output.raw("")

        self.output.raw("Step 3: Post-Pull Scripts")
        self.output.raw("Each group is processed separately, with comma-separated alternatives within a group.")
        self.output.raw("Example: 'sync,syncAll fire_webhook' means:")
        self.output.raw("  - First try 'sync' OR 'syncAll' (first one found will be executed)")
        self.output.raw("  - Then try to run 'fire_webhook'")
        self.output.raw("Enter '-' to disable running scripts.")
        scripts = self._ask("Scripts to run", str(current.post_pull))
        post_pull = PostPullScriptPlan() if scripts == '-' else PostPullScriptPlan.parse(scripts)
        self.output.raw("")

        self.output.raw("Step 4: Default Repositories")
        repositories = self._select_repositories(base_path)

        settings = current.with_updates(
            base_path=base_path,
            ssh_connection=ssh_connection,
            post_pull=post_pull,
            repositories=tuple(repositories),
            remote_names=RemoteNamePreference.parse(DEFAULT_REMOTE_NAMES),
            max_connect_attempts=DEFAULT_MAX_CONNECT_ATTEMPTS,
            connect_retry_wait=DEFAULT_CONNECT_RETRY_WAIT,
        )

        self.output.raw("Saving configuration...")
        save_config_file(settings, config_path)
        self.output.success(f"Configuration saved to {config_path}")
        self.output.raw("Run 'repo-sync --help' to see available options.")
        return settings

    def _select_repositories(self, base_path: Path) -> list[str]:
        self.output.raw(f"Searching for git repositories in {base_path}...")
        if not base_path.is_dir():
            self.output.warning(f"Directory not found: {base_path}")
            base_path.mkdir(parents=True, exist_ok=True)
            self.output.success(f"Created directory: {base_path}")

        available = self.scanner.find_repository_names(base_path)
        if not available:
            self.output.warning(f"No git repositories found in {base_path}")
            self.output.raw("Add repositories there or use --repos when running.")
            return []

        self.output.raw("Found repositories:")
        for index, name in enumerate(available, start=1):
            self.output.raw(f"{index:3d}) {name}")
        selection = self.prompt("Enter the numbers of your selections (comma-separated), or 'a' for all: ")
        chosen = parse_selection(selection, available)

        self.output.raw("Selected repositories:")
        if not chosen:
            self.output.raw("  (No repositories selected)")
        for name in chosen:
            self.output.raw(f"  - {name}")
        return chosen
