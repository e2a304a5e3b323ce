"""SyncOrchestrator: coordinates sync across multiple repositories."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from colorama import Fore, Style
from tqdm import tqdm

from repo_sync.context import RunContext
from repo_sync.errors import DirectoryNotFound, SyncError
from repo_sync.models import (
    OutcomeStatus,
    RepoSyncSettings,
    RepoTarget,
    SyncOutcome,
    SyncPolicy,
    SyncReport,
)
from repo_sync.synchronizer import RepoSyncEngine

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Main orchestrator - runs the engine over each target in order"""

    def __init__(
        self,
        settings: RepoSyncSettings,
        context: RunContext,
        engine: RepoSyncEngine | None = None,
    ):
        """Create an orchestrator; the engine defaults to one built from settings and context."""
        self.settings = settings
        self.context = context
        self.output = context.output
        self.engine = engine or RepoSyncEngine(settings, context)

    def run(self, targets: Sequence[RepoTarget], policy: SyncPolicy) -> SyncReport:
        """Sync every target sequentially and aggregate the outcomes."""
        report = SyncReport()
        total = len(targets)
        started = time.monotonic()

        with tqdm(total=total, desc="Syncing", unit="repo", disable=None, leave=False) as pbar:
            for index, target in enumerate(targets, start=1):
                pbar.set_postfix_str(target.name, refresh=True)
                outcome = self._sync_single_repo(index, total, target, policy)
                report.add(target, outcome)
                self._announce(target, outcome)
                pbar.update(1)

        report.elapsed = time.monotonic() - started
        return report

    def _sync_single_repo(
        self, index: int, total: int, target: RepoTarget, policy: SyncPolicy
    ) -> SyncOutcome:
        """Run one repository, turning a missing directory or a crash into an Error outcome."""
        if not target.path.is_dir():
            self.output.raw(f"\n{Fore.BLUE}[{index}/{total}] {Fore.RED}✗ {target.name}{Style.RESET_ALL}")
            error = DirectoryNotFound(f"Directory not found: {target.path}")
            self.output.error(error.reason)
            return SyncOutcome.failed(error)

        self.output.raw(f"\n{Fore.BLUE}[{index}/{total}] ▶ {target.name}{Style.RESET_ALL}")
        try:
            return self.engine.sync(target, policy)
        except Exception as e:
            logger.debug("unexpected error syncing %s", target.path, exc_info=True)
            self.output.error(f"Unexpected error in {target.path}: {type(e).__name__}: {e}")
            return SyncOutcome.failed(SyncError(f"Unexpected error: {type(e).__name__}: {e}"))

    def _announce(self, target: RepoTarget, outcome: SyncOutcome) -> None:
        """Print the one-line result right after the repository finishes."""
        if outcome.status is OutcomeStatus.SUCCESS:
            label = f" {outcome.scripts_label}" if outcome.scripts_label else ""
            self.output.raw(f"{Fore.GREEN}✓ {target.name} - Successfully synced{Style.RESET_ALL}{label}")
        elif outcome.status is OutcomeStatus.ERROR:
            self.output.raw(f"{Fore.RED}✗ {target.name} - Sync failed: {outcome.reason}{Style.RESET_ALL}")
        else:
            self.output.raw(f"{Fore.YELLOW}○ {target.name} - Sync skipped: {outcome.reason}{Style.RESET_ALL}")
