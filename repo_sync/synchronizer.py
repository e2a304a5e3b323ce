"""RepoSyncEngine: brings one repository up to date with its remote."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError

from repo_sync.context import RunContext
from repo_sync.errors import (
    BranchSwitchFailed,
    DetachedHead,
    NotAGitRepository,
    PullFailed,
    StashFailed,
    StashRestoreConflict,
    SyncError,
)
from repo_sync.models import RepoSyncSettings, RepoTarget, SyncOutcome, SyncPolicy
from repo_sync.output import SECTION_WIDTH
from repo_sync.protocols import GitRepository
from repo_sync.repository import GitPythonRepository
from repo_sync.scripts import PostPullScriptRunner


class RepoSyncEngine:
    """Runs the per-repository sync pipeline.

    Stages, in order: validate, detect branch, check branch membership,
    then either run the post-pull scripts or go through the unpushed-commit
    guard, stash, switch, pull, stash restore and branch restore.
    """

    def __init__(
        self,
        settings: RepoSyncSettings,
        context: RunContext,
        repo_factory: Callable[[Path], GitRepository] = GitPythonRepository,
        script_runner: PostPullScriptRunner | None = None,
    ):
        """Create an engine sharing one RunContext across repositories."""
        self.settings = settings
        self.context = context
        self.output = context.output
        self.repo_factory = repo_factory
        self.script_runner = script_runner or PostPullScriptRunner(context)

    def sync(self, target: RepoTarget, policy: SyncPolicy) -> SyncOutcome:
        """Synchronize one repository and classify the result."""
        self.output.section(f"Syncing Repository: {target.name}")
        self.output.info(f"Full path: {target.path}", min_verbosity=1)

        try:
            repo = self._open(target.path)
        except SyncError as e:
            self.output.error(e.detail)
            return SyncOutcome.failed(e)

        try:
            return self._run_stages(repo, target, policy)
        except SyncError as e:
            self.output.error(e.detail)
            return SyncOutcome.failed(e)
        finally:
            repo.close()

    def _open(self, path: Path) -> GitRepository:
        if not (path / '.git').exists():
            raise NotAGitRepository(f"not a git repository: {path}")
        try:
            return self.repo_factory(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotAGitRepository(f"not a git repository: {path}") from e

    def _run_stages(self, repo: GitRepository, target: RepoTarget, policy: SyncPolicy) -> SyncOutcome:
        branches = self.settings.branches
        primary = branches.primary

        current = repo.current_branch
        if current is None:
            raise DetachedHead(f"detached HEAD: {repo.path}")
        self.output.info(f"Current branch: {current}")

        remote = self.settings.remote_names.resolve(repo.remote_names())

        if current in branches:
            self.output.info(f"On valid target branch: {current}", min_verbosity=1)
        elif not policy.force_target_branch:
            self.output.warning(f"Not on any target branch ({branches}). Current branch: {current}")
            self.output.warning("Skipping operations. Use --force-master to override.")
            return SyncOutcome.skipped(f"not on target branch (on {current})")
        else:
            self.output.info(f"Force-master enabled. Will checkout {primary} from remote.")
            self._switch_branch(repo, remote, primary, current)
            current = primary

        if policy.should_run_scripts(self.settings.post_pull, self.settings.sync_by_default):
            return self._run_scripts(repo)

        self.output.info(f"Using remote: {remote}")
        skip = self._check_unpushed(repo, remote, current)
        if skip is not None:
            return skip

        stash_ref = self._stash_local_changes(repo)

        try:
            self._switch_branch(repo, remote, primary, current)
        except BranchSwitchFailed as e:
            self._restore_stash_best_effort(repo, stash_ref, e)
            raise

        self.output.debug(f"git pull --rebase {remote} {primary} in {repo.path}")
        pull_result = repo.pull(remote, primary)
        if not pull_result.success:
            self.output.error("Pull operation failed!")
            if pull_result.output:
                self.output.error(f"Git output: {pull_result.output}")
            error = PullFailed(f"pull from {remote}/{primary} failed")
            self._restore_stash_best_effort(repo, stash_ref, error)
            self._return_to_branch_best_effort(repo, current, primary, error)
            raise error
        self._report_pull(pull_result.output)

        if stash_ref is not None:
            self._restore_stash(repo, stash_ref)

        self._return_to_branch(repo, current, primary)

        self.output.info("Latest commit:")
        self.output.raw(repo.latest_commit_summary(), indent=1)
        self.output.success(f"{target.name} successfully synced with remote")
        return SyncOutcome.succeeded()

    def _run_scripts(self, repo: GitRepository) -> SyncOutcome:
        """Run post-pull scripts instead of pulling; the scripts do their own pull."""
        if not self.settings.post_pull:
            self.output.info("No post-pull scripts configured. Skipping.")
            return SyncOutcome.succeeded("no post-pull scripts configured")

        self.output.info("Running post-pull scripts...")
        executed = self.script_runner.run_scripts(repo.path, self.settings.post_pull)
        self.output.success("Post-pull scripts completed successfully")
        return SyncOutcome.succeeded("post-pull scripts completed", executed_scripts=executed)

    def _check_unpushed(self, repo: GitRepository, remote: str, branch: str) -> SyncOutcome | None:
        """Return a skip outcome if the branch has no remote ref or has unpushed work."""
        remote_ref = f"{remote}/{branch}"
        if not repo.ref_exists(remote_ref):
            self.output.warning(
                f"Remote branch not found: {remote_ref}. "
                "This is probably a branch that hasn't been pushed yet."
            )
            return SyncOutcome.skipped(f"remote branch not found: {remote_ref}")

        unpushed = repo.unpushed_commits(remote_ref)
        if unpushed:
            self.output.warning(f"There are unpushed commits, not touching: {repo.path} (branch: {branch})")
            self.output.info("Unpushed commits:")
            self.output.raw('\n'.join(unpushed), indent=1)
            return SyncOutcome.skipped(f"unpushed commits present ({len(unpushed)})")
        return None

    def _stash_local_changes(self, repo: GitRepository) -> str | None:
        """Stash uncommitted changes. Returns the new stash entry's commit id, or None."""
        changes = repo.status_lines()
        if not changes:
            self.output.info("No local changes", min_verbosity=1)
            return None

        self.output.info("Local changes found. Stashing...")
        self.output.raw('\n'.join(changes), indent=1)
        message = f"Auto stash by repo-sync {datetime.now():%Y-%m-%d %H:%M:%S}"
        result = repo.stash_push(message)
        if not result.success:
            raise StashFailed(f"failed to stash local changes: {result.output or result.message}")
        if result.ref is None:
            self.output.info("Nothing was stashed (changes git cannot stash, e.g. inside a submodule)")
            return None
        self.output.debug(f"Created stash entry {result.ref}")
        self.output.success("Changes stashed")
        return result.ref

    def _switch_branch(self, repo: GitRepository, remote: str, target_branch: str, current: str) -> None:
        if current == target_branch:
            self.output.info(f"Already on target branch: {target_branch}", min_verbosity=1)
            return

        self.output.info(f"Switching from {current} to {target_branch}...")
        result = repo.checkout_from_remote(target_branch, f"{remote}/{target_branch}")
        if not result.success:
            self.output.error("Could not switch branch! Check if you have uncommitted changes.")
            raise BranchSwitchFailed(
                f"could not switch to {target_branch} from {remote}/{target_branch}"
            )
        self.output.success(f"Switched to {target_branch} branch")

    def _report_pull(self, output: str) -> None:
        if 'up to date' in output.lower():
            self.output.info("Repository already up to date, no changes pulled")
            return
        self.output.success("Successfully pulled latest changes")
        changed = [line for line in output.splitlines() if line.startswith(' ')]
        if changed:
            self.output.raw('\n'.join(changed), indent=1)

    def _restore_stash(self, repo: GitRepository, stash_ref: str) -> None:
        self.output.info("Applying stashed changes...")
        result = repo.stash_pop(stash_ref)
        if not result.success:
            self.output.error("Stash apply failed! There might be conflicts.")
            if result.output:
                self.output.error(f"Git output: {result.output}")
            self._show_stash_conflict_help(repo)
            raise StashRestoreConflict()
        self.output.success("Stashed changes successfully restored")

    def _restore_stash_best_effort(self, repo: GitRepository, stash_ref: str | None, error: SyncError) -> None:
        """Try once to put stashed changes back; record the outcome on error."""
        if stash_ref is None:
            return
        result = repo.stash_pop(stash_ref)
        if result.success:
            self.output.success("Stashed changes restored")
            error.add_cleanup("stashed changes restored")
        else:
            self.output.warning("Could not restore stashed changes, run 'git stash pop' manually")
            error.add_cleanup("stash restore failed, changes remain in 'git stash list'")

    def _return_to_branch(self, repo: GitRepository, original: str, current: str) -> None:
        if original == current:
            return
        self.output.info(f"Returning to original branch: {original}...")
        result = repo.checkout(original)
        if not result.success:
            self.output.error(f"Could not return to original branch! You are currently on {current}")
            raise BranchSwitchFailed(f"could not return to {original}, left on {current}")
        self.output.success(f"Successfully returned to {original} branch")

    def _return_to_branch_best_effort(
        self, repo: GitRepository, original: str, current: str, error: SyncError
    ) -> None:
        if original == current:
            return
        result = repo.checkout(original)
        if result.success:
            error.add_cleanup(f"returned to {original}")
        else:
            self.output.warning(f"Could not return to {original}, still on {current}")
            error.add_cleanup(f"left on {current}")

    def _show_stash_conflict_help(self, repo: GitRepository) -> None:
        """Print conflict resolution instructions after a failed stash pop."""
        self.output.error("⚠⚠⚠ STASH CONFLICT DETECTED ⚠⚠⚠", indent=1)
        self.output.raw("━" * SECTION_WIDTH, indent=1)
        self.output.raw("The pull succeeded but stashed changes conflict.", indent=1)
        self.output.raw("", indent=1)
        self.output.raw("To resolve:", indent=1)
        self.output.raw(f"  cd '{repo.path}'", indent=1)
        self.output.raw("  git stash show -p stash@{0}", indent=1)
        self.output.raw("  git stash apply stash@{0}", indent=1)
        self.output.raw("  # Resolve conflicts, then:", indent=1)
        self.output.raw("  git stash drop stash@{0}", indent=1)
        self.output.raw("━" * SECTION_WIDTH, indent=1)
