"""Concrete GitPython-based repository implementation."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path

from git import GitCommandError, Repo

from repo_sync.models import OperationResult, OperationType


def _git_output(error: GitCommandError) -> str:
    """Best human-readable text from a failed git call."""
    text = (error.stderr or error.stdout or '').strip()
    if text.startswith("stderr: "):
        text = text[len("stderr: "):].strip().strip("'")
    return text or str(error)


class GitPythonRepository:
    """Concrete implementation using GitPython.

    Every command runs with the repository as its working directory; nothing
    here touches the process current directory.
    """

    def __init__(self, repo_path: Path):
        """Open a git repository at the given path."""
        self._path = repo_path
        self._repo = Repo(repo_path)
        self._logger = logging.getLogger(__name__)

    def close(self) -> None:
        """Release underlying git resources."""
        self._repo.close()

    @property
    def path(self) -> Path:
        """Absolute path to the repository root."""
        return self._path

    @property
    def current_branch(self) -> str | None:
        """Name of the checked-out branch, or None if HEAD is detached."""
        try:
            if self._repo.head.is_detached:
                return None
            return self._repo.active_branch.name
        except (TypeError, ValueError):
            return None

    def remote_names(self) -> list[str]:
        """Names of the configured remotes."""
        return [remote.name for remote in self._repo.remotes]

    def ref_exists(self, ref: str) -> bool:
        """Return True if ref resolves to a commit."""
        try:
            self._repo.git.rev_parse('--verify', '--quiet', f'{ref}^{{commit}}')
            return True
        except GitCommandError:
            return False

    def unpushed_commits(self, remote_ref: str) -> list[str]:
        """One-line summaries of commits on HEAD that remote_ref does not have."""
        head = self._repo.git.rev_parse('HEAD')
        if head == self._repo.git.rev_parse(remote_ref):
            return []
        log = self._repo.git.log(f'{remote_ref}..HEAD', '--oneline')
        return [line for line in log.splitlines() if line.strip()]

    def status_lines(self) -> list[str]:
        """Porcelain status lines; empty when the working tree is clean."""
        status = self._repo.git.status('--porcelain')
        return [line for line in status.splitlines() if line.strip()]

    def _stash_top(self) -> str | None:
        """Commit id of stash@{0}, or None when the stash is empty."""
        try:
            return self._repo.git.rev_parse('--verify', '--quiet', 'refs/stash')
        except GitCommandError:
            return None

    def stash_push(self, message: str, include_untracked: bool = True) -> OperationResult:
        """Stash working tree changes with a descriptive message.

        `ref` on the result is the commit id of the new stash entry. It is None
        when git exited cleanly without creating one (for example when the only
        changes are inside a submodule).
        """
        try:
            args = ['push', '-m', message]
            if include_untracked:
                args.insert(1, '-u')
            before = self._stash_top()
            self._logger.debug("git stash %s in %s", ' '.join(args), self._path)
            output = self._repo.git.stash(*args)
            after = self._stash_top()
            if after is None or after == before:
                return OperationResult(True, OperationType.STASH, "Nothing stashed", output=output)
            return OperationResult(True, OperationType.STASH, f"Stashed changes: {message}", output=output, ref=after)
        except GitCommandError as e:
            return OperationResult(False, OperationType.STASH, "Stash failed", e, _git_output(e))

    def stash_pop(self, ref: str) -> OperationResult:
        """Apply and drop the stash entry whose commit id is ref.

        Entries pushed by other tools or by the user are never touched, even if
        they sit on top of the stack.
        """
        try:
            entries = self._repo.git.stash('list', '--format=%H').splitlines()
            if ref not in entries:
                return OperationResult(False, OperationType.STASH_POP, f"Stash entry {ref} not found",
                                       output=f"stash entry {ref[:12]} is no longer in 'git stash list'")
            selector = f"stash@{{{entries.index(ref)}}}"
            self._logger.debug("git stash pop %s in %s", selector, self._path)
            output = self._repo.git.stash('pop', selector)
            return OperationResult(True, OperationType.STASH_POP, "Popped stash", output=output)
        except GitCommandError as e:
            return OperationResult(False, OperationType.STASH_POP, "Stash pop failed", e, _git_output(e))

    def checkout(self, branch: str) -> OperationResult:
        """Check out a local branch by name."""
        try:
            self._logger.debug("git checkout %s in %s", branch, self._path)
            self._repo.git.checkout(branch)
            return OperationResult(True, OperationType.CHECKOUT, f"Checked out {branch}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.CHECKOUT, "Checkout failed", e, _git_output(e))

    def checkout_from_remote(self, branch: str, remote_ref: str) -> OperationResult:
        """Create or reset a local branch at remote_ref and check it out."""
        try:
            self._logger.debug("git checkout -B %s %s in %s", branch, remote_ref, self._path)
            self._repo.git.checkout('-B', branch, remote_ref)
            return OperationResult(True, OperationType.CHECKOUT, f"Checked out {branch} from {remote_ref}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.CHECKOUT, "Checkout failed", e, _git_output(e))

    def pull(self, remote: str, branch: str) -> OperationResult:
        """Pull from remote/branch with --rebase. Aborts the rebase on failure."""
        try:
            self._logger.debug("git pull --rebase %s %s in %s", remote, branch, self._path)
            output = self._repo.git.pull('--rebase', remote, branch)
            return OperationResult(True, OperationType.PULL, f"Pulled from {remote}/{branch}", output=output)
        except GitCommandError as e:
            with contextlib.suppress(GitCommandError):
                self._repo.git.rebase('--abort')
            return OperationResult(False, OperationType.PULL, "Pull failed", e, _git_output(e))

    def latest_commit_summary(self) -> str:
        """'<hash> - <subject> (<relative date>) <author>' for HEAD."""
        try:
            return self._repo.git.log('-1', '--pretty=format:%h - %s (%cr) <%an>', 'HEAD')
        except GitCommandError as e:
            return _git_output(e)
