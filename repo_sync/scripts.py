"""Post-pull hook script execution."""

from __future__ import annotations

import os
from pathlib import Path

from repo_sync.context import RunContext
from repo_sync.errors import RemoteUnreachable, ScriptExecutionFailed
from repo_sync.models import PostPullScriptPlan

TRUNCATE_THRESHOLD = 10
TRUNCATE_KEEP = 5


def truncate_output(output: str, verbosity: int, failed: bool = False) -> tuple[str, str] | None:
    """Pick the part of a script's output to show at this verbosity.

    Returns (label, text), or None when nothing should be shown.
    Successful runs show nothing at verbosity 0, the first and last lines at
    verbosity 1 when the output is long, and everything at verbosity 2.
    Failed runs always show something: everything at verbosity 2, otherwise
    the head of the output.
    """
    lines = output.rstrip('\n').splitlines()

    if failed:
        if verbosity >= 2:
            return "Error output (full):", '\n'.join(lines)
        if len(lines) > TRUNCATE_KEEP:
            return "Error output (truncated):", '\n'.join(lines[:TRUNCATE_KEEP] + ['...'])
        return "Error output:", '\n'.join(lines)

    if verbosity <= 0 or not lines:
        return None
    if verbosity >= 2:
        return "Script output (full):", '\n'.join(lines)
    if len(lines) > TRUNCATE_THRESHOLD:
        kept = lines[:TRUNCATE_KEEP] + ['...'] + lines[-TRUNCATE_KEEP:]
        return "Script output (truncated):", '\n'.join(kept)
    return "Script output:", '\n'.join(lines)


def find_executable(repo_path: Path, script_name: str) -> Path | None:
    """Path to script_name in the repository root if it is an executable file."""
    candidate = repo_path / script_name
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return candidate
    return None


class PostPullScriptRunner:
    """Runs a PostPullScriptPlan inside one repository."""

    def __init__(self, context: RunContext):
        self.context = context
        self.output = context.output

    def run_scripts(self, repo_path: Path, plan: PostPullScriptPlan) -> list[str]:
        """Execute the plan and return the names of the scripts that ran.

        Raises ConfigurationError if no SSH target is configured,
        RemoteUnreachable if the endpoint does not answer, and
        ScriptExecutionFailed as soon as a script exits non-zero (later
        groups are not attempted).
        """
        if not plan:
            self.output.info("No post-pull scripts configured. Skipping.")
            return []

        if not self.context.remote.ensure_reachable():
            raise RemoteUnreachable()

        executed: list[str] = []
        for group in plan:
            self.output.info(f"Processing script group: {','.join(group)}", min_verbosity=1)
            script_name = self._run_group(repo_path, group)
            if script_name is None:
                self.output.warning(f"No valid alternative found for script group: {','.join(group)}")
            else:
                executed.append(script_name)

        if not executed:
            self.output.warning("None of the configured scripts were found or executable. Nothing was executed.")
        return executed

    def _run_group(self, repo_path: Path, group: tuple[str, ...]) -> str | None:
        """Run the first executable alternative of a group; None if none exists."""
        for script_name in group:
            self.output.info(f"Checking for script: {script_name}", min_verbosity=1)
            script_path = find_executable(repo_path, script_name)
            if script_path is None:
                self.output.info(
                    f"Script '{script_name}' not found or not executable. Trying next alternative.",
                    min_verbosity=1,
                )
                continue

            self.output.info(f"Executing {script_name} script...")
            self.output.debug(f"Running {script_path} in {repo_path}")
            result = self.context.runner.run(repo_path, [str(script_path)], merge_stderr=True)
            if not result.ok:
                self.output.error(f"{script_name} failed with status: {result.exit_code}")
                self._show_output(result.stdout, failed=True)
                raise ScriptExecutionFailed(script_name, result.exit_code, result.stdout)

            self.output.success(f"{script_name} executed successfully")
            self._show_output(result.stdout, failed=False)
            return script_name
        return None

    def _show_output(self, text: str, failed: bool) -> None:
        shown = truncate_output(text, self.context.verbosity, failed)
        if shown is None:
            return
        label, body = shown
        if failed:
            self.output.error(label)
        else:
            self.output.raw(label)
        if body:
            self.output.raw(body)
