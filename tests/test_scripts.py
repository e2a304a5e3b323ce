"""Tests for post-pull script execution."""

from pathlib import Path

import pytest

from repo_sync import (
    CommandResult,
    ConfigurationError,
    NullOutputHandler,
    PostPullScriptPlan,
    PostPullScriptRunner,
    RemoteAvailability,
    RemoteUnreachable,
    RunContext,
    ScriptExecutionFailed,
    SubprocessCommandRunner,
    truncate_output,
)


class SshOnlyRunner:
    """Answers ssh checks itself and runs everything else for real."""

    def __init__(self, ssh_exit_code=0):
        self.ssh_exit_code = ssh_exit_code
        self.ssh_calls = 0
        self.script_calls = []
        self._real = SubprocessCommandRunner()

    def run(self, working_dir, argv, merge_stderr=False):
        if argv[0] == "ssh":
            self.ssh_calls += 1
            return CommandResult(self.ssh_exit_code)
        self.script_calls.append(Path(argv[0]).name)
        return self._real.run(working_dir, argv, merge_stderr)


def _script(repo: Path, name: str, body: str = "exit 0", executable: bool = True,
            shebang: bool = True) -> Path:
    path = repo / name
    path.write_text(f"#!/bin/sh\n{body}\n" if shebang else f"{body}\n")
    path.chmod(0o755 if executable else 0o644)
    return path


def _context(runner, ssh="deploy@build", verbosity=0, attempts=2):
    output = NullOutputHandler()
    remote = RemoteAvailability(ssh, runner, output, max_attempts=attempts, retry_wait=0,
                                sleep=lambda _s: None)
    return RunContext(output=output, runner=runner, remote=remote, verbosity=verbosity)


class TestPostPullScriptRunner:
    def test_first_existing_alternative_then_next_group(self, tmp_path: Path):
        _script(tmp_path, "syncAll")
        _script(tmp_path, "webhook")
        runner = SshOnlyRunner()
        scripts = PostPullScriptRunner(_context(runner))

        plan = PostPullScriptPlan((("sync", "syncAll"), ("webhook",)))
        executed = scripts.run_scripts(tmp_path, plan)

        assert executed == ["syncAll", "webhook"]
        assert runner.script_calls == ["syncAll", "webhook"]

    def test_only_first_alternative_runs(self, tmp_path: Path):
        _script(tmp_path, "sync")
        _script(tmp_path, "syncAll")
        runner = SshOnlyRunner()
        executed = PostPullScriptRunner(_context(runner)).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync,syncAll"))
        assert executed == ["sync"]
        assert runner.script_calls == ["sync"]

    def test_failure_aborts_remaining_groups(self, tmp_path: Path):
        _script(tmp_path, "syncAll", "echo broken; exit 3")
        _script(tmp_path, "webhook")
        runner = SshOnlyRunner()
        scripts = PostPullScriptRunner(_context(runner))

        with pytest.raises(ScriptExecutionFailed) as exc:
            scripts.run_scripts(tmp_path, PostPullScriptPlan.parse("sync,syncAll webhook"))

        assert exc.value.script == "syncAll"
        assert exc.value.exit_code == 3
        assert "broken" in exc.value.output
        assert runner.script_calls == ["syncAll"]

    def test_stderr_captured_with_stdout(self, tmp_path: Path):
        _script(tmp_path, "sync", "echo out; echo err >&2; exit 1")
        with pytest.raises(ScriptExecutionFailed) as exc:
            PostPullScriptRunner(_context(SshOnlyRunner())).run_scripts(
                tmp_path, PostPullScriptPlan.parse("sync"))
        assert "out" in exc.value.output
        assert "err" in exc.value.output

    def test_script_without_interpreter_line_runs_with_sh(self, tmp_path: Path):
        _script(tmp_path, "sync", "echo hi > ran.txt\nexit 0", shebang=False)
        executed = PostPullScriptRunner(_context(SshOnlyRunner())).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync"))
        assert executed == ["sync"]
        assert (tmp_path / "ran.txt").read_text() == "hi\n"

    def test_script_without_interpreter_line_failure_aborts(self, tmp_path: Path):
        _script(tmp_path, "sync", "echo nope\nexit 5", shebang=False)
        _script(tmp_path, "webhook")
        runner = SshOnlyRunner()
        with pytest.raises(ScriptExecutionFailed) as exc:
            PostPullScriptRunner(_context(runner)).run_scripts(
                tmp_path, PostPullScriptPlan.parse("sync webhook"))
        assert exc.value.exit_code == 5
        assert "nope" in exc.value.output
        assert runner.script_calls == ["sync"]

    def test_non_executable_is_skipped(self, tmp_path: Path):
        _script(tmp_path, "sync", executable=False)
        _script(tmp_path, "syncAll")
        runner = SshOnlyRunner()
        executed = PostPullScriptRunner(_context(runner)).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync,syncAll"))
        assert executed == ["syncAll"]

    def test_missing_group_is_not_a_failure(self, tmp_path: Path):
        _script(tmp_path, "webhook")
        executed = PostPullScriptRunner(_context(SshOnlyRunner())).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync,syncAll webhook"))
        assert executed == ["webhook"]

    def test_nothing_found_is_success(self, tmp_path: Path):
        executed = PostPullScriptRunner(_context(SshOnlyRunner())).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync,syncAll webhook"))
        assert executed == []

    def test_scripts_run_in_repository_root(self, tmp_path: Path):
        _script(tmp_path, "sync", "pwd > where.txt")
        PostPullScriptRunner(_context(SshOnlyRunner())).run_scripts(
            tmp_path, PostPullScriptPlan.parse("sync"))
        assert Path((tmp_path / "where.txt").read_text().strip()).resolve() == tmp_path.resolve()

    def test_empty_plan_skips_remote_check(self, tmp_path: Path):
        runner = SshOnlyRunner()
        assert PostPullScriptRunner(_context(runner, ssh="")).run_scripts(tmp_path, PostPullScriptPlan()) == []
        assert runner.ssh_calls == 0

    def test_missing_ssh_configuration(self, tmp_path: Path):
        _script(tmp_path, "sync")
        runner = SshOnlyRunner()
        with pytest.raises(ConfigurationError):
            PostPullScriptRunner(_context(runner, ssh="")).run_scripts(
                tmp_path, PostPullScriptPlan.parse("sync"))
        assert runner.script_calls == []

    def test_unreachable_remote_runs_nothing(self, tmp_path: Path):
        _script(tmp_path, "sync")
        runner = SshOnlyRunner(ssh_exit_code=255)
        with pytest.raises(RemoteUnreachable):
            PostPullScriptRunner(_context(runner)).run_scripts(tmp_path, PostPullScriptPlan.parse("sync"))
        assert runner.script_calls == []


class TestTruncateOutput:
    def _lines(self, count):
        return "\n".join(f"line{i}" for i in range(1, count + 1)) + "\n"

    def test_quiet_shows_nothing(self):
        assert truncate_output(self._lines(3), verbosity=0) is None

    def test_verbose_short_output_in_full(self):
        label, text = truncate_output(self._lines(10), verbosity=1)
        assert label == "Script output:"
        assert text.splitlines() == [f"line{i}" for i in range(1, 11)]

    def test_verbose_long_output_head_and_tail(self):
        label, text = truncate_output(self._lines(12), verbosity=1)
        assert label == "Script output (truncated):"
        assert text.splitlines() == [
            "line1", "line2", "line3", "line4", "line5", "...",
            "line8", "line9", "line10", "line11", "line12",
        ]

    def test_very_verbose_full(self):
        label, text = truncate_output(self._lines(30), verbosity=2)
        assert label == "Script output (full):"
        assert len(text.splitlines()) == 30

    def test_verbose_empty_output(self):
        assert truncate_output("", verbosity=1) is None

    def test_failure_head_only(self):
        label, text = truncate_output(self._lines(8), verbosity=0, failed=True)
        assert label == "Error output (truncated):"
        assert text.splitlines() == ["line1", "line2", "line3", "line4", "line5", "..."]

    def test_failure_short(self):
        label, text = truncate_output(self._lines(2), verbosity=1, failed=True)
        assert label == "Error output:"
        assert text == "line1\nline2"

    def test_failure_full_when_very_verbose(self):
        label, text = truncate_output(self._lines(8), verbosity=2, failed=True)
        assert label == "Error output (full):"
        assert len(text.splitlines()) == 8
