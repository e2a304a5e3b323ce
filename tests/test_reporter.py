"""Tests for the end-of-run summary."""

from pathlib import Path

import pytest

from repo_sync import (
    NullOutputHandler,
    RepoTarget,
    ScriptExecutionFailed,
    SummaryReporter,
    SyncOutcome,
    SyncReport,
    format_duration,
)


class RecordingOutputHandler(NullOutputHandler):
    def __init__(self):
        super().__init__()
        self.lines = []

    def raw(self, text, indent=0):
        self.lines.append(text)


@pytest.mark.parametrize("seconds, expected", [
    (0, "0s"),
    (45.9, "45s"),
    (60, "1m 0s"),
    (150, "2m 30s"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


class TestSummaryReporter:
    def _report(self):
        report = SyncReport(elapsed=75)
        report.add(RepoTarget("api", Path("/r/api")), SyncOutcome.succeeded())
        report.add(RepoTarget("web", Path("/r/web")),
                   SyncOutcome.succeeded("post-pull scripts completed", executed_scripts=["syncAll"]))
        report.add(RepoTarget("worker", Path("/r/worker")),
                   SyncOutcome.failed(ScriptExecutionFailed("sync", 2)))
        report.add(RepoTarget("docs", Path("/r/docs")),
                   SyncOutcome.skipped("not on target branch (on dev)"))
        return report

    def test_counts_and_lines(self):
        output = RecordingOutputHandler()
        SummaryReporter(output).print_summary(self._report())
        text = "\n".join(output.lines)

        assert "SYNC SUMMARY" in text
        assert "Operation completed in: 1m 15s" in text
        assert "Repositories processed: 4" in text
        assert "Successful: 2" in text
        assert "Failed: 1" in text
        assert "Skipped: 1" in text
        assert any("✓" in line and line.endswith(" api") for line in output.lines)
        assert any("✓" in line and line.endswith(" web (Scripts: syncAll)") for line in output.lines)
        assert any("✗" in line and line.endswith(" worker: sync failed with status 2") for line in output.lines)
        assert any("○" in line and line.endswith(" docs: not on target branch (on dev)") for line in output.lines)

    def test_empty_buckets_not_listed(self):
        report = SyncReport()
        report.add(RepoTarget("api", Path("/r/api")), SyncOutcome.succeeded())
        output = RecordingOutputHandler()
        SummaryReporter(output).print_summary(report)
        text = "\n".join(output.lines)
        assert "Failed repositories:" not in text
        assert "Skipped repositories:" not in text
