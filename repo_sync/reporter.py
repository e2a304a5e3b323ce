"""SummaryReporter: generates and displays the final report."""

from __future__ import annotations

from colorama import Fore, Style

from repo_sync.models import RepoResult, SyncReport
from repo_sync.output import SECTION_WIDTH, status_icon
from repo_sync.protocols import OutputHandler


def format_duration(seconds: float) -> str:
    """'2m 30s' for a minute or more, '45s' below that."""
    total = int(seconds)
    if total >= 60:
        return f"{total // 60}m {total % 60}s"
    return f"{total}s"


class SummaryReporter:
    """Generates and displays summary reports"""

    def __init__(self, output: OutputHandler):
        """Create a reporter that writes to the given output handler."""
        self.output = output

    def print_summary(self, report: SyncReport):
        """Print counts per outcome bucket followed by the per-repository lines."""
        self.output.raw("")
        self.output.raw("╔" + "=" * SECTION_WIDTH + "╗")
        self.output.raw("║" + "SYNC SUMMARY".center(SECTION_WIDTH) + "║")
        self.output.raw("╚" + "=" * SECTION_WIDTH + "╝")
        self.output.raw(f"Operation completed in: {format_duration(report.elapsed)}")
        self.output.raw(f"Repositories processed: {report.repos_processed}")
        self.output.raw(f"  {Fore.GREEN}✓ Successful: {len(report.successful)}{Style.RESET_ALL}")
        self.output.raw(f"  {Fore.RED}✗ Failed: {len(report.failed)}{Style.RESET_ALL}")
        self.output.raw(f"  {Fore.YELLOW}○ Skipped: {len(report.skipped)}{Style.RESET_ALL}")

        self._print_bucket(f"{Fore.GREEN}Successfully synced repositories:{Style.RESET_ALL}",
                           report.successful, 'success')
        self._print_bucket(f"{Fore.RED}Failed repositories:{Style.RESET_ALL}",
                           report.failed, 'failure')
        self._print_bucket(f"{Fore.YELLOW}Skipped repositories:{Style.RESET_ALL}",
                           report.skipped, 'skipped')

        self.output.raw("")
        self.output.raw("=" * SECTION_WIDTH)

    def _print_bucket(self, title: str, results: list[RepoResult], icon: str):
        if not results:
            return
        self.output.raw("")
        self.output.raw(title)
        for result in results:
            self.output.raw(f"  {status_icon(icon)} {result.line}")
