"""Output handler implementations: console and null."""

from __future__ import annotations

from colorama import Fore, Style
from tqdm import tqdm

SECTION_WIDTH = 50

STATUS_ICONS = {
    'success': f"{Fore.GREEN}✓{Style.RESET_ALL}",
    'failure': f"{Fore.RED}✗{Style.RESET_ALL}",
    'skipped': f"{Fore.YELLOW}○{Style.RESET_ALL}",
}


def status_icon(kind: str) -> str:
    """Colored icon for 'success', 'failure' or 'skipped'."""
    return STATUS_ICONS.get(kind, "•")


class ConsoleOutputHandler:
    """Console output with colors, gated by verbosity."""

    def __init__(self, verbosity: int = 0):
        """Create a console handler. Informational lines above `verbosity` are dropped."""
        self.verbosity = verbosity

    def info(self, message: str, indent: int = 0, min_verbosity: int = 0) -> None:
        """Print an informational message if the run is verbose enough."""
        if self.verbosity >= min_verbosity:
            tqdm.write("  " * indent + f"{Fore.BLUE}[INFO]{Style.RESET_ALL} {message}")

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        tqdm.write("  " * indent + f"{Fore.GREEN}[SUCCESS]{Style.RESET_ALL} {message}")

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        tqdm.write("  " * indent + f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        tqdm.write("  " * indent + f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(f"{Fore.BLUE}=== {title} ==={Style.RESET_ALL}")

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only at verbosity 2)."""
        if self.verbosity >= 2:
            tqdm.write(f"{Fore.CYAN}[DEBUG] {message}{Style.RESET_ALL}")

    def raw(self, text: str, indent: int = 0) -> None:
        """Print text verbatim, one line at a time."""
        for line in text.splitlines() or [""]:
            tqdm.write("  " * indent + line)


class NullOutputHandler:
    """Silent output handler for testing."""

    verbosity = 0

    def info(self, message: str, indent: int = 0, min_verbosity: int = 0) -> None:
        """No-op."""
        pass

    def success(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def error(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def section(self, title: str) -> None:
        """No-op."""
        pass

    def debug(self, message: str) -> None:
        """No-op."""
        pass

    def raw(self, text: str, indent: int = 0) -> None:
        """No-op."""
        pass
