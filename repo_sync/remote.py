"""RemoteAvailability: memoized connectivity check for the SSH endpoint."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from repo_sync.errors import ConfigurationError
from repo_sync.protocols import CommandRunner, OutputHandler

logger = logging.getLogger(__name__)

SSH_CONNECT_TIMEOUT = 5


class RemoteAvailability:
    """Checks once per run whether the configured SSH endpoint answers.

    The first caller checks (with retries); everyone after that gets the
    cached verdict, including callers working on other repositories.
    """

    def __init__(
        self,
        ssh_connection: str,
        runner: CommandRunner,
        output: OutputHandler,
        max_attempts: int = 3,
        retry_wait: float = 10,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.ssh_connection = ssh_connection
        self.runner = runner
        self.output = output
        self.max_attempts = max(1, max_attempts)
        self.retry_wait = retry_wait
        self._sleep = sleep
        self._lock = threading.Lock()
        self.checked = False
        self.reachable = False
        self.attempts = 0

    def ensure_reachable(self) -> bool:
        """Return whether the endpoint is reachable, probing only on the first call."""
        if not self.ssh_connection:
            raise ConfigurationError(
                "SSH connection is not configured, run 'repo-sync --init' to configure it"
            )

        with self._lock:
            if self.checked:
                if not self.reachable:
                    self.output.warning("Remote server check previously failed, skipping connection attempt")
                return self.reachable

            self.reachable = self._check()
            self.checked = True
            return self.reachable

    def _check(self) -> bool:
        self.output.info(f"Checking if remote server ({self.ssh_connection}) is online...")
        for attempt in range(1, self.max_attempts + 1):
            self.output.info(
                f"Attempt {attempt} of {self.max_attempts} to connect to remote server...",
                min_verbosity=1,
            )
            self.attempts += 1
            result = self.runner.run(None, [
                'ssh',
                '-o', f'ConnectTimeout={SSH_CONNECT_TIMEOUT}',
                '-o', 'BatchMode=yes',
                self.ssh_connection,
                'exit',
            ])
            if result.ok:
                self.output.success(f"Remote server ({self.ssh_connection}) is online")
                return True

            logger.debug("ssh check %d failed: %s", attempt, result.stderr.strip())
            if attempt < self.max_attempts:
                self.output.warning(
                    f"Remote server not reachable, retrying in {self.retry_wait} seconds..."
                )
                self._sleep(self.retry_wait)

        self.output.error(f"Remote server is not reachable after {self.max_attempts} attempts")
        return False
