"""Subprocess-backed CommandRunner."""

from __future__ import annotations

import errno
import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from repo_sync.models import CommandResult

logger = logging.getLogger(__name__)

FALLBACK_SHELL = '/bin/sh'


class SubprocessCommandRunner:
    """Run a process synchronously in an explicit working directory."""

    def run(
        self,
        working_dir: Path | None,
        argv: Sequence[str],
        merge_stderr: bool = False,
    ) -> CommandResult:
        """Run argv and capture its output.

        With merge_stderr=True stderr is interleaved into stdout, the way a
        shell `2>&1` capture would see it. Spawn failures are never raised:
        a missing executable is exit code 127 and any other OS error is 126.
        A file without an interpreter line is run with /bin/sh, as a shell
        would do.
        """
        argv = list(argv)
        logger.debug("run %s (cwd=%s)", argv, working_dir)
        try:
            return self._spawn(working_dir, argv, merge_stderr)
        except FileNotFoundError as e:
            logger.debug("executable not found: %s", e)
            return CommandResult(127, '', str(e))
        except OSError as e:
            if e.errno != errno.ENOEXEC:
                logger.debug("cannot execute %s: %s", argv[0], e)
                return CommandResult(126, '', str(e))

        logger.debug("%s has no interpreter line, running it with %s", argv[0], FALLBACK_SHELL)
        try:
            return self._spawn(working_dir, [FALLBACK_SHELL, *argv], merge_stderr)
        except OSError as e:
            logger.debug("cannot execute %s: %s", argv[0], e)
            return CommandResult(126, '', str(e))

    def _spawn(self, working_dir: Path | None, argv: list[str], merge_stderr: bool) -> CommandResult:
        proc = subprocess.run(
            argv,
            cwd=working_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            check=False,
        )
        return CommandResult(proc.returncode, proc.stdout or '', proc.stderr or '')
