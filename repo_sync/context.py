"""RunContext: per-invocation state shared by every repository in a run."""

from __future__ import annotations

from dataclasses import dataclass

from repo_sync.protocols import CommandRunner, OutputHandler
from repo_sync.remote import RemoteAvailability


@dataclass
class RunContext:
    """Verbosity, output, process runner and the remote reachability memo"""
    output: OutputHandler
    runner: CommandRunner
    remote: RemoteAvailability
    verbosity: int = 0
