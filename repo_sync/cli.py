"""CLI entry point: main() function."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from repo_sync.config import create_argument_parser, default_config_path, load_settings
from repo_sync.context import RunContext
from repo_sync.models import SyncPolicy
from repo_sync.orchestrator import SyncOrchestrator
from repo_sync.output import ConsoleOutputHandler
from repo_sync.remote import RemoteAvailability
from repo_sync.reporter import SummaryReporter
from repo_sync.runner import SubprocessCommandRunner
from repo_sync.targets import resolve_targets
from repo_sync.wizard import InitWizard


def main(argv: list[str] | None = None):
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_intermixed_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbosity >= 2 else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = ConsoleOutputHandler(verbosity=args.verbosity)
    config_path = Path(args.config).expanduser() if args.config else default_config_path()
    settings = load_settings(config_path, warn=output.warning)

    if args.init:
        try:
            InitWizard(output).run(settings, config_path)
        except (KeyboardInterrupt, EOFError):
            output.warning("\nConfiguration cancelled")
            sys.exit(130)
        sys.exit(0)

    requested = [*args.repos, *args.repo_list]
    if not requested:
        if not config_path.is_file():
            output.warning("No configuration file found.")
            output.info("Consider running 'repo-sync --init' to create a configuration file.")
        output.info("Using default repository list")

    targets = resolve_targets(requested, settings.repositories, args.exclude, settings.base_path)
    if not targets:
        output.error("No repositories to sync after applying exclusions.")
        sys.exit(1)

    policy = SyncPolicy(
        force_target_branch=args.force_master,
        script_mode=args.sync_mode,
        verbosity=args.verbosity,
    )

    runner = SubprocessCommandRunner()
    remote = RemoteAvailability(
        settings.ssh_connection,
        runner,
        output,
        max_attempts=settings.max_connect_attempts,
        retry_wait=settings.connect_retry_wait,
    )
    context = RunContext(output=output, runner=runner, remote=remote, verbosity=args.verbosity)

    output.section("Sync Operation Started")
    output.info(f"Repositories to sync: {len(targets)}")
    for target in targets:
        output.raw(f"  - {target.name}")

    orchestrator = SyncOrchestrator(settings, context)

    try:
        report = orchestrator.run(targets, policy)
    except KeyboardInterrupt:
        output.warning("\n\nInterrupted by user")
        sys.exit(130)

    SummaryReporter(output).print_summary(report)
    sys.exit(report.exit_code)
