"""Configuration: argument parser and config file load/save."""

from __future__ import annotations

import argparse
import os
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path

from dotenv import dotenv_values

from repo_sync.models import (
    DEFAULT_BRANCHES,
    DEFAULT_CONNECT_RETRY_WAIT,
    DEFAULT_MAX_CONNECT_ATTEMPTS,
    DEFAULT_REMOTE_NAMES,
    DEFAULT_REPO_BASE_PATH,
    DEFAULT_RUN_AFTER_PULL,
    BranchSet,
    PostPullScriptPlan,
    RemoteNamePreference,
    RepoSyncSettings,
    ScriptMode,
)

CONFIG_FILENAME = 'repo-sync.conf'
CONFIG_ENV_VAR = 'REPO_SYNC_CONFIG'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all repo-sync flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from repo_sync import __version__

    parser = argparse.ArgumentParser(
        prog='repo-sync',
        description="Sync a set of local git repositories with their remotes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
If no repositories are given, the REPOSITORIES list from the config file is used.

Examples:
  %(prog)s                                  # Sync all default repositories
  %(prog)s --exclude=backend,api            # Sync defaults except backend and api
  %(prog)s --repos=frontend,backend         # Only sync the given repositories
  %(prog)s frontend backend                 # Same, positional syntax
  %(prog)s --init                           # Run the configuration wizard
  %(prog)s --sync                           # Force running post-pull scripts
  %(prog)s --no-sync                        # Pull only, skip post-pull scripts
  %(prog)s -v                               # Show truncated script output
  %(prog)s -vv                              # Show full script output
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('repos', nargs='*', metavar='REPO',
                        help='Repository names or paths to sync (overrides the default list)')
    parser.add_argument('--repos', dest='repo_list', type=_comma_list, action='extend', default=[],
                        metavar='REPO1,REPO2',
                        help='Comma-separated list of repositories to sync')
    parser.add_argument('--exclude', type=_comma_list, action='extend', default=[],
                        metavar='REPO1,REPO2',
                        help='Comma-separated list of repositories to exclude')
    parser.add_argument('--force-master', dest='force_master', action='store_true',
                        help='Check out the primary branch even when another branch is checked out')

    sync_group = parser.add_mutually_exclusive_group()
    sync_group.add_argument('--sync', dest='sync_mode', action='store_const', const=ScriptMode.ALWAYS,
                            help='Run post-pull scripts')
    sync_group.add_argument('--no-sync', dest='sync_mode', action='store_const', const=ScriptMode.NEVER,
                            help='Skip post-pull scripts, only git operations are performed')
    parser.set_defaults(sync_mode=ScriptMode.DEFAULT)

    parser.add_argument('--init', action='store_true',
                        help='Run the configuration wizard and exit')
    parser.add_argument('-v', '--verbose', dest='verbosity', action='count', default=0,
                        help='Show truncated script output (-vv for full output)')
    parser.add_argument('--very-verbose', dest='verbosity', action='store_const', const=2,
                        help='Show full script output')
    parser.add_argument('--config', type=str, default=None,
                        help=f'Path to config file (default: $XDG_CONFIG_HOME/repo-sync/{CONFIG_FILENAME})')

    return parser


def default_config_path() -> Path:
    """$REPO_SYNC_CONFIG, else the XDG config directory."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    xdg_home = Path(os.environ.get('XDG_CONFIG_HOME', str(Path.home() / '.config')))
    return xdg_home / 'repo-sync' / CONFIG_FILENAME


def load_config_file(config_path: Path) -> dict[str, str]:
    """Read KEY=VALUE pairs from the config file. Returns empty dict if not found."""
    if not config_path.is_file():
        return {}
    values = dotenv_values(config_path)
    return {str(k): str(v) for k, v in values.items() if k is not None and v is not None}


def _parse_int(values: Mapping[str, str], key: str, default: int, warn: Callable[[str], None]) -> int:
    raw = values.get(key, '').strip()
    if not raw:
        return default
    try:
        number = int(raw)
    except ValueError:
        warn(f"Invalid {key}={raw!r}, using default {default}")
        return default
    if number < 0:
        warn(f"Invalid {key}={raw!r}, using default {default}")
        return default
    return number


def _parse_bool(values: Mapping[str, str], key: str, default: bool, warn: Callable[[str], None]) -> bool:
    raw = values.get(key, '').strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    warn(f"Invalid {key}={raw!r}, using default {str(default).lower()}")
    return default


def settings_from_mapping(values: Mapping[str, str], warn: Callable[[str], None] = print) -> RepoSyncSettings:
    """Turn raw config values into typed settings, defaulting whatever is missing.

    Unknown keys are ignored. RUN_AFTER_PULL present but empty means no
    post-pull scripts; an empty DEFAULT_BRANCH or REMOTE_NAMES falls back to
    the default.
    """
    base_path = values.get('REPO_BASE_PATH', '').strip()
    branches = values.get('DEFAULT_BRANCH', '').strip() or DEFAULT_BRANCHES
    remotes = values.get('REMOTE_NAMES', '').strip() or DEFAULT_REMOTE_NAMES
    run_after_pull = values['RUN_AFTER_PULL'] if 'RUN_AFTER_PULL' in values else DEFAULT_RUN_AFTER_PULL

    return RepoSyncSettings(
        base_path=Path(base_path).expanduser() if base_path else DEFAULT_REPO_BASE_PATH,
        repositories=tuple(_comma_list(values.get('REPOSITORIES', ''))),
        remote_names=RemoteNamePreference.parse(remotes),
        branches=BranchSet.parse(branches),
        ssh_connection=values.get('SSH_CONNECTION', '').strip(),
        post_pull=PostPullScriptPlan.parse(run_after_pull),
        max_connect_attempts=_parse_int(values, 'MAX_CONNECT_ATTEMPTS', DEFAULT_MAX_CONNECT_ATTEMPTS, warn),
        connect_retry_wait=_parse_int(values, 'CONNECT_RETRY_WAIT', DEFAULT_CONNECT_RETRY_WAIT, warn),
        sync_by_default=_parse_bool(values, 'SYNC_BY_DEFAULT', True, warn),
    )


def load_settings(config_path: Path, warn: Callable[[str], None] = print) -> RepoSyncSettings:
    """Load and parse the config file, or return defaults if it does not exist."""
    return settings_from_mapping(load_config_file(config_path), warn)


def save_config_file(settings: RepoSyncSettings, config_path: Path) -> None:
    """Write settings in the commented KEY=VALUE format."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    content = f"""# Repository Sync Tool Configuration
# Created on {datetime.now():%Y-%m-%d %H:%M:%S}

# Repository base path - the base directory where your repositories are located
REPO_BASE_PATH={settings.base_path}

# Repositories to sync by default (comma-separated list)
REPOSITORIES={','.join(settings.repositories)}

# Remote names in order of preference (comma-separated list)
REMOTE_NAMES={settings.remote_names}

# Branch names to sync with (comma-separated alternatives, the first one is pulled)
DEFAULT_BRANCH={settings.branches}

# SSH connection string for remote server (required for post-pull scripts)
SSH_CONNECTION={settings.ssh_connection}

# Scripts to run after pull (space-separated groups with comma-separated alternatives)
# Example: "sync,syncAll fire_webhook" - first try sync OR syncAll, then try fire_webhook
# Leave empty to skip running any scripts
RUN_AFTER_PULL="{settings.post_pull}"

# Run post-pull scripts when neither --sync nor --no-sync is given
SYNC_BY_DEFAULT={str(settings.sync_by_default).lower()}

# Maximum number of attempts to connect to remote server
MAX_CONNECT_ATTEMPTS={settings.max_connect_attempts}

# Seconds to wait between connection attempts
CONNECT_RETRY_WAIT={settings.connect_retry_wait}
"""
    config_path.write_text(content)
