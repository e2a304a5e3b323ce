"""Tests for the argument parser and config file handling."""

from pathlib import Path

import pytest

from repo_sync import (
    PostPullScriptPlan,
    RepoSyncSettings,
    ScriptMode,
    create_argument_parser,
    load_config_file,
    load_settings,
    save_config_file,
    settings_from_mapping,
)
from repo_sync.config import default_config_path


class TestArgumentParser:
    def _parse(self, *argv):
        return create_argument_parser().parse_args(list(argv))

    def test_defaults(self):
        args = self._parse()
        assert args.repos == []
        assert args.repo_list == []
        assert args.exclude == []
        assert args.force_master is False
        assert args.sync_mode is ScriptMode.DEFAULT
        assert args.init is False
        assert args.verbosity == 0

    def test_positional_repos(self):
        args = self._parse("frontend", "backend")
        assert args.repos == ["frontend", "backend"]

    def test_repos_and_exclude_lists(self):
        args = self._parse("--repos=a,b", "--repos=c", "--exclude=b")
        assert args.repo_list == ["a", "b", "c"]
        assert args.exclude == ["b"]

    def test_sync_flags(self):
        assert self._parse("--sync").sync_mode is ScriptMode.ALWAYS
        assert self._parse("--no-sync").sync_mode is ScriptMode.NEVER

    def test_sync_flags_mutually_exclusive(self):
        with pytest.raises(SystemExit) as exc:
            self._parse("--sync", "--no-sync")
        assert exc.value.code == 2

    @pytest.mark.parametrize("argv, expected", [
        (["-v"], 1),
        (["--verbose"], 1),
        (["-vv"], 2),
        (["--very-verbose"], 2),
    ])
    def test_verbosity(self, argv, expected):
        assert self._parse(*argv).verbosity == expected

    def test_force_master_and_init(self):
        args = self._parse("--force-master", "--init")
        assert args.force_master is True
        assert args.init is True

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as exc:
            self._parse("--help")
        assert exc.value.code == 0
        assert "--force-master" in capsys.readouterr().out

    def test_unknown_flag_is_fatal(self):
        with pytest.raises(SystemExit) as exc:
            self._parse("--bogus")
        assert exc.value.code == 2


class TestConfigPath:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REPO_SYNC_CONFIG", str(tmp_path / "custom.conf"))
        assert default_config_path() == tmp_path / "custom.conf"

    def test_xdg(self, monkeypatch, tmp_path):
        monkeypatch.delenv("REPO_SYNC_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_config_path() == tmp_path / "repo-sync" / "repo-sync.conf"


class TestLoadConfigFile:
    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_config_file(tmp_path / "missing.conf") == {}

    def test_reads_key_values_and_comments(self, tmp_path: Path):
        config = tmp_path / "repo-sync.conf"
        config.write_text(
            "# comment\n"
            "REPO_BASE_PATH=/srv/repos\n"
            "REPOSITORIES=api,web\n"
            "RUN_AFTER_PULL=\"sync,syncAll webhook\"\n"
            "SOMETHING_ELSE=ignored\n"
        )
        values = load_config_file(config)
        assert values["REPO_BASE_PATH"] == "/srv/repos"
        assert values["REPOSITORIES"] == "api,web"
        assert values["RUN_AFTER_PULL"] == "sync,syncAll webhook"

    def test_missing_file_gives_default_settings(self, tmp_path: Path):
        assert load_settings(tmp_path / "missing.conf") == RepoSyncSettings()


class TestSettingsFromMapping:
    def test_full_mapping(self):
        settings = settings_from_mapping({
            "REPO_BASE_PATH": "/srv/repos",
            "REPOSITORIES": "api, web",
            "REMOTE_NAMES": "fork,origin",
            "DEFAULT_BRANCH": "main,master",
            "SSH_CONNECTION": "deploy@build",
            "RUN_AFTER_PULL": "sync,syncAll webhook",
            "MAX_CONNECT_ATTEMPTS": "5",
            "CONNECT_RETRY_WAIT": "2",
            "SYNC_BY_DEFAULT": "no",
        })
        assert settings.base_path == Path("/srv/repos")
        assert settings.repositories == ("api", "web")
        assert settings.remote_names.names == ("fork", "origin")
        assert settings.branches.primary == "main"
        assert settings.ssh_connection == "deploy@build"
        assert settings.post_pull.groups == (("sync", "syncAll"), ("webhook",))
        assert settings.max_connect_attempts == 5
        assert settings.connect_retry_wait == 2
        assert settings.sync_by_default is False

    def test_tilde_expanded(self):
        settings = settings_from_mapping({"REPO_BASE_PATH": "~/code"})
        assert settings.base_path == Path.home() / "code"

    def test_empty_run_after_pull_disables_scripts(self):
        settings = settings_from_mapping({"RUN_AFTER_PULL": ""})
        assert settings.post_pull == PostPullScriptPlan()

    def test_absent_run_after_pull_uses_default(self):
        settings = settings_from_mapping({})
        assert settings.post_pull.groups == (("sync", "syncAll"),)

    def test_empty_branch_falls_back(self):
        settings = settings_from_mapping({"DEFAULT_BRANCH": ""})
        assert settings.branches.names == ("master", "main")

    def test_invalid_int_warns_and_defaults(self):
        warnings = []
        settings = settings_from_mapping({"MAX_CONNECT_ATTEMPTS": "many"}, warn=warnings.append)
        assert settings.max_connect_attempts == 3
        assert len(warnings) == 1
        assert "MAX_CONNECT_ATTEMPTS" in warnings[0]


class TestSaveConfigFile:
    def test_round_trip(self, tmp_path: Path):
        settings = RepoSyncSettings(
            base_path=tmp_path / "repos",
            repositories=("api", "web"),
            ssh_connection="deploy@build",
            post_pull=PostPullScriptPlan.parse("sync,syncAll webhook"),
            max_connect_attempts=2,
            connect_retry_wait=1,
            sync_by_default=False,
        )
        config = tmp_path / "nested" / "repo-sync.conf"
        save_config_file(settings, config)
        assert config.read_text().startswith("# Repository Sync Tool Configuration")
        assert load_settings(config) == settings

    def test_round_trip_without_scripts(self, tmp_path: Path):
        settings = RepoSyncSettings(post_pull=PostPullScriptPlan())
        config = tmp_path / "repo-sync.conf"
        save_config_file(settings, config)
        assert load_settings(config).post_pull == PostPullScriptPlan()
