"""
Tests for configuration loading.
"""

import logging

import pytest
import yaml
from pydantic import ValidationError

from onoff_engine.config import EngineConfig, load_config, load_role_definitions
from onoff_engine.engine import RoleTeamMap
from onoff_engine.errors import ConfigurationError

LIVE_ENV = {
    "ONELOGIN_CLIENT": "client",
    "ONELOGIN_CLIENTSECRET": "secret",
    "ONELOGIN_SUBDOMAIN": "acme",
    "GITHUB_TOKEN": "ghp_token",
    "GITHUB_ORG": "acme",
    "MATTERMOST_HOOK": "https://chat.example.com/hooks/abc",
    "GITHUB_DEV_TEAMID": "1001",
    "GITHUB_QA_TEAMID": "1002",
    "GITHUB_PM_TEAMID": "1004",
}


@pytest.fixture
def config_file(tmp_path):
    def write(data):
        path = tmp_path / "onoff.yaml"
        path.write_text(yaml.safe_dump(data))
        return path
    return write


class TestLoadConfig:
    """Test cases for load_config."""

    def test_reads_environment(self):
        config = load_config(environ=LIVE_ENV)

        assert config.onelogin.client_id == "client"
        assert config.onelogin.subdomain == "acme"
        assert config.onelogin.handle_attribute == "GH"
        assert config.github.organization == "acme"
        assert config.notifier.webhook_url == "https://chat.example.com/hooks/abc"
        assert config.notifier.username == "OnOffBoardBot"
        assert config.mock_mode is False
        assert config.missing_credentials() == []

    def test_team_ids_from_environment(self):
        config = load_config(environ=LIVE_ENV)

        teams = {role.name: role.team_id for role in config.roles}
        assert teams == {"Developer": 1001, "QA": 1002, "SA": None, "PM": 1004}

    def test_role_map_skips_unset_team(self):
        role_map = RoleTeamMap.from_config(load_config(environ=LIVE_ENV))

        assert sorted(role_map) == [258872, 258875, 258878]
        assert 258880 not in role_map

    def test_non_numeric_team_id_is_ignored(self, caplog):
        env = dict(LIVE_ENV, GITHUB_QA_TEAMID="qa-team")

        with caplog.at_level(logging.WARNING):
            config = load_config(environ=env)

        qa = next(role for role in config.roles if role.name == "QA")
        assert qa.team_id is None
        assert "GITHUB_QA_TEAMID" in caplog.text

    def test_missing_credentials(self):
        config = load_config(environ={"GITHUB_TOKEN": "t"})

        assert config.missing_credentials() == [
            "ONELOGIN_CLIENT",
            "ONELOGIN_CLIENTSECRET",
            "ONELOGIN_SUBDOMAIN",
            "GITHUB_ORG",
            "MATTERMOST_HOOK",
        ]

    @pytest.mark.parametrize("value, expected", [
        ("1", True), ("true", True), ("YES", True), ("on", True),
        ("0", False), ("false", False), ("", False),
    ])
    def test_mock_mode_flag(self, value, expected):
        assert load_config(environ={"ONOFF_MOCK_MODE": value}).mock_mode is expected

    def test_yaml_overrides_environment(self, config_file):
        path = config_file({
            "github": {"organization": "other-org"},
            "notifier": {"username": "Provisioner"},
            "log_level": "DEBUG",
        })

        config = load_config(path, environ=LIVE_ENV)

        assert config.github.organization == "other-org"
        assert config.github.token == "ghp_token"
        assert config.notifier.username == "Provisioner"
        assert config.logging_level == logging.DEBUG

    def test_yaml_roles_and_mock_users(self, config_file):
        path = config_file({
            "mock_mode": True,
            "roles": [{"name": "Ops", "role_id": 1, "team_id": 77}],
            "mock_users": [{"user_id": 5, "first_name": "Op", "handle": "op", "role_ids": [1]}],
        })

        config = load_config(path, environ={})

        assert config.mock_mode is True
        assert [(r.name, r.team_id) for r in config.roles] == [("Ops", 77)]
        assert config.mock_users[0].handle == "op"

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(path, environ=LIVE_ENV)

        assert config.github.organization == "acme"

    def test_config_is_immutable(self):
        config = load_config(environ=LIVE_ENV)

        with pytest.raises(ValidationError):
            config.mock_mode = True

    def test_unknown_log_level_falls_back_to_info(self):
        assert EngineConfig(log_level="chatty").logging_level == logging.INFO


class TestRoleDefinitions:
    """Test cases for the packaged role definitions."""

    def test_default_roles(self):
        roles = load_role_definitions()

        assert [(r["name"], r["role_id"]) for r in roles] == [
            ("Developer", 258872),
            ("QA", 258878),
            ("SA", 258880),
            ("PM", 258875),
        ]
        assert roles[0]["team_env"] == "GITHUB_DEV_TEAMID"


class TestConfigurationError:
    """Test cases for ConfigurationError."""

    def test_missing_message(self):
        error = ConfigurationError.missing(["A", "B"])
        assert str(error) == "Missing required configuration: A, B"
