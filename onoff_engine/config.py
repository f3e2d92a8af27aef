"""
Configuration loading for the OnOff Engine.

Settings come from environment variables (the way the service is deployed)
and may be overlaid by a YAML file. The result is an immutable EngineConfig
that is built once per process and handed to every component.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_ROLE_MAPPINGS = Path(__file__).parent / "engine" / "role_mappings.yaml"
DEFAULT_BOT_USERNAME = "OnOffBoardBot"
DEFAULT_HANDLE_ATTRIBUTE = "GH"

_TRUTHY = {"1", "true", "yes", "on"}


class OneLoginSettings(BaseModel):
    """Identity provider credentials."""
    model_config = ConfigDict(frozen=True)

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    subdomain: Optional[str] = None
    handle_attribute: str = DEFAULT_HANDLE_ATTRIBUTE
    timeout: float = 10.0


class GitHubSettings(BaseModel):
    """Collaboration platform credentials."""
    model_config = ConfigDict(frozen=True)

    token: Optional[str] = None
    organization: Optional[str] = None
    base_url: str = "https://api.github.com"


class NotifierSettings(BaseModel):
    """Chat webhook settings."""
    model_config = ConfigDict(frozen=True)

    webhook_url: Optional[str] = None
    username: str = DEFAULT_BOT_USERNAME
    timeout: int = 10


class RoleDefinition(BaseModel):
    """
    A supported identity provider role.

    The team id is either given directly or read from the environment
    variable named by ``team_env``. A role without a usable team id is
    left out of the role-team map.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    role_id: int
    team_env: Optional[str] = None
    team_id: Optional[int] = None


class MockUser(BaseModel):
    """Identity seeded into the mock identity provider."""
    user_id: int
    first_name: str = ""
    last_name: str = ""
    handle: Optional[str] = None
    role_ids: List[int] = Field(default_factory=list)


class EngineConfig(BaseModel):
    """Process-wide, read-only configuration."""
    model_config = ConfigDict(frozen=True)

    onelogin: OneLoginSettings = Field(default_factory=OneLoginSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    notifier: NotifierSettings = Field(default_factory=NotifierSettings)
    roles: List[RoleDefinition] = Field(default_factory=list)
    mock_mode: bool = False
    mock_users: List[MockUser] = Field(default_factory=list)
    log_level: str = "INFO"

    def missing_credentials(self) -> List[str]:
        """Names of required settings that are absent for live mode."""
        required = {
            "ONELOGIN_CLIENT": self.onelogin.client_id,
            "ONELOGIN_CLIENTSECRET": self.onelogin.client_secret,
            "ONELOGIN_SUBDOMAIN": self.onelogin.subdomain,
            "GITHUB_TOKEN": self.github.token,
            "GITHUB_ORG": self.github.organization,
            "MATTERMOST_HOOK": self.notifier.webhook_url,
        }
        return [name for name, value in required.items() if not value]

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def load_role_definitions(path: Union[str, Path] = DEFAULT_ROLE_MAPPINGS) -> List[Dict[str, Any]]:
    """Read the list of role definitions from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return list(data.get("roles", []))


def _resolve_team_ids(roles: List[Dict[str, Any]], environ: Mapping[str, str]) -> List[RoleDefinition]:
    resolved = []
    for role in roles:
        role = dict(role)
        if role.get("team_id") in (None, "") and role.get("team_env"):
            raw = environ.get(role["team_env"], "").strip()
            if raw:
                try:
                    role["team_id"] = int(raw)
                except ValueError:
                    logger.warning(f"Ignoring non-numeric team id {raw!r} in {role['team_env']}")
                    role["team_id"] = None
            else:
                role["team_id"] = None
        resolved.append(RoleDefinition(**role))
    return resolved


def load_config(config_path: Optional[Union[str, Path]] = None,
                environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """
    Build the engine configuration.

    Args:
        config_path: Optional YAML file whose sections override the environment
        environ: Environment mapping, defaults to os.environ

    Returns:
        EngineConfig ready to be passed to the pipeline
    """
    env = os.environ if environ is None else environ

    config: Dict[str, Any] = {
        "onelogin": {
            "client_id": env.get("ONELOGIN_CLIENT") or None,
            "client_secret": env.get("ONELOGIN_CLIENTSECRET") or None,
            "subdomain": env.get("ONELOGIN_SUBDOMAIN") or None,
            "handle_attribute": env.get("ONELOGIN_HANDLE_ATTRIBUTE") or DEFAULT_HANDLE_ATTRIBUTE,
        },
        "github": {
            "token": env.get("GITHUB_TOKEN") or None,
            "organization": env.get("GITHUB_ORG") or None,
            "base_url": env.get("GITHUB_API_URL") or "https://api.github.com",
        },
        "notifier": {
            "webhook_url": env.get("MATTERMOST_HOOK") or None,
            "username": env.get("NOTIFIER_USERNAME") or DEFAULT_BOT_USERNAME,
        },
        "mock_mode": env.get("ONOFF_MOCK_MODE", "").strip().lower() in _TRUTHY,
        "log_level": env.get("LOG_LEVEL", "INFO"),
    }

    file_config: Dict[str, Any] = {}
    if config_path:
        path = Path(config_path)
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration overrides from {path}")

    for section in ("onelogin", "github", "notifier"):
        config[section].update(file_config.get(section) or {})
    for key in ("mock_mode", "mock_users", "log_level"):
        if key in file_config:
            config[key] = file_config[key]

    roles = file_config.get("roles")
    if roles is None:
        roles = load_role_definitions()
    config["roles"] = _resolve_team_ids(roles, env)

    return EngineConfig(**config)
