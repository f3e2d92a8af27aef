"""
Connectors Package for the OnOff Engine.

This package provides integrations with OneLogin (identity provider),
GitHub (team membership) and Mattermost (notifications).
"""

from typing import Type

from .base_connector import (
    BaseConnector,
    ConnectorResult,
    IdentityConnector,
    MembershipConnector,
    MockConnector,
    NotificationConnector,
)
from .github_connector import GitHubConnector, GitHubMockConnector
from .mattermost_connector import MattermostConnector, MattermostMockConnector
from .onelogin_connector import OneLoginConnector, OneLoginMockConnector

_CONNECTORS = {
    "onelogin": (OneLoginConnector, OneLoginMockConnector),
    "github": (GitHubConnector, GitHubMockConnector),
    "mattermost": (MattermostConnector, MattermostMockConnector),
}


def get_connector_class(system: str, mock: bool = False) -> Type[BaseConnector]:
    """Get the connector class for a system, real or mock."""
    try:
        real, fake = _CONNECTORS[system]
    except KeyError:
        raise ValueError(f"Unknown system: {system}") from None
    return fake if mock else real


__all__ = [
    "BaseConnector",
    "MockConnector",
    "ConnectorResult",
    "IdentityConnector",
    "MembershipConnector",
    "NotificationConnector",
    "GitHubConnector",
    "GitHubMockConnector",
    "MattermostConnector",
    "MattermostMockConnector",
    "OneLoginConnector",
    "OneLoginMockConnector",
    "get_connector_class",
]
