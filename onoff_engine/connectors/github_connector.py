"""
GitHub Connector for the OnOff Engine.

Provides team membership management for GitHub organizations. Teams are
addressed by their numeric id, members by their GitHub login.
"""

import logging
from typing import Dict, Optional, Set

import requests
from github import Auth, Github, GithubException
from github.Organization import Organization

from ..config import GitHubSettings
from ..errors import MutationError
from .base_connector import ConnectorResult, MembershipConnector, MockConnector

logger = logging.getLogger(__name__)


class GitHubConnector(MembershipConnector):
    """GitHub connector for adding and removing team members."""

    def __init__(self, settings: Optional[GitHubSettings] = None, github: Optional[Github] = None):
        super().__init__(settings or GitHubSettings(), mock_mode=False)
        self._github = github
        self._org: Optional[Organization] = None

    def validate_config(self):
        missing = []
        if not self.settings.token:
            missing.append("GITHUB_TOKEN")
        if not self.settings.organization:
            missing.append("GITHUB_ORG")
        return missing

    @property
    def github(self) -> Github:
        if self._github is None:
            self._github = Github(auth=Auth.Token(self.settings.token), base_url=self.settings.base_url)
        return self._github

    def _get_org(self) -> Organization:
        if self._org is None:
            self._org = self.github.get_organization(self.settings.organization)
        return self._org

    def add_to_team(self, team_id: int, handle: str) -> ConnectorResult:
        """Add a GitHub user to a team as a regular member."""
        try:
            team = self._get_org().get_team(team_id)
            user = self.github.get_user(handle)
            team.add_membership(user, role="member")

            logger.info(f"Added {handle} to GitHub team {team_id}")
            return ConnectorResult.ok(f"Added {handle} to team {team_id}")

        except GithubException as e:
            error = MutationError(f"Failed to add {handle} to team {team_id}: {e}", status_code=e.status)
            logger.error(str(error))
            return ConnectorResult.failed(error)
        except requests.RequestException as e:
            error = MutationError(f"Failed to reach GitHub to add {handle} to team {team_id}: {e}")
            logger.error(str(error))
            return ConnectorResult.failed(error)

    def remove_from_team(self, team_id: int, handle: str) -> ConnectorResult:
        """Remove a GitHub user from a team."""
        try:
            team = self._get_org().get_team(team_id)
            user = self.github.get_user(handle)
            team.remove_membership(user)

            logger.info(f"Removed {handle} from GitHub team {team_id}")
            return ConnectorResult.ok(f"Removed {handle} from team {team_id}")

        except GithubException as e:
            error = MutationError(f"Failed to remove {handle} from team {team_id}: {e}", status_code=e.status)
            logger.error(str(error))
            return ConnectorResult.failed(error)
        except requests.RequestException as e:
            error = MutationError(f"Failed to reach GitHub to remove {handle} from team {team_id}: {e}")
            logger.error(str(error))
            return ConnectorResult.failed(error)


class GitHubMockConnector(MockConnector, MembershipConnector):
    """Mock implementation of GitHub connector for testing."""

    def __init__(self, settings: Optional[GitHubSettings] = None):
        super().__init__(settings or GitHubSettings())

        # GitHub-specific mock state
        self.teams: Dict[int, Set[str]] = {}  # team_id -> set of logins
        self.unknown_handles: Set[str] = set()

    def add_to_team(self, team_id: int, handle: str) -> ConnectorResult:
        self._record("add_to_team", team_id, handle)
        if handle in self.unknown_handles:
            return ConnectorResult.failed(MutationError(f"Mock GitHub user {handle} not found", status_code=404))

        # Adding an existing member is accepted, as GitHub does
        self.teams.setdefault(team_id, set()).add(handle)
        logger.info(f"Mock added {handle} to team {team_id}")
        return ConnectorResult.ok(f"Added {handle} to team {team_id}")

    def remove_from_team(self, team_id: int, handle: str) -> ConnectorResult:
        self._record("remove_from_team", team_id, handle)
        members = self.teams.get(team_id, set())
        if handle not in members:
            return ConnectorResult.failed(
                MutationError(f"Mock GitHub user {handle} is not a member of team {team_id}", status_code=404)
            )

        members.discard(handle)
        logger.info(f"Mock removed {handle} from team {team_id}")
        return ConnectorResult.ok(f"Removed {handle} from team {team_id}")
