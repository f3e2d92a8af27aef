"""
Base Connector Classes for the OnOff Engine.

This module provides the foundation for the three external collaborators
(identity provider, collaboration platform, chat webhook) with both real
API implementations and in-memory mock backends.

Connector operations never raise for expected failures. They return a
ConnectorResult whose ``error`` holds the typed engine error, leaving the
caller to decide how loudly to log it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from ..errors import OnOffEngineError
from ..models import EventDirection, MembershipAction

logger = logging.getLogger(__name__)


class ConnectorResult:
    """Result of a connector operation."""

    def __init__(self, success: bool, message: str = "", data: Optional[Any] = None,
                 error: Optional[OnOffEngineError] = None):
        self.success = success
        self.message = message
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, message: str = "", data: Optional[Any] = None) -> "ConnectorResult":
        return cls(True, message, data)

    @classmethod
    def failed(cls, error: OnOffEngineError) -> "ConnectorResult":
        return cls(False, str(error), error=error)

    def __bool__(self):
        return self.success

    def __str__(self):
        return f"{'✓' if self.success else '✗'} {self.message}"

    def __repr__(self):
        return f"ConnectorResult(success={self.success!r}, message={self.message!r})"


class BaseConnector(ABC):
    """
    Abstract base class for all system connectors.

    Each connector wraps one external system and is constructed with the
    settings section it needs.
    """

    def __init__(self, settings: Optional[Any] = None, mock_mode: bool = False):
        """
        Initialize the connector.

        Args:
            settings: Settings model with credentials and endpoints
            mock_mode: If True, the connector talks to an in-memory backend
        """
        self.settings = settings
        self.mock_mode = mock_mode
        self.system_name = self.__class__.__name__.replace('MockConnector', '').replace('Connector', '').lower()

        logger.info(f"Initialized {self.__class__.__name__} (mock_mode={mock_mode})")

    def validate_config(self) -> List[str]:
        """
        Check that the connector has what it needs to make calls.

        Returns:
            Names of missing settings, empty when the connector is usable
        """
        return []

    def get_system_name(self) -> str:
        """Get the name of the system this connector manages."""
        return self.system_name

    def is_mock_mode(self) -> bool:
        """Check if this connector is running in mock mode."""
        return self.mock_mode


class IdentityConnector(BaseConnector):
    """Resolves identity provider users."""

    @abstractmethod
    def get_user(self, user_id: int) -> ConnectorResult:
        """
        Fetch a user's attributes.

        Args:
            user_id: Numeric identity provider user id

        Returns:
            ConnectorResult with a UserRecord as data, or a ResolutionError
        """


class MembershipConnector(BaseConnector):
    """Adds and removes handles from numbered teams."""

    @abstractmethod
    def add_to_team(self, team_id: int, handle: str) -> ConnectorResult:
        """
        Add a handle to a team.

        Returns:
            ConnectorResult, failing with a MutationError
        """

    @abstractmethod
    def remove_from_team(self, team_id: int, handle: str) -> ConnectorResult:
        """
        Remove a handle from a team.

        Returns:
            ConnectorResult, failing with a MutationError
        """

    def apply(self, action: MembershipAction) -> ConnectorResult:
        """Apply a membership action in its direction."""
        if action.direction == EventDirection.GRANT:
            return self.add_to_team(action.team_id, action.handle)
        return self.remove_from_team(action.team_id, action.handle)


class NotificationConnector(BaseConnector):
    """Posts human-readable messages to a chat channel."""

    @abstractmethod
    def notify(self, message: str) -> ConnectorResult:
        """
        Post a message.

        Returns:
            ConnectorResult, failing with a NotificationError
        """


class MockConnector(BaseConnector):
    """
    Base class for mock/simulated connectors.

    Records every call so tests and dry runs can inspect what would have
    been sent to the real system.
    """

    def __init__(self, settings: Optional[Any] = None):
        super().__init__(settings, mock_mode=True)
        self.calls: List[Tuple[Any, ...]] = []

    def _record(self, *call: Any):
        self.calls.append(call)
