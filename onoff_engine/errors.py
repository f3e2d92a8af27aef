"""
Error types for the OnOff Engine.

Only StructuralError (and ConfigurationError, when the pipeline cannot be
built) escape a batch. The per-event errors are carried inside
ConnectorResult objects and logged by the reconciler.
"""

from typing import Optional


class OnOffEngineError(Exception):
    """Base class for all engine errors."""


class StructuralError(OnOffEngineError):
    """Raised when an inbound batch cannot be parsed."""


class ConfigurationError(OnOffEngineError):
    """Raised when a live pipeline is missing required credentials."""

    @classmethod
    def missing(cls, names) -> "ConfigurationError":
        return cls(f"Missing required configuration: {', '.join(names)}")


class ResolutionError(OnOffEngineError):
    """Identity provider lookup failed for one user."""

    def __init__(self, message: str, user_id: Optional[int] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.user_id = user_id
        self.status_code = status_code


class MutationError(OnOffEngineError):
    """Team membership change failed on the collaboration platform."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotificationError(OnOffEngineError):
    """Chat webhook delivery failed."""
