"""
Core data models for the OnOff Engine.

This module defines the Pydantic models used throughout the system
for identity provider lifecycle events, resolved users, role-team
mappings and the membership actions derived from them.
"""

from enum import Enum, IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class EventTypeCode(IntEnum):
    """OneLogin event type ids that drive onboarding and offboarding."""
    CREATED_USER = 13
    DEACTIVATED_USER = 15
    SUSPENDED_USER = 21
    USER_UNLICENSED = 223


class EventClassification(str, Enum):
    """Outcome of classifying a lifecycle event by its type code."""
    ONBOARD = "onboard"
    OFFBOARD = "offboard"
    IGNORE = "ignore"


class EventDirection(str, Enum):
    """Direction of a membership change on the collaboration platform."""
    GRANT = "grant"
    REVOKE = "revoke"


class OutcomeStatus(str, Enum):
    """Per-event processing status, reported in logs and to in-process callers."""
    IGNORED = "ignored"
    SKIPPED_NO_USER = "skipped_no_user"
    RESOLUTION_FAILED = "resolution_failed"
    NO_HANDLE = "no_handle"
    NO_TEAM = "no_team"
    APPLIED = "applied"
    MUTATION_FAILED = "mutation_failed"
    ERROR = "error"


class LifecycleEvent(BaseModel):
    """
    One record of an incoming OneLogin webhook batch.

    Only the fields needed for dispatch are modelled; the provider sends
    dozens more (actor, app, policy, risk data...) which are ignored.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_type_id: StrictInt = Field(0, description="Lifecycle transition code")
    user_id: StrictInt = Field(0, description="OneLogin id of the affected user")

    @field_validator("event_type_id", "user_id", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        """Missing values arrive as null from some webhook senders."""
        if v is None:
            return 0
        return v


class UserRecord(BaseModel):
    """Snapshot of a user resolved from the identity provider."""
    user_id: int
    first_name: str = ""
    last_name: str = ""
    external_handle: Optional[str] = Field(None, description="GitHub username")
    role_ids: List[int] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_handle(self) -> bool:
        return bool(self.external_handle and self.external_handle.strip())


class RoleTeamEntry(BaseModel):
    """A single role to team binding."""
    model_config = ConfigDict(frozen=True)

    role_id: int
    team_id: int
    name: str = ""

    @property
    def label(self) -> str:
        if self.name:
            return f"{self.name} (team {self.team_id})"
        return f"team {self.team_id}"


class MembershipAction(BaseModel):
    """A single membership mutation derived by the reconciler."""
    model_config = ConfigDict(frozen=True)

    direction: EventDirection
    team_id: int
    handle: str
    actor_name: str
    team_name: str = ""

    @property
    def team_label(self) -> str:
        if self.team_name:
            return f"{self.team_name} (team {self.team_id})"
        return f"team {self.team_id}"


class ReconcileOutcome(BaseModel):
    """What happened to one event of a batch."""
    index: int
    user_id: int
    event_type_id: int
    classification: EventClassification
    status: OutcomeStatus
    action: Optional[MembershipAction] = None
    notified: bool = False
    error: Optional[str] = None


class BatchReport(BaseModel):
    """Summary of a dispatched batch, never exposed over HTTP."""
    outcomes: List[ReconcileOutcome] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def counts(self) -> Dict[str, int]:
        """Number of events per outcome status."""
        counts: Dict[str, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1
        return counts
