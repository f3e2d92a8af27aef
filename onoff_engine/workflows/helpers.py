"""
Workflow Helper Functions for the OnOff Engine.

Utility functions for classifying lifecycle events and formatting the
messages sent to the notification channel.
"""

from typing import Optional

from ..connectors.base_connector import ConnectorResult
from ..models import EventClassification, EventDirection, EventTypeCode, MembershipAction


ONBOARD_CODES = frozenset({EventTypeCode.CREATED_USER})
OFFBOARD_CODES = frozenset({
    EventTypeCode.DEACTIVATED_USER,
    EventTypeCode.SUSPENDED_USER,
    EventTypeCode.USER_UNLICENSED,
})


def classify_event(event_type_id: int) -> EventClassification:
    """
    Classify an event type code.

    Args:
        event_type_id: OneLogin event type id

    Returns:
        ONBOARD for user creation, OFFBOARD for deactivation, suspension or
        unlicensing, IGNORE for anything else
    """
    if event_type_id in ONBOARD_CODES:
        return EventClassification.ONBOARD
    if event_type_id in OFFBOARD_CODES:
        return EventClassification.OFFBOARD
    return EventClassification.IGNORE


def direction_for(classification: EventClassification) -> Optional[EventDirection]:
    """Map a classification to the membership direction it implies."""
    if classification == EventClassification.ONBOARD:
        return EventDirection.GRANT
    if classification == EventClassification.OFFBOARD:
        return EventDirection.REVOKE
    return None


def format_notification(action: MembershipAction, result: Optional[ConnectorResult] = None) -> str:
    """
    Build the chat message for an attempted membership change.

    Args:
        action: The action that was attempted
        result: Outcome of the mutation; a failure is appended to the text

    Returns:
        Message text
    """
    verb = "added to" if action.direction == EventDirection.GRANT else "removed from"
    message = (
        f"User {action.actor_name} with github handler {action.handle} "
        f"{verb} github team {action.team_label}"
    )
    if result is not None and not result.success:
        message += f" (failed: {result.message})"
    return message
