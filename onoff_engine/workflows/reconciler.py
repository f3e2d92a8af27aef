"""
Access Reconciler for the OnOff Engine.

Turns a resolved user and a direction into at most one GitHub team
membership change, then tells the chat channel what was attempted.
"""

import logging
from typing import Optional

from ..connectors.base_connector import (
    ConnectorResult,
    IdentityConnector,
    MembershipConnector,
    NotificationConnector,
)
from ..engine.role_mapper import RoleTeamMap, select_team
from ..errors import MutationError, NotificationError
from ..models import (
    EventClassification,
    EventDirection,
    MembershipAction,
    OutcomeStatus,
    ReconcileOutcome,
    UserRecord,
)
from .helpers import format_notification

logger = logging.getLogger(__name__)


class AccessReconciler:
    """
    Applies grant/revoke decisions for single users.

    Resolution, mutation and notification failures stop at this class:
    they are logged and recorded on the outcome, never raised.
    """

    def __init__(self, resolver: IdentityConnector, mutator: MembershipConnector,
                 notifier: NotificationConnector, role_map: RoleTeamMap):
        self.resolver = resolver
        self.mutator = mutator
        self.notifier = notifier
        self.role_map = role_map

    def process(self, user_id: int, direction: EventDirection,
                outcome: Optional[ReconcileOutcome] = None) -> ReconcileOutcome:
        """
        Resolve a user by id and reconcile their team membership.

        Args:
            user_id: Identity provider user id
            direction: Grant or revoke
            outcome: Outcome record to fill in; a new one is created if omitted

        Returns:
            The filled-in outcome
        """
        outcome = outcome or _new_outcome(user_id, direction)

        result = self.resolver.get_user(user_id)
        if not result.success:
            logger.error(f"Could not resolve user {user_id}, skipping event: {result.message}")
            outcome.status = OutcomeStatus.RESOLUTION_FAILED
            outcome.error = result.message
            return outcome

        return self.reconcile(result.data, direction, outcome)

    def reconcile(self, user: UserRecord, direction: EventDirection,
                  outcome: Optional[ReconcileOutcome] = None) -> ReconcileOutcome:
        """
        Reconcile one resolved user.

        Args:
            user: Resolved user record
            direction: Grant or revoke
            outcome: Outcome record to fill in; a new one is created if omitted

        Returns:
            The filled-in outcome
        """
        outcome = outcome or _new_outcome(user.user_id, direction)

        if not user.has_handle:
            logger.info(f"No GitHub handle for user {user.user_id} ({user.display_name}), nothing to do")
            outcome.status = OutcomeStatus.NO_HANDLE
            return outcome

        entry = select_team(user.role_ids, self.role_map)
        if entry is None:
            logger.info(f"No mapped role for user {user.user_id} (roles {user.role_ids}), nothing to do")
            outcome.status = OutcomeStatus.NO_TEAM
            return outcome

        action = MembershipAction(
            direction=direction,
            team_id=entry.team_id,
            team_name=entry.name,
            handle=user.external_handle.strip(),
            actor_name=user.display_name,
        )
        outcome.action = action

        logger.info(f"Will {direction.value} {action.handle} on GitHub {action.team_label}")
        mutation = self._apply(action)
        if mutation.success:
            outcome.status = OutcomeStatus.APPLIED
        else:
            status = getattr(mutation.error, "status_code", None)
            logger.error(
                f"Membership change failed for {action.handle}"
                f"{f' (HTTP {status})' if status else ''}: {mutation.message}"
            )
            outcome.status = OutcomeStatus.MUTATION_FAILED
            outcome.error = mutation.message

        outcome.notified = self._notify(action, mutation)
        return outcome

    def _apply(self, action: MembershipAction) -> ConnectorResult:
        # Every attempted change is announced, so nothing raised by the mutator escapes
        try:
            return self.mutator.apply(action)
        except Exception as e:
            logger.exception(f"Unexpected error changing membership for {action.handle}")
            return ConnectorResult.failed(MutationError(f"Unexpected error: {e}"))

    def _notify(self, action: MembershipAction, mutation: ConnectorResult) -> bool:
        message = format_notification(action, mutation)
        try:
            delivery = self.notifier.notify(message)
        except Exception as e:
            logger.exception(f"Unexpected error notifying about {action.handle}")
            delivery = ConnectorResult.failed(NotificationError(str(e)))
        if not delivery.success:
            logger.error(f"Notification for {action.handle} was not delivered: {delivery.message}")
        return delivery.success


def _new_outcome(user_id: int, direction: EventDirection) -> ReconcileOutcome:
    classification = (
        EventClassification.ONBOARD if direction == EventDirection.GRANT else EventClassification.OFFBOARD
    )
    return ReconcileOutcome(
        index=0,
        user_id=user_id,
        event_type_id=0,
        classification=classification,
        status=OutcomeStatus.ERROR,
    )
