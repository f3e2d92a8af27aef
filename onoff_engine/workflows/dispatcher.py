"""
Event Dispatcher for the OnOff Engine.

Routes each lifecycle event of a batch to the access reconciler as an
onboarding (grant) or offboarding (revoke) request. Events are handled
one after another in arrival order, and a failure in one event never
stops the rest of the batch.
"""

import logging
from typing import Any, Iterable, List, Optional, Union

from ..config import EngineConfig
from ..connectors import get_connector_class
from ..connectors.onelogin_connector import OneLoginMockConnector
from ..engine.role_mapper import RoleTeamMap
from ..errors import ConfigurationError
from ..ingestion import parse_event_batch
from ..models import (
    BatchReport,
    EventClassification,
    LifecycleEvent,
    OutcomeStatus,
    ReconcileOutcome,
)
from .helpers import classify_event, direction_for
from .reconciler import AccessReconciler

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Dispatches lifecycle event batches."""

    def __init__(self, reconciler: AccessReconciler):
        self.reconciler = reconciler

    def handle_batch(self, body: Union[str, bytes, List[Any], None]) -> BatchReport:
        """
        Parse and dispatch a raw batch.

        Raises:
            StructuralError: If the batch cannot be parsed; nothing is processed
        """
        events = parse_event_batch(body)
        return self.dispatch(events)

    def dispatch(self, events: Iterable[LifecycleEvent]) -> BatchReport:
        """
        Process every event in order.

        Args:
            events: Parsed lifecycle events

        Returns:
            BatchReport with one outcome per event
        """
        report = BatchReport()
        for index, event in enumerate(events):
            report.outcomes.append(self.dispatch_event(event, index))

        logger.info(f"Dispatched batch of {report.total} events: {report.counts()}")
        return report

    def dispatch_event(self, event: LifecycleEvent, index: int = 0) -> ReconcileOutcome:
        """Classify one event and hand it to the reconciler."""
        classification = classify_event(event.event_type_id)
        outcome = ReconcileOutcome(
            index=index,
            user_id=event.user_id,
            event_type_id=event.event_type_id,
            classification=classification,
            status=OutcomeStatus.IGNORED,
        )

        if classification == EventClassification.IGNORE:
            logger.info(f"Event type {event.event_type_id} not needed, ignoring")
            return outcome

        if not event.user_id:
            logger.warning(f"Event {index} ({event.event_type_id}) has no user id, skipping")
            outcome.status = OutcomeStatus.SKIPPED_NO_USER
            return outcome

        direction = direction_for(classification)
        logger.info(f"Event {index}: {classification.value} user {event.user_id}")

        try:
            self.reconciler.process(event.user_id, direction, outcome)
        except Exception as e:
            logger.exception(f"Unexpected error processing event {index} for user {event.user_id}")
            outcome.status = OutcomeStatus.ERROR
            outcome.error = str(e)

        return outcome


def build_dispatcher(config: EngineConfig, role_map: Optional[RoleTeamMap] = None) -> EventDispatcher:
    """
    Assemble the dispatcher and its collaborators from configuration.

    Args:
        config: Engine configuration
        role_map: Pre-built role-team map, built from config when omitted

    Returns:
        Ready EventDispatcher

    Raises:
        ConfigurationError: If live mode is selected and credentials are missing
    """
    if not config.mock_mode:
        missing = config.missing_credentials()
        if missing:
            raise ConfigurationError.missing(missing)

    resolver = get_connector_class("onelogin", mock=config.mock_mode)(config.onelogin)
    mutator = get_connector_class("github", mock=config.mock_mode)(config.github)
    notifier = get_connector_class("mattermost", mock=config.mock_mode)(config.notifier)

    if isinstance(resolver, OneLoginMockConnector):
        resolver.seed(config.mock_users)

    reconciler = AccessReconciler(
        resolver=resolver,
        mutator=mutator,
        notifier=notifier,
        role_map=role_map if role_map is not None else RoleTeamMap.from_config(config),
    )
    return EventDispatcher(reconciler)
