"""
Tests for the EventDispatcher.

Covers event classification, batch ordering and per-event failure
isolation.
"""

import pytest

from onoff_engine.config import EngineConfig, GitHubSettings, MockUser, NotifierSettings, OneLoginSettings
from onoff_engine.connectors import GitHubMockConnector, OneLoginMockConnector
from onoff_engine.errors import ConfigurationError, StructuralError
from onoff_engine.models import (
    EventClassification,
    EventDirection,
    EventTypeCode,
    LifecycleEvent,
    OutcomeStatus,
)
from onoff_engine.workflows import (
    AccessReconciler,
    EventDispatcher,
    build_dispatcher,
    classify_event,
    direction_for,
)

OFFBOARD_CODES = [EventTypeCode.DEACTIVATED_USER, EventTypeCode.SUSPENDED_USER, EventTypeCode.USER_UNLICENSED]


class TestClassification:
    """Test cases for event type classification."""

    def test_creation_is_onboard(self):
        assert classify_event(13) == EventClassification.ONBOARD
        assert direction_for(EventClassification.ONBOARD) == EventDirection.GRANT

    @pytest.mark.parametrize("code", [15, 21, 223])
    def test_offboard_codes(self, code):
        assert classify_event(code) == EventClassification.OFFBOARD
        assert direction_for(classify_event(code)) == EventDirection.REVOKE

    @pytest.mark.parametrize("code", [0, 1, 14, 16, 22, 222, 224, -13])
    def test_other_codes_are_ignored(self, code):
        assert classify_event(code) == EventClassification.IGNORE
        assert direction_for(EventClassification.IGNORE) is None


class TestEventDispatcher:
    """Test cases for EventDispatcher."""

    @pytest.fixture
    def mock_reconciler(self, mocker):
        return mocker.Mock()

    def test_onboard_event_grants(self, mock_reconciler):
        EventDispatcher(mock_reconciler).dispatch([LifecycleEvent(event_type_id=13, user_id=42)])

        mock_reconciler.process.assert_called_once()
        user_id, direction, _ = mock_reconciler.process.call_args.args
        assert (user_id, direction) == (42, EventDirection.GRANT)

    @pytest.mark.parametrize("code", OFFBOARD_CODES)
    def test_offboard_codes_behave_identically(self, resolver, mutator, notifier, role_map, code):
        """Deactivation, suspension and unlicensing all revoke."""
        mutator.teams[1002] = {"octocat"}
        dispatcher = EventDispatcher(AccessReconciler(resolver, mutator, notifier, role_map))

        report = dispatcher.dispatch([LifecycleEvent(event_type_id=int(code), user_id=42)])

        assert report.outcomes[0].status == OutcomeStatus.APPLIED
        assert mutator.calls == [("remove_from_team", 1002, "octocat")]
        assert len(notifier.messages) == 1

    def test_unrecognised_code_touches_nothing(self, dispatcher, resolver, mutator, notifier):
        report = dispatcher.dispatch([LifecycleEvent(event_type_id=5, user_id=7)])

        assert report.outcomes[0].status == OutcomeStatus.IGNORED
        assert resolver.calls == []
        assert mutator.calls == []
        assert notifier.calls == []

    def test_event_without_user_id_is_skipped(self, dispatcher, resolver):
        report = dispatcher.dispatch([LifecycleEvent(event_type_id=13)])

        assert report.outcomes[0].status == OutcomeStatus.SKIPPED_NO_USER
        assert resolver.calls == []

    def test_events_processed_in_order(self, dispatcher, resolver):
        events = [LifecycleEvent(event_type_id=13, user_id=uid) for uid in (43, 42, 44)]

        report = dispatcher.dispatch(events)

        assert [c[1] for c in resolver.calls] == [43, 42, 44]
        assert [o.index for o in report.outcomes] == [0, 1, 2]

    def test_middle_resolution_failure_does_not_stop_batch(self, dispatcher, mutator, notifier):
        events = [
            LifecycleEvent(event_type_id=13, user_id=42),
            LifecycleEvent(event_type_id=13, user_id=999),
            LifecycleEvent(event_type_id=13, user_id=43),
        ]

        report = dispatcher.dispatch(events)

        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.APPLIED, OutcomeStatus.RESOLUTION_FAILED, OutcomeStatus.APPLIED,
        ]
        assert [c[2] for c in mutator.calls] == ["octocat", "hubot"]
        assert len(notifier.messages) == 2

    def test_unexpected_exception_is_contained(self, mock_reconciler):
        mock_reconciler.process.side_effect = [RuntimeError("boom"), None]
        dispatcher = EventDispatcher(mock_reconciler)

        report = dispatcher.dispatch([
            LifecycleEvent(event_type_id=13, user_id=1),
            LifecycleEvent(event_type_id=15, user_id=2),
        ])

        assert mock_reconciler.process.call_count == 2
        assert report.outcomes[0].status == OutcomeStatus.ERROR
        assert report.outcomes[0].error == "boom"

    def test_handle_batch_rejects_malformed_payload(self, mock_reconciler):
        with pytest.raises(StructuralError):
            EventDispatcher(mock_reconciler).handle_batch(b'{"event_type_id": 13}')
        mock_reconciler.process.assert_not_called()

    def test_report_counts(self, dispatcher):
        report = dispatcher.handle_batch('[{"event_type_id": 13, "user_id": 42}, {"event_type_id": 1}]')

        assert report.total == 2
        assert report.counts() == {"applied": 1, "ignored": 1}


class TestBuildDispatcher:
    """Test cases for assembling the pipeline from configuration."""

    def test_live_mode_requires_credentials(self):
        config = EngineConfig(github=GitHubSettings(token="t"))

        with pytest.raises(ConfigurationError) as exc_info:
            build_dispatcher(config)

        message = str(exc_info.value)
        assert "ONELOGIN_CLIENT" in message
        assert "MATTERMOST_HOOK" in message
        assert "GITHUB_TOKEN" not in message

    def test_live_mode_with_credentials(self):
        config = EngineConfig(
            onelogin=OneLoginSettings(client_id="id", client_secret="secret", subdomain="acme"),
            github=GitHubSettings(token="token", organization="acme"),
            notifier=NotifierSettings(webhook_url="https://chat.example.com/hooks/abc"),
        )

        dispatcher = build_dispatcher(config)

        assert dispatcher.reconciler.resolver.mock_mode is False
        assert dispatcher.reconciler.mutator.get_system_name() == "github"

    def test_mock_mode_seeds_users(self):
        config = EngineConfig(
            mock_mode=True,
            mock_users=[MockUser(user_id=42, handle="octocat", role_ids=[258878])],
        )

        dispatcher = build_dispatcher(config)

        assert isinstance(dispatcher.reconciler.resolver, OneLoginMockConnector)
        assert isinstance(dispatcher.reconciler.mutator, GitHubMockConnector)
        assert 42 in dispatcher.reconciler.resolver.users
