"""
Shared fixtures for the OnOff Engine tests.
"""

import pytest

from onoff_engine.connectors import GitHubMockConnector, MattermostMockConnector, OneLoginMockConnector
from onoff_engine.engine import RoleTeamMap
from onoff_engine.models import RoleTeamEntry, UserRecord
from onoff_engine.workflows import AccessReconciler, EventDispatcher

DEV_ROLE = 258872
QA_ROLE = 258878
SA_ROLE = 258880
PM_ROLE = 258875

DEV_TEAM = 1001
QA_TEAM = 1002
PM_TEAM = 1004


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests across components")


@pytest.fixture
def role_map():
    """Role-team map with Developer, QA and PM teams configured (no SA team)."""
    return RoleTeamMap([
        RoleTeamEntry(role_id=DEV_ROLE, team_id=DEV_TEAM, name="Developer"),
        RoleTeamEntry(role_id=QA_ROLE, team_id=QA_TEAM, name="QA"),
        RoleTeamEntry(role_id=PM_ROLE, team_id=PM_TEAM, name="PM"),
    ])


@pytest.fixture
def resolver():
    resolver = OneLoginMockConnector()
    resolver.add_user(UserRecord(
        user_id=42, first_name="Mona", last_name="Lisa",
        external_handle="octocat", role_ids=[QA_ROLE, PM_ROLE],
    ))
    resolver.add_user(UserRecord(
        user_id=43, first_name="Hubot", last_name="Robot",
        external_handle="hubot", role_ids=[DEV_ROLE],
    ))
    resolver.add_user(UserRecord(
        user_id=44, first_name="No", last_name="Handle",
        external_handle=None, role_ids=[DEV_ROLE, QA_ROLE],
    ))
    resolver.add_user(UserRecord(
        user_id=45, first_name="Sam", last_name="Admin",
        external_handle="samadmin", role_ids=[SA_ROLE, 999],
    ))
    return resolver


@pytest.fixture
def mutator():
    return GitHubMockConnector()


@pytest.fixture
def notifier():
    return MattermostMockConnector()


@pytest.fixture
def reconciler(resolver, mutator, notifier, role_map):
    return AccessReconciler(resolver=resolver, mutator=mutator, notifier=notifier, role_map=role_map)


@pytest.fixture
def dispatcher(reconciler):
    return EventDispatcher(reconciler)
