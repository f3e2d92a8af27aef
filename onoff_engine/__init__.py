"""
OnOff Engine

Identity lifecycle automation: turns OneLogin user lifecycle webhooks
(created, deactivated, suspended, unlicensed) into GitHub team membership
grants and revocations, announcing every change on a Mattermost channel.
"""

__version__ = "1.0.0"
__author__ = "OnOff Engine Team"
__email__ = "team@example.com"

from .config import EngineConfig, load_config
from .engine.role_mapper import RoleTeamMap, select_team
from .workflows.dispatcher import EventDispatcher, build_dispatcher
from .workflows.reconciler import AccessReconciler

__all__ = [
    "EngineConfig",
    "load_config",
    "RoleTeamMap",
    "select_team",
    "EventDispatcher",
    "build_dispatcher",
    "AccessReconciler",
]
