"""
Role Mapping Package.

This package provides the static role-to-team table and the first-match
role selection used when reconciling access.
"""

from .role_mapper import RoleTeamMap, select_team

__all__ = [
    "RoleTeamMap",
    "select_team",
]
