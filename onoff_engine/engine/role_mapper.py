"""
Role Mapper for the OnOff Engine.

Holds the static role-to-team table built from configuration and
provides the first-match role selection used by the reconciler.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ..config import EngineConfig
from ..errors import ConfigurationError
from ..models import RoleTeamEntry

logger = logging.getLogger(__name__)


class RoleTeamMap:
    """
    Read-only mapping of identity provider role ids to GitHub teams.

    A role id maps to exactly one team or is absent. The map is built once
    and shared by every batch; nothing mutates it afterwards.
    """

    def __init__(self, entries: Iterable[RoleTeamEntry] = ()):
        table: Dict[int, RoleTeamEntry] = {}
        for entry in entries:
            existing = table.get(entry.role_id)
            if existing is not None and existing.team_id != entry.team_id:
                raise ConfigurationError(
                    f"Role {entry.role_id} is mapped to both team {existing.team_id} "
                    f"and team {entry.team_id}"
                )
            table[entry.role_id] = entry
        self._table: Mapping[int, RoleTeamEntry] = MappingProxyType(table)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "RoleTeamMap":
        """Build the map from configured roles, skipping roles without a team id."""
        entries = []
        for role in config.roles:
            if role.team_id is None:
                logger.warning(f"No team id configured for role {role.name} ({role.role_id}), skipping")
                continue
            entries.append(RoleTeamEntry(role_id=role.role_id, team_id=role.team_id, name=role.name))

        role_map = cls(entries)
        logger.info(f"Loaded role-team map with {len(role_map)} roles: {sorted(role_map)}")
        return role_map

    @classmethod
    def from_dict(cls, mapping: Mapping[int, int]) -> "RoleTeamMap":
        """Build an unnamed map from plain role id -> team id pairs."""
        return cls(RoleTeamEntry(role_id=role_id, team_id=team_id) for role_id, team_id in mapping.items())

    def get(self, role_id: int) -> Optional[RoleTeamEntry]:
        return self._table.get(role_id)

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._table

    def __iter__(self) -> Iterator[int]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{e.role_id}->{e.team_id}" for e in self._table.values())
        return f"RoleTeamMap({pairs})"


def select_team(role_ids: Iterable[int], mapping: RoleTeamMap) -> Optional[RoleTeamEntry]:
    """
    Pick the team for the first mapped role in ``role_ids``.

    Roles are scanned in the order the identity provider lists them and the
    scan stops at the first hit; later mapped roles are never considered.

    Args:
        role_ids: Role ids assigned to the user, in provider order
        mapping: Role-team map to consult

    Returns:
        The matching RoleTeamEntry, or None when no role is mapped
    """
    for role_id in role_ids:
        entry = mapping.get(role_id)
        if entry is not None:
            return entry
    return None
