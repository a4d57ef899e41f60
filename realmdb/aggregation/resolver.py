##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Connection group resolution.

The connection serving a realm is the nearest one declared along the path from the
realm up to the root ("nearest wins"); if none is declared, the realm has no
connection. Realms resolving to the same connection instance form one connection
group, which owns the union of its members' models and migration directories.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from realmdb.connections.database_connection import DatabaseConnection
from realmdb.host.realm import Realm


if TYPE_CHECKING:
    from realmdb.aggregation.collector import Collector


LOG = logging.getLogger(__name__)

NO_CONNECTION = "none"


@dataclass(eq=False)
class ConnectionGroup:
    """
    The realms sharing one resolved connection.

    Attributes:
        connection: The shared connection, or None for realms without one.
        realms: Member realms, in registration order.
        migration_dirs: `(realm, directory)` pairs contributed by members, in registration order.
        model_names: Logical names of the models owned by members, in registration order.
    """

    connection: Optional[DatabaseConnection]
    realms: List[Realm] = field(default_factory=list)
    migration_dirs: List[Tuple[Realm, str]] = field(default_factory=list)
    model_names: List[str] = field(default_factory=list)

    @property
    def key(self):
        """The identity of the connection, or `NO_CONNECTION`."""
        return NO_CONNECTION if self.connection is None else id(self.connection)

    def describe(self) -> str:
        """A short description of the group's connection."""
        return "no connection" if self.connection is None else self.connection.describe()


class ConnectionGroupResolver:
    """
    Resolves connections per realm and partitions contributing realms into groups.

    Per-realm results are memoized. Declaring a connection during registration
    clears the memo; once the collector is frozen the groups are computed once and
    reused.

    Methods:
        resolve: The connection serving a realm.
        groups: The connection groups, ordered by their first registered member.
        reset: Forget memoized results.
    """

    def __init__(self, collector: "Collector"):
        self._collector = collector
        self._memo: Dict[Realm, Optional[DatabaseConnection]] = {}
        self._groups: Optional[List[ConnectionGroup]] = None

    def reset(self):
        """
        Forget memoized results.
        """
        self._memo.clear()
        self._groups = None

    def resolve(self, realm: Realm) -> Optional[DatabaseConnection]:
        """
        Find the connection serving `realm`.

        Args:
            realm: The realm asking.

        Returns:
            The nearest connection declared at the realm or an ancestor, or None.
        """
        if realm in self._memo:
            return self._memo[realm]

        connection = None
        for ancestor in realm.lineage():
            state = self._collector.states.get(ancestor)
            if state is not None and state.connection is not None:
                connection = state.connection
                break

        self._memo[realm] = connection
        return connection

    def groups(self) -> List[ConnectionGroup]:
        """
        Partition every contributing realm into connection groups.

        Returns:
            The groups, ordered by the registration order of their first member.
        """
        if self._groups is not None:
            return self._groups

        groups: Dict[object, ConnectionGroup] = {}
        for realm, state in self._collector.states.items():
            connection = self.resolve(realm)
            key = NO_CONNECTION if connection is None else id(connection)
            group = groups.get(key)
            if group is None:
                group = groups[key] = ConnectionGroup(connection)
            group.realms.append(realm)
            group.migration_dirs.extend((realm, directory) for directory in state.migration_dirs)
            group.model_names.extend(self._collector.registry.names_owned_by(realm))
            LOG.debug(f'Realm "{realm.name}" belongs to the group of {group.describe()}.')

        result = list(groups.values())
        if self._collector.frozen:
            self._groups = result
        return result
