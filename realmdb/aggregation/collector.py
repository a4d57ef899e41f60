##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The root-held collector of realm contributions.

One `Collector` exists per realm tree. It is created lazily at the root the first
time any realm contributes, is reachable from every realm through `for_realm`, and
is frozen when the pre-start phase begins. Each contributing realm also gets a
`RealmState` in its `plugins` namespace holding what that realm supplied locally.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from realmdb.aggregation.model_registry import ModelRegistry
from realmdb.aggregation.resolver import ConnectionGroup, ConnectionGroupResolver
from realmdb.config.contribution import ContributionOptions, parse_contribution
from realmdb.connections.connection_factory import connect
from realmdb.connections.database_connection import DatabaseConnection
from realmdb.exceptions import ConfigError, DuplicateConnectionError, DuplicateFlagError, LateRegistrationError
from realmdb.host.realm import Realm
from realmdb.models.model import Model
from realmdb.utils import resolve_path


LOG = logging.getLogger(__name__)

COLLECTOR_KEY = "realmdb.collector"
STATE_KEY = "realmdb"


@dataclass(eq=False)
class RealmState:
    """
    What one realm contributed locally.

    Attributes:
        realm: The contributing realm.
        collector: The tree's collector.
        connection: The connection declared at this realm, if any.
        migration_dirs: Migration directories contributed at this realm, as absolute paths.
    """

    realm: Realm
    collector: "Collector"
    connection: Optional[DatabaseConnection] = None
    migration_dirs: List[str] = field(default_factory=list)

    @property
    def model_names(self) -> List[str]:
        """Logical names of the models contributed directly at this realm."""
        return list(self.collector.registry.view(self.realm))


class Collector:
    """
    Accumulates every realm's contribution in one tree-wide structure.

    Attributes:
        root (Realm): The root of the realm tree.
        states (Dict[Realm, RealmState]): Local contributions, in registration order.
        flags (Dict[str, Any]): Process-wide flags, each set by at most one contribution.
        registry (ModelRegistry): The tree-wide model registry.
        resolver (ConnectionGroupResolver): Connection resolution for this tree.

    Methods:
        for_realm: Return the collector of a realm's tree, creating it if needed.
        add: Record a validated contribution.
        connection_for: The connection serving a realm.
        groups: The connection groups of the tree.
        freeze: Refuse any further contribution.
    """

    def __init__(self, root: Realm):
        self.root: Realm = root
        self.states: Dict[Realm, RealmState] = {}
        self.flags: Dict[str, Any] = {}
        self.registry: ModelRegistry = ModelRegistry()
        self.resolver: ConnectionGroupResolver = ConnectionGroupResolver(self)
        self._frozen: bool = False

    @classmethod
    def for_realm(cls, realm: Realm) -> "Collector":
        """
        Return the collector held at the root of `realm`'s tree.

        Args:
            realm: Any realm in the tree.

        Returns:
            The tree's collector.
        """
        root = realm.root
        collector = root.plugins.get(COLLECTOR_KEY)
        if collector is None:
            collector = cls(root)
            root.plugins[COLLECTOR_KEY] = collector
            LOG.debug(f'Created the realmdb collector at realm "{root.name}".')
        return collector

    @property
    def frozen(self) -> bool:
        """True once the pre-start phase has begun."""
        return self._frozen

    @property
    def models(self) -> Dict[str, Type[Model]]:
        """The flat, tree-wide mapping of logical name to model."""
        return self.registry.models

    def freeze(self):
        """
        Refuse any further contribution.
        """
        self._frozen = True
        self.registry.freeze()

    def add(self, realm: Realm, options: ContributionOptions) -> RealmState:
        """
        Record a contribution from `realm`.

        Every check runs before anything is stored, so a rejected contribution
        leaves the collector as it was.

        Args:
            realm: The contributing realm.
            options: The validated contribution.

        Returns:
            The realm's accumulated local state.

        Raises:
            LateRegistrationError: If the pre-start phase has begun.
            DuplicateConnectionError: If the realm already declared a connection.
            DuplicateFlagError: If a process-wide flag was already set.
            DuplicateModelError: If a model name is taken by a different definition.
            ConfigError: If a connection descriptor cannot be instantiated.
        """
        if self._frozen:
            raise LateRegistrationError(
                f'Cannot contribute to realm "{realm.name}" after the pre-start phase has begun.'
            )

        state = self.states.get(realm)
        if options.connection is not None and state is not None and state.connection is not None:
            raise DuplicateConnectionError()

        flags = options.flags()
        for flag in flags:
            if flag in self.flags:
                raise DuplicateFlagError(flag)

        models = self.registry.prepare(realm, options.models) if options.models is not None else []

        connection = None
        if options.connection is not None:
            try:
                connection = connect(options.connection)
            except ValueError as exc:
                raise ConfigError(f"Bad options passed to realmdb. {exc}") from exc

        migrations_dir = None
        if options.migrations_dir is not None:
            migrations_dir = resolve_path(options.migrations_dir, realm.path)

        if state is None:
            state = RealmState(realm, self)
            self.states[realm] = state
            realm.plugins[STATE_KEY] = state
        if connection is not None:
            state.connection = connection
            self.resolver.reset()
        if migrations_dir is not None and migrations_dir not in state.migration_dirs:
            state.migration_dirs.append(migrations_dir)
        self.flags.update(flags)
        self.registry.commit(realm, models)

        LOG.debug(
            f'Realm "{realm.name}" contributed {len(models)} model(s)'
            f"{', a connection' if connection is not None else ''}"
            f"{', a migrations directory' if migrations_dir is not None else ''}"
            f"{', flags ' + str(flags) if flags else ''}."
        )
        return state

    def connection_for(self, realm: Realm) -> Optional[DatabaseConnection]:
        """
        Return the connection serving `realm`.

        Args:
            realm: Any realm in the tree.

        Returns:
            The nearest connection declared at the realm or an ancestor, or None.
        """
        return self.resolver.resolve(realm)

    def groups(self) -> List[ConnectionGroup]:
        """
        Return the tree's connection groups.

        Returns:
            The groups, ordered by the registration order of their first member.
        """
        return self.resolver.groups()


def contribute(realm: Realm, config: Any) -> RealmState:
    """
    Validate `config` and record it as a contribution of `realm`.

    Args:
        realm: The contributing realm.
        config: A mapping of options, or a model, list of models, or path to model files.

    Returns:
        The realm's accumulated local state.
    """
    options = parse_contribution(config)
    return Collector.for_realm(realm).add(realm, options)
