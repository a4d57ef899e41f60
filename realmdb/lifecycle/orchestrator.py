##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The pre-start and post-stop phases.

`LifecycleOrchestrator` walks a linear state machine:

    registered -> pre_start -> ready -> stopping -> stopped

Pre-start freezes the collector, probes every distinct connection concurrently,
binds connections to the models of their group in one pass, and then runs the
coalesced migrations of each group in turn. Post-stop destroys every distinct
connection exactly once unless `teardown_on_stop` was set to False.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple, Type

from tabulate import tabulate

from realmdb.aggregation.collector import Collector
from realmdb.aggregation.resolver import ConnectionGroup
from realmdb.common.enums import LifecycleState, MigrationMode
from realmdb.connections.database_connection import DatabaseConnection
from realmdb.exceptions import ConnectionTeardownError, ConnectionUnreachableError, LifecycleError
from realmdb.migrations.coalescer import MigrationCoalescer
from realmdb.models.model import Model


LOG = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Could not connect to database using realmdb connection"


class LifecycleOrchestrator:
    """
    Runs the pre-start and post-stop phases for one collector.

    Attributes:
        collector (Collector): The tree's collector.
        coalescer (MigrationCoalescer): Builds the merged migrations directory per group.
        max_workers (Optional[int]): Thread cap for probing and destroying connections.
        state (LifecycleState): The current lifecycle state.

    Methods:
        connections: The distinct connections of the tree, in group order.
        describe: A table summarizing the connection groups.
        pre_start: Probe, bind and migrate.
        post_stop: Destroy every distinct connection once.
    """

    def __init__(
        self, collector: Collector, coalescer: MigrationCoalescer = None, max_workers: Optional[int] = None
    ):
        self.collector: Collector = collector
        self.coalescer: MigrationCoalescer = coalescer or MigrationCoalescer()
        self.max_workers: Optional[int] = max_workers
        self.state: LifecycleState = LifecycleState.REGISTERED

    def connections(self) -> List[DatabaseConnection]:
        """
        Return the distinct connections of the tree.

        Returns:
            One entry per connection instance, ordered by first registered member.
        """
        return [group.connection for group in self.collector.groups() if group.connection is not None]

    def describe(self) -> str:
        """
        Summarize the connection groups as a table.

        Returns:
            The rendered table.
        """
        rows = [
            [
                group.describe(),
                ", ".join(realm.name for realm in group.realms),
                ", ".join(group.model_names) or "-",
                len(group.migration_dirs),
            ]
            for group in self.collector.groups()
        ]
        return tabulate(rows, headers=["Connection", "Realms", "Models", "Migration Dirs"])

    def _fan_out(
        self, task: Callable[[DatabaseConnection], None], connections: List[DatabaseConnection]
    ) -> List[Tuple[DatabaseConnection, Exception]]:
        """
        Run `task` once per connection in a thread pool and wait for every run.

        Args:
            task: Called with one connection.
            connections: Distinct connections.

        Returns:
            `(connection, exception)` pairs for the failed runs, in the order of `connections`.
        """
        if not connections:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers or len(connections)) as executor:
            futures = [(connection, executor.submit(task, connection)) for connection in connections]

        return [(connection, future.exception()) for connection, future in futures if future.exception() is not None]

    def _model_names_for(self, connection: DatabaseConnection) -> List[str]:
        names = []
        for name, model in self.collector.models.items():
            bound_to = model.get_connection()
            if bound_to is None:
                bound_to = self.collector.connection_for(self.collector.registry.owner(name))
            if bound_to is connection:
                names.append(name)
        return sorted(names)

    def _unreachable(self, connection: DatabaseConnection, exc: Exception) -> ConnectionUnreachableError:
        names = self._model_names_for(connection)
        message = UNREACHABLE_MESSAGE
        if names:
            message += " for models: " + ", ".join(f'"{name}"' for name in names)
        message += "."
        if str(exc):
            message = f"{message}: {exc}"
        return ConnectionUnreachableError(message, connection=connection, model_names=names)

    def _probe(self, groups: List[ConnectionGroup]):
        connections = [group.connection for group in groups if group.connection is not None]
        errors = self._fan_out(lambda connection: connection.ping(), connections)
        if errors:
            connection, exc = errors[0]
            LOG.error(f"{len(errors)} connection(s) failed their readiness probe.")
            raise self._unreachable(connection, exc) from exc
        LOG.debug(f"Probed {len(connections)} connection(s).")

    def _bind(self, groups: List[ConnectionGroup]):
        bound: Dict[str, Type[Model]] = {}
        for group in groups:
            if group.connection is None:
                continue
            for name in group.model_names:
                model = self.collector.models[name]
                if model.get_connection() is not None:
                    LOG.debug(f'Model "{name}" already has a connection; leaving it as is.')
                    continue
                bound[name] = model.bind(group.connection)
        self.collector.registry.rebind(bound)
        LOG.debug(f"Bound {len(bound)} model(s).")

    def _migrate(self, group: ConnectionGroup, mode: MigrationMode):
        if not group.migration_dirs:
            return
        if group.connection is None:
            LOG.warning(
                "Skipping migrations contributed by realms without a connection: "
                + ", ".join(realm.name for realm in group.realms)
            )
            return

        merged = self.coalescer.coalesce(group)
        try:
            applied = group.connection.run_migrations(merged, mode)
        finally:
            self.coalescer.cleanup(merged)
        LOG.info(f"Ran {len(applied)} migration(s) ({mode.value}) on {group.describe()}.")

    def pre_start(self):
        """
        Freeze the collector, probe every connection, bind models and run migrations.

        Raises:
            LifecycleError: If pre-start already ran or the orchestrator is stopping.
            ConnectionUnreachableError: If a connection fails its probe. When several
                fail, the one whose group was registered first is reported.
            MigrationIOError: If migration directories cannot be coalesced.
            MigrationError: If the migration runner fails.
        """
        if self.state is not LifecycleState.REGISTERED:
            raise LifecycleError(f"Cannot run pre-start from the '{self.state.value}' state.")
        self.state = LifecycleState.PRE_START
        self.collector.freeze()

        groups = self.collector.groups()
        LOG.debug(f"Connection groups:\n{self.describe()}")

        self._probe(groups)
        self._bind(groups)

        mode = MigrationMode.from_option(self.collector.flags.get("migrate_on_start"))
        if mode is not None:
            for group in groups:
                self._migrate(group, mode)

        self.state = LifecycleState.READY
        LOG.info(f"realmdb is ready with {len(self.connections())} connection(s).")

    def post_stop(self):
        """
        Destroy every distinct connection exactly once.

        Every connection is attempted even if some fail. Nothing is destroyed when
        `teardown_on_stop` was set to False.

        Raises:
            LifecycleError: If post-stop already ran.
            ConnectionTeardownError: If any connection failed to be destroyed.
        """
        if self.state in (LifecycleState.STOPPING, LifecycleState.STOPPED):
            raise LifecycleError(f"Cannot run post-stop from the '{self.state.value}' state.")
        self.state = LifecycleState.STOPPING
        self.collector.freeze()

        try:
            if self.collector.flags.get("teardown_on_stop") is False:
                LOG.debug("Leaving connections open; teardown_on_stop is False.")
                return

            connections = self.connections()
            errors = self._fan_out(lambda connection: connection.destroy(), connections)
            for connection, exc in errors:
                LOG.error(f"Failed to destroy connection to {connection.describe()}: {exc}")
            if errors:
                raise ConnectionTeardownError(errors)
        finally:
            self.state = LifecycleState.STOPPED
