##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The `realmdb` plugin.

Registering `plugin` with a host wires RealmDB into it: the pre-start and post-stop
phases run the lifecycle orchestrator, and every `PluginServer` gains three accessors:

    server.contribute(config)                  # add models, a connection, migrations...
    server.models(include_descendants=False)   # models visible at this realm
    server.connection()                        # the connection serving this realm

The options passed when registering the plugin are contributed on behalf of the
realm that registered it, so a plugin may simply do
`server.register(realmdb.plugin.plugin, {"models": [Dog]})`.
"""

import logging
from typing import Any, Dict, Optional, Type

from realmdb.aggregation.collector import Collector, RealmState
from realmdb.aggregation.collector import contribute as _contribute
from realmdb.common.enums import Phase
from realmdb.connections.database_connection import DatabaseConnection
from realmdb.host.realm import Realm
from realmdb.host.server import Host, PluginServer
from realmdb.lifecycle.orchestrator import LifecycleOrchestrator
from realmdb.models.model import Model


LOG = logging.getLogger(__name__)

ORCHESTRATOR_KEY = "realmdb.orchestrator"


def models(realm: Realm, include_descendants: bool = False) -> Dict[str, Type[Model]]:
    """
    Return the models visible at `realm`.

    Args:
        realm: The realm asking.
        include_descendants: If True, return every model in the tree.

    Returns:
        A mapping of logical name to model.
    """
    return Collector.for_realm(realm).registry.view(realm, include_descendants)


def connection(realm: Realm) -> Optional[DatabaseConnection]:
    """
    Return the connection serving `realm`.

    Args:
        realm: The realm asking.

    Returns:
        The nearest connection declared at the realm or an ancestor, or None.
    """
    return Collector.for_realm(realm).connection_for(realm)


def contribute(realm: Realm, config: Any) -> RealmState:
    """Contribute `config` on behalf of `realm`."""
    return _contribute(realm, config)


def setup(host: Host) -> LifecycleOrchestrator:
    """
    Wire RealmDB into `host`. Repeated calls return the existing orchestrator.

    Args:
        host: The host to wire into.

    Returns:
        The orchestrator driving the host's lifecycle.
    """
    orchestrator = host.root.plugins.get(ORCHESTRATOR_KEY)
    if orchestrator is not None:
        return orchestrator

    orchestrator = LifecycleOrchestrator(Collector.for_realm(host.root))
    host.root.plugins[ORCHESTRATOR_KEY] = orchestrator
    host.ext(Phase.PRE_START, lambda _host: orchestrator.pre_start())
    host.ext(Phase.POST_STOP, lambda _host: orchestrator.post_stop())
    host.decorate("models", models)
    host.decorate("connection", connection)
    host.decorate("contribute", contribute)
    LOG.debug(f'Wired realmdb into host "{host.root.name}".')
    return orchestrator


class RealmDBPlugin:
    """
    The plugin object handed to `Host.register`. It may be registered any number of times.
    """

    name = "realmdb"

    def register(self, server: PluginServer, options: Any = None):
        """
        Wire RealmDB into the host and contribute `options` for the registering realm.

        Args:
            server: The view bound to this registration's realm.
            options: A contribution, as accepted by `contribute`.
        """
        setup(server.host)
        _contribute(server.realm.parent or server.realm, options)


plugin = RealmDBPlugin()
