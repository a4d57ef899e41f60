##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Connection factory for selecting and instantiating database connections in RealmDB.

This module defines the `ConnectionFactory` class, which maps backend names found in
connection descriptors (e.g. `{"backend": "sqlite", "database": ":memory:"}`) to
`DatabaseConnection` implementations, and the `connect` helper that accepts either a
descriptor or a live connection.
"""

from typing import Any, Dict, NoReturn, Union

from realmdb.abstracts import RealmBaseFactory
from realmdb.connections.database_connection import DatabaseConnection
from realmdb.connections.redis_connection import RedisConnection
from realmdb.connections.sqlite_connection import SQLiteConnection
from realmdb.exceptions import ConfigError, ConnectionNotSupportedError


class ConnectionFactory(RealmBaseFactory):
    """
    Factory class for managing and instantiating supported database connections.

    Attributes:
        _registry (Dict[str, DatabaseConnection]): Maps canonical backend names to connection classes.
        _aliases (Dict[str, str]): Maps alternate names to canonical backend names.
    """

    def _register_builtins(self):
        """
        Register built-in connection implementations.
        """
        self.register("sqlite", SQLiteConnection, aliases=["sqlite3"])
        self.register("redis", RedisConnection, aliases=["rediss"])

    def _validate_component(self, component_class: Any):
        """
        Ensure registered component is a subclass of DatabaseConnection.

        Args:
            component_class: The class to validate.

        Raises:
            TypeError: If the component does not subclass DatabaseConnection.
        """
        if not isinstance(component_class, type) or not issubclass(component_class, DatabaseConnection):
            raise TypeError(f"{component_class} must inherit from DatabaseConnection")

    def _entry_point_group(self) -> str:
        """
        Entry point group used for discovering connection plugins.

        Returns:
            The entry point namespace for RealmDB connection plugins.
        """
        return "realmdb.connections"

    def _unsupported(self, msg: str) -> NoReturn:
        """
        Raise `ConnectionNotSupportedError` for an unknown backend.

        Args:
            msg: The message to add to the error being raised.
        """
        raise ConnectionNotSupportedError(msg)


connection_factory = ConnectionFactory()


def connect(descriptor_or_instance: Union[DatabaseConnection, Dict[str, Any]]) -> DatabaseConnection:
    """
    Turn a connection descriptor into a connection, or pass a live connection through.

    Args:
        descriptor_or_instance: A `DatabaseConnection`, or a dict with a `backend` key
            plus the keyword arguments of that backend's connection class.

    Returns:
        The connection.

    Raises:
        ConfigError: If a descriptor has no `backend` key.
        ConnectionNotSupportedError: If the backend is unknown.
    """
    if isinstance(descriptor_or_instance, DatabaseConnection):
        return descriptor_or_instance

    config = dict(descriptor_or_instance)
    backend = config.pop("backend", None)
    if not backend:
        raise ConfigError("A connection config must name its 'backend'.")
    return connection_factory.create(backend, config)
