##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Abstract base class for database connections in RealmDB.

This module defines `DatabaseConnection`, the interface every connection shared
between realms must provide. A connection is opened lazily, can be probed for
readiness, is destroyed at most once, and keeps a ledger of the migrations that
were applied to it.

Usage:
    This base class is not meant to be instantiated directly. Instead, it should be subclassed
    by backend-specific implementations such as `SQLiteConnection` or `RedisConnection`.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import Any, ContextManager, List, Tuple, Union

from realmdb.common.enums import MigrationMode
from realmdb.migrations.runner import MigrationRunner


LOG = logging.getLogger(__name__)


class DatabaseConnection(ABC):
    """
    Abstract base class for a connection that can be shared by several realms.

    Connections are compared and hashed by identity: two realms share a connection
    only when they hold the very same instance.

    Attributes:
        backend_name (str): The name of the backend (e.g., "sqlite", "redis").

    Methods:
        connect:
            Open the underlying client if needed and return it.

        ping:
            Issue a lightweight readiness probe, raising on failure.

        destroy:
            Close the underlying client. Safe to call more than once.

        applied_migrations:
            Read the migration ledger.

        record_migration:
            Add an entry to the migration ledger.

        forget_migration:
            Remove an entry from the migration ledger.

        transaction:
            Context manager wrapping a single migration.

        run_migrations:
            Apply or revert the migrations found in a directory.

        current_migration_version:
            Report the newest applied migration, or "none".

        describe:
            A short, password-free description of the connection target.
    """

    def __init__(self, backend_name: str):
        """
        Initialize the `DatabaseConnection` instance.

        Args:
            backend_name: The name of the backend (e.g., "sqlite").
        """
        self.backend_name: str = backend_name
        self._client: Any = None

    @abstractmethod
    def _open(self) -> Any:
        """
        Open and return a new client for this connection.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement an `_open` method.")

    @abstractmethod
    def _close(self, client: Any):
        """
        Close a client returned by `_open`.

        Args:
            client: The client to close.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement a `_close` method.")

    @abstractmethod
    def ping(self):
        """
        Issue a lightweight readiness probe.

        Raises:
            Exception: Whatever the underlying client raises when the database is unreachable.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement a `ping` method.")

    @abstractmethod
    def applied_migrations(self) -> List[Tuple[str, int]]:
        """
        Read the migration ledger.

        Returns:
            `(name, batch)` tuples in the order the migrations were applied.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement an `applied_migrations` method.")

    @abstractmethod
    def record_migration(self, name: str, batch: int):
        """
        Add a migration to the ledger.

        Args:
            name: The migration's file name.
            batch: The batch number it was applied in.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement a `record_migration` method.")

    @abstractmethod
    def forget_migration(self, name: str):
        """
        Remove a migration from the ledger.

        Args:
            name: The migration's file name.
        """
        raise NotImplementedError("Subclasses of `DatabaseConnection` must implement a `forget_migration` method.")

    @property
    def client(self) -> Any:
        """The underlying client, opened on first access."""
        return self.connect()

    @property
    def is_connected(self) -> bool:
        """True while an underlying client is open."""
        return self._client is not None

    def connect(self) -> Any:
        """
        Open the underlying client if it is not open yet.

        Returns:
            The underlying client.
        """
        if self._client is None:
            self._client = self._open()
            LOG.debug(f"Opened connection to {self.describe()}.")
        return self._client

    def destroy(self):
        """
        Close the underlying client. Does nothing if it was never opened or is already closed.
        """
        if self._client is None:
            return
        client, self._client = self._client, None
        self._close(client)
        LOG.info(f"Destroyed connection to {self.describe()}.")

    def transaction(self) -> ContextManager:
        """
        Context manager wrapping a single migration.

        Backends without transactions use a no-op context.
        """
        return nullcontext()

    def run_migrations(self, directory: str, mode: Union[MigrationMode, str] = MigrationMode.LATEST) -> List[str]:
        """
        Apply or revert the migrations found in `directory`.

        Args:
            directory: A flat directory of migration files.
            mode: `"latest"` to apply pending migrations, `"rollback"` to revert the newest batch.

        Returns:
            The names of the affected migrations, in execution order.
        """
        return MigrationRunner(self).run(directory, MigrationMode(mode))

    def current_migration_version(self) -> str:
        """
        Report the newest applied migration.

        Returns:
            The version identifier of the newest applied migration, or "none".
        """
        return MigrationRunner(self).current_version()

    def describe(self) -> str:
        """
        Describe the connection target without credentials.

        Returns:
            A short description such as "sqlite::memory:".
        """
        return self.backend_name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.describe()}>"
