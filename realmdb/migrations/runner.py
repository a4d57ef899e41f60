##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
A small migration runner driven by a per-connection ledger.

The runner only needs a handful of primitives from a connection: read the ledger
(`applied_migrations`), write to it (`record_migration`, `forget_migration`), and
a `transaction()` context in which each migration runs. Migrations are applied in
filename order, grouped into numbered batches; a rollback reverts the newest batch.
"""

import logging
import os
from typing import TYPE_CHECKING, Dict, List, Tuple

from realmdb.common.enums import MigrationMode
from realmdb.exceptions import MigrationError
from realmdb.migrations.loader import load_migration


if TYPE_CHECKING:
    from realmdb.connections.database_connection import DatabaseConnection


LOG = logging.getLogger(__name__)

NO_VERSION = "none"


class MigrationRunner:
    """
    Applies and reverts the migrations of one directory against one connection.

    Attributes:
        connection: The connection whose ledger is read and written.

    Methods:
        run: Move the connection in the given direction and return the affected file names.
        latest: Apply every pending migration as a new batch.
        rollback: Revert the most recent batch.
        current_version: Report the version of the newest applied migration.
    """

    def __init__(self, connection: "DatabaseConnection"):
        self.connection = connection

    def _list_migrations(self, directory: str) -> Dict[str, object]:
        try:
            filenames = sorted(os.listdir(directory))
        except OSError as exc:
            raise MigrationError(f"Could not read migrations directory '{directory}': {exc}") from exc

        migrations = {}
        for filename in filenames:
            module = load_migration(os.path.join(directory, filename))
            if module is not None:
                migrations[filename] = module
        return migrations

    def _validate(self, applied: List[Tuple[str, int]], migrations: Dict[str, object]):
        missing = [name for name, _ in applied if name not in migrations]
        if missing:
            raise MigrationError(
                "The migration directory is corrupt, the following files are missing: " + ", ".join(missing)
            )

    def run(self, directory: str, mode: MigrationMode) -> List[str]:
        """
        Move the connection in the given direction.

        Args:
            directory: A flat directory of migration files.
            mode: `MigrationMode.LATEST` or `MigrationMode.ROLLBACK`.

        Returns:
            The names of the migrations applied (latest) or reverted (rollback), in execution order.
        """
        if mode is MigrationMode.ROLLBACK:
            return self.rollback(directory)
        return self.latest(directory)

    def latest(self, directory: str) -> List[str]:
        """
        Apply every migration in `directory` that the ledger does not list yet.

        Args:
            directory: A flat directory of migration files.

        Returns:
            The names of the applied migrations.
        """
        migrations = self._list_migrations(directory)
        applied = self.connection.applied_migrations()
        self._validate(applied, migrations)

        done = {name for name, _ in applied}
        pending = [name for name in migrations if name not in done]
        if not pending:
            LOG.debug(f"No pending migrations for {self.connection.describe()}.")
            return []

        batch = max((batch for _, batch in applied), default=0) + 1
        for name in pending:
            with self.connection.transaction():
                migrations[name].up(self.connection)
                self.connection.record_migration(name, batch)
            LOG.debug(f"Applied migration '{name}' (batch {batch}) on {self.connection.describe()}.")
        return pending

    def rollback(self, directory: str) -> List[str]:
        """
        Revert the most recently applied batch.

        Args:
            directory: A flat directory of migration files.

        Returns:
            The names of the reverted migrations, newest first.
        """
        migrations = self._list_migrations(directory)
        applied = self.connection.applied_migrations()
        self._validate(applied, migrations)
        if not applied:
            LOG.debug(f"Nothing to roll back on {self.connection.describe()}.")
            return []

        last_batch = max(batch for _, batch in applied)
        reverting = sorted((name for name, batch in applied if batch == last_batch), reverse=True)
        for name in reverting:
            with self.connection.transaction():
                migrations[name].down(self.connection)
                self.connection.forget_migration(name)
            LOG.debug(f"Reverted migration '{name}' (batch {last_batch}) on {self.connection.describe()}.")
        return reverting

    def current_version(self) -> str:
        """
        Report the newest applied migration.

        Returns:
            `"none"` if nothing has been applied, otherwise the greatest applied
            file name up to its first underscore.
        """
        applied = self.connection.applied_migrations()
        if not applied:
            return NO_VERSION
        return max(name for name, _ in applied).split("_")[0]
