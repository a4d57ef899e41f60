##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Merging of migration directories that share one connection.

Realms that resolve to the same connection may each contribute a migrations
directory. Before the runner is invoked, the coalescer copies every recognized
migration file from those directories into one fresh temporary directory, in realm
registration order. A file name seen twice is treated as one shared migration: the
first copy is kept and later ones are skipped. Files that are not migrations are
never copied.
"""

import logging
import os
import shutil
import tempfile
from typing import Callable, Dict

from realmdb.aggregation.resolver import ConnectionGroup
from realmdb.exceptions import MigrationIOError
from realmdb.migrations.loader import is_migration_file


LOG = logging.getLogger(__name__)

TEMP_PREFIX = "realmdb-migrations-"


class MigrationCoalescer:
    """
    Builds one merged migrations directory per connection group.

    Attributes:
        recognize: Predicate deciding whether a file path is a migration.

    Methods:
        coalesce: Merge a group's migration directories and return the merged path.
        cleanup: Remove a merged directory.
    """

    def __init__(self, recognize: Callable[[str], bool] = is_migration_file):
        self.recognize = recognize

    def _make_temp_dir(self) -> str:
        try:
            return tempfile.mkdtemp(prefix=TEMP_PREFIX)
        except OSError as exc:
            raise MigrationIOError(f"Could not create a temporary migrations directory: {exc}") from exc

    def _list_dir(self, directory: str):
        try:
            return sorted(os.listdir(directory))
        except OSError as exc:
            raise MigrationIOError(f"Could not read migrations directory '{directory}': {exc}") from exc

    def coalesce(self, group: ConnectionGroup) -> str:
        """
        Copy every migration contributed to `group` into one temporary directory.

        Args:
            group: The connection group whose `migration_dirs` are merged.

        Returns:
            The path of the merged directory. The caller owns it and should
            remove it with `cleanup` once migrations have run.

        Raises:
            MigrationIOError: If the temporary directory cannot be created, or a
                contributed directory cannot be read or copied from.
        """
        merged = self._make_temp_dir()
        copied: Dict[str, str] = {}
        try:
            for realm, directory in group.migration_dirs:
                for filename in self._list_dir(directory):
                    source = os.path.join(directory, filename)
                    if filename in copied:
                        LOG.debug(
                            f"Skipping '{source}' from realm '{realm.name}': "
                            f"'{filename}' was already taken from '{copied[filename]}'."
                        )
                        continue
                    if not self.recognize(source):
                        LOG.debug(f"Ignoring non-migration file '{source}'.")
                        continue
                    try:
                        shutil.copyfile(source, os.path.join(merged, filename))
                    except OSError as exc:
                        raise MigrationIOError(f"Could not copy migration '{source}': {exc}") from exc
                    copied[filename] = directory
        except BaseException:
            self.cleanup(merged)
            raise

        LOG.debug(f"Coalesced {len(copied)} migration(s) for {group.describe()} into '{merged}'.")
        return merged

    def cleanup(self, merged: str):
        """
        Remove a directory produced by `coalesce`.

        Args:
            merged: The merged directory.
        """
        shutil.rmtree(merged, ignore_errors=True)
