##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Tests for the `runner.py` module.
"""

import pytest

from realmdb.common.enums import MigrationMode
from realmdb.exceptions import MigrationError
from realmdb.migrations.runner import NO_VERSION, MigrationRunner
from tests.fixture_types import FixtureCallable, FixtureConnection


class TestMigrationRunner:
    """Tests for the `MigrationRunner` class, run against in-memory SQLite."""

    def test_latest_applies_in_filename_order(
        self, connections_sqlite: FixtureConnection, migrations_dir_factory: FixtureCallable
    ):
        """
        Test that pending migrations run in filename order as one batch.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            migrations_dir_factory: Factory writing a directory of files.
        """
        directory = migrations_dir_factory("ordered", {"002_b.py": None, "001_a.py": None, "README.md": "docs"})
        runner = MigrationRunner(connections_sqlite)

        assert runner.latest(directory) == ["001_a.py", "002_b.py"]
        assert connections_sqlite.applied_migrations() == [("001_a.py", 1), ("002_b.py", 1)]
        assert runner.latest(directory) == []

    def test_new_files_make_a_new_batch(
        self, connections_sqlite: FixtureConnection, migrations_dir_factory: FixtureCallable, tmp_path
    ):
        """
        Test that migrations added later are applied in the next batch, and that rollback
        only reverts that batch.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            migrations_dir_factory: Factory writing a directory of files.
            tmp_path: PyTest temporary directory fixture.
        """
        directory = migrations_dir_factory("batches", {"001_a.py": None})
        runner = MigrationRunner(connections_sqlite)
        runner.run(directory, MigrationMode.LATEST)

        first = (tmp_path / "batches" / "001_a.py").read_text()
        (tmp_path / "batches" / "002_b.py").write_text(first.replace("T001_a", "T002_b"))
        assert runner.run(directory, MigrationMode.LATEST) == ["002_b.py"]
        assert connections_sqlite.applied_migrations() == [("001_a.py", 1), ("002_b.py", 2)]
        assert runner.current_version() == "002"

        assert runner.run(directory, MigrationMode.ROLLBACK) == ["002_b.py"]
        assert connections_sqlite.applied_migrations() == [("001_a.py", 1)]
        assert runner.current_version() == "001"

    def test_rollback_with_nothing_applied(
        self, connections_sqlite: FixtureConnection, migrations_dir_factory: FixtureCallable
    ):
        """
        Test that rolling back a fresh database does nothing.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            migrations_dir_factory: Factory writing a directory of files.
        """
        directory = migrations_dir_factory("fresh", {"001_a.py": None})
        assert MigrationRunner(connections_sqlite).rollback(directory) == []
        assert MigrationRunner(connections_sqlite).current_version() == NO_VERSION

    def test_failed_migration_is_not_recorded(
        self, connections_sqlite: FixtureConnection, migrations_dir_factory: FixtureCallable
    ):
        """
        Test that a migration raising an error leaves no trace in the ledger.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            migrations_dir_factory: Factory writing a directory of files.
        """
        failing = "def up(connection):\n    raise RuntimeError('nope')\n\n\ndef down(connection):\n    pass\n"
        directory = migrations_dir_factory("failing", {"001_a.py": None, "002_fail.py": failing})

        with pytest.raises(RuntimeError, match="nope"):
            MigrationRunner(connections_sqlite).latest(directory)
        assert connections_sqlite.applied_migrations() == [("001_a.py", 1)]

    def test_missing_applied_migration(
        self, connections_sqlite: FixtureConnection, migrations_dir_factory: FixtureCallable
    ):
        """
        Test that a ledger entry without a matching file is reported as corruption.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            migrations_dir_factory: Factory writing a directory of files.
        """
        directory = migrations_dir_factory("corrupt", {"002_b.py": None})
        connections_sqlite.record_migration("001_a.py", 1)
        with pytest.raises(MigrationError, match="corrupt.*001_a.py"):
            MigrationRunner(connections_sqlite).latest(directory)

    def test_unreadable_directory(self, connections_sqlite: FixtureConnection, tmp_path):
        """
        Test that a missing directory is a `MigrationError`.

        Args:
            connections_sqlite: An in-memory SQLite connection.
            tmp_path: PyTest temporary directory fixture.
        """
        with pytest.raises(MigrationError, match="Could not read migrations directory"):
            MigrationRunner(connections_sqlite).latest(str(tmp_path / "missing"))
