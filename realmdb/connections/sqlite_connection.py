##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
SQLite connection for the RealmDB application.

This module defines the `SQLiteConnection` class, which holds one long-lived
`sqlite3` connection. An in-memory database lives exactly as long as that
connection, so the connection is opened lazily and only closed by `destroy`.
"""

import logging
import re
import sqlite3
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator, List, Tuple

from realmdb.connections.database_connection import DatabaseConnection


LOG = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteConnection(DatabaseConnection):
    """
    A `DatabaseConnection` backed by the standard library's `sqlite3` module.

    The connection is configured with:
    - Foreign key constraint enforcement
    - WAL mode for file databases
    - Dictionary-style row access via `sqlite3.Row`
    - Autocommit, so migrations control their own transactions

    Attributes:
        database (str): The database path, or ":memory:".
        migrations_table (str): The table holding the migration ledger.
    """

    def __init__(self, database: str = MEMORY_DATABASE, migrations_table: str = "realmdb_migrations"):
        """
        Initialize the `SQLiteConnection`.

        Args:
            database: The database path, or ":memory:".
            migrations_table: The name of the migration ledger table.

        Raises:
            ValueError: If `migrations_table` is not a plain SQL identifier.
        """
        if not IDENTIFIER_PATTERN.match(migrations_table):
            raise ValueError(f"Invalid migrations table name '{migrations_table}'.")
        super().__init__("sqlite")
        self.database: str = str(database)
        self.migrations_table: str = migrations_table

    def _open(self) -> sqlite3.Connection:
        if self.database != MEMORY_DATABASE:
            Path(self.database).parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {"check_same_thread": False}
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        conn = sqlite3.connect(self.database, **connection_kwargs)

        if self.database != MEMORY_DATABASE:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

        # This enables name-based access to columns
        conn.row_factory = sqlite3.Row
        return conn

    def _close(self, client: sqlite3.Connection):
        client.close()

    def ping(self):
        """
        Run `SELECT 1` against the database.
        """
        self.connect().execute("SELECT 1").fetchone()

    def execute(self, sql: str, params: Any = ()) -> sqlite3.Cursor:
        """
        Execute a single SQL statement.

        Args:
            sql: The SQL statement.
            params: Positional or named parameters for the statement.

        Returns:
            The resulting cursor.
        """
        return self.connect().execute(sql, params)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run the enclosed statements in a single transaction, rolling back on error.

        Yields:
            The underlying `sqlite3` connection.
        """
        conn = self.connect()
        conn.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def _ensure_ledger(self):
        self.execute(
            f"CREATE TABLE IF NOT EXISTS {self.migrations_table} ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "name TEXT NOT NULL, "
            "batch INTEGER NOT NULL, "
            "migration_time TEXT NOT NULL)"
        )

    def applied_migrations(self) -> List[Tuple[str, int]]:
        self._ensure_ledger()
        cursor = self.execute(f"SELECT name, batch FROM {self.migrations_table} ORDER BY id")
        return [(row["name"], row["batch"]) for row in cursor.fetchall()]

    def record_migration(self, name: str, batch: int):
        self._ensure_ledger()
        self.execute(
            f"INSERT INTO {self.migrations_table} (name, batch, migration_time) VALUES (?, ?, ?)",
            (name, batch, datetime.now(timezone.utc).isoformat()),
        )

    def forget_migration(self, name: str):
        self._ensure_ledger()
        self.execute(f"DELETE FROM {self.migrations_table} WHERE name = ?", (name,))

    def describe(self) -> str:
        return f"sqlite:{self.database}"
