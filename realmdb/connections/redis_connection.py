##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Redis connection for the RealmDB application.

This module defines `RedisConnection`, a `DatabaseConnection` backed by a redis-py
client. Redis has no schema, so migrations here are data migrations; the ledger
is a hash mapping each applied migration file name to its batch number.
"""

import logging
from typing import List, Tuple
from urllib.parse import urlsplit, urlunsplit

from redis import Redis

from realmdb.connections.database_connection import DatabaseConnection


LOG = logging.getLogger(__name__)


class RedisConnection(DatabaseConnection):
    """
    A `DatabaseConnection` backed by Redis.

    Attributes:
        url (str): The Redis URL to connect to.
        migrations_key (str): The hash holding the migration ledger.
        client_kwargs (dict): Extra keyword arguments passed to `Redis.from_url`.
    """

    def __init__(
        self, url: str = "redis://localhost:6379/0", migrations_key: str = "realmdb:migrations", **client_kwargs
    ):
        """
        Initialize the `RedisConnection`.

        Args:
            url: The Redis URL to connect to.
            migrations_key: The name of the hash holding the migration ledger.
            **client_kwargs: Extra keyword arguments for `Redis.from_url`.
        """
        super().__init__("redis")
        self.url: str = url
        self.migrations_key: str = migrations_key
        self.client_kwargs = client_kwargs

    def _open(self) -> Redis:
        return Redis.from_url(self.url, decode_responses=True, **self.client_kwargs)

    def _close(self, client: Redis):
        client.close()

    def ping(self):
        """
        Send `PING` to the server.
        """
        self.connect().ping()

    def applied_migrations(self) -> List[Tuple[str, int]]:
        ledger = self.connect().hgetall(self.migrations_key)
        return sorted(((name, int(batch)) for name, batch in ledger.items()), key=lambda entry: (entry[1], entry[0]))

    def record_migration(self, name: str, batch: int):
        self.connect().hset(self.migrations_key, name, batch)

    def forget_migration(self, name: str):
        self.connect().hdel(self.migrations_key, name)

    def describe(self) -> str:
        parts = urlsplit(self.url)
        if parts.password:
            netloc = parts.netloc.replace(f":{parts.password}@", ":******@")
            return urlunsplit(parts._replace(netloc=netloc))
        return self.url
