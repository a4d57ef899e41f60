##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Database connections for RealmDB.

The `connections` package defines the capabilities RealmDB needs from a database
connection (`connect`, `ping`, `destroy`, and running migrations) along with
concrete SQLite and Redis implementations and a factory that turns connection
descriptors into connection instances.

Modules:
    database_connection: Contains the abstract `DatabaseConnection` base class.
    sqlite_connection: Contains `SQLiteConnection`, built on the standard `sqlite3` module.
    redis_connection: Contains `RedisConnection`, built on redis-py.
    connection_factory: Contains `ConnectionFactory` and the `connect` helper.
"""
