##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Migration support for RealmDB.

Modules:
    loader: Recognizes migration files and imports their `up`/`down` functions.
    runner: A ledger-driven runner that moves a connection to `latest` or rolls back a batch.
    coalescer: Merges the migration directories of every realm sharing one connection.
"""
