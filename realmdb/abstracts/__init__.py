##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The `abstracts` package provides ABC classes that can be used throughout
RealmDB's codebase.

Modules:
    factory: Contains `RealmBaseFactory`, used to manage pluggable components in RealmDB.
"""

from realmdb.abstracts.factory import RealmBaseFactory


__all__ = ["RealmBaseFactory"]
