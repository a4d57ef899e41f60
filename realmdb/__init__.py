##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
RealmDB: realm-scoped database models, connections, and migrations for plugin trees.

This module contains the source code for RealmDB.
"""

__version__ = "1.0.0"
VERSION = __version__
