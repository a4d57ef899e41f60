##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The `common` package provides shared definitions used across RealmDB.

Modules:
    enums.py: Defines the enumerations for lifecycle states, host phases, and migration modes.
"""
