##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Configuration handling for RealmDB.

Modules:
    contribution: Validates and normalizes what a realm contributes (connection, models,
        migrations directory, process-wide flags), and loads contributions from YAML files.
"""
