##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Database model definitions for RealmDB.

Modules:
    model: Contains the `Model` base class that plugins subclass to declare models.
    loader: Normalizes model contributions (single model, list, or path/glob) into a list.
    compat: Contains `assert_compatible`, a check that two model definitions are interchangeable.
"""
