##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Aggregation of realm contributions.

Modules:
    model_registry: Contains `ModelRegistry`, which stores one model per logical name
        tree-wide and serves realm-local or tree-wide views.
    resolver: Contains `ConnectionGroupResolver` and `ConnectionGroup`, which decide the
        connection serving each realm and partition the tree into connection groups.
    collector: Contains the root-held `Collector` and `contribute`, the entry point for
        every realm contribution.
"""
