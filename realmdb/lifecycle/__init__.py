##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Lifecycle orchestration.

Modules:
    orchestrator: Contains `LifecycleOrchestrator`, which probes, binds and migrates
        every connection group at pre-start and destroys each distinct connection
        once at post-stop.
"""
