##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
A minimal host plugin system.

RealmDB itself only needs a few primitives from its host: a tree of realms, phase
hooks (`on_pre_start`, `on_post_stop`), and a way to expose accessors on the objects
plugins receive. This package provides those primitives so RealmDB can be used
standalone and tested end to end.

Modules:
    realm: Contains `Realm`, a node of the plugin tree.
    server: Contains `Host`, `PluginServer` and `Plugin`.
"""

from realmdb.host.realm import Realm
from realmdb.host.server import Host, Plugin, PluginServer


__all__ = ["Host", "Plugin", "PluginServer", "Realm"]
