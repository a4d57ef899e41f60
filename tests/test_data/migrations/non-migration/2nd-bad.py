##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################


def up(connection):
    connection.execute("CREATE TABLE Bad (id INTEGER PRIMARY KEY)")
