##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""This module provides enumerations for the realm lifecycle and migrations."""
from enum import Enum
from typing import Any, Optional


__all__ = ("LifecycleState", "MigrationMode", "Phase")


class LifecycleState(Enum):
    """
    States of the lifecycle orchestrator.

    Transitions are linear: `REGISTERED -> PRE_START -> READY -> STOPPING -> STOPPED`.
    A stop may also begin from `REGISTERED` or from a failed `PRE_START`.
    """

    REGISTERED = "registered"
    PRE_START = "pre_start"
    READY = "ready"
    STOPPING = "stopping"
    STOPPED = "stopped"


class Phase(Enum):
    """Host phases that extensions can hook into."""

    PRE_START = "on_pre_start"
    POST_STOP = "on_post_stop"


class MigrationMode(Enum):
    """
    Directions the migration runner can move a connection in.

    Attributes:
        LATEST: Apply every pending migration as one new batch.
        ROLLBACK: Revert the most recently applied batch.
    """

    LATEST = "latest"
    ROLLBACK = "rollback"

    @classmethod
    def from_option(cls, value: Any) -> Optional["MigrationMode"]:
        """
        Translate a `migrate_on_start` option value into a mode.

        Args:
            value: `None`, `False`, `True`, `"latest"`, or `"rollback"`.

        Returns:
            The matching mode, or None when migrations should not run.
        """
        if value is None or value is False:
            return None
        if value is True:
            return cls.LATEST
        return cls(value)
