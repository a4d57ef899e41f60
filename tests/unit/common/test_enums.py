##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Tests for the `enums.py` module.
"""

import pytest

from realmdb.common.enums import LifecycleState, MigrationMode, Phase


class TestMigrationMode:
    """Tests for translating `migrate_on_start` values into a `MigrationMode`."""

    @pytest.mark.parametrize("value", [None, False])
    def test_from_option_disabled(self, value):
        """
        Test that a missing or False option means migrations do not run.

        Args:
            value: The option value under test.
        """
        assert MigrationMode.from_option(value) is None

    @pytest.mark.parametrize(
        "value, expected",
        [(True, MigrationMode.LATEST), ("latest", MigrationMode.LATEST), ("rollback", MigrationMode.ROLLBACK)],
    )
    def test_from_option_enabled(self, value, expected: MigrationMode):
        """
        Test that True and the named modes map onto the right direction.

        Args:
            value: The option value under test.
            expected: The mode it should translate to.
        """
        assert MigrationMode.from_option(value) is expected

    def test_from_option_unknown_value(self):
        """
        Test that an unknown mode is rejected.
        """
        with pytest.raises(ValueError):
            MigrationMode.from_option("sideways")


def test_lifecycle_states_are_ordered():
    """
    Test the declared order of the lifecycle states.
    """
    assert [state.value for state in LifecycleState] == ["registered", "pre_start", "ready", "stopping", "stopped"]


def test_phase_values():
    """
    Test the hook names of the host phases.
    """
    assert Phase.PRE_START.value == "on_pre_start"
    assert Phase.POST_STOP.value == "on_post_stop"
