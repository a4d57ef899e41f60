##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Tests for the `realm.py` module.
"""

import gc

from realmdb.host.realm import Realm
from tests.fixture_types import FixtureDict


class TestRealm:
    """Tests for the `Realm` class."""

    def test_tree_structure(self, realms_tree: FixtureDict[str, Realm]):
        """
        Test parents, children and roots.

        Args:
            realms_tree: A small realm tree.
        """
        root, a, b, sibling = (realms_tree[name] for name in ("root", "a", "b", "sibling"))
        assert root.is_root and root.parent is None
        assert not b.is_root
        assert b.parent is a
        assert root.children == [a, sibling]
        assert b.root is root
        assert repr(b) == "<Realm b>"

    def test_lineage_and_descendants(self, realms_tree: FixtureDict[str, Realm]):
        """
        Test walking up to the root and down through the subtree.

        Args:
            realms_tree: A small realm tree.
        """
        assert [realm.name for realm in realms_tree["b"].lineage()] == ["b", "a", "root"]
        assert [realm.name for realm in realms_tree["root"].descendants()] == ["a", "b", "sibling"]
        assert list(realms_tree["b"].descendants()) == []

    def test_parent_is_not_owned(self):
        """
        Test that a child does not keep its parent alive.
        """
        parent = Realm("parent")
        child = Realm("child", parent)
        del parent
        gc.collect()
        assert child.parent is None

    def test_realms_hash_by_identity(self):
        """
        Test that two realms with the same name are different keys.
        """
        assert len({Realm("same"), Realm("same")}) == 2
