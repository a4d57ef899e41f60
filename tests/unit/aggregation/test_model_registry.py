##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Tests for the `model_registry.py` module.
"""

from typing import Dict

import pytest

from realmdb.aggregation.model_registry import ModelRegistry
from realmdb.connections.sqlite_connection import SQLiteConnection
from realmdb.exceptions import DuplicateModelError, LateRegistrationError
from realmdb.host.realm import Realm
from realmdb.models.model import Model
from tests.fixture_types import FixtureDict
from tests.models import Dog, Movie, Person


class TestModelRegistry:
    """Tests for the `ModelRegistry` class."""

    @pytest.fixture
    def registry(self) -> ModelRegistry:
        """
        An empty registry.

        Returns:
            A `ModelRegistry`.
        """
        return ModelRegistry()

    def test_views(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that the local view only shows a realm's own models and the tree-wide view shows all.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.register(realms_tree["a"], [Dog, Person])
        registry.register(realms_tree["b"], Movie)

        assert registry.view(realms_tree["a"]) == {"Dog": Dog, "Person": Person}
        assert registry.view(realms_tree["b"]) == {"Movie": Movie}
        assert registry.view(realms_tree["root"]) == {}
        assert registry.view(realms_tree["sibling"]) == {}
        for realm in realms_tree.values():
            assert registry.view(realm, include_descendants=True) == {"Dog": Dog, "Person": Person, "Movie": Movie}

    def test_views_are_copies(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that mutating a view does not touch the registry.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.register(realms_tree["a"], Dog)
        view: Dict = registry.view(realms_tree["a"], include_descendants=True)
        view.clear()
        assert registry.models == {"Dog": Dog}

    def test_identical_reregistration_is_idempotent(
        self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]
    ):
        """
        Test that the same definition may be registered again, here or elsewhere.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.register(realms_tree["a"], Dog)
        registry.register(realms_tree["a"], [Dog, Dog])
        registry.register(realms_tree["sibling"], Dog)

        assert registry.models == {"Dog": Dog}
        assert registry.owner("Dog") is realms_tree["a"]
        assert registry.view(realms_tree["sibling"]) == {"Dog": Dog}
        assert registry.names_owned_by(realms_tree["a"]) == ["Dog"]
        assert registry.names_owned_by(realms_tree["sibling"]) == []

    def test_duplicate_name_in_sibling(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that two different definitions named "Dog" collide across the tree.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        other_dog = type("Dog", (Model,), {})
        registry.register(realms_tree["a"], Dog)

        with pytest.raises(DuplicateModelError, match='Model "Dog" has already been registered') as excinfo:
            registry.register(realms_tree["sibling"], other_dog)
        assert 'realm "a"' in str(excinfo.value)
        assert 'realm "sibling"' in str(excinfo.value)

    def test_duplicate_name_in_one_contribution(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that a single contribution may not hold two definitions with one name.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        other_dog = type("Dog", (Model,), {})
        with pytest.raises(DuplicateModelError, match='"Dog"'):
            registry.register(realms_tree["a"], [Dog, other_dog])

    def test_failed_registration_stores_nothing(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that a rejected contribution leaves no partial state behind.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.register(realms_tree["a"], Dog)
        with pytest.raises(DuplicateModelError):
            registry.register(realms_tree["b"], [Person, type("Dog", (Model,), {})])

        assert registry.models == {"Dog": Dog}
        assert registry.view(realms_tree["b"]) == {}

    def test_late_registration(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that nothing can be registered once the registry is frozen.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.freeze()
        assert registry.frozen
        with pytest.raises(LateRegistrationError):
            registry.register(realms_tree["a"], Dog)

    def test_rebind(self, registry: ModelRegistry, realms_tree: FixtureDict[str, Realm]):
        """
        Test that bound variants replace the stored models in every view.

        Args:
            registry: An empty registry.
            realms_tree: A small realm tree.
        """
        registry.register(realms_tree["a"], [Dog, Person])
        registry.freeze()
        bound = Dog.bind(SQLiteConnection())

        registry.rebind({"Dog": bound})
        assert registry.view(realms_tree["a"])["Dog"] is bound
        assert registry.view(realms_tree["a"])["Person"] is Person
        assert registry.owner("Dog") is realms_tree["a"]

        with pytest.raises(KeyError):
            registry.rebind({"Movie": Movie})
