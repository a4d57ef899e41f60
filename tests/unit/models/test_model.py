##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Tests for the `model.py` module.
"""

import gc
import weakref
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel

from realmdb.connections.sqlite_connection import SQLiteConnection
from realmdb.exceptions import ValidationError
from realmdb.models.model import BOUND_MODELS, Model
from tests.models import Dog, Movie, Person, Zombie


class TestModelBasics:
    """Tests for naming, instances and binding."""

    def test_table_name_defaults_to_class_name(self):
        """
        Test the default and the explicit table name.
        """

        class Cat(Model):
            pass

        assert Cat.get_table_name() == "Cat"
        assert Zombie.get_table_name() == "Zombie"

    def test_instance_attributes(self):
        """
        Test that keyword arguments become public attributes.
        """
        dog = Dog(name="Guy", _secret="hidden")
        assert dog.to_dict() == {"name": "Guy"}
        assert repr(dog) == "Dog(name='Guy')"

    def test_bind_returns_memoized_subclass(self):
        """
        Test that binding produces one subclass per connection and leaves the original unbound.
        """
        first, second = SQLiteConnection(), SQLiteConnection()

        bound = Dog.bind(first)
        assert issubclass(bound, Dog)
        assert bound.__name__ == "Dog"
        assert bound.get_table_name() == "Dog"
        assert bound.get_connection() is first
        assert Dog.get_connection() is None

        assert Dog.bind(first) is bound
        assert Dog.bind(second) is not bound
        assert Dog.bind(second).get_connection() is second

    def test_bind_does_not_keep_connections_alive(self):
        """
        Test that binding a model does not keep an otherwise unused connection alive.
        """
        connection = SQLiteConnection()
        bound = Dog.bind(connection)
        connection_ref = weakref.ref(connection)
        assert connection in BOUND_MODELS

        del connection
        gc.collect()

        assert connection_ref() is None
        assert bound.get_connection() is None

    def test_bound_instances_validate(self):
        """
        Test that a bound subclass keeps the schema of its model.
        """
        bound = Dog.bind(SQLiteConnection())
        assert bound(name="Guy").validate() == {"name": "Guy", "favorite_toy": None}


class TestModelSchema:
    """Tests for the memoized plain and patch schemas."""

    def test_no_schema(self):
        """
        Test that a model without a schema has neither schema nor JSON attributes.
        """
        assert Zombie.get_schema() is None
        assert Zombie.get_schema(patch=True) is None
        assert Zombie.get_json_attributes() is None

    def test_class_schema_is_used_as_is(self):
        """
        Test that a pydantic schema is returned unchanged and memoized.
        """
        assert Dog.get_schema() is Dog.schema
        assert Dog.get_schema(patch=True) is Dog.get_schema(patch=True)
        assert Dog.get_schema(patch=True) is not Dog.schema

    def test_dict_schema_is_compiled_once(self):
        """
        Test that a dict of field definitions is compiled into a pydantic model once.
        """
        schema = Person.get_schema()
        assert issubclass(schema, BaseModel)
        assert set(schema.model_fields) == {"first_name", "last_name", "age"}
        assert Person.get_schema() is schema

    def test_patch_schema_makes_fields_optional(self):
        """
        Test that every field of the patch schema may be omitted.
        """
        patch = Person.get_schema(patch=True)
        assert patch.model_validate({}).model_dump(exclude_unset=True) == {}
        assert all(not field.is_required() for field in patch.model_fields.values())

    def test_subclass_does_not_share_cache(self):
        """
        Test that a subclass owns its own cache slot even when it inherits the schema.
        """

        class Puppy(Dog):
            pass

        class Hound(Dog):
            class schema(BaseModel):
                name: str
                speed: int

        assert Puppy.get_schema() is Dog.get_schema()
        assert Puppy.get_schema(patch=True) is not Dog.get_schema(patch=True)
        assert Hound.get_schema() is Hound.schema
        assert "speed" in Hound.get_schema(patch=True).model_fields
        assert "speed" not in Dog.get_schema(patch=True).model_fields

    def test_assigning_schema_invalidates_cache(self):
        """
        Test that declaring a new schema on a class drops the memoized views.
        """

        class Kennel(Model):
            schema = {"size": (int, ...)}

        old_patch = Kennel.get_schema(patch=True)
        Kennel.schema = {"size": (int, ...), "city": (str, ...)}

        assert set(Kennel.get_schema().model_fields) == {"size", "city"}
        assert Kennel.get_schema(patch=True) is not old_patch


class TestJsonAttributes:
    """Tests for the attributes stored as JSON documents."""

    def test_derived_from_schema(self):
        """
        Test that containers and optional containers are detected, scalars are not.
        """
        assert Movie.get_json_attributes() == ["cast", "ratings"]
        assert Person.get_json_attributes() == []

    def test_nested_model_is_json(self):
        """
        Test that nested pydantic models and PEP 604 unions are detected.
        """

        class Address(BaseModel):
            city: str

        class Home(Model):
            class schema(BaseModel):
                address: Address
                tags: list[str] | None = None
                owner: Optional[str] = None

        assert Home.get_json_attributes() == ["address", "tags"]

    def test_explicit_value_wins(self):
        """
        Test that an explicit list is used as is, also by subclasses.
        """

        class Poster(Model):
            json_attributes = ["meta"]

            class schema(BaseModel):
                meta: str
                sizes: List[int]

        assert Poster.get_json_attributes() == ["meta"]
        assert Poster.bind(SQLiteConnection()).get_json_attributes() == ["meta"]

    def test_memoized_per_schema(self):
        """
        Test that the derived list follows a newly declared schema.
        """

        class Crate(Model):
            schema = {"items": (Dict[str, int], ...)}

        assert Crate.get_json_attributes() == ["items"]
        Crate.schema = {"label": (str, ...)}
        assert Crate.get_json_attributes() == []


class TestValidate:
    """Tests for `Model.validate`."""

    def test_valid_data_gets_defaults(self):
        """
        Test that validated data includes defaults.
        """
        assert Dog().validate({"name": "Guy"}) == {"name": "Guy", "favorite_toy": None}

    def test_patch_keeps_only_given_fields(self):
        """
        Test that patch validation allows missing fields and does not fill in defaults.
        """
        assert Person().validate({"age": 3}, patch=True) == {"age": 3}

    def test_invalid_data(self):
        """
        Test that a mismatch raises `ValidationError` with per-field details.
        """
        with pytest.raises(ValidationError) as excinfo:
            Person().validate({"first_name": 7, "age": "old"})

        data = excinfo.value.data
        assert set(data) == {"first_name", "last_name", "age"}
        assert data["first_name"][0]["keyword"] == "string_type"
        assert data["last_name"][0]["keyword"] == "missing"
        assert data["age"][0]["keyword"] == "int_parsing"
        assert all({"message", "keyword", "params"} <= set(entry) for errors in data.values() for entry in errors)

    def test_skip_validation(self):
        """
        Test that skipping validation returns the data untouched.
        """
        json = {"name": 5}
        assert Dog().validate(json, skip_validation=True) is json

    def test_no_schema_returns_data(self):
        """
        Test that a model without a schema accepts anything.
        """
        assert Zombie().validate({"brains": True}) == {"brains": True}

    def test_before_validate_can_swap_schema(self):
        """
        Test that `before_validate` sees the options that were passed and can replace the schema.
        """
        seen = {}

        class Strict(BaseModel):
            name: str
            good_boy: bool

        class PickyDog(Dog):
            def before_validate(self, schema, json, options):
                seen["options"] = options
                return Strict

        with pytest.raises(ValidationError):
            PickyDog().validate({"name": "Guy"})
        assert seen["options"] == {}

        PickyDog().validate({"name": "Guy", "good_boy": True}, patch=True)
        assert seen["options"] == {"patch": True}
