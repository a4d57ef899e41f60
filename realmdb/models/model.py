##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The `Model` base class for RealmDB.

Plugins declare models by subclassing `Model`. A model's logical name is its class
name and must be unique across the whole realm tree. A model may carry a pydantic
schema, used by `Model.validate`, and is bound to a database connection during the
pre-start phase by `Model.bind`, which returns a bound subclass instead of mutating
the class a plugin handed in.
"""

import logging
import types
import typing
import weakref
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Type, Union

from pydantic import BaseModel, create_model
from pydantic import ValidationError as PydanticValidationError

from realmdb.exceptions import ValidationError


if TYPE_CHECKING:
    from realmdb.connections.database_connection import DatabaseConnection


LOG = logging.getLogger(__name__)

JSON_CONTAINER_TYPES = (dict, list, tuple, set, frozenset)

# connection -> {model class: bound subclass}
BOUND_MODELS: "weakref.WeakKeyDictionary[DatabaseConnection, Dict[type, type]]" = weakref.WeakKeyDictionary()


def _is_json_annotation(annotation: Any) -> bool:
    """
    Check whether a schema field is stored as a JSON document rather than a scalar column.

    Args:
        annotation: The field's type annotation.

    Returns:
        True for dicts, sequences, sets and nested pydantic models (optionally wrapped in Optional/Union).
    """
    origin = typing.get_origin(annotation)
    if origin in (Union, types.UnionType):
        return any(_is_json_annotation(arg) for arg in typing.get_args(annotation) if arg is not type(None))
    if origin is not None:
        return isinstance(origin, type) and issubclass(origin, JSON_CONTAINER_TYPES)
    if isinstance(annotation, type):
        return issubclass(annotation, JSON_CONTAINER_TYPES) or issubclass(annotation, BaseModel)
    return False


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return str(value)


def _validation_data(exc: PydanticValidationError) -> Dict[str, List[Dict]]:
    """
    Convert pydantic's error list into a mapping of field name to error details.

    Args:
        exc: The pydantic validation error.

    Returns:
        A dict mapping dotted field paths to lists of `{"message", "keyword", "params"}` dicts.
    """
    data: Dict[str, List[Dict]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "$root"
        params = {key: _jsonable(value) for key, value in (error.get("ctx") or {}).items()}
        data.setdefault(field, []).append({"message": error["msg"], "keyword": error["type"], "params": params})
    return data


class Model:
    """
    Base class for database models contributed by realms.

    Class attributes:
        table_name (str): The table backing the model. Defaults to the class name.
        schema: A pydantic `BaseModel` subclass, or a dict of pydantic field
            definitions (`{"name": (str, ...)}`), describing valid instances.
        json_attributes (List[str]): Explicit list of attributes stored as JSON.
            When unset it is derived from the schema.

    Methods:
        get_table_name: The table backing the model.
        get_connection: The connection bound to the model, if any.
        bind: Return a subclass bound to a connection.
        get_schema: The plain or patch pydantic schema, memoized per class.
        get_json_attributes: The attributes stored as JSON, memoized per class.
        before_validate: Hook allowing an instance to swap its schema before validation.
        validate: Validate a dict (or the instance itself) against the schema.
    """

    table_name: ClassVar[Optional[str]] = None
    schema: ClassVar[Optional[Union[Type[BaseModel], Dict[str, Any]]]] = None
    json_attributes: ClassVar[Optional[List[str]]] = None
    _connection_ref: ClassVar[Optional[weakref.ref]] = None

    def __init__(self, **attributes: Any):
        for name, value in attributes.items():
            setattr(self, name, value)

    def __repr__(self) -> str:
        attributes = ", ".join(f"{name}={value!r}" for name, value in self.to_dict().items())
        return f"{self.__class__.__name__}({attributes})"

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the instance's public attributes.

        Returns:
            A dict of attribute name to value, omitting names starting with an underscore.
        """
        return {name: value for name, value in vars(self).items() if not name.startswith("_")}

    @classmethod
    def get_table_name(cls) -> str:
        """The table backing the model."""
        return cls.table_name or cls.__name__

    @classmethod
    def get_connection(cls) -> Optional["DatabaseConnection"]:
        """The connection bound to the model, or None."""
        return cls._connection_ref() if cls._connection_ref is not None else None

    @classmethod
    def bind(cls, connection: "DatabaseConnection") -> Type["Model"]:
        """
        Return a subclass of this model bound to `connection`.

        The subclass keeps the logical name, table name and schema of this model.
        Bound subclasses are memoized per connection, so binding twice returns the same class.
        The memo and the bound subclass only hold weak references to the connection, so a
        connection nothing else uses is freed along with its memo entries.

        Args:
            connection: The connection to bind.

        Returns:
            The bound subclass.
        """
        bound_models = BOUND_MODELS.setdefault(connection, {})
        bound = bound_models.get(cls)
        if bound is None:
            bound = type(cls)(
                cls.__name__,
                (cls,),
                {
                    "_connection_ref": weakref.ref(connection),
                    "__module__": cls.__module__,
                    "__qualname__": cls.__qualname__,
                    "__doc__": cls.__doc__,
                },
            )
            bound_models[cls] = bound
            LOG.debug(f"Bound model '{cls.__name__}' to {connection.describe()}.")
        return bound

    @classmethod
    def _compile_schema(cls) -> Optional[Type[BaseModel]]:
        if cls.schema is None:
            return None
        if isinstance(cls.schema, dict):
            return create_model(f"{cls.__name__}Schema", **cls.schema)
        return cls.schema

    @classmethod
    def get_schema(cls, patch: bool = False) -> Optional[Type[BaseModel]]:
        """
        Return the model's pydantic schema.

        Both views are memoized on the concrete class: a subclass never reuses its parent's
        cache, and assigning a new `schema` invalidates the cache.

        Args:
            patch: If True, return a variant of the schema in which every field is optional.

        Returns:
            The schema, or None if the model has no schema.
        """
        cache = cls.__dict__.get("_schema_cache")
        if cache is None or cache["declared"] is not cls.schema:
            cache = {"declared": cls.schema}
            cls._schema_cache = cache

        if patch not in cache:
            if patch:
                plain = cls.get_schema()
                cache[True] = None if plain is None else create_model(
                    f"{plain.__name__}Patch",
                    __base__=plain,
                    **{name: (Optional[field.annotation], None) for name, field in plain.model_fields.items()},
                )
            else:
                cache[False] = cls._compile_schema()
        return cache[patch]

    @classmethod
    def get_json_attributes(cls) -> Optional[List[str]]:
        """
        Return the attributes stored as JSON documents.

        An explicit `json_attributes` declared on the class wins. Otherwise the list is derived
        from the schema (dict, list, tuple, set and nested model fields) and memoized per class.

        Returns:
            The attribute names, or None if the model has no schema.
        """
        if cls.json_attributes is not None:
            return cls.json_attributes

        cache = cls.__dict__.get("_json_attributes_cache")
        if cache is not None and cache[0] is cls.schema:
            return cache[1]

        schema = cls.get_schema()
        attributes = None
        if schema is not None:
            attributes = [name for name, field in schema.model_fields.items() if _is_json_annotation(field.annotation)]
        cls._json_attributes_cache = (cls.schema, attributes)
        return attributes

    def before_validate(
        self, schema: Optional[Type[BaseModel]], json: Dict[str, Any], options: Dict[str, Any]
    ) -> Optional[Type[BaseModel]]:
        """
        Hook called before validation. Override to swap or inspect the schema.

        Args:
            schema: The schema about to be used.
            json: The data about to be validated.
            options: The validation options that were passed explicitly.

        Returns:
            The schema to validate against.
        """
        return schema

    def validate(self, json: Dict[str, Any] = None, skip_validation: bool = False, patch: bool = False) -> Dict:
        """
        Validate `json` against the model's schema.

        Args:
            json: The data to validate. Defaults to the instance's own attributes.
            skip_validation: If True, return `json` without validating it.
            patch: If True, missing fields are allowed and defaults are not filled in.

        Returns:
            The validated data.

        Raises:
            ValidationError: If the data does not match the schema.
        """
        json = self.to_dict() if json is None else json

        options = {}
        if skip_validation:
            options["skip_validation"] = True
        if patch:
            options["patch"] = True

        schema = self.before_validate(self.get_schema(patch), json, options)
        if schema is None or skip_validation:
            return json

        try:
            validated = schema.model_validate(json)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc), _validation_data(exc)) from exc
        return validated.model_dump(exclude_unset=patch)
