##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""Compatibility check between two model definitions."""

from typing import Type

from realmdb.exceptions import IncompatibleModelsError
from realmdb.models.model import Model


DEFAULT_MESSAGE = (
    "Models are incompatible. One model must extend the other, "
    "they must have the same name, and share the same table name."
)


def assert_compatible(model_a: Type[Model], model_b: Type[Model], message: str = None):
    """
    Assert that two model definitions can stand in for each other.

    They are compatible when one extends the other, they share a logical name,
    and they share a table.

    Args:
        model_a: A model definition.
        model_b: Another model definition.
        message: A custom error message.

    Raises:
        IncompatibleModelsError: If the models are not compatible.
    """
    extends = issubclass(model_a, model_b) or issubclass(model_b, model_a)
    same_name = model_a.__name__ == model_b.__name__
    same_table = model_a.get_table_name() == model_b.get_table_name()

    if not (extends and same_name and same_table):
        raise IncompatibleModelsError(message or DEFAULT_MESSAGE)
