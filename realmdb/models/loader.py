##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Normalization of model contributions.

A realm may contribute models as a single `Model` subclass, a list or tuple of them,
or a path. A path may name a Python file, a directory of Python files, or a glob.
A file exports the models listed in its `__all__`, or else every `Model` subclass
defined in it, in definition order.
"""

import glob
import logging
import os
from pathlib import Path
from typing import Any, List, Type, Union

from realmdb.exceptions import ConfigError
from realmdb.models.model import Model
from realmdb.utils import load_module_from_path, module_name_for, resolve_path


LOG = logging.getLogger(__name__)

GLOB_CHARACTERS = "*?["

ModelContribution = Union[Type[Model], List[Type[Model]], str, Path]


def is_model(candidate: Any) -> bool:
    """
    Check whether `candidate` is a model definition.

    Args:
        candidate: Any object.

    Returns:
        True if `candidate` is a subclass of `Model` other than `Model` itself.
    """
    return isinstance(candidate, type) and issubclass(candidate, Model) and candidate is not Model


def expand_model_path(path: Union[str, Path], base: str = None) -> List[str]:
    """
    Resolve a model path, directory, or glob into a sorted list of Python files.

    Args:
        path: A file, directory or glob. Relative paths resolve against `base`.
        base: The directory relative paths resolve against. Defaults to the current working directory.

    Returns:
        The matching files.

    Raises:
        ConfigError: If a non-glob path does not exist.
    """
    resolved = resolve_path(path, base)
    if any(char in resolved for char in GLOB_CHARACTERS):
        return sorted(match for match in glob.glob(resolved, recursive=True) if os.path.isfile(match))
    if os.path.isdir(resolved):
        return sorted(
            os.path.join(resolved, entry)
            for entry in os.listdir(resolved)
            if entry.endswith(".py") and not entry.startswith("_")
        )
    if os.path.isfile(resolved):
        return [resolved]
    raise ConfigError(f"Bad options passed to realmdb. No model files found at '{path}'.")


def load_model_file(path: str) -> List[Type[Model]]:
    """
    Import a model file and collect the models it exports.

    Args:
        path: The Python file to import.

    Returns:
        The exported models, in export or definition order.

    Raises:
        ConfigError: If the file cannot be imported.
    """
    try:
        module = load_module_from_path(path, module_name_for(path, "realmdb_models"), register=True)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise ConfigError(f"Bad options passed to realmdb. Could not load models from '{path}': {exc}") from exc

    exported = getattr(module, "__all__", None)
    if exported is not None:
        candidates = [getattr(module, name, None) for name in exported]
    else:
        candidates = [value for value in vars(module).values() if getattr(value, "__module__", None) == module.__name__]

    models = [candidate for candidate in candidates if is_model(candidate)]
    LOG.debug(f"Loaded {len(models)} model(s) from '{path}'.")
    return models


def normalize_models(models: ModelContribution, base: str = None) -> List[Type[Model]]:
    """
    Resolve a model contribution into an ordered list of model definitions.

    Args:
        models: A model, a list/tuple of models, or a path/glob to model files.
        base: The directory relative paths resolve against.

    Returns:
        The model definitions, in contribution order.

    Raises:
        ConfigError: If the contribution has an unsupported shape.
    """
    if models is None:
        return []
    if is_model(models):
        return [models]
    if isinstance(models, (str, os.PathLike)):
        return [model for path in expand_model_path(models, base) for model in load_model_file(path)]
    if isinstance(models, (list, tuple)):
        invalid = [repr(model) for model in models if not is_model(model)]
        if invalid:
            raise ConfigError(f"Bad options passed to realmdb. Not model definitions: {', '.join(invalid)}.")
        return list(models)
    raise ConfigError(
        "Bad options passed to realmdb. `models` must be a model, a list of models, or a path; "
        f"got {type(models).__name__}."
    )
