##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Validation of realm contributions.

A contribution is what one realm supplies to RealmDB: an optional connection (a live
`DatabaseConnection` or a descriptor dict such as `{"backend": "sqlite"}`), models,
a migrations directory, and the process-wide `migrate_on_start` and `teardown_on_stop`
flags. Contributions are validated with pydantic before any state is touched; any
shape error surfaces as a `ConfigError`.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, StrictBool, field_validator
from pydantic import ValidationError as PydanticValidationError

from realmdb.connections.database_connection import DatabaseConnection
from realmdb.exceptions import ConfigError
from realmdb.models.loader import is_model
from realmdb.models.model import Model
from realmdb.utils import load_yaml, resolve_path


LOG = logging.getLogger(__name__)

PROCESS_FLAGS = ("teardown_on_stop", "migrate_on_start")
PATH_OPTIONS = ("models", "migrations_dir")


class ContributionOptions(BaseModel):
    """
    The validated shape of a realm's contribution.

    Attributes:
        connection: A live connection, or a descriptor dict with a `backend` key.
        models: A model, a list of models, or a path/glob to model files.
        migrations_dir: A directory of migration files.
        migrate_on_start: `False`, `True`, `"latest"` or `"rollback"`. Process-wide.
        teardown_on_stop: Whether connections are destroyed on stop. Process-wide.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True, frozen=True)

    connection: Optional[Union[DatabaseConnection, Dict[str, Any]]] = None
    models: Optional[Union[Type[Model], List[Type[Model]], str, Path]] = None
    migrations_dir: Optional[Union[str, Path]] = None
    migrate_on_start: Optional[Union[StrictBool, Literal["latest", "rollback"]]] = None
    teardown_on_stop: Optional[StrictBool] = None

    @field_validator("connection")
    @classmethod
    def _connection_names_backend(cls, value: Any) -> Any:
        if isinstance(value, dict) and not value.get("backend"):
            raise ValueError("a connection config must name its 'backend'")
        return value

    def flags(self) -> Dict[str, Any]:
        """
        Return the process-wide flags this contribution sets.

        Returns:
            A dict of flag name to value, omitting flags that were not given.
        """
        return {flag: getattr(self, flag) for flag in PROCESS_FLAGS if getattr(self, flag) is not None}


def _describe_errors(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        key = str(error["loc"][0]) if error["loc"] else "options"
        if error["type"] == "extra_forbidden":
            message = f'"{key}" is not allowed'
        else:
            message = f'"{key}" is invalid: {error["msg"]}'
        if message not in messages:
            messages.append(message)
    return "; ".join(messages)


def parse_contribution(config: Any) -> ContributionOptions:
    """
    Validate a contribution.

    Besides a mapping of options, `config` may be a model, a list/tuple of models, or a
    path, each short for `{"models": config}`.

    Args:
        config: The contribution.

    Returns:
        The validated options.

    Raises:
        ConfigError: If the contribution is malformed.
    """
    if isinstance(config, ContributionOptions):
        return config
    if config is None:
        return ContributionOptions()
    if is_model(config) or isinstance(config, (list, tuple, str, os.PathLike)):
        config = {"models": config}
    if not isinstance(config, Mapping):
        raise ConfigError(f"Bad options passed to realmdb. Expected a mapping of options, got {type(config).__name__}.")

    try:
        return ContributionOptions.model_validate(dict(config))
    except PydanticValidationError as exc:
        raise ConfigError(f"Bad options passed to realmdb. {_describe_errors(exc)}") from exc


def load_options(filepath: str) -> Dict[str, Any]:
    """
    Read contribution options from a YAML file.

    Relative `models` and `migrations_dir` paths in the file resolve against the
    directory containing the file.

    Args:
        filepath: The path to the YAML file.

    Returns:
        The options, ready to be passed to `contribute`.

    Raises:
        ConfigError: If the file does not hold a mapping.
    """
    LOG.info(f"Reading realmdb options from file {filepath}")
    options = load_yaml(filepath) or {}
    if not isinstance(options, dict):
        raise ConfigError(f"Bad options passed to realmdb. '{filepath}' does not contain a mapping.")

    base = os.path.dirname(os.path.abspath(filepath))
    for key in PATH_OPTIONS:
        if isinstance(options.get(key), str):
            options[key] = resolve_path(options[key], base)
    return options
