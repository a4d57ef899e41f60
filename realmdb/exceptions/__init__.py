##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Module of all RealmDB-specific exception types.

Registration-time errors (`ConfigError` and its subclasses, `DuplicateModelError`,
`LateRegistrationError`) abort only the contribution that raised them. Pre-start
errors (`ConnectionUnreachableError`, `MigrationIOError`, `MigrationError`) abort
the whole pre-start phase. `ConnectionTeardownError` is raised once every distinct
connection has had its teardown attempted. `ValidationError` is local to a single
`Model.validate` call.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

from typing import Any, Dict, List, Tuple


__all__ = (
    "RealmDBError",
    "ConfigError",
    "DuplicateConnectionError",
    "DuplicateFlagError",
    "DuplicateModelError",
    "LateRegistrationError",
    "LifecycleError",
    "ConnectionUnreachableError",
    "MigrationIOError",
    "MigrationError",
    "ConnectionTeardownError",
    "ValidationError",
    "IncompatibleModelsError",
    "ConnectionNotSupportedError",
)


class RealmDBError(Exception):
    """
    Base class for every error raised by RealmDB.
    """


class ConfigError(RealmDBError):
    """
    Exception to signal a malformed contribution (unknown keys, bad value types,
    unloadable model files).
    """

    def __init__(self, message: str):
        super().__init__(message)


class DuplicateConnectionError(ConfigError):
    """
    Exception to signal that a realm declared a connection more than once.
    """

    def __init__(self, message: str = "A connection instance/config may be specified only once per realm."):
        super().__init__(message)


class DuplicateFlagError(ConfigError):
    """
    Exception to signal that a process-wide flag was set more than once in a realm tree.

    Attributes:
        flag: The name of the flag that was set twice.
    """

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"realmdb's {flag} option can only be specified once.")


class DuplicateModelError(RealmDBError):
    """
    Exception to signal that two different model definitions share a logical name.

    Attributes:
        model_name: The logical name that collided.
    """

    def __init__(self, model_name: str, registered_in: str, attempted_in: str):
        self.model_name = model_name
        super().__init__(
            f'Model "{model_name}" has already been registered '
            f'(registered in realm "{registered_in}", attempted again in realm "{attempted_in}").'
        )


class LateRegistrationError(RealmDBError):
    """
    Exception to signal that a contribution arrived after the pre-start phase began.
    """

    def __init__(self, message: str):
        super().__init__(message)


class LifecycleError(RealmDBError):
    """
    Exception to signal an invalid lifecycle transition.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConnectionUnreachableError(RealmDBError):
    """
    Exception raised when a connection fails its readiness probe.

    Attributes:
        connection: The connection that could not be reached.
        model_names: The sorted logical names of the models bound to that connection.
    """

    def __init__(self, message: str, connection: Any = None, model_names: List[str] = None):
        self.connection = connection
        self.model_names = model_names or []
        super().__init__(message)


class MigrationIOError(RealmDBError):
    """
    Exception to signal a filesystem failure while coalescing migration directories.
    """

    def __init__(self, message: str):
        super().__init__(message)


class MigrationError(RealmDBError):
    """
    Exception to signal an inconsistent migration ledger or directory.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConnectionTeardownError(RealmDBError):
    """
    Exception raised after teardown when one or more connections failed to be destroyed.

    Attributes:
        errors: A list of `(connection, exception)` tuples.
    """

    def __init__(self, errors: List[Tuple[Any, Exception]]):
        self.errors = errors
        details = "; ".join(f"{connection}: {error}" for connection, error in errors)
        super().__init__(f"Failed to destroy {len(errors)} connection(s): {details}")


class ValidationError(RealmDBError):
    """
    Exception raised when a value does not match a model's schema.

    Attributes:
        data: A mapping of field name to a list of `{"message", "keyword", "params"}` dicts.
    """

    def __init__(self, message: str, data: Dict[str, List[Dict]] = None):
        self.data = data or {}
        super().__init__(message)


class IncompatibleModelsError(RealmDBError):
    """
    Exception to signal that two model definitions are not interchangeable.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConnectionNotSupportedError(RealmDBError):
    """
    Exception to signal that a connection descriptor names an unknown backend.
    """

    def __init__(self, message: str):
        super().__init__(message)
