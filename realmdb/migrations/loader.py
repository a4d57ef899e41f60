##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Recognition and loading of migration files.

A migration file is a Python module that defines two callables, `up(connection)`
and `down(connection)`. Anything else found in a migrations directory (data files,
helpers without both functions, private `_`-prefixed modules, files that do not
parse) is not a migration.

Recognition reads the source without importing it, so only the migration runner
ever executes a migration's module body.
"""

import ast
import logging
import os
from types import ModuleType
from typing import Optional, Set

from realmdb.utils import load_module_from_path, module_name_for


LOG = logging.getLogger(__name__)

MIGRATION_SUFFIX = ".py"
MIGRATION_FUNCTIONS = {"up", "down"}


def _top_level_names(tree: ast.Module) -> Set[str]:
    names = set()
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            names.update(target.id for target in node.targets if isinstance(target, ast.Name))
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
        elif isinstance(node, ast.ImportFrom):
            names.update(alias.asname or alias.name for alias in node.names)
    return names


def is_migration_file(path: str) -> bool:
    """
    Check whether `path` follows the migration-file convention without importing it.

    Args:
        path: Path to the candidate file.

    Returns:
        True if the file is a public `.py` file whose top level defines both `up` and `down`.
    """
    filename = os.path.basename(path)
    if not filename.endswith(MIGRATION_SUFFIX) or filename.startswith(("_", ".")) or not os.path.isfile(path):
        return False

    try:
        with open(path, "rb") as migration_file:
            tree = ast.parse(migration_file.read(), filename=path)
    except (OSError, SyntaxError, ValueError) as exc:
        LOG.debug(f"Could not read '{path}' as a migration: {exc}")
        return False

    if not MIGRATION_FUNCTIONS.issubset(_top_level_names(tree)):
        LOG.debug(f"'{path}' does not define both `up` and `down`; it is not a migration.")
        return False
    return True


def load_migration(path: str) -> Optional[ModuleType]:
    """
    Import a migration file.

    Args:
        path: Path to the candidate file.

    Returns:
        The imported module if it is a migration, otherwise None.
    """
    if not is_migration_file(path):
        return None

    module = load_module_from_path(path, module_name_for(path, "realmdb_migration"))
    if callable(getattr(module, "up", None)) and callable(getattr(module, "down", None)):
        return module

    LOG.debug(f"'{path}' does not bind callable `up` and `down`; it is not a migration.")
    return None
