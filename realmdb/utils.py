##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Module for project-wide utility functions.
"""
import importlib.util
import logging
import os
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, Union

import yaml


LOG = logging.getLogger(__name__)


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def resolve_path(path: Union[str, Path], base: Union[str, Path] = None) -> str:
    """
    Turn `path` into an absolute path.

    Args:
        path: An absolute or relative path. `~` and environment variables are expanded.
        base: The directory relative paths are resolved against. Defaults to the
            current working directory.

    Returns:
        The absolute, normalized path.
    """
    expanded = os.path.expandvars(os.path.expanduser(str(path)))
    if os.path.isabs(expanded):
        return os.path.normpath(expanded)
    return os.path.normpath(os.path.join(str(base) if base is not None else os.getcwd(), expanded))


def module_name_for(path: str, prefix: str) -> str:
    """
    Build an importable, collision-resistant module name for a file loaded by path.

    Args:
        path: The path to the Python file.
        prefix: A namespace prefix for the generated name.

    Returns:
        A valid dotted-free module name.
    """
    stem = re.sub(r"\W", "_", Path(path).stem)
    return f"{prefix}_{stem}_{abs(hash(os.path.abspath(path))):x}"


def load_module_from_path(path: str, module_name: str, register: bool = False) -> ModuleType:
    """
    Import a Python source file that is not necessarily on `sys.path`.

    Args:
        path: The path to the Python file.
        module_name: The name to give the module.
        register: If True, the module is inserted into `sys.modules` before it is
            executed so that classes defined in it can resolve their own module. A module
            already registered under `module_name` is returned as is.

    Returns:
        The executed module.

    Raises:
        ImportError: If no loader can be built for `path`.
    """
    if register and module_name in sys.modules:
        return sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load a module from '{path}'.")
    module = importlib.util.module_from_spec(spec)
    if register:
        sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    LOG.debug(f"Loaded module '{module_name}' from '{path}'.")
    return module
