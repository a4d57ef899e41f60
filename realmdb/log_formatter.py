##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Logging setup for RealmDB.

The `realmdb` logger gets a single named stream handler. Calling `setup_logging`
again swaps that handler out instead of adding another one, so building several
hosts in one process does not print every message several times.
"""

import logging
import sys
from typing import IO, Union

import coloredlogs


FORMATS = {
    "DEFAULT": "[%(asctime)s: %(levelname)s] %(message)s",
    "DEBUG": "[%(asctime)s: %(levelname)s] [%(name)s: %(lineno)d] %(message)s",
}

HANDLER_NAME = "realmdb"


def level_number(log_level: Union[int, str]) -> int:
    """
    Translate a level name such as "info" or "DEBUG" into its numeric value.

    Args:
        log_level: A level name or number.

    Returns:
        The numeric logging level.

    Raises:
        ValueError: If `log_level` is not a known level name.
    """
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'.")
    return level


def setup_logging(
    logger: logging.Logger, log_level: Union[int, str] = "INFO", colors: bool = True, stream: IO = None
) -> logging.Handler:
    """
    Setup and configure Python logging.

    Args:
        logger: A logging.Logger object.
        log_level: Logger level, by name or number. DEBUG and below use the detailed format.
        colors: If True use colored logs.
        stream: Where to write. Defaults to stdout.

    Returns:
        The handler now attached to `logger`.
    """
    level = level_number(log_level)
    fmt = FORMATS["DEBUG"] if level <= logging.DEBUG else FORMATS["DEFAULT"]
    formatter = coloredlogs.ColoredFormatter(fmt=fmt) if colors else logging.Formatter(fmt)

    for previous in [handler for handler in logger.handlers if handler.get_name() == HANDLER_NAME]:
        logger.removeHandler(previous)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return handler
