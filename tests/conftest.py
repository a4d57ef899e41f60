##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import logging
import os
from glob import glob

import pytest

from realmdb.host import Host
from tests.fixture_types import FixtureHost, FixtureModification, FixtureStr


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(TESTS_DIR)

fixture_glob = os.path.join(TESTS_DIR, "fixtures", "**", "*.py")
pytest_plugins = [
    os.path.relpath(fixture_file, REPO_ROOT).replace(os.sep, ".").replace(".py", "")
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture(scope="session")
def test_data_dir() -> FixtureStr:
    """
    The directory holding the static files used by the test suite
    (model files, migration directories, YAML options).

    Returns:
        The absolute path to `tests/test_data`.
    """
    return os.path.join(TESTS_DIR, "test_data")


@pytest.fixture
def migrations_data_dir(test_data_dir: FixtureStr) -> FixtureStr:
    """
    The directory holding the sample migration directories.

    Args:
        test_data_dir: The absolute path to `tests/test_data`.

    Returns:
        The absolute path to `tests/test_data/migrations`.
    """
    return os.path.join(test_data_dir, "migrations")


@pytest.fixture
def host() -> FixtureHost:
    """
    A fresh host with an empty realm tree.

    Returns:
        A `Host` whose root realm is named "root".
    """
    return Host()


@pytest.fixture(autouse=True)
def reset_realmdb_logger() -> FixtureModification:
    """
    Restore the `realmdb` logger after tests that configure it, so that
    `caplog` keeps receiving records in later tests.
    """
    logger = logging.getLogger("realmdb")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
