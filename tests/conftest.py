"""Shared fixtures: a fixed noise table keeps every render reproducible."""
import logging

import pytest

from pattern_generator.noise import NoiseEngine, create_permutation_table
from pattern_generator.generator import PatternGenerator


@pytest.fixture(scope="session")
def permutation_table():
    """A permutation table shuffled from a fixed seed."""
    return create_permutation_table(seed=1234)


@pytest.fixture
def engine(permutation_table):
    return NoiseEngine(permutation_table=permutation_table)


@pytest.fixture
def logger():
    return logging.getLogger("pattern_generator.tests")


@pytest.fixture
def generator(permutation_table, logger):
    """A generator sized for fast tests."""
    return PatternGenerator(config={'width': 64, 'height': 48}, logger=logger, permutation_table=permutation_table)
