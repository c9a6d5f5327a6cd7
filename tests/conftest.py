"""Shared fixtures for ngspairmap tests."""

import numpy as np
import pytest


def random_sequence(length, seed):
    """Uniform random ACGT sequence."""
    rng = np.random.default_rng(seed)
    return "".join(rng.choice(list("ACGT"), size=length))


@pytest.fixture
def linear_seq():
    """40 bp linear reference sequence."""
    return random_sequence(40, seed=1)


@pytest.fixture
def circular_seq():
    """60 bp circular reference sequence."""
    return random_sequence(60, seed=2)


@pytest.fixture
def circular_id():
    return "plasmid topology=circular"
