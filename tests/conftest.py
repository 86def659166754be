"""Shared fixtures: key generation is slow, so keys are created once per session."""
import pytest

from fhe_core.bfv_scheme import BFVScheme
from fhe_core.model import DEFAULT_MODEL


@pytest.fixture(scope="session")
def scheme():
    return BFVScheme()


@pytest.fixture(scope="session")
def keypair(scheme):
    return scheme.generate_keypair()


@pytest.fixture(scope="session")
def other_keypair(scheme):
    return scheme.generate_keypair()


@pytest.fixture
def model():
    return DEFAULT_MODEL
