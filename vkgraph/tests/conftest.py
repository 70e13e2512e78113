"""
Pytest configuration for vkgraph tests.
"""

import pytest

from vkgraph.tests.fakes import SEED_ID, FakeVKClient, InMemoryGraphRepository, group, person


def pytest_configure(config):
    """Configure pytest with asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test."
    )


@pytest.fixture
def scenario_client():
    """
    Seed with 3 followers and 2 subscriptions (one person, one group).

    None of the followers overlap with the subscriptions, and the
    discovered persons have no relations of their own.
    """
    return FakeVKClient(
        users=[person(SEED_ID, "Seed"), person(101), person(102), person(103), person(201)],
        followers={SEED_ID: [101, 102, 103]},
        subscriptions={SEED_ID: ([201], [301])},
        groups=[group(301)],
    )


@pytest.fixture
def repository():
    """Empty in-memory graph store"""
    return InMemoryGraphRepository()
