"""
Pytest fixtures for persistence tests against a real Neo4j.

Point TEST_NEO4J_URI at a throwaway instance: every test starts by
deleting all nodes. Tests are skipped when nothing answers there.

Usage:
    TEST_NEO4J_URI=bolt://localhost:7688 pytest -m integration
"""

import os
import pytest
import pytest_asyncio
from neo4j.exceptions import DriverError, Neo4jError

from vkgraph.repositories import SocialGraphRepository
from vkgraph.services import Neo4jService


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring Neo4j"
    )


@pytest_asyncio.fixture
async def neo4j_service():
    """Connected test Neo4j, or skip"""
    service = Neo4jService(
        uri=os.getenv("TEST_NEO4J_URI", "bolt://localhost:7688"),
        user=os.getenv("TEST_NEO4J_USER", "neo4j"),
        password=os.getenv("TEST_NEO4J_PASSWORD", "test_password"),
        database=os.getenv("TEST_NEO4J_DATABASE", "neo4j"),
    )
    try:
        await service.connect()
    except (DriverError, Neo4jError, OSError) as e:
        pytest.skip(f"Neo4j not available: {e}")

    try:
        yield service
    finally:
        await service.close()


@pytest_asyncio.fixture
async def fresh_repository(neo4j_service):
    """
    Per-test fresh database.

    Clears all data and creates constraints before each test.
    """
    await neo4j_service._execute_write("MATCH (n) DETACH DELETE n")
    repository = SocialGraphRepository(neo4j_service)
    await repository.ensure_schema()
    yield repository
