"""
Database Configuration
======================

Neo4j connection configuration, built once at process start and passed
explicitly to the service that owns the driver.
"""
import os
from typing import TYPE_CHECKING
from dataclasses import dataclass

if TYPE_CHECKING:
    from .settings import Settings
    from ..services.neo4j_service import Neo4jService


@dataclass
class Neo4jConfig:
    """Neo4j connection configuration."""
    uri: str
    user: str
    password: str
    database: str = "neo4j"

    @classmethod
    def from_settings(cls, settings: 'Settings') -> 'Neo4jConfig':
        """Create config from loaded application settings."""
        return cls(
            uri=settings.neo4j_uri,
            user=settings.neo4j_user,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
        )

    @classmethod
    def from_env(cls) -> 'Neo4jConfig':
        """Create config from environment variables."""
        uri = os.getenv('NEO4J_URI')
        if not uri:
            host = os.getenv('NEO4J_HOST')
            if not host:
                raise ValueError("NEO4J_URI or NEO4J_HOST environment variable is required")
            uri = f"bolt://{host}:{os.getenv('NEO4J_BOLT_PORT', '7687')}"

        return cls(
            uri=uri,
            user=os.getenv('NEO4J_USER', 'neo4j'),
            password=os.getenv('NEO4J_PASSWORD', ''),
            database=os.getenv('NEO4J_DATABASE', 'neo4j'),
        )


async def create_neo4j_service(config: Neo4jConfig) -> 'Neo4jService':
    """Create and connect Neo4j service from config."""
    from ..services.neo4j_service import Neo4jService
    service = Neo4jService(
        uri=config.uri,
        user=config.user,
        password=config.password,
        database=config.database,
    )
    await service.connect()
    return service
