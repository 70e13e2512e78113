"""
Neo4j Graph Service - driver lifecycle and transaction helpers

Node Types:
- User: {id, name, first_name, last_name, screen_name, sex, city} - unique on id
- Group: {id, name, screen_name} - unique on id

Relationships:
- (User)-[:FOLLOWS]->(User)
- (User)-[:SUBSCRIBES_TO]->(User|Group)

Every write runs in its own managed write transaction, so a failure only
rolls back that single statement. Cypher for the social graph lives in
SocialGraphRepository.
"""
import os
import logging
from typing import Dict, List, Optional, Any

from neo4j import AsyncGraphDatabase, AsyncDriver
from neo4j.exceptions import DriverError, Neo4jError

from ..exceptions import StoreWriteError

logger = logging.getLogger(__name__)


class Neo4jService:
    """Service for Neo4j graph operations"""

    def __init__(
        self,
        uri: str = None,
        user: str = None,
        password: str = None,
        database: str = None,
    ):
        """Initialize Neo4j connection settings (connect() opens the driver)"""
        self.uri = uri or os.getenv('NEO4J_URI', 'bolt://localhost:7687')
        self.user = user or os.getenv('NEO4J_USER', 'neo4j')
        self.password = password if password is not None else os.getenv('NEO4J_PASSWORD', '')
        self.database = database or os.getenv('NEO4J_DATABASE', 'neo4j')

        self.driver: Optional[AsyncDriver] = None

    async def connect(self):
        """Establish connection to Neo4j"""
        if not self.driver:
            self.driver = AsyncGraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password)
            )
            try:
                await self.driver.verify_connectivity()
            except BaseException:
                await self.driver.close()
                self.driver = None
                raise
            logger.info(f"✅ Connected to Neo4j at {self.uri}")

    async def close(self):
        """Close Neo4j connection"""
        if self.driver:
            await self.driver.close()
            self.driver = None
            logger.info("🔌 Closed Neo4j connection")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _execute_write(self, query: str, parameters: Dict = None):
        """
        Execute write query in its own transaction.

        Returns:
            First record or None

        Raises:
            StoreWriteError: the transaction failed (after driver retries)
        """
        async def work(tx):
            result = await tx.run(query, parameters or {})
            return await result.single()

        try:
            async with self.driver.session(database=self.database) as session:
                return await session.execute_write(work)
        except (Neo4jError, DriverError) as e:
            raise StoreWriteError(f"Neo4j write failed: {e}") from e

    async def _execute_read(self, query: str, parameters: Dict = None) -> List[Dict[str, Any]]:
        """Execute read query"""
        async def work(tx):
            result = await tx.run(query, parameters or {})
            return await result.data()

        async with self.driver.session(database=self.database) as session:
            return await session.execute_read(work)
