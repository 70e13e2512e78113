"""
Social Graph Repository - Neo4j storage for users, groups and their relations

Deduplication Strategy:
- Uniqueness constraints on User.id and Group.id
- Every write is a MERGE on id, so re-running a persist never adds nodes
- Relationships are MERGEd between the two merged endpoints, never CREATEd

Attribute policy:
- upsert_person: overwrite on create AND match (latest snapshot wins)
- upsert_relation: endpoint attributes set ON CREATE only, an existing
  node keeps the attributes it was created with
"""
import logging
from typing import Any, Dict, List, Union

from ..models import Edge, EdgeType, GroupEntity, NodeLabel, PersonEntity
from ..services.neo4j_service import Neo4jService

logger = logging.getLogger(__name__)

Entity = Union[PersonEntity, GroupEntity]

SCHEMA_CONSTRAINTS = [
    "CREATE CONSTRAINT user_id_unique IF NOT EXISTS FOR (u:User) REQUIRE u.id IS UNIQUE",
    "CREATE CONSTRAINT group_id_unique IF NOT EXISTS FOR (g:Group) REQUIRE g.id IS UNIQUE",
]

UPSERT_PERSON_QUERY = """
MERGE (u:User {id: $id})
ON CREATE SET u.created_at = datetime()
SET u += $props, u.updated_at = datetime()
RETURN u.id as id
"""

# Labels and relationship types cannot be parameters; they are filled in
# from NodeLabel / EdgeType values only.
UPSERT_RELATION_TEMPLATE = """
MERGE (s:User {{id: $source_id}})
ON CREATE SET s += $source_props, s.created_at = datetime()
MERGE (t:{target_label} {{id: $target_id}})
ON CREATE SET t += $target_props, t.created_at = datetime()
MERGE (s)-[r:{edge_type}]->(t)
ON CREATE SET r.created_at = datetime()
RETURN s.id as source_id, t.id as target_id
"""


class SocialGraphRepository:
    """
    Repository for the VK social graph

    Neo4j is the only storage.
    """

    def __init__(self, neo4j_service: Neo4jService):
        self.neo4j = neo4j_service

    async def ensure_schema(self):
        """Create uniqueness constraints (idempotent)"""
        for constraint in SCHEMA_CONSTRAINTS:
            await self.neo4j._execute_write(constraint)
        logger.info(f"Ensured {len(SCHEMA_CONSTRAINTS)} uniqueness constraints")

    async def upsert_person(self, person: PersonEntity):
        """
        Create or refresh a User node.

        Existing nodes get all attributes overwritten with this snapshot.
        """
        await self.neo4j._execute_write(UPSERT_PERSON_QUERY, {
            'id': person.id,
            'props': person.to_properties(),
        })
        logger.debug(f"📦 User {person.id} ({person.screen_name}) upserted")

    async def upsert_relation(self, edge: Edge, source: PersonEntity, target: Entity):
        """
        Merge both endpoints and the relationship in one transaction.

        Args:
            edge: Relationship to store (source is always a User)
            source: Snapshot of the source person
            target: Snapshot of the target person or group
        """
        query = UPSERT_RELATION_TEMPLATE.format(
            target_label=NodeLabel(edge.target_label).value,
            edge_type=EdgeType(edge.edge_type).value,
        )
        await self.neo4j._execute_write(query, {
            'source_id': edge.source_id,
            'source_props': source.to_properties(),
            'target_id': edge.target_id,
            'target_props': target.to_properties(),
        })
        logger.debug(f"🔗 {edge}")

    async def list_persons(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Sample of stored users for the post-run report"""
        return await self.neo4j._execute_read("""
            MATCH (u:User)
            RETURN u.id as id, u.screen_name as screen_name, u.name as name,
                   u.sex as sex, u.city as city
            ORDER BY u.id
            LIMIT $limit
        """, {'limit': limit})

    async def count_nodes(self) -> int:
        rows = await self.neo4j._execute_read("""
            MATCH (n)
            WHERE n:User OR n:Group
            RETURN count(n) as count
        """)
        return rows[0]['count'] if rows else 0

    async def count_relationships(self) -> int:
        rows = await self.neo4j._execute_read("""
            MATCH (:User)-[r:FOLLOWS|SUBSCRIBES_TO]->()
            RETURN count(r) as count
        """)
        return rows[0]['count'] if rows else 0
