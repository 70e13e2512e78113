"""
Neo4j Persistence
=================

End-to-end checks of the Cypher against a real Neo4j:
- persisting the seed scenario twice yields 6 nodes and 5 relationships
- root snapshots overwrite, connected snapshots are create-only
- the uniqueness constraint rejects a second User with the same id
"""

import pytest

from vkgraph.exceptions import StoreWriteError
from vkgraph.models import Edge, EdgeType, GraphFragment
from vkgraph.services import GraphDiscoverer, GraphUpserter
from vkgraph.tests.fakes import SEED_ID, person


async def stored_user(repository, identity):
    rows = await repository.neo4j._execute_read(
        "MATCH (u:User {id: $id}) RETURN u.first_name as first_name, u.city as city",
        {'id': identity},
    )
    return rows[0] if rows else None


@pytest.mark.integration
class TestNeo4jPersistence:

    @pytest.mark.asyncio
    async def test_scenario_is_idempotent(self, fresh_repository, scenario_client):
        fragment = await GraphDiscoverer(scenario_client).discover(SEED_ID, 2)
        upserter = GraphUpserter(fresh_repository)

        first = await upserter.persist(fragment)
        assert first.ok
        assert await fresh_repository.count_nodes() == 6
        assert await fresh_repository.count_relationships() == 5

        second = await upserter.persist(fragment)
        assert second.ok
        assert await fresh_repository.count_nodes() == 6
        assert await fresh_repository.count_relationships() == 5

    @pytest.mark.asyncio
    async def test_root_overwrites_and_connected_keeps(self, fresh_repository):
        upserter = GraphUpserter(fresh_repository)

        await upserter.persist(GraphFragment(root=person(2, "Original", city="Omsk")))
        assert (await stored_user(fresh_repository, 2))['first_name'] == "Original"

        # met again as a follower of 3: attributes untouched
        await upserter.persist(GraphFragment(
            root=person(3),
            persons={2: person(2, "Changed", city="Tomsk")},
            edges=[Edge(2, 3, EdgeType.FOLLOWS)],
        ))
        assert (await stored_user(fresh_repository, 2))['city'] == "Omsk"

        # root again: overwritten
        await upserter.persist(GraphFragment(root=person(2, "Latest", city="Perm")))
        assert (await stored_user(fresh_repository, 2))['first_name'] == "Latest"
        assert (await stored_user(fresh_repository, 2))['city'] == "Perm"

        assert await fresh_repository.count_nodes() == 2
        assert await fresh_repository.count_relationships() == 1

    @pytest.mark.asyncio
    async def test_uniqueness_constraint(self, fresh_repository):
        await fresh_repository.upsert_person(person(1))

        with pytest.raises(StoreWriteError):
            await fresh_repository.neo4j._execute_write("CREATE (:User {id: 1})")

    @pytest.mark.asyncio
    async def test_list_persons(self, fresh_repository):
        for identity in (3, 1, 2):
            await fresh_repository.upsert_person(person(identity))

        rows = await fresh_repository.list_persons(limit=2)

        assert [row['id'] for row in rows] == [1, 2]
        assert rows[0]['screen_name'] == 'id1'
