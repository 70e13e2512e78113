"""
Tests for entity parsing and fragment helpers.
"""

from vkgraph.models import (
    Edge, EdgeType, GraphFragment, GroupEntity, NodeLabel, PersonEntity, Sex
)
from vkgraph.tests.fakes import group, person


class TestPersonEntity:

    def test_from_api_full_profile(self):
        user = PersonEntity.from_api({
            'id': 5, 'first_name': 'Anna', 'last_name': 'K', 'screen_name': 'annak',
            'sex': 1, 'city': {'id': 2, 'title': 'Saint Petersburg'},
        })

        assert user.name == "Anna K"
        assert user.sex == Sex.FEMALE
        assert user.city == "Saint Petersburg"
        assert not user.is_deactivated

    def test_from_api_sparse_profile(self):
        user = PersonEntity.from_api({'id': '7', 'deactivated': 'deleted', 'first_name': 'DELETED'})

        assert user.id == 7
        assert user.city == ""
        assert user.screen_name == ""
        assert user.sex == Sex.UNKNOWN
        assert user.is_deactivated
        assert user.name == "DELETED"

    def test_unknown_sex_code(self):
        assert Sex.parse(9) == Sex.UNKNOWN
        assert Sex.parse(None) == Sex.UNKNOWN
        assert Sex.parse("2") == Sex.MALE

    def test_properties_exclude_id(self):
        props = person(3, "Ivan", city="Tver").to_properties()

        assert 'id' not in props
        assert props == {
            'name': 'Ivan Test', 'first_name': 'Ivan', 'last_name': 'Test',
            'screen_name': 'id3', 'sex': 0, 'city': 'Tver',
        }


class TestGroupEntity:

    def test_from_api(self):
        g = GroupEntity.from_api({'id': 1, 'name': 'VK API', 'screen_name': 'apiclub', 'type': 'group'})

        assert (g.id, g.name, g.screen_name) == (1, 'VK API', 'apiclub')
        assert g.to_properties() == {'name': 'VK API', 'screen_name': 'apiclub'}


class TestGraphFragment:

    def test_empty(self):
        fragment = GraphFragment()

        assert fragment.is_empty
        assert fragment.node_count == 0
        assert list(fragment.iter_identities()) == []

    def test_lookups(self):
        fragment = GraphFragment(
            root=person(1),
            persons={2: person(2)},
            groups={9: group(9)},
            edges=[
                Edge(2, 1, EdgeType.FOLLOWS),
                Edge(1, 2, EdgeType.SUBSCRIBES_TO),
                Edge(1, 9, EdgeType.SUBSCRIBES_TO, NodeLabel.GROUP),
            ],
        )

        assert fragment.node_count == 3
        assert fragment.person(1).id == 1
        assert fragment.entity(NodeLabel.GROUP, 9).id == 9
        assert fragment.entity(NodeLabel.USER, 9) is None
        assert len(fragment.edges_of(EdgeType.SUBSCRIBES_TO)) == 1
        assert len(fragment.edges_of(EdgeType.SUBSCRIBES_TO, NodeLabel.GROUP)) == 1
        assert list(fragment.iter_identities()) == [1, 2]

    def test_edge_str(self):
        edge = Edge(1, 9, EdgeType.SUBSCRIBES_TO, NodeLabel.GROUP)

        assert str(edge) == "(1)-[:SUBSCRIBES_TO]->(Group 9)"
        assert edge.is_group_edge
