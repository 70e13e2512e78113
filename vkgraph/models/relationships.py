"""
Relationship domain models

Represents typed, directed connections in the social graph:
- (User)-[:FOLLOWS]->(User)          follower -> followed
- (User)-[:SUBSCRIBES_TO]->(User)    subscriber -> person
- (User)-[:SUBSCRIBES_TO]->(Group)   subscriber -> group

The source of an edge is always a User.
"""
from dataclasses import dataclass
from enum import Enum


class NodeLabel(str, Enum):
    """Neo4j node labels"""
    USER = 'User'
    GROUP = 'Group'


class EdgeType(str, Enum):
    """Neo4j relationship types"""
    FOLLOWS = 'FOLLOWS'
    SUBSCRIBES_TO = 'SUBSCRIBES_TO'


@dataclass(frozen=True)
class Edge:
    """Directed, typed relationship between two identities"""
    source_id: int
    target_id: int
    edge_type: EdgeType
    target_label: NodeLabel = NodeLabel.USER

    @property
    def is_group_edge(self) -> bool:
        return self.target_label == NodeLabel.GROUP

    @property
    def key(self) -> tuple:
        """Natural key: what the store merges the relationship on"""
        return (self.source_id, self.edge_type, self.target_label, self.target_id)

    def __str__(self) -> str:
        return f"({self.source_id})-[:{self.edge_type.value}]->({self.target_label.value} {self.target_id})"
