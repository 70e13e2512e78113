"""
Domain Models - Storage-agnostic data structures

Discovery produces these models; the repository maps them onto Neo4j
nodes and relationships.
"""

from .entity import Sex, PersonEntity, GroupEntity
from .relationships import NodeLabel, EdgeType, Edge
from .fragment import FetchFailure, GraphFragment

__all__ = [
    # Entities
    'Sex',
    'PersonEntity',
    'GroupEntity',

    # Relationships
    'NodeLabel',
    'EdgeType',
    'Edge',

    # Discovery output
    'FetchFailure',
    'GraphFragment',
]
