"""
GraphFragment - bounded output of one discovery call
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union

from .entity import GroupEntity, PersonEntity
from .relationships import Edge, EdgeType, NodeLabel


@dataclass(frozen=True)
class FetchFailure:
    """A remote call that failed for one identity during discovery"""
    identity: int
    operation: str  # users.get, users.getFollowers, ...
    error: Exception

    def __str__(self) -> str:
        return f"{self.operation}({self.identity}): {self.error}"


@dataclass
class GraphFragment:
    """
    Entities and edges discovered from one seed.

    persons holds every discovered person except the root, keyed by
    identity, so a person reachable by several paths appears once.
    """
    root: Optional[PersonEntity] = None
    persons: Dict[int, PersonEntity] = field(default_factory=dict)
    groups: Dict[int, GroupEntity] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    # Branch failures isolated during discovery
    failures: List[FetchFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    @property
    def node_count(self) -> int:
        if self.root is None:
            return 0
        return 1 + len(self.persons) + len(self.groups)

    def person(self, identity: int) -> Optional[PersonEntity]:
        """Look up a person by identity, root included"""
        if self.root is not None and self.root.id == identity:
            return self.root
        return self.persons.get(identity)

    def entity(self, label: NodeLabel, identity: int) -> Optional[Union[PersonEntity, GroupEntity]]:
        if label == NodeLabel.GROUP:
            return self.groups.get(identity)
        return self.person(identity)

    def edges_of(self, edge_type: EdgeType, target_label: NodeLabel = NodeLabel.USER) -> List[Edge]:
        return [
            edge for edge in self.edges
            if edge.edge_type == edge_type and edge.target_label == target_label
        ]

    def iter_identities(self) -> Iterator[int]:
        """All person identities in the fragment, root first"""
        if self.root is not None:
            yield self.root.id
        yield from self.persons

    def summary(self) -> str:
        return (
            f"{self.node_count} nodes "
            f"({len(self.persons)} persons, {len(self.groups)} groups beyond root), "
            f"{len(self.edges)} edges, {len(self.failures)} failures"
        )
