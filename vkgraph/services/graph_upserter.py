"""
GraphUpserter - idempotent persistence of a discovered GraphFragment.

Write order:
1. Root user: MERGE + overwrite all attributes (latest snapshot wins)
2. FOLLOWS edges between persons
3. SUBSCRIBES_TO edges to persons
4. SUBSCRIBES_TO edges to groups

Each edge is its own transaction that merges both endpoints (attributes
on create only) and the relationship. There is no enclosing transaction:
whatever was written before a failure stays written, and re-running
persist() on the same fragment converges instead of duplicating.

Fault isolation:
- Root failure ends the call (relations would hang off a stale root)
- A failing edge is logged and recorded; the rest of its category and the
  other categories are still written
"""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ..exceptions import StoreWriteError
from ..models import Edge, EdgeType, GraphFragment, NodeLabel

if TYPE_CHECKING:
    from ..repositories import SocialGraphRepository

logger = logging.getLogger(__name__)

ROOT = 'root'
FOLLOWS = 'follows'
SUBSCRIPTIONS = 'subscriptions'
GROUPS = 'groups'

CATEGORIES: List[Tuple[str, EdgeType, NodeLabel]] = [
    (FOLLOWS, EdgeType.FOLLOWS, NodeLabel.USER),
    (SUBSCRIPTIONS, EdgeType.SUBSCRIBES_TO, NodeLabel.USER),
    (GROUPS, EdgeType.SUBSCRIBES_TO, NodeLabel.GROUP),
]


@dataclass
class PersistFailure:
    """One write that did not make it into the store"""
    category: str
    error: Exception
    edge: Optional[Edge] = None

    def __str__(self) -> str:
        target = f" {self.edge}" if self.edge else ""
        return f"[{self.category}]{target}: {self.error}"


@dataclass
class PersistReport:
    """Outcome of one persist() call"""
    root_written: bool = False
    written: Dict[str, int] = field(default_factory=lambda: {name: 0 for name, _, _ in CATEGORIES})
    skipped: int = 0  # edges whose endpoints were missing from the fragment
    failures: List[PersistFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def edges_written(self) -> int:
        return sum(self.written.values())

    def summary(self) -> str:
        parts = ", ".join(f"{name}={count}" for name, count in self.written.items())
        return (
            f"root={'yes' if self.root_written else 'no'}, edges={self.edges_written} ({parts}), "
            f"skipped={self.skipped}, failures={len(self.failures)}"
        )


class GraphUpserter:
    """Writes fragments into the graph store with merge semantics"""

    def __init__(self, repository: 'SocialGraphRepository'):
        self.repository = repository

    async def persist(self, fragment: GraphFragment) -> PersistReport:
        """
        Persist a fragment.

        Args:
            fragment: Output of GraphDiscoverer.discover()

        Returns:
            PersistReport; failures are reported there, never raised
        """
        report = PersistReport()
        if fragment.is_empty:
            logger.info("Empty fragment, nothing to persist")
            return report

        root = fragment.root
        try:
            await self.repository.upsert_person(root)
            report.root_written = True
        except StoreWriteError as e:
            logger.error(f"❌ Error saving root user {root.id}: {e}")
            report.failures.append(PersistFailure(ROOT, e))
            return report

        for category, edge_type, target_label in CATEGORIES:
            edges = fragment.edges_of(edge_type, target_label)
            try:
                await self._persist_category(fragment, category, edges, report)
            except Exception as e:
                logger.error(f"❌ Error saving {category} relations: {e}", exc_info=True)
                report.failures.append(PersistFailure(category, e))

        logger.info(f"💾 Persisted fragment rooted at {root.id}: {report.summary()}")
        return report

    async def _persist_category(
        self,
        fragment: GraphFragment,
        category: str,
        edges: List[Edge],
        report: PersistReport,
    ):
        """Write one category's edges, isolating each failing edge"""
        for edge in edges:
            source = fragment.person(edge.source_id)
            target = fragment.entity(edge.target_label, edge.target_id)
            if source is None or target is None:
                logger.debug(f"Skipping {edge}: endpoint not in fragment")
                report.skipped += 1
                continue

            try:
                await self.repository.upsert_relation(edge, source, target)
            except StoreWriteError as e:
                logger.warning(f"⚠️  Error saving {edge.edge_type.value} relation {edge}: {e}")
                report.failures.append(PersistFailure(category, e, edge))
                continue

            report.written[category] += 1
