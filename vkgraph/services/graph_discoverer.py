"""
GraphDiscoverer - bounded, deduplicated traversal of the VK social graph.

Starting from a seed user, walks "follows" and "subscribes to" relations
depth-first up to max_depth hops and returns everything it saw as one
GraphFragment.

Traversal:
- Explicit work stack of (identity, remaining_depth), no call-stack recursion
- One visited set per discover() call, checked BEFORE any fetch, so every
  person is fetched once and expanded at most once
- A newly seen person is fetched, recorded and linked, then pushed for
  expansion only while depth remains
- Groups are leaves: fetched in one batch per expansion, never expanded

Failure policy:
- Seed failures always propagate (NotFound, UpstreamError, ...)
- Below the seed, a failed call is recorded in fragment.failures and the
  traversal continues with the rest of the graph
- fail_fast=True aborts the whole discovery on the first failure instead

Usage:
    discoverer = GraphDiscoverer(client, max_connections=500)
    fragment = await discoverer.discover(162400179, max_depth=2)
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Set, Tuple

from ..exceptions import FetchError
from ..models import (
    Edge, EdgeType, FetchFailure, GraphFragment, NodeLabel, PersonEntity
)

logger = logging.getLogger(__name__)


@dataclass
class _TraversalState:
    """State owned by a single discover() call"""
    fragment: GraphFragment
    visited: Set[int] = field(default_factory=set)
    emitted: Set[tuple] = field(default_factory=set)
    failed_groups: Set[int] = field(default_factory=set)
    profile_fetches: int = 0


class GraphDiscoverer:
    """Depth-limited discovery of followers, subscriptions and groups"""

    def __init__(
        self,
        client,
        fail_fast: bool = False,
        max_connections: Optional[int] = None,
    ):
        """
        Args:
            client: VKClient (or anything with the same four fetch coroutines)
            fail_fast: Abort the whole traversal on the first branch failure
            max_connections: Cap on each follower/subscription list
        """
        self.client = client
        self.fail_fast = fail_fast
        self.max_connections = max_connections

    async def discover(self, seed_id: int, max_depth: int) -> GraphFragment:
        """
        Discover the graph around seed_id.

        Args:
            seed_id: Identity of the seed user
            max_depth: Hops to expand; <= 0 returns an empty fragment

        Returns:
            GraphFragment rooted at the seed

        Raises:
            FetchError: seed profile could not be fetched, or any failure
                when fail_fast is set
        """
        fragment = GraphFragment()
        if max_depth <= 0:
            logger.info(f"Depth {max_depth} for seed {seed_id}: nothing to discover")
            return fragment

        state = _TraversalState(fragment=fragment)
        state.visited.add(seed_id)

        logger.info(f"🔍 Discovering graph around {seed_id} (depth={max_depth})")
        state.profile_fetches += 1
        fragment.root = await self.client.get_user(seed_id)

        stack: List[Tuple[int, int]] = [(seed_id, max_depth)]
        while stack:
            identity, depth = stack.pop()
            children = await self._expand(state, identity, depth)
            # Reversed so the first child in API order is expanded first
            stack.extend(reversed(children))

        logger.info(
            f"✅ Discovery from {seed_id} done: {fragment.summary()}, "
            f"{state.profile_fetches} profile fetches"
        )
        return fragment

    async def _expand(self, state: _TraversalState, identity: int, depth: int) -> List[Tuple[int, int]]:
        """
        Fetch identity's followers and subscriptions, record new persons,
        groups and edges.

        Returns:
            Newly visited persons that still have depth left to expand
        """
        next_depth = depth - 1
        children: List[Tuple[int, int]] = []
        logger.debug(f"Expanding {identity} (depth={depth})")

        followers = await self._guarded(
            state, identity, 'users.getFollowers',
            self.client.get_followers, identity, limit=self.max_connections,
        )
        for follower_id in followers or []:
            is_new = await self._visit(state, follower_id)
            self._link(state, Edge(follower_id, identity, EdgeType.FOLLOWS))
            if is_new and next_depth > 0:
                children.append((follower_id, next_depth))

        subscriptions = await self._guarded(
            state, identity, 'users.getSubscriptions',
            self.client.get_subscriptions, identity, limit=self.max_connections,
        )
        if subscriptions is None:
            return children

        for target_id in subscriptions.users:
            is_new = await self._visit(state, target_id)
            self._link(state, Edge(identity, target_id, EdgeType.SUBSCRIBES_TO))
            if is_new and next_depth > 0:
                children.append((target_id, next_depth))

        await self._collect_groups(state, identity, subscriptions.groups)
        for group_id in subscriptions.groups:
            self._link(state, Edge(identity, group_id, EdgeType.SUBSCRIBES_TO, NodeLabel.GROUP))

        return children

    async def _visit(self, state: _TraversalState, identity: int) -> bool:
        """
        Fetch and record a person the first time it is seen.

        Returns:
            True if the person was new and its profile was fetched
        """
        if identity in state.visited:
            return False

        state.visited.add(identity)
        state.profile_fetches += 1
        person: Optional[PersonEntity] = await self._guarded(
            state, identity, 'users.get', self.client.get_user, identity,
        )
        if person is None:
            return False

        state.fragment.persons[identity] = person
        return True

    async def _collect_groups(self, state: _TraversalState, identity: int, group_ids: List[int]):
        """Fetch the groups not seen yet in one batch"""
        fragment = state.fragment
        unseen = [
            group_id for group_id in dict.fromkeys(group_ids)
            if group_id not in fragment.groups and group_id not in state.failed_groups
        ]
        if not unseen:
            return

        groups = await self._guarded(state, identity, 'groups.getById', self.client.get_groups, unseen)
        if groups is None:
            state.failed_groups.update(unseen)
            return

        for group in groups:
            fragment.groups[group.id] = group

        # Ids the API silently dropped (deleted communities)
        missing = set(unseen) - {group.id for group in groups}
        if missing:
            logger.debug(f"groups.getById skipped {len(missing)} ids for {identity}")
            state.failed_groups.update(missing)

    def _link(self, state: _TraversalState, edge: Edge):
        """Record an edge once, and only between entities the fragment holds"""
        fragment = state.fragment
        if fragment.entity(edge.target_label, edge.target_id) is None:
            return
        if fragment.person(edge.source_id) is None:
            return
        if edge.key in state.emitted:
            return

        state.emitted.add(edge.key)
        fragment.edges.append(edge)

    async def _guarded(
        self,
        state: _TraversalState,
        identity: int,
        operation: str,
        fetch: Callable[..., Awaitable[Any]],
        *args,
        **kwargs,
    ) -> Any:
        """
        Run one remote call, isolating its failure to the current branch.

        Returns:
            The call's result, or None if it failed and was recorded
        """
        try:
            return await fetch(*args, **kwargs)
        except FetchError as e:
            if self.fail_fast:
                logger.error(f"❌ {operation}({identity}) failed, aborting discovery: {e}")
                raise
            logger.warning(f"⚠️  {operation}({identity}) failed, skipping branch: {e}")
            state.fragment.failures.append(FetchFailure(identity, operation, e))
            return None
