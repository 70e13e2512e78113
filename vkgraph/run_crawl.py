#!/usr/bin/env python3
"""
Crawl a VK user's social graph into Neo4j
=========================================

Discovers the seed user's followers, subscriptions and groups up to the
given depth, then merges everything into Neo4j. Re-running over the same
users does not duplicate nodes or relationships.

Usage:
    vkgraph-crawl                           # seed and depth from .env / defaults
    vkgraph-crawl --user-id 1 --depth 1     # explicit seed
    vkgraph-crawl --no-persist              # discover only
    vkgraph-crawl --show 20                 # list 20 stored users afterwards
    vkgraph-crawl --fail-fast               # abort on the first failed call

Environment:
    ACCESS_TOKEN                            VK access token
    NEO4J_URI or NEO4J_HOST/NEO4J_BOLT_PORT
    NEO4J_USER, NEO4J_PASSWORD
"""

import sys
import asyncio
import argparse
import logging
from typing import List, Optional

from dotenv import load_dotenv
from neo4j.exceptions import DriverError, Neo4jError

from vkgraph.config import Neo4jConfig, Settings, create_neo4j_service
from vkgraph.exceptions import FetchError, StoreWriteError
from vkgraph.models import GraphFragment
from vkgraph.repositories import SocialGraphRepository
from vkgraph.services import GraphDiscoverer, GraphUpserter, RateLimiter, VKClient

log = logging.getLogger('vkgraph.crawl')

EXIT_OK = 0
EXIT_DISCOVERY_FAILED = 1
EXIT_STORE_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl a VK social graph into Neo4j")
    parser.add_argument('--user-id', type=int, help="Seed user id (default: SEED_USER_ID)")
    parser.add_argument('--depth', type=int, help="Traversal depth (default: MAX_DEPTH)")
    parser.add_argument('--max-connections', type=int,
                        help="Cap on each follower/subscription list")
    parser.add_argument('--fail-fast', action='store_true',
                        help="Abort discovery on the first failed API call")
    parser.add_argument('--no-persist', action='store_true', help="Discover only")
    parser.add_argument('--show', type=int, default=10, metavar='N',
                        help="List N stored users after persisting (0 to skip)")
    return parser


async def discover(settings: Settings, args: argparse.Namespace) -> GraphFragment:
    """Run discovery with the configured client and limiter"""
    seed_id = args.user_id if args.user_id is not None else settings.seed_user_id
    depth = args.depth if args.depth is not None else settings.max_depth
    max_connections = args.max_connections if args.max_connections is not None else settings.max_connections

    limiter = RateLimiter(min_interval=settings.vk_request_interval)
    async with VKClient(
        access_token=settings.access_token,
        rate_limiter=limiter,
        base_url=settings.vk_api_base_url,
        api_version=settings.vk_api_version,
        timeout=settings.vk_timeout,
    ) as client:
        discoverer = GraphDiscoverer(
            client,
            fail_fast=args.fail_fast or settings.discovery_fail_fast,
            max_connections=max_connections,
        )
        fragment = await discoverer.discover(seed_id, depth)
        log.info(f"{client.requests_made} API requests")
        return fragment


async def persist(settings: Settings, fragment: GraphFragment, show: int) -> int:
    """Merge the fragment into Neo4j and print the report"""
    try:
        neo4j = await create_neo4j_service(Neo4jConfig.from_settings(settings))
    except (Neo4jError, DriverError, OSError) as e:
        log.error(f"Cannot connect to Neo4j at {settings.neo4j_uri}: {e}")
        return EXIT_STORE_UNAVAILABLE

    try:
        repository = SocialGraphRepository(neo4j)
        try:
            await repository.ensure_schema()
        except StoreWriteError as e:
            log.warning(f"Could not ensure constraints: {e}")

        report = await GraphUpserter(repository).persist(fragment)
        print(f"Data saved to Neo4j: {report.summary()}")
        for failure in report.failures:
            print(f"  ! {failure}")

        if show > 0:
            try:
                rows = await repository.list_persons(limit=show)
            except (Neo4jError, DriverError) as e:
                log.warning(f"Could not list stored users: {e}")
                rows = []
            print(f"\nDisplaying the first {show} users:")
            for row in rows:
                print(
                    f"ID: {row['id']}, ScreenName: {row['screen_name']}, Name: {row['name']}, "
                    f"Sex: {row['sex']}, City: {row['city']}"
                )
    finally:
        await neo4j.close()

    return EXIT_OK


async def run(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()

    try:
        fragment = await discover(settings, args)
    except FetchError as e:
        log.error(f"Error fetching VK data: {e}")
        return EXIT_DISCOVERY_FAILED

    print(f"Discovered {fragment.summary()}")
    for failure in fragment.failures:
        print(f"  ! {failure}")

    if args.no_persist:
        return EXIT_OK

    return await persist(settings, fragment, args.show)


def main(argv: Optional[List[str]] = None):
    load_dotenv()

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    )

    sys.exit(asyncio.run(run(argv, settings)))


if __name__ == "__main__":
    main()
