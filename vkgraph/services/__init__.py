"""
Services - remote API access, discovery and persistence
"""
from .rate_limiter import RateLimiter
from .vk_client import VKClient, Subscriptions
from .neo4j_service import Neo4jService
from .graph_discoverer import GraphDiscoverer
from .graph_upserter import GraphUpserter, PersistReport, PersistFailure

__all__ = [
    'RateLimiter',
    'VKClient',
    'Subscriptions',
    'Neo4jService',
    'GraphDiscoverer',
    'GraphUpserter',
    'PersistReport',
    'PersistFailure',
]
