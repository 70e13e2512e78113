"""
Repository Pattern - Storage abstraction layer

Repositories hide Cypher from the crawler: the upserter hands over domain
models and the repository maps them onto User/Group nodes and
FOLLOWS/SUBSCRIBES_TO relationships.
"""
from .social_graph_repository import SocialGraphRepository

__all__ = [
    'SocialGraphRepository',
]
