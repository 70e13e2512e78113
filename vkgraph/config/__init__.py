"""
Configuration module for settings and database connections.
"""
from .settings import Settings, get_settings
from .database import Neo4jConfig, create_neo4j_service

__all__ = [
    'Settings',
    'get_settings',
    'Neo4jConfig',
    'create_neo4j_service',
]
