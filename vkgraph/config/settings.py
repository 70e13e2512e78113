from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional
import os


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - .env file (for secrets like the VK access token)
    - System environment

    Variable names match the crawler's .env conventions:
    - ACCESS_TOKEN (VK user or service token)
    - NEO4J_HOST, NEO4J_BOLT_PORT or NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD
    """

    # VK API
    access_token: str = Field(default="", validate_default=True)
    vk_api_base_url: str = "https://api.vk.com/method/"
    vk_api_version: str = "5.131"
    vk_request_interval: float = 0.35  # seconds between consecutive calls
    vk_timeout: float = 10.0

    # Neo4j
    neo4j_host: str = "localhost"
    neo4j_bolt_port: int = 7687
    neo4j_uri: Optional[str] = Field(default=None, validate_default=True)
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = "neo4j"

    # Crawl
    seed_user_id: int = 162400179
    max_depth: int = 2
    max_connections: Optional[int] = None  # per follower/subscription list
    discovery_fail_fast: bool = False

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('access_token', mode='before')
    @classmethod
    def get_access_token(cls, v):
        """Use VK_ACCESS_TOKEN from env if ACCESS_TOKEN not set"""
        if v:
            return v
        return os.getenv('VK_ACCESS_TOKEN', v or '')

    @field_validator('neo4j_uri', mode='before')
    @classmethod
    def construct_neo4j_uri(cls, v, info):
        """Construct bolt URI from host and port if not explicitly set"""
        if v:
            return v

        data = info.data
        host = data.get('neo4j_host', 'localhost')
        port = data.get('neo4j_bolt_port', 7687)

        return f"bolt://{host}:{port}"

    @field_validator('max_connections', mode='before')
    @classmethod
    def empty_means_unbounded(cls, v):
        """MAX_CONNECTIONS= (empty) or 0 means no cap"""
        if v in ("", None, 0, "0"):
            return None
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
