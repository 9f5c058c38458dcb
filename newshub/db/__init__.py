"""Database management for AI News Hub."""

from .base import ArticleStore, DigestStore, SourceStore
from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection

__all__ = [
    "ArticleStore",
    "DigestStore",
    "SourceStore",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
