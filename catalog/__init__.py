"""
Catalog Package

Domain entities and the data-store gateways the pipeline reads from.

Components:
- User, Movie, SortKey: Immutable domain values
- CatalogGateway, UserGateway: Abstract store interfaces
- InMemoryCatalog, InMemoryUserStore: Dict-backed implementations
"""

from .models import Movie, SortKey, User, parse_embedding
from .interface import CatalogGateway, UserGateway
from .memory_store import InMemoryCatalog, InMemoryUserStore

__all__ = [
    # Models
    "Movie",
    "SortKey",
    "User",
    "parse_embedding",
    # Interfaces
    "CatalogGateway",
    "UserGateway",
    # Implementations
    "InMemoryCatalog",
    "InMemoryUserStore",
]
