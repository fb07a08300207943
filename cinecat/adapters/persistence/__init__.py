"""
Persistance locale : catalogue JSON et cache d'affiches.
"""

from cinecat.adapters.persistence.json_catalog_store import JsonCatalogStore
from cinecat.adapters.persistence.poster_cache import PosterCache

__all__ = [
    "JsonCatalogStore",
    "PosterCache",
]
