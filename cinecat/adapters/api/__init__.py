"""
Client API externe pour l'enrichissement des metadonnees.

- TMDBClient: The Movie Database (recherche, details, IDs externes, images)

Infrastructure partagee:
- APICache: Cache persistant des recherches (30 jours)
- with_retry / request_with_retry: backoff exponentiel sur HTTP 429
"""

from cinecat.adapters.api.cache import APICache
from cinecat.adapters.api.retry import request_with_retry, with_retry
from cinecat.adapters.api.tmdb_client import TMDBClient

__all__ = [
    "APICache",
    "TMDBClient",
    "request_with_retry",
    "with_retry",
]
