"""
Entites metier du catalogue.

Exports:
- CatalogEntry: Un film catalogue
- CastMember: Un acteur principal d'un film
- WatchLogEntry: Une ligne du journal de visionnage
"""

from cinecat.core.entities.catalog import CastMember, CatalogEntry, WatchLogEntry

__all__ = [
    "CatalogEntry",
    "CastMember",
    "WatchLogEntry",
]
