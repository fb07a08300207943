"""
Statistiques du catalogue : totaux, moyennes, repartition par genre et
par decennie, meilleurs films.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from cinecat.core.entities.catalog import CatalogEntry
from cinecat.core.ports.catalog_store import ICatalogStore

DEFAULT_TOP_RATED = 100


@dataclass(frozen=True)
class CatalogStatistics:
    """
    Vue agregee du catalogue.

    Attributes:
        total: Nombre d'entrees
        wishlist: Entrees sans fichier
        average_runtime: Duree moyenne (entrees de duree connue), None si aucune
        average_rating: Note TMDB moyenne, None si catalogue vide
        oldest_year / newest_year: Annees extremes (annees inconnues ignorees)
        genre_counts: (genre, nombre), du plus frequent au moins frequent
        decade_counts: (decennie, nombre), par decennie croissante
        top_rated: Entrees les mieux notees, note decroissante
    """

    total: int
    wishlist: int
    average_runtime: Optional[float]
    average_rating: Optional[float]
    oldest_year: Optional[int]
    newest_year: Optional[int]
    genre_counts: tuple[tuple[str, int], ...]
    decade_counts: tuple[tuple[int, int], ...]
    top_rated: tuple[CatalogEntry, ...]


def _mean(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def compute_statistics(
    entries: Iterable[CatalogEntry], top_n: int = DEFAULT_TOP_RATED
) -> CatalogStatistics:
    """Calcule les statistiques d'un ensemble d'entrees."""
    entries = list(entries)
    runtimes = [e.runtime_minutes for e in entries if e.runtime_minutes]
    years = [e.release_year for e in entries if e.release_year]

    genres = Counter(genre for e in entries for genre in e.genres)
    decades = Counter((year // 10) * 10 for year in years)

    # Tri stable : a note egale, l'ordre d'id est conserve
    top_rated = sorted(
        sorted(entries, key=lambda e: e.id or 0),
        key=lambda e: e.rating_score,
        reverse=True,
    )[:top_n]

    return CatalogStatistics(
        total=len(entries),
        wishlist=sum(1 for e in entries if not e.has_file),
        average_runtime=_mean(runtimes),
        average_rating=_mean([e.rating_score for e in entries]),
        oldest_year=min(years, default=None),
        newest_year=max(years, default=None),
        genre_counts=tuple(sorted(genres.items(), key=lambda item: (-item[1], item[0]))),
        decade_counts=tuple(sorted(decades.items())),
        top_rated=tuple(top_rated),
    )


class StatisticsService:
    """Statistiques calculees sur l'etat courant du catalogue."""

    def __init__(self, store: ICatalogStore) -> None:
        self._store = store

    def compute(self, top_n: int = DEFAULT_TOP_RATED) -> CatalogStatistics:
        return compute_statistics(self._store.list_all(), top_n=top_n)
