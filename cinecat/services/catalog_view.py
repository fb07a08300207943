"""
Projections filtrees et triees du catalogue pour la presentation.

Les projections sont memorisees par (texte, genre, tri) et invalidees
des que la version du catalogue change.
"""

from enum import Enum
from typing import Callable, Optional

from cinecat.core.entities.catalog import CatalogEntry
from cinecat.core.ports.catalog_store import ICatalogStore

ALL_GENRES = "All"


class SortKey(str, Enum):
    """Ordres de tri proposes a l'utilisateur."""

    TITLE = "title"
    YEAR_DESC = "year-desc"
    YEAR_ASC = "year-asc"
    RATING_DESC = "rating-desc"
    RATING_ASC = "rating-asc"
    ADDED_DESC = "added-desc"
    ADDED_ASC = "added-asc"


def _year(entry: CatalogEntry) -> int:
    # Annee inconnue triee comme 0
    return entry.release_year or 0


# (cle, descendant) ; les egalites se departagent toujours par id croissant
_SORTS: dict[SortKey, tuple[Callable[[CatalogEntry], object], bool]] = {
    SortKey.TITLE: (lambda e: e.title, False),
    SortKey.YEAR_DESC: (_year, True),
    SortKey.YEAR_ASC: (_year, False),
    SortKey.RATING_DESC: (lambda e: e.rating_score, True),
    SortKey.RATING_ASC: (lambda e: e.rating_score, False),
    SortKey.ADDED_DESC: (lambda e: e.added_at, True),
    SortKey.ADDED_ASC: (lambda e: e.added_at, False),
}


def sort_entries(entries: list[CatalogEntry], sort_key: SortKey) -> list[CatalogEntry]:
    """
    Trie des entrees selon sort_key, egalites departagees par id croissant.

    Deux tris stables successifs : d'abord par id, puis par la cle demandee.
    """
    key, descending = _SORTS[sort_key]
    ordered = sorted(entries, key=lambda e: e.id)
    return sorted(ordered, key=key, reverse=descending)


def matches(entry: CatalogEntry, filter_text: Optional[str], genre: Optional[str]) -> bool:
    """Filtre titre (sous-chaine, insensible a la casse) ET genre (appartenance exacte)."""
    if filter_text and filter_text.casefold() not in entry.title.casefold():
        return False
    if genre and genre != ALL_GENRES and genre not in entry.genres:
        return False
    return True


class CatalogViewService:
    """
    Moteur de vues du catalogue.

    Example:
        views = CatalogViewService(store)
        horror = views.project(filter_text="night", genre="Horror",
                               sort_key=SortKey.RATING_DESC)
    """

    def __init__(self, store: ICatalogStore) -> None:
        self._store = store
        self._cache: dict[tuple[str, str, SortKey], list[CatalogEntry]] = {}
        self._cache_version = -1

    def project(
        self,
        filter_text: Optional[str] = None,
        genre: Optional[str] = None,
        sort_key: SortKey = SortKey.TITLE,
    ) -> list[CatalogEntry]:
        """
        Calcule la projection du catalogue.

        Args:
            filter_text: Sous-chaine recherchee dans le titre (None ou "" = pas de filtre)
            genre: Genre exact (None ou "All" = pas de filtre)
            sort_key: Ordre de tri

        Returns:
            Nouvelle liste d'entrees (la modifier n'affecte pas le cache)
        """
        filter_text = (filter_text or "").strip()
        genre = genre or ALL_GENRES
        sort_key = SortKey(sort_key)

        if self._cache_version != self._store.version:
            self._cache.clear()
            self._cache_version = self._store.version

        cache_key = (filter_text.casefold(), genre, sort_key)
        cached = self._cache.get(cache_key)
        if cached is None:
            selected = [
                entry
                for entry in self._store.list_all()
                if matches(entry, filter_text, genre)
            ]
            cached = sort_entries(selected, sort_key)
            self._cache[cache_key] = cached
        return list(cached)

    def available_genres(self) -> list[str]:
        """Genres presents dans le catalogue, tries, precedes de "All"."""
        genres = {genre for entry in self._store.list_all() for genre in entry.genres}
        return [ALL_GENRES, *sorted(genres)]
