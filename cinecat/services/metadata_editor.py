"""
Edition manuelle des metadonnees d'une entree.

Pour corriger un titre, une annee ou une distribution sans passer par
TMDB. Les champs modifies sont ecrits via ICatalogStore.update ; un
rafraichissement ulterieur les remplace par les donnees distantes.
"""

from dataclasses import dataclass, fields, replace
from typing import Optional

from loguru import logger

from cinecat.core.entities.catalog import MAX_CAST_MEMBERS, CastMember, CatalogEntry
from cinecat.core.errors import InvalidEdit, NotFound
from cinecat.core.ports.catalog_store import ICatalogStore

UNKNOWN_GENRE = "Unknown"


@dataclass(frozen=True)
class MetadataEdit:
    """
    Champs a modifier ; None laisse le champ inchange.

    release_year et runtime_minutes a 0 effacent la valeur (inconnue).
    """

    title: Optional[str] = None
    release_year: Optional[int] = None
    director: Optional[str] = None
    genres: Optional[tuple[str, ...]] = None
    rating_score: Optional[float] = None
    runtime_minutes: Optional[int] = None
    description: Optional[str] = None
    cast_names: Optional[tuple[str, ...]] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


def split_list(value: str) -> tuple[str, ...]:
    """'Horror, Sci-Fi,' -> ('Horror', 'Sci-Fi')."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


class MetadataEditor:
    """
    Applique une MetadataEdit a une entree du catalogue.

    Example:
        editor = MetadataEditor(store)
        entry = editor.edit(3, MetadataEdit(title="Alien", release_year=1979))
    """

    def __init__(self, store: ICatalogStore) -> None:
        self._store = store

    def edit(self, entry_id: int, changes: MetadataEdit) -> CatalogEntry:
        """
        Modifie les metadonnees d'une entree.

        Raises:
            NotFound: Si l'entree n'existe pas
            InvalidEdit: Titre vide, annee ou duree negative, distribution
                         trop longue
        """
        existing = self._store.get(entry_id)
        if existing is None:
            raise NotFound("entry", entry_id)
        if changes.is_empty():
            return existing

        updated = self._apply(existing, changes)
        stored = self._store.update(updated)
        logger.info(f"Entree #{entry_id} modifiee a la main: {stored.title}")
        return stored

    def _apply(self, entry: CatalogEntry, changes: MetadataEdit) -> CatalogEntry:
        values: dict = {}

        if changes.title is not None:
            title = changes.title.strip()
            if not title:
                raise InvalidEdit("title cannot be empty")
            values["title"] = title

        if changes.release_year is not None:
            if changes.release_year < 0:
                raise InvalidEdit(f"invalid year {changes.release_year}")
            values["release_year"] = changes.release_year or None

        if changes.director is not None:
            values["director"] = changes.director.strip() or "Unknown"

        if changes.genres is not None:
            genres = tuple(g.strip() for g in changes.genres if g.strip())
            values["genres"] = genres or (UNKNOWN_GENRE,)

        if changes.rating_score is not None:
            values["rating_score"] = min(max(changes.rating_score, 0.0), 10.0)

        if changes.runtime_minutes is not None:
            if changes.runtime_minutes < 0:
                raise InvalidEdit(f"invalid runtime {changes.runtime_minutes}")
            values["runtime_minutes"] = changes.runtime_minutes or None

        if changes.description is not None:
            values["description"] = changes.description.strip()

        if changes.cast_names is not None:
            values["cast_members"] = self._cast(entry, changes.cast_names)

        return replace(entry, **values)

    @staticmethod
    def _cast(entry: CatalogEntry, names: tuple[str, ...]) -> tuple[CastMember, ...]:
        names = tuple(n.strip() for n in names if n.strip())
        if len(names) > MAX_CAST_MEMBERS:
            raise InvalidEdit(f"at most {MAX_CAST_MEMBERS} cast members")

        # Role et photo conserves pour les acteurs deja credites
        known = {member.name: member for member in entry.cast_members}
        return tuple(known.get(name, CastMember(name)) for name in names)
