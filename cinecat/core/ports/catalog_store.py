"""
Interface port pour le catalogue.

Le catalogue est la seule structure modifiee par plusieurs workers :
toutes les mutations passent par insert, update, remove, associate_file
et add_watch_log, serialisees par l'implementation (un seul ecrivain).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from cinecat.core.entities.catalog import CatalogEntry, WatchLogEntry


class ICatalogStore(ABC):
    """Interface de stockage des entrees du catalogue."""

    @abstractmethod
    def load(self) -> None:
        """Charge le catalogue persiste (fichier absent ou vide = catalogue vide)."""
        ...

    @abstractmethod
    def get(self, entry_id: int) -> Optional[CatalogEntry]:
        """Recupere une entree par son id."""
        ...

    @abstractmethod
    def find_by_path(self, file_path: Path) -> Optional[CatalogEntry]:
        """Recupere l'entree associee a un fichier."""
        ...

    @abstractmethod
    def find_by_tmdb_id(self, tmdb_id: int) -> list[CatalogEntry]:
        """Entrees decrivant un meme film distant (plusieurs copies possibles)."""
        ...

    @abstractmethod
    def list_all(self) -> list[CatalogEntry]:
        """Liste toutes les entrees (instantane)."""
        ...

    @abstractmethod
    def file_paths(self) -> frozenset[Path]:
        """Ensemble des chemins de fichiers deja catalogues."""
        ...

    @abstractmethod
    def insert(self, entry: CatalogEntry) -> CatalogEntry:
        """
        Ajoute une entree et la retourne telle que stockee.

        Une entree sans id recoit le prochain id local. Leve DuplicateEntry
        si l'id fourni ou le chemin de fichier est deja pris.
        """
        ...

    @abstractmethod
    def update(self, entry: CatalogEntry) -> CatalogEntry:
        """
        Remplace l'entree de meme id.

        La date d'ajout d'origine est conservee.
        """
        ...

    @abstractmethod
    def remove(self, entry_id: int) -> CatalogEntry:
        """Supprime une entree (jamais le fichier sur disque)."""
        ...

    @abstractmethod
    def associate_file(self, entry_id: int, file_path: Path) -> CatalogEntry:
        """Associe un fichier video a une entree."""
        ...

    @abstractmethod
    def add_watch_log(self, entry_id: int, log_entry: WatchLogEntry) -> CatalogEntry:
        """Ajoute une ligne au journal de visionnage d'une entree."""
        ...

    @property
    @abstractmethod
    def version(self) -> int:
        """Compteur de mutations, incremente a chaque modification."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...
