"""
Assemblage d'une entree de catalogue a partir de TMDB.

Pipeline commun a la synchronisation, a l'ajout manuel et a la
desambiguisation : details -> ID externe -> affiche -> CatalogEntry.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

from cinecat.adapters.persistence.poster_cache import PosterCache
from cinecat.core.entities.catalog import CatalogEntry, WatchLogEntry, utc_now
from cinecat.core.errors import DownloadFailed, NoMatch
from cinecat.core.ports.api_clients import IMetadataClient


class EntryAssembler:
    """
    Construit des CatalogEntry completes a partir de l'API de metadonnees.

    Un echec de telechargement d'affiche n'est pas bloquant : l'entree est
    creee sans poster_reference et l'affiche sera retentee au prochain
    rafraichissement.
    """

    def __init__(self, client: IMetadataClient, posters: PosterCache) -> None:
        self._client = client
        self._posters = posters

    async def assemble(
        self,
        movie_id: int,
        file_path: Optional[Path] = None,
        added_at: Optional[datetime] = None,
        watch_log: tuple[WatchLogEntry, ...] = (),
    ) -> CatalogEntry:
        """
        Construit l'entree (sans id local) d'un film identifie par son id TMDB.

        Args:
            movie_id: ID TMDB
            file_path: Fichier video associe (None = wishlist)
            added_at: Date d'ajout a conserver (maintenant par defaut)
            watch_log: Journal de visionnage a conserver

        Raises:
            NotFound: Si l'id ne se resout plus
            Unreachable, RateLimited, Malformed: Erreurs du service distant
        """
        details = await self._client.fetch_details(movie_id)
        external_reference = await self._client.fetch_external_reference(details.id)

        poster_reference = None
        try:
            poster_reference = await self._posters.ensure_cached(
                details.id, details.poster_path
            )
        except DownloadFailed as e:
            logger.warning(str(e))

        return CatalogEntry(
            tmdb_id=details.id,
            title=details.title,
            release_year=details.release_year,
            director=details.director,
            genres=details.genres,
            rating_score=details.rating_score,
            runtime_minutes=details.runtime_minutes,
            description=details.overview,
            external_reference_id=external_reference,
            cast_members=details.cast,
            file_path=file_path,
            poster_reference=poster_reference,
            poster_url=details.poster_url,
            added_at=added_at or utc_now(),
            watch_log=watch_log,
        )

    async def assemble_from_title(
        self, title: str, file_path: Optional[Path] = None
    ) -> CatalogEntry:
        """
        Recherche un titre et construit l'entree du premier candidat.

        Le premier candidat (ordre de pertinence TMDB) est retenu tel quel ;
        les erreurs de correspondance se corrigent par desambiguisation.

        Raises:
            NoMatch: Si la recherche ne retourne aucun candidat
        """
        candidates = await self._client.search(title)
        if not candidates:
            raise NoMatch(title)
        return await self.assemble(candidates[0].id, file_path=file_path)
