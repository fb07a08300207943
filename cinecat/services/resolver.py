"""
Service de desambiguisation des correspondances.

La correspondance automatique retient le premier resultat TMDB, ce qui
confond parfois un film avec son remake. Ce service est le filet de
securite manuel :
- Lister les candidats d'un titre
- Appliquer un candidat choisi a une entree existante
- Rafraichir une entree (reappliquer son propre id TMDB)
- Ajouter manuellement un film, avec ou sans fichier (wishlist)

Les erreurs remontent directement a l'appelant.
"""

import asyncio
from pathlib import Path
from typing import Optional

from loguru import logger

from cinecat.core.entities.catalog import CatalogEntry
from cinecat.core.errors import NoMatch, NotFound
from cinecat.core.ports.api_clients import CandidateMatch, IMetadataClient
from cinecat.core.ports.catalog_store import ICatalogStore
from cinecat.services.entry_assembler import EntryAssembler


class DisambiguationResolver:
    """
    Resolution manuelle des correspondances TMDB.

    Example:
        resolver = DisambiguationResolver(store, client, assembler)
        candidates = await resolver.list_candidates("The Thing")
        entry = await resolver.apply_candidate(entry_id=3, candidate_id=60935)
    """

    def __init__(
        self,
        store: ICatalogStore,
        client: IMetadataClient,
        assembler: EntryAssembler,
    ) -> None:
        self._store = store
        self._client = client
        self._assembler = assembler

    async def list_candidates(self, title: str) -> list[CandidateMatch]:
        """Candidats TMDB pour un titre (20 max, ordre de pertinence, non filtres)."""
        return await self._client.search(title)

    async def apply_candidate(self, entry_id: int, candidate_id: int) -> CatalogEntry:
        """
        Remplace les metadonnees d'une entree par celles d'un candidat.

        L'id local, le chemin de fichier, la date d'ajout et le journal de
        visionnage sont conserves ; seul tmdb_id et les metadonnees changent.

        Args:
            entry_id: Id local de l'entree a corriger
            candidate_id: Id TMDB du film choisi

        Returns:
            L'entree mise a jour

        Raises:
            NotFound: Si l'entree ou le candidat ne se resout plus
        """
        existing = self._store.get(entry_id)
        if existing is None:
            raise NotFound("entry", entry_id)

        fresh = await self._assembler.assemble(candidate_id)
        return await self._replace_metadata(existing, fresh)

    async def refresh(self, entry_id: int) -> CatalogEntry:
        """
        Rafraichit une entree en reappliquant son propre id TMDB.

        Une entree sans tmdb_id (ecrite a la main) est recherchee par son
        titre et recoit le premier candidat.
        """
        existing = self._store.get(entry_id)
        if existing is None:
            raise NotFound("entry", entry_id)
        if existing.tmdb_id is not None:
            return await self.apply_candidate(entry_id, existing.tmdb_id)

        fresh = await self._assembler.assemble_from_title(existing.title)
        return await self._replace_metadata(existing, fresh)

    async def _replace_metadata(
        self, existing: CatalogEntry, fresh: CatalogEntry
    ) -> CatalogEntry:
        loop = asyncio.get_running_loop()
        stored = await loop.run_in_executor(
            None, self._store.update, existing.with_metadata_from(fresh)
        )
        logger.info(
            f"Entree #{stored.id} -> {stored.title} ({stored.release_year}) [tmdb {stored.tmdb_id}]"
        )
        return stored

    async def add_manual(
        self,
        title: str,
        candidate_id: Optional[int] = None,
        file_path: Optional[Path] = None,
    ) -> CatalogEntry:
        """
        Ajoute un film choisi par l'utilisateur.

        Args:
            title: Titre recherche
            candidate_id: Candidat choisi parmi list_candidates(title) ;
                          le premier candidat si None
            file_path: Fichier video associe (None = wishlist)

        Raises:
            NoMatch: Si la recherche ne retourne aucun candidat
            NotFound: Si candidate_id ne figure pas parmi les candidats
            DuplicateEntry: Si le fichier est deja associe a une autre entree
        """
        candidates = await self.list_candidates(title)
        if not candidates:
            raise NoMatch(title)

        if candidate_id is None:
            chosen = candidates[0]
        else:
            chosen = next((c for c in candidates if c.id == candidate_id), None)
            if chosen is None:
                raise NotFound("movie", candidate_id)

        if file_path is not None:
            file_path = file_path.expanduser().absolute()

        entry = await self._assembler.assemble(chosen.id, file_path=file_path)

        loop = asyncio.get_running_loop()
        stored = await loop.run_in_executor(None, self._store.insert, entry)
        logger.info(f"Ajout manuel: {stored.title} ({stored.release_year})")
        return stored
