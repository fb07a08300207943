"""
Cache d'affiches sur disque.

Une image par film, nommee de facon deterministe a partir de l'id TMDB
(poster_<id>.jpg). Le cache est permanent : pas de TTL, pas de purge.
Un rafraichissement des metadonnees ne retelecharge pas l'affiche tant que
le fichier n'est pas supprime manuellement.

Concurrence :
- Des ids distincts sont telecharges en parallele par les workers.
- Pour un meme id, un verrou asyncio garantit au plus un telechargement
  en cours ; les appelants suivants relisent le fichier deja ecrit.
- Le verrou d'un id est libere des que plus personne ne l'attend.
- L'ecriture passe par un fichier temporaire + os.replace.
"""

import asyncio
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Optional

from loguru import logger

from cinecat.core.errors import DownloadFailed, MetadataError
from cinecat.core.ports.api_clients import IMetadataClient


@dataclass
class _LockSlot:
    """Verrou d'un id et nombre de taches qui le tiennent ou l'attendent."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class PosterCache:
    """
    Cache permanent des affiches, indexe par id TMDB.

    Example:
        posters = PosterCache(poster_dir, tmdb_client)
        reference = await posters.ensure_cached(348, "/vfrQk5IPloGg1v9Rzbh2Eg3VGyM.jpg")
        path = posters.poster_dir / reference
    """

    def __init__(self, poster_dir: Path, client: IMetadataClient) -> None:
        """
        Args:
            poster_dir: Repertoire des affiches (cree au premier telechargement)
            client: Client de metadonnees utilise pour telecharger les images
        """
        self._poster_dir = poster_dir
        self._client = client
        self._locks: dict[int, _LockSlot] = {}

    @property
    def poster_dir(self) -> Path:
        return self._poster_dir

    @staticmethod
    def reference_for(movie_id: int) -> str:
        """Cle de cache d'un film (nom du fichier dans le repertoire)."""
        return f"poster_{movie_id}.jpg"

    def path_for(self, movie_id: int) -> Path:
        return self._poster_dir / self.reference_for(movie_id)

    def is_cached(self, movie_id: int) -> bool:
        return self.path_for(movie_id).is_file()

    async def ensure_cached(self, movie_id: int, image_path: Optional[str]) -> str:
        """
        Retourne la cle de cache de l'affiche, en la telechargeant si besoin.

        Si le fichier existe deja, aucun appel reseau n'est fait.

        Args:
            movie_id: ID TMDB du film
            image_path: Fragment de chemin de l'affiche sur le CDN

        Returns:
            Cle de cache (nom du fichier dans poster_dir)

        Raises:
            DownloadFailed: Si l'affiche est absente ou le telechargement echoue
        """
        reference = self.reference_for(movie_id)
        if self.is_cached(movie_id):
            return reference

        async with self._locked(movie_id):
            # Un autre appelant a pu terminer le telechargement pendant l'attente
            if self.is_cached(movie_id):
                return reference

            if not image_path:
                raise DownloadFailed(movie_id, "no poster available")

            try:
                data = await self._client.download_image(image_path)
            except MetadataError as e:
                raise DownloadFailed(movie_id, str(e)) from e
            if not data:
                raise DownloadFailed(movie_id, "empty response")

            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self._write, self.path_for(movie_id), data)
            except OSError as e:
                raise DownloadFailed(movie_id, str(e)) from e

        logger.debug(f"Affiche mise en cache: {reference} ({len(data)} octets)")
        return reference

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".poster-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @asynccontextmanager
    async def _locked(self, movie_id: int) -> AsyncIterator[None]:
        """Verrou exclusif par id, retire du dictionnaire au dernier utilisateur."""
        slot = self._locks.setdefault(movie_id, _LockSlot())
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                del self._locks[movie_id]
