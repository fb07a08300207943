"""
Cache persistant des recherches TMDB.

Le cache utilise diskcache pour la persistence sur disque, ce qui permet
de conserver les resultats entre les redemarrages de l'application.

Seules les recherches par titre sont cachees (30 jours) : les details et
les IDs externes sont toujours relus pour qu'un rafraichissement voie
les donnees distantes courantes.
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les appels API.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes.

    Attributes:
        SEARCH_TTL: Duree de vie des resultats de recherche (30 jours)

    Example:
        cache = APICache(cache_dir="~/.local/share/cinecat/cache/api")
        await cache.set_search("tmdb:search:en-US:alien", results)
        data = await cache.get("tmdb:search:en-US:alien")
    """

    SEARCH_TTL = 30 * 24 * 60 * 60  # 30 jours en secondes (2592000)

    def __init__(self, cache_dir: str | Path) -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """Recupere une valeur du cache, None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur dans le cache avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (doit etre serializable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_search(self, key: str, value: Any) -> None:
        """Stocke un resultat de recherche (TTL de 30 jours)."""
        await self.set(key, value, self.SEARCH_TTL)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
