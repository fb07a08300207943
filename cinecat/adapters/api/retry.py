"""
Mecanisme de retry avec backoff exponentiel pour l'API TMDB.

Gere automatiquement les erreurs 429 (rate limiting) en relancant
les requetes avec un delai croissant et du jitter aleatoire. Une fois
les tentatives epuisees, RateLimited remonte a l'appelant.

Traduit egalement les erreurs de transport httpx en Unreachable pour
que les couches superieures ne dependent pas de httpx.

Usage:
    response = await request_with_retry(client, "GET", "/search/movie")
"""

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from cinecat.core.errors import RateLimited, Unreachable


def with_retry(max_attempts: int = 3, max_wait: int = 60):
    """
    Decorateur pour relancer sur RateLimited avec backoff exponentiel.

    Utilise wait_random_exponential pour ajouter du jitter : les workers
    d'une meme synchronisation ne relancent pas tous en meme temps.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(RateLimited),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


def _parse_retry_after(value: str | None) -> int | None:
    """Lit le header Retry-After (secondes) ; None si absent ou non numerique."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur 429.

    Les autres erreurs HTTP (4xx, 5xx) sont propagees immediatement
    sans retry, sous forme de httpx.HTTPStatusError.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        RateLimited: Si 429 apres epuisement des tentatives
        Unreachable: Sur erreur de connexion ou timeout
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise Unreachable(f"{method} {url}: {e.__class__.__name__}: {e}") from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.debug(f"429 sur {url}, retry after {retry_after}s")
            raise RateLimited(retry_after)
        response.raise_for_status()
        return response

    return await _do_request()
