"""
Client TMDB pour la recherche et la recuperation de metadonnees de films.

Implemente l'interface IMetadataClient pour TMDB (The Movie Database).
Utilise le cache persistant pour les recherches et le mecanisme de retry
pour gerer le rate limiting.

Usage:
    cache = APICache(cache_dir)
    client = TMDBClient(api_key="your_key", cache=cache)
    candidates = await client.search("Alien")
    details = await client.fetch_details(candidates[0].id)
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from cinecat.adapters.api.cache import APICache
from cinecat.adapters.api.retry import request_with_retry
from cinecat.core.entities.catalog import MAX_CAST_MEMBERS, CastMember
from cinecat.core.errors import Malformed, NotFound, Unreachable
from cinecat.core.ports.api_clients import (
    MAX_CANDIDATES,
    CandidateMatch,
    IMetadataClient,
    MovieDetails,
)


def _parse_year(release_date: Optional[str]) -> Optional[int]:
    """Extrait l'annee d'une date YYYY-MM-DD ; None si vide ou invalide."""
    if not release_date or len(release_date) < 4:
        return None
    try:
        return int(release_date[:4])
    except ValueError:
        return None


class TMDBClient(IMetadataClient):
    """
    Client API TMDB pour les metadonnees de films.

    Implemente IMetadataClient avec:
    - Recherche de films par titre (20 candidats max, ordre de pertinence TMDB)
    - Recuperation des details complets (credits inclus)
    - Recuperation de l'ID IMDb via /external_ids
    - Telechargement des affiches depuis le CDN d'images
    - Cache persistant des recherches (30 jours)
    - Retry automatique sur rate limiting (429)

    Le client est partage par tous les workers d'une synchronisation :
    httpx.AsyncClient supporte les requetes concurrentes.

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base pour les affiches (taille originale)
        TMDB_PROFILE_BASE_URL: URL de base pour les photos d'acteurs (w185)
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"
    TMDB_PROFILE_BASE_URL = "https://image.tmdb.org/t/p/w185"

    def __init__(
        self,
        api_key: str,
        cache: Optional[APICache] = None,
        language: str = "en-US",
        timeout: float = 30.0,
        max_attempts: int = 3,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4)
            cache: Cache des recherches (optionnel)
            language: Langue des reponses TMDB
            timeout: Timeout des requetes en secondes
            max_attempts: Tentatives sur HTTP 429 avant RateLimited
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._client: Optional[httpx.AsyncClient] = None
        self._image_client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP de l'API, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if self._client is None or self._client.is_closed:
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    def _get_image_client(self) -> httpx.AsyncClient:
        """Client HTTP du CDN d'images (sans la cle API)."""
        if self._image_client is None or self._image_client.is_closed:
            self._image_client = httpx.AsyncClient(
                base_url=self.TMDB_IMAGE_BASE_URL,
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._image_client

    async def _get_json(
        self,
        url: str,
        params: Optional[dict[str, str]] = None,
        movie_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        GET sur l'API et decode le JSON.

        Raises:
            NotFound: Sur 404 quand movie_id est fourni
            Unreachable: Sur erreur reseau ou erreur HTTP non geree
            RateLimited: Sur 429 persistant
            Malformed: Si le corps n'est pas un objet JSON
        """
        client = self._get_client()
        try:
            response = await request_with_retry(
                client, "GET", url, max_attempts=self._max_attempts, params=params
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404 and movie_id is not None:
                raise NotFound("movie", movie_id) from e
            raise Unreachable(f"GET {url}: HTTP {status}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise Malformed(f"GET {url}: invalid JSON") from e
        if not isinstance(data, dict):
            raise Malformed(f"GET {url}: expected a JSON object")
        return data

    async def search(self, title: str) -> list[CandidateMatch]:
        """
        Recherche des films par titre.

        Utilise le pattern cache-first: verifie le cache AVANT de faire
        un appel API. Les resultats sont caches pour 30 jours.

        Args:
            title: Titre du film a rechercher

        Returns:
            Liste de CandidateMatch (vide si aucun resultat), au plus 20
        """
        query = " ".join(title.split())
        if not query:
            return []

        cache_key = f"tmdb:search:{self._language}:{query.casefold()}"

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit recherche: {query}")
                return cached

        data = await self._get_json(
            "/search/movie",
            params={
                "query": query,
                "language": self._language,
                "include_adult": "false",
            },
        )

        try:
            candidates = [
                CandidateMatch(
                    id=int(item["id"]),
                    title=item.get("title") or item.get("original_title") or "",
                    release_year=_parse_year(item.get("release_date")),
                    rating_score=float(item.get("vote_average") or 0.0),
                )
                for item in data.get("results", [])[:MAX_CANDIDATES]
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise Malformed(f"search '{query}': {e!r}") from e

        logger.debug(f"Recherche TMDB '{query}': {len(candidates)} candidat(s)")

        if self._cache is not None:
            await self._cache.set_search(cache_key, candidates)

        return candidates

    async def fetch_details(self, movie_id: int) -> MovieDetails:
        """
        Recupere les details complets d'un film (credits inclus).

        Args:
            movie_id: ID TMDB du film

        Returns:
            MovieDetails avec toutes les informations

        Raises:
            NotFound: Si l'id ne se resout plus
        """
        data = await self._get_json(
            f"/movie/{movie_id}",
            params={"language": self._language, "append_to_response": "credits"},
            movie_id=movie_id,
        )

        try:
            return self._parse_details(data)
        except (KeyError, TypeError, ValueError) as e:
            raise Malformed(f"details {movie_id}: {e!r}") from e

    def _parse_details(self, data: dict[str, Any]) -> MovieDetails:
        """Transforme la reponse /movie/{id} en MovieDetails."""
        credits_data = data.get("credits") or {}

        director = next(
            (
                crew_member["name"]
                for crew_member in credits_data.get("crew", [])
                if crew_member.get("job") == "Director" and crew_member.get("name")
            ),
            "Unknown",
        )

        cast = tuple(
            CastMember(
                name=actor["name"],
                character=actor.get("character") or "",
                photo_reference=(
                    f"{self.TMDB_PROFILE_BASE_URL}{actor['profile_path']}"
                    if actor.get("profile_path")
                    else ""
                ),
            )
            for actor in credits_data.get("cast", [])[:MAX_CAST_MEMBERS]
            if actor.get("name")
        )

        genres = tuple(g["name"] for g in data.get("genres", []) if g.get("name"))

        poster_path = data.get("poster_path") or None
        poster_url = f"{self.TMDB_IMAGE_BASE_URL}{poster_path}" if poster_path else None

        runtime = data.get("runtime")

        return MovieDetails(
            id=int(data["id"]),
            title=data.get("title") or data.get("original_title") or "",
            release_year=_parse_year(data.get("release_date")),
            director=director,
            genres=genres or ("Unknown",),
            rating_score=float(data.get("vote_average") or 0.0),
            runtime_minutes=int(runtime) if runtime else None,
            overview=data.get("overview") or "",
            poster_path=poster_path,
            poster_url=poster_url,
            cast=cast,
        )

    async def fetch_external_reference(self, movie_id: int) -> Optional[str]:
        """
        Recupere l'ID IMDb d'un film.

        Args:
            movie_id: ID TMDB du film

        Returns:
            ID IMDb (ex: "tt0078748"), ou None si absent ou film inconnu
        """
        try:
            data = await self._get_json(
                f"/movie/{movie_id}/external_ids", movie_id=movie_id
            )
        except NotFound:
            return None

        imdb_id = data.get("imdb_id")
        return imdb_id if isinstance(imdb_id, str) and imdb_id else None

    async def download_image(self, image_path: str) -> bytes:
        """
        Telecharge une image depuis le CDN TMDB.

        Args:
            image_path: Fragment de chemin retourne par l'API (ex: "/abc.jpg")

        Returns:
            Contenu binaire de l'image
        """
        client = self._get_image_client()
        try:
            response = await request_with_retry(
                client, "GET", image_path, max_attempts=self._max_attempts
            )
        except httpx.HTTPStatusError as e:
            raise Unreachable(
                f"GET {image_path}: HTTP {e.response.status_code}"
            ) from e
        return response.content

    async def close(self) -> None:
        """
        Ferme les clients HTTP.

        Doit etre appele a la fin de l'utilisation pour liberer
        les ressources reseau.
        """
        for client in (self._client, self._image_client):
            if client is not None and not client.is_closed:
                await client.aclose()
        self._client = None
        self._image_client = None
