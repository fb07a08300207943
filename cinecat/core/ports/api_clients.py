"""
Interface port pour le client de metadonnees.

Interface abstraite (port) definissant le contrat avec le service de films
distant. L'implementation (adaptateur) est le client TMDB.

Le client est une facade sans etat : ses seuls effets sont les appels
reseau sortants. Il ne modifie jamais le catalogue.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from cinecat.core.entities.catalog import CastMember

# Nombre maximum de candidats retournes par une recherche
MAX_CANDIDATES = 20


@dataclass(frozen=True)
class CandidateMatch:
    """
    Candidat retourne par une recherche par titre.

    Les candidats sont ordonnes selon la pertinence du service distant.

    Attributs :
        id : ID TMDB du film
        title : Titre
        release_year : Annee de sortie (None si inconnue)
        rating_score : Note moyenne TMDB (0-10)
    """

    id: int
    title: str
    release_year: Optional[int] = None
    rating_score: float = 0.0


@dataclass(frozen=True)
class MovieDetails:
    """
    Fiche complete d'un film.

    Attributs :
        id : ID TMDB
        title : Titre
        release_year : Annee de sortie
        director : Realisateur ("Unknown" si absent des credits)
        genres : Noms des genres (("Unknown",) si aucun)
        rating_score : Note moyenne TMDB
        runtime_minutes : Duree en minutes
        overview : Resume
        poster_path : Fragment de chemin de l'affiche sur le CDN (ex: "/abc.jpg")
        poster_url : URL complete de l'affiche en taille originale
        cast : Acteurs principaux (5 au maximum)
    """

    id: int
    title: str
    release_year: Optional[int] = None
    director: str = "Unknown"
    genres: tuple[str, ...] = ()
    rating_score: float = 0.0
    runtime_minutes: Optional[int] = None
    overview: str = ""
    poster_path: Optional[str] = None
    poster_url: Optional[str] = None
    cast: tuple[CastMember, ...] = ()


class IMetadataClient(ABC):
    """
    Interface du service de metadonnees de films.

    Chaque appel reseau peut lever Unreachable, RateLimited ou Malformed.
    """

    @abstractmethod
    async def search(self, title: str) -> list[CandidateMatch]:
        """
        Recherche des films par titre.

        Retourne :
            Au plus MAX_CANDIDATES candidats dans l'ordre de pertinence
            du service ; liste vide (pas d'erreur) si aucun resultat.
        """
        ...

    @abstractmethod
    async def fetch_details(self, movie_id: int) -> MovieDetails:
        """
        Recupere la fiche complete d'un film.

        Leve :
            NotFound : si l'id ne se resout plus
        """
        ...

    @abstractmethod
    async def fetch_external_reference(self, movie_id: int) -> Optional[str]:
        """Recupere l'ID IMDb d'un film ; None si absent."""
        ...

    @abstractmethod
    async def download_image(self, image_path: str) -> bytes:
        """Telecharge une image a partir du fragment de chemin servi par l'API."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Libere les ressources reseau."""
        ...
