"""
Taxonomie des erreurs de Cinecat.

Toutes les erreurs metier derivent de CinecatError pour que la CLI puisse
les afficher proprement sans masquer les erreurs de programmation.

Politique de propagation :
- Pendant une synchronisation, les erreurs par fichier sont capturees,
  comptees et rapportees (un fichier en echec n'interrompt jamais le lot).
- Les operations unitaires (ajout manuel, rafraichissement, desambiguisation)
  remontent l'erreur a l'appelant.
- CorruptStore est la seule erreur fatale au demarrage.
"""

from pathlib import Path
from typing import Optional, Union


class CinecatError(Exception):
    """Erreur de base de l'application."""


class ConfigMissing(CinecatError):
    """Aucune cle API TMDB n'est configuree."""

    def __init__(self) -> None:
        super().__init__(
            "No TMDB API key configured. Run 'cinecat config set-key <KEY>' "
            "(free key: https://www.themoviedb.org/settings/api)"
        )


class ConfigInvalid(CinecatError):
    """Le fichier de configuration existe mais ne peut pas etre lu."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration file {path}: {reason}")


class DirectoryUnreadable(CinecatError):
    """Un repertoire de scan n'existe pas ou ne peut pas etre liste."""

    def __init__(self, directory: Path, reason: str) -> None:
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot read directory {directory}: {reason}")


class NoMatch(CinecatError):
    """La recherche n'a retourne aucun candidat."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"No match found for '{title}'")


class MetadataError(CinecatError):
    """Erreur de base pour les appels au service de metadonnees distant."""


class Unreachable(MetadataError):
    """Le service distant ne repond pas (reseau, timeout, erreur serveur)."""


class RateLimited(MetadataError):
    """
    Le service distant signale un depassement de quota (HTTP 429).

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None.
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


class Malformed(MetadataError):
    """La reponse du service distant ne peut pas etre interpretee."""


class NotFound(CinecatError):
    """
    Un identifiant ne se resout plus.

    Attributes:
        kind: "movie" pour un identifiant distant, "entry" pour le catalogue local
        identifier: L'identifiant introuvable
    """

    def __init__(self, kind: str, identifier: Union[int, str]) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class DownloadFailed(CinecatError):
    """Le telechargement d'une affiche a echoue."""

    def __init__(self, movie_id: int, reason: str) -> None:
        self.movie_id = movie_id
        self.reason = reason
        super().__init__(f"Poster download failed for {movie_id}: {reason}")


class CorruptStore(CinecatError):
    """Le fichier catalogue existe mais ne peut pas etre deserialise."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Catalog file {path} is corrupt: {reason}")


class DuplicateEntry(CinecatError):
    """Une mutation violerait l'unicite de l'id local ou du chemin de fichier."""


class InvalidEdit(CinecatError):
    """Une modification manuelle des metadonnees est refusee."""
