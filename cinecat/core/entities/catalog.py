"""
Catalog entities.

A CatalogEntry is an immutable snapshot: every mutation produces a new
instance (dataclasses.replace) which the store swaps in atomically, so
readers never observe a half-updated record.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

# Nombre maximum d'acteurs conserves par film
MAX_CAST_MEMBERS = 5


def utc_now() -> datetime:
    """Horodatage courant en UTC (aware)."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CastMember:
    """
    Actor credited in a movie.

    Attributes:
        name: Actor name
        character: Character played (may be empty)
        photo_reference: Profile picture URL on the TMDB CDN (may be empty)
    """

    name: str
    character: str = ""
    photo_reference: str = ""


@dataclass(frozen=True)
class WatchLogEntry:
    """One viewing of a movie, with an optional personal rating (0-10)."""

    watched_on: date
    rating: Optional[float] = None
    comments: str = ""


@dataclass(frozen=True)
class CatalogEntry:
    """
    One cataloged movie.

    Several entries may describe the same remote movie (two copies of a
    film in two directories): the local id is the key, not tmdb_id.

    Attributes:
        id: Local entry id assigned by the store on insert, None before
        tmdb_id: TMDB movie id, None for hand-written entries
        title: Title as returned by TMDB
        release_year: Year of the release date, None if unknown
        director: First crew member with job "Director"
        genres: Genre names, in TMDB order
        rating_score: TMDB vote average (0-10)
        runtime_minutes: Runtime, None if unknown
        description: Plot overview
        external_reference_id: IMDb id (tt...), None if TMDB has none
        cast_members: Up to MAX_CAST_MEMBERS leading actors
        file_path: Absolute path of the video file, None for wishlist entries
        poster_reference: Poster cache key, None until downloaded
        poster_url: Remote poster URL, None if TMDB has no poster
        added_at: Creation timestamp, never changes afterwards
        watch_log: Viewing history (user data, kept across refreshes)
    """

    id: Optional[int] = None
    tmdb_id: Optional[int] = None
    title: str = ""
    release_year: Optional[int] = None
    director: str = "Unknown"
    genres: tuple[str, ...] = ()
    rating_score: float = 0.0
    runtime_minutes: Optional[int] = None
    description: str = ""
    external_reference_id: Optional[str] = None
    cast_members: tuple[CastMember, ...] = ()
    file_path: Optional[Path] = None
    poster_reference: Optional[str] = None
    poster_url: Optional[str] = None
    added_at: datetime = field(default_factory=utc_now)
    watch_log: tuple[WatchLogEntry, ...] = ()

    @property
    def has_file(self) -> bool:
        """True si l'entree est associee a un fichier video (sinon : wishlist)."""
        return self.file_path is not None

    def with_metadata_from(self, other: "CatalogEntry") -> "CatalogEntry":
        """
        Retourne une copie portant les metadonnees derivees de `other`.

        Les metadonnees (tmdb_id compris) viennent de `other` ; l'id local,
        le chemin de fichier, la date d'ajout et le journal de visionnage
        sont conserves.
        """
        return replace(
            other,
            id=self.id,
            file_path=self.file_path,
            added_at=self.added_at,
            watch_log=self.watch_log,
        )
